import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import col, select

from app import crud
from app.api.deps import ClientIP, SessionDep, get_current_active_superuser
from app.models import (
    Comment,
    CommentCreate,
    CommentPublic,
    CommentReply,
    CommentTarget,
    CommentThread,
    LikeResult,
    Message,
)

router = APIRouter(prefix="/comments", tags=["comments"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=CommentPublic, status_code=201)
def create_comment(*, session: SessionDep, comment_in: CommentCreate) -> Any:
    comment = crud.create_comment(session=session, comment_in=comment_in)
    logger.info(
        "New comment %s on %s %s awaiting approval",
        comment.id, comment.target_type.value, comment.target_id,
    )
    return comment


@router.get(
    "/pending",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=list[CommentPublic],
)
def read_pending(session: SessionDep) -> Any:
    return session.exec(
        select(Comment).where(Comment.status == 0).order_by(col(Comment.created_at).desc())
    ).all()


@router.get("/{target_type}/{target_id}", response_model=list[CommentThread])
def read_comments(session: SessionDep, target_type: CommentTarget, target_id: int) -> Any:
    approved = session.exec(
        select(Comment)
        .where(
            Comment.target_type == target_type,
            Comment.target_id == target_id,
            Comment.status == 1,
        )
        .order_by(col(Comment.created_at), col(Comment.id))
    ).all()

    replies: dict[int, list[CommentPublic]] = {}
    for comment in approved:
        if comment.parent_id is not None:
            replies.setdefault(comment.parent_id, []).append(
                CommentPublic.model_validate(comment)
            )
    top_level = [c for c in approved if c.parent_id is None]
    top_level.reverse()
    return [
        CommentThread.model_validate(c, update={"replies": replies.get(c.id, [])})
        for c in top_level
    ]


@router.post("/{id}/reply", response_model=CommentPublic, status_code=201)
def reply_to_comment(*, session: SessionDep, id: int, reply_in: CommentReply) -> Any:
    parent = session.get(Comment, id)
    if not parent:
        raise HTTPException(status_code=404, detail="Comment not found")
    return crud.create_comment_reply(session=session, parent=parent, reply_in=reply_in)


@router.post("/{id}/like", response_model=LikeResult)
def like_comment(session: SessionDep, id: int, client_ip: ClientIP) -> Any:
    comment = session.get(Comment, id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    liked = crud.toggle_comment_like(session=session, comment=comment, user_ip=client_ip)
    return LikeResult(liked=liked, likes_count=comment.likes_count)


@router.post(
    "/{id}/approve",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=CommentPublic,
)
def approve_comment(session: SessionDep, id: int) -> Any:
    comment = session.get(Comment, id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    comment.status = 1
    session.add(comment)
    session.commit()
    session.refresh(comment)
    return comment


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_comment(session: SessionDep, id: int) -> Message:
    comment = session.get(Comment, id)
    if not comment:
        raise HTTPException(status_code=404, detail="Comment not found")
    for reply in session.exec(select(Comment).where(Comment.parent_id == id)).all():
        session.delete(reply)
    session.delete(comment)
    session.commit()
    return Message(message="Comment deleted successfully")
