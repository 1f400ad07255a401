import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, func, select

from app import crud
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import (
    Country,
    Message,
    Question,
    QuestionAdmin,
    QuestionAnswer,
    QuestionCreate,
    QuestionPublic,
    QuestionStatusUpdate,
    QuestionWithAnswers,
)

router = APIRouter(prefix="/questions", tags=["questions"])
logger = logging.getLogger(__name__)


def country_faq(session: Session, country_id: int) -> list[QuestionWithAnswers]:
    """Approved questions of a country, newest first, each with its approved answers."""
    approved = session.exec(
        select(Question)
        .where(Question.country_id == country_id, Question.status == 1)
        .order_by(col(Question.created_at), col(Question.id))
    ).all()
    answers: dict[int, list[QuestionPublic]] = {}
    for question in approved:
        if question.parent_id is not None:
            answers.setdefault(question.parent_id, []).append(
                QuestionPublic.model_validate(question)
            )
    top_level = [q for q in approved if q.parent_id is None]
    top_level.reverse()
    return [
        QuestionWithAnswers.model_validate(q, update={"answers": answers.get(q.id, [])})
        for q in top_level
    ]


@router.post("/", response_model=QuestionPublic, status_code=201)
def create_question(*, session: SessionDep, question_in: QuestionCreate) -> Any:
    if not session.get(Country, question_in.country_id):
        raise HTTPException(status_code=404, detail="Country not found")
    question = crud.create_question(session=session, question_in=question_in)
    logger.info(
        "New question %s on country %s awaiting approval", question.id, question.country_id
    )
    return question


@router.get("/country/{country_id}", response_model=list[QuestionWithAnswers])
def read_country_questions(session: SessionDep, country_id: int) -> Any:
    return country_faq(session, country_id)


@router.get(
    "/admin/list",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=list[QuestionAdmin],
)
def read_questions_admin(session: SessionDep, status: int | None = None) -> Any:
    statement = select(Question).where(col(Question.parent_id).is_(None))
    if status is not None:
        statement = statement.where(Question.status == status)
    questions = session.exec(statement.order_by(col(Question.created_at).desc())).all()
    answer_counts = dict(
        session.exec(
            select(Question.parent_id, func.count())
            .where(col(Question.parent_id).is_not(None))
            .group_by(Question.parent_id)
        ).all()
    )
    return [
        QuestionAdmin.model_validate(q, update={"answer_count": answer_counts.get(q.id, 0)})
        for q in questions
    ]


@router.post(
    "/{id}/answer",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=QuestionPublic,
    status_code=201,
)
def answer_question(*, session: SessionDep, id: int, answer_in: QuestionAnswer) -> Any:
    question = session.get(Question, id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return crud.answer_question(session=session, question=question, answer_in=answer_in)


@router.patch(
    "/{id}",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=QuestionPublic,
)
def update_question_status(
    *, session: SessionDep, id: int, status_in: QuestionStatusUpdate
) -> Any:
    question = session.get(Question, id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    question.status = status_in.status
    session.add(question)
    session.commit()
    session.refresh(question)
    return question


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_question(session: SessionDep, id: int) -> Message:
    question = session.get(Question, id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    for answer in session.exec(select(Question).where(Question.parent_id == id)).all():
        session.delete(answer)
    session.delete(question)
    session.commit()
    return Message(message="Question deleted successfully")
