import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, func, select

from app import crud
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import (
    Blog,
    BlogCreate,
    BlogDetail,
    BlogPublic,
    BlogsPublic,
    BlogUpdate,
    Message,
    TaxonomyType,
)
from app.services import seo, slugs

router = APIRouter(prefix="/blogs", tags=["blogs"])
logger = logging.getLogger(__name__)


def _with_paths(session: Session, blogs: list[Blog]) -> list[BlogPublic]:
    slug_map = slugs.blog_slug_map(session)
    return [
        BlogPublic.model_validate(b, update={"path": slugs.blog_path(b, slug_map.get(b.id))})
        for b in blogs
    ]


@router.get("/", response_model=BlogsPublic)
def read_blogs(
    session: SessionDep, home: bool = False, skip: int = 0, limit: int = 20
) -> Any:
    statement = select(Blog).where(Blog.status == 1)
    if home:
        statement = statement.where(Blog.home == 1)
    count = session.exec(select(func.count()).select_from(statement.subquery())).one()
    blogs = session.exec(
        statement.order_by(col(Blog.created_at).desc(), col(Blog.id).desc())
        .offset(skip)
        .limit(limit)
    ).all()
    return BlogsPublic(data=_with_paths(session, list(blogs)), count=count)


@router.get(
    "/admin/list",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=BlogsPublic,
)
def read_all_blogs(session: SessionDep, skip: int = 0, limit: int = 100) -> Any:
    count = session.exec(select(func.count()).select_from(Blog)).one()
    blogs = session.exec(
        select(Blog).order_by(col(Blog.created_at).desc()).offset(skip).limit(limit)
    ).all()
    return BlogsPublic(data=_with_paths(session, list(blogs)), count=count)


@router.get("/fix-taxonomy", dependencies=[Depends(get_current_active_superuser)])
def fix_all_taxonomies(session: SessionDep) -> dict[str, Any]:
    return slugs.fix_blog_taxonomies(session)


@router.post("/fix-taxonomy", dependencies=[Depends(get_current_active_superuser)])
def fix_taxonomy(session: SessionDep, blog_id: int) -> dict[str, Any]:
    blog = session.get(Blog, blog_id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    if not blog.slug:
        raise HTTPException(status_code=400, detail="Blog has no slug")
    taxonomy, created = slugs.ensure_blog_taxonomy(session, blog.id, blog.slug)
    message = "Taxonomy created" if created else "Taxonomy already exists"
    return {"message": message, "created": created, "slug": taxonomy.slug}


@router.get("/{slug:path}", response_model=BlogDetail)
def read_blog(session: SessionDep, slug: str, locale: str = "tr") -> Any:
    blog = slugs.resolve_blog(session, slug)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")

    blog = crud.increment_blog_views(session=session, blog=blog)

    taxonomy = crud.get_taxonomy(session=session, type=TaxonomyType.BLOG, model_id=blog.id)
    contents = seo.localized(blog, "contents", locale)
    return BlogDetail.model_validate(
        blog,
        update={
            "path": slugs.blog_path(blog, taxonomy.slug if taxonomy else None),
            "reading_time": seo.reading_time(contents, locale),
            "headings": seo.parse_h2_headings(contents),
        },
    )


@router.post(
    "/", dependencies=[Depends(get_current_active_superuser)], response_model=BlogPublic
)
def create_blog(*, session: SessionDep, blog_in: BlogCreate) -> Any:
    slug = slugs.generate_slug(blog_in.slug or blog_in.title)
    if not slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug from the title")
    taxonomy_slug = f"{slugs.BLOG_SLUG_PREFIX}{slug}"
    if slugs.slug_taken(session, taxonomy_slug):
        raise HTTPException(status_code=400, detail=f"Slug '{slug}' is already in use")

    blog_in.slug = slug
    blog = crud.create_blog(session=session, blog_in=blog_in)
    slugs.ensure_blog_taxonomy(session, blog.id, slug)
    logger.info("Created blog %s at /%s", blog.id, taxonomy_slug)
    return BlogPublic.model_validate(blog, update={"path": f"/{taxonomy_slug}"})


@router.patch(
    "/{id}", dependencies=[Depends(get_current_active_superuser)], response_model=BlogPublic
)
def update_blog(*, session: SessionDep, id: int, blog_in: BlogUpdate) -> Any:
    blog = session.get(Blog, id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    if not blog_in.model_dump(exclude_unset=True):
        raise HTTPException(status_code=400, detail="No fields to update")

    if blog_in.slug is not None:
        slug = slugs.generate_slug(blog_in.slug)
        taxonomy = crud.get_taxonomy(session=session, type=TaxonomyType.BLOG, model_id=id)
        taxonomy_slug = f"{slugs.BLOG_SLUG_PREFIX}{slug}"
        if not slug or slugs.slug_taken(session, taxonomy_slug, exclude=taxonomy):
            raise HTTPException(status_code=400, detail=f"Slug '{slug}' is already in use")
        blog_in.slug = slug
        crud.set_taxonomy_slug(
            session=session, type=TaxonomyType.BLOG, model_id=id, slug=taxonomy_slug
        )

    blog = crud.update_blog(session=session, db_blog=blog, blog_in=blog_in)
    return _with_paths(session, [blog])[0]


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_blog(session: SessionDep, id: int) -> Message:
    blog = session.get(Blog, id)
    if not blog:
        raise HTTPException(status_code=404, detail="Blog not found")
    crud.delete_taxonomy(session=session, type=TaxonomyType.BLOG, model_id=id)
    session.delete(blog)
    session.commit()
    logger.info("Deleted blog %s", id)
    return Message(message="Blog deleted successfully")
