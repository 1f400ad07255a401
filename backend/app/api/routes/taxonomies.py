from typing import Any

from fastapi import APIRouter, Depends

from app.api.deps import SessionDep, get_current_active_superuser
from app.services import slugs

router = APIRouter(
    prefix="/taxonomies",
    tags=["taxonomies"],
    dependencies=[Depends(get_current_active_superuser)],
)


@router.get("/")
def read_slugs(session: SessionDep) -> dict[str, Any]:
    rows = slugs.list_slugs(session)
    return {"data": rows, "count": len(rows)}


@router.get("/check")
def check_slug(session: SessionDep, slug: str) -> dict[str, Any]:
    normalized = slug.strip("/")
    return {"slug": normalized, "taken": slugs.slug_taken(session, normalized)}


@router.post("/fix-country-slugs")
def fix_country_slugs(session: SessionDep, dry_run: bool = True) -> dict[str, Any]:
    return slugs.fix_country_slugs(session, dry_run=dry_run)


@router.post("/restore-flat-slugs")
def restore_flat_slugs(session: SessionDep, dry_run: bool = True) -> dict[str, Any]:
    return slugs.restore_flat_slugs(session, dry_run=dry_run)
