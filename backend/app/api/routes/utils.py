from typing import Any

from fastapi import APIRouter
from sqlmodel import select

from app.api.deps import SessionDep
from app.core.config import settings

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get("/health-check/")
def health_check(session: SessionDep) -> bool:
    # Fails with a 500 when the database is unreachable
    session.exec(select(1)).one()
    return True


@router.get("/site-info/")
def site_info() -> dict[str, Any]:
    return {
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL,
        "default_locale": settings.DEFAULT_LOCALE,
        "locales": settings.LOCALES,
        "media_url": settings.MEDIA_URL,
    }
