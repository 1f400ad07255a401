import logging
from typing import Any, Literal

import httpx
from pydantic import BaseModel

from app.core.config import settings

logger = logging.getLogger(__name__)


class PexelsPhotoSource(BaseModel):
    original: str
    large: str | None = None
    medium: str | None = None
    small: str | None = None
    landscape: str | None = None
    tiny: str | None = None


class PexelsPhoto(BaseModel):
    id: int
    width: int
    height: int
    url: str
    photographer: str
    photographer_url: str | None = None
    alt: str | None = None
    src: PexelsPhotoSource


class PexelsSearchResult(BaseModel):
    total_results: int
    page: int
    per_page: int
    photos: list[PexelsPhoto]
    next_page: str | None = None


async def search_photos(
    query: str,
    *,
    per_page: int = 15,
    page: int = 1,
    orientation: Literal["landscape", "portrait", "square"] = "landscape",
    locale: str = "tr-TR",
    client: httpx.AsyncClient | None = None,
) -> PexelsSearchResult | None:
    """Search stock photos. Returns None when the API key is missing or the call fails."""
    if not settings.PEXELS_API_KEY:
        logger.warning("PEXELS_API_KEY is not configured; skipping photo search")
        return None

    params: dict[str, Any] = {
        "query": query,
        "per_page": per_page,
        "page": page,
        "orientation": orientation,
        "locale": locale,
    }
    headers = {"Authorization": settings.PEXELS_API_KEY}
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=15.0)
    try:
        response = await client.get(
            f"{settings.PEXELS_API_URL}/search", params=params, headers=headers
        )
        response.raise_for_status()
        return PexelsSearchResult.model_validate(response.json())
    except (httpx.HTTPError, ValueError) as e:
        # ValueError covers undecodable JSON and pydantic validation errors
        logger.error("Pexels search failed for %r: %s", query, e)
        return None
    finally:
        if owns_client:
            await client.aclose()
