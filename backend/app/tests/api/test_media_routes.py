from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from app.core.config import settings
from app.services.pexels import PexelsSearchResult

API = f"{settings.API_V1_STR}/media"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def test_upload_image_stores_file(
    client: TestClient, superuser_token_headers: dict[str, str], media_root
) -> None:
    r = client.post(
        f"{API}/upload",
        headers=superuser_token_headers,
        files={"file": ("kapak.png", PNG_BYTES, "image/png")},
        data={"bucket": "countries"},
    )
    assert r.status_code == 200, r.text
    stored = r.json()
    assert stored["path"].startswith("countries/")
    assert stored["path"].endswith(".png")
    assert stored["url"] == f"{settings.MEDIA_URL}/{stored['path']}"
    assert (media_root / stored["path"]).read_bytes() == PNG_BYTES


def test_upload_rejects_non_images(
    client: TestClient, superuser_token_headers: dict[str, str], media_root
) -> None:
    r = client.post(
        f"{API}/upload",
        headers=superuser_token_headers,
        files={"file": ("notlar.txt", b"hello", "text/plain")},
    )
    assert r.status_code == 400


def test_upload_rejects_large_files(
    client: TestClient, superuser_token_headers: dict[str, str], media_root, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 10)
    r = client.post(
        f"{API}/upload",
        headers=superuser_token_headers,
        files={"file": ("kapak.png", PNG_BYTES, "image/png")},
    )
    assert r.status_code == 413


def test_delete_media_rejects_traversal(
    client: TestClient, superuser_token_headers: dict[str, str], media_root
) -> None:
    r = client.delete(f"{API}/blogs/..%2F..%2Fsecrets.txt", headers=superuser_token_headers)
    assert r.status_code in (400, 404)
    r = client.delete(f"{API}/blogs/missing.png", headers=superuser_token_headers)
    assert r.status_code == 404


def test_pexels_search_unavailable(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    with patch("app.api.routes.media.search_photos", AsyncMock(return_value=None)):
        r = client.get(
            f"{API}/pexels/search", headers=superuser_token_headers, params={"query": "paris"}
        )
    assert r.status_code == 503


def test_pexels_search_results(
    client: TestClient, superuser_token_headers: dict[str, str]
) -> None:
    result = PexelsSearchResult(total_results=0, page=1, per_page=15, photos=[])
    search = AsyncMock(return_value=result)
    with patch("app.api.routes.media.search_photos", search):
        r = client.get(
            f"{API}/pexels/search",
            headers=superuser_token_headers,
            params={"query": "istanbul", "per_page": 5},
        )
    assert r.status_code == 200
    assert r.json()["total_results"] == 0
    search.assert_awaited_once_with("istanbul", per_page=5, page=1, orientation="landscape")
