from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import RedirectResponse

# Old URLs that search engines still link to
LEGACY_REDIRECTS: dict[str, str] = {
    "/kuveyt/kuveyt-gezilecek-yerler": "/blog/kuveyt-gezilecek-yerler",
    "/amerika/danismanlik-paketleri": "/amerika",
    "/amerika/tum-sorular": "/amerika",
    "/kuveyt-gezilecek-yerler": "/blog/kuveyt-gezilecek-yerler",
    "/kapida-vize-isteyen-ulkeler": "/blog/kapida-vize-isteyen-ulkeler",
    "/amerika-green-card-basvuru-sartlari-ve-cekilis-rehberi": "/blog/amerika-green-card-basvuru-sartlari-ve-cekilis-rehberi",
    "/amerika-yonetim-sekli-nufusu-ve-en-cok-merak-edilenler": "/blog/amerika-yonetim-sekli-nufusu-ve-en-cok-merak-edilenler",
    "/dubai-marhaba-servisinin-tum-detaylari": "/blog/dubai-marhaba-servisinin-tum-detaylari",
    "/dubai-sik-sorulan-sorular": "/blog/dubai-sik-sorulan-sorular",
    "/kuveytte-colde-safari": "/blog/kuveytte-colde-safari",
    "/yunanistan-adalari-kapi-vizesi-rehberi": "/blog/yunanistan-adalari-kapi-vizesi-rehberi",
    "/amerika-f2m2-ogrenci-aile-vizesi": "/amerika-f2-ve-m2-ogrenci-ailesi-vizeleri",
}

SKIPPED_PREFIXES = ("/api", "/media", "/docs", "/redoc", "/openapi")


def redirect_target(path: str) -> str | None:
    """Where a page request should be permanently redirected, if anywhere."""
    if path.startswith(SKIPPED_PREFIXES) or "." in path:
        return None

    locale_prefix = "/en" if path == "/en" or path.startswith("/en/") else ""
    if path == "/tr" or path.startswith("/tr/"):
        bare = path[3:] or "/"
    else:
        bare = path[len(locale_prefix):] or "/"

    legacy = LEGACY_REDIRECTS.get(bare.rstrip("/") or "/")
    if legacy:
        return f"{locale_prefix}{legacy}"
    if path == "/tr" or path.startswith("/tr/"):
        return bare
    return None


async def locale_redirect_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    target = redirect_target(request.url.path)
    if target is None:
        return await call_next(request)
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return RedirectResponse(target, status_code=301)
