import logging
from collections import defaultdict
from pathlib import Path
from typing import Annotated, Any

from fastapi import APIRouter, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlmodel import Session, col, select

from app import crud
from app.api.deps import SessionDep
from app.api.routes.applications import submit_application
from app.api.routes.questions import country_faq
from app.core.config import settings
from app.models import (
    ApplicationCreate,
    Blog,
    Comment,
    CommentTarget,
    Country,
    Product,
    QuestionCreate,
    TaxonomyType,
)
from app.services import seo, slugs

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter(include_in_schema=False)

LABELS: dict[str, dict[str, str]] = {
    "tr": {
        "countries": "Ülkeler",
        "blog": "Blog",
        "featured": "Öne Çıkan Yazılar",
        "all_countries": "Tüm Ülkeler",
        "other_continent": "Diğer",
        "visa_status": "Vize Durumu",
        "allowed_stay": "Kalış Süresi",
        "packages": "Danışmanlık Paketleri",
        "documents": "Gerekli Belgeler",
        "prices": "Ücretler",
        "warnings": "Önemli Notlar",
        "comments": "Yorumlar",
        "contents": "İçindekiler",
        "not_found": "Aradığınız sayfa bulunamadı.",
        "home": "Ana Sayfa",
        "faq": "Sıkça Sorulan Sorular",
        "ask_question": "Soru Sorun",
        "name": "Ad Soyad",
        "email": "E-posta",
        "phone": "Telefon",
        "question": "Sorunuz",
        "send": "Gönder",
        "question_sent": "Sorunuz alındı, onaylandıktan sonra yayınlanacak.",
        "question_invalid": "Lütfen adınızı, geçerli bir e-posta adresini ve sorunuzu yazın.",
        "apply": "Başvuru",
        "application_title": "Vize Başvuru Formu",
        "country": "Ülke",
        "package": "Paket",
        "notes": "Notlar",
        "select": "Seçiniz",
        "application_sent": "Başvurunuz başarıyla alındı! En kısa sürede sizinle iletişime geçeceğiz.",
        "application_invalid": "Başvurunuz kaydedilemedi. Lütfen bilgilerinizi kontrol edin.",
    },
    "en": {
        "countries": "Countries",
        "blog": "Blog",
        "featured": "Featured Posts",
        "all_countries": "All Countries",
        "other_continent": "Other",
        "visa_status": "Visa Status",
        "allowed_stay": "Allowed Stay",
        "packages": "Consultancy Packages",
        "documents": "Required Documents",
        "prices": "Fees",
        "warnings": "Important Notes",
        "comments": "Comments",
        "contents": "Table of Contents",
        "not_found": "The page you are looking for could not be found.",
        "home": "Home",
        "faq": "Frequently Asked Questions",
        "ask_question": "Ask a Question",
        "name": "Full Name",
        "email": "Email",
        "phone": "Phone",
        "question": "Your Question",
        "send": "Send",
        "question_sent": "Your question was received and will be published after review.",
        "question_invalid": "Please enter your name, a valid email address and your question.",
        "apply": "Apply",
        "application_title": "Visa Application Form",
        "country": "Country",
        "package": "Package",
        "notes": "Notes",
        "select": "Select",
        "application_sent": "Your application was received! We will contact you shortly.",
        "application_invalid": "Your application could not be saved. Please check your details.",
    },
}

VISA_STATUS_LABELS: dict[str, dict[str, str]] = {
    "tr": {
        "visa-free": "Vizesiz",
        "visa-on-arrival": "Kapıda Vize",
        "eta": "Elektronik Seyahat İzni",
        "evisa": "E-Vize",
        "visa-required": "Vize Gerekli",
    },
    "en": {
        "visa-free": "Visa Free",
        "visa-on-arrival": "Visa on Arrival",
        "eta": "Electronic Travel Authorisation",
        "evisa": "eVisa",
        "visa-required": "Visa Required",
    },
}


def page_locale(request: Request) -> str:
    path = request.url.path
    return "en" if path == "/en" or path.startswith("/en/") else settings.DEFAULT_LOCALE


def locale_prefix(locale: str) -> str:
    return "" if locale == settings.DEFAULT_LOCALE else f"/{locale}"


def render(
    request: Request, template: str, context: dict[str, Any], status_code: int = 200
) -> HTMLResponse:
    locale = page_locale(request)
    page = {
        "request": request,
        "locale": locale,
        "prefix": locale_prefix(locale),
        "labels": LABELS[locale],
        "site_name": settings.SITE_NAME,
        "site_url": settings.SITE_URL.rstrip("/"),
        **context,
    }
    return templates.TemplateResponse(request, template, page, status_code=status_code)


def not_found(request: Request) -> HTMLResponse:
    labels = LABELS[page_locale(request)]
    return render(
        request,
        "404.html",
        {"title": labels["not_found"], "meta_description": labels["not_found"]},
        status_code=404,
    )


def seo_meta(record: Any, title: str, locale: str) -> dict[str, str]:
    """Title and meta description for a page.

    The stored SEO fields are written in Turkish, so other locales build them
    from the localized title and description.
    """
    if locale == settings.DEFAULT_LOCALE:
        return {
            "title": record.meta_title or title,
            "meta_description": record.meta_description
            or seo.localized(record, "description", locale),
        }
    return {
        "title": f"{title} - {settings.SITE_NAME}",
        "meta_description": seo.localized(record, "description", locale),
    }


def _country_cards(session: Session, countries: list[Country], locale: str) -> list[dict[str, Any]]:
    slug_map = slugs.country_slug_map(session)
    return [
        {
            "name": c.name,
            "title": seo.localized(c, "title", locale) or c.name,
            "image_url": c.image_url,
            "continent": c.continent,
            "url": f"{locale_prefix(locale)}/{slug_map.get(c.id, f'country-{c.id}')}",
        }
        for c in countries
    ]


def _blog_cards(session: Session, blogs: list[Blog], locale: str) -> list[dict[str, Any]]:
    slug_map = slugs.blog_slug_map(session)
    return [
        {
            "title": seo.localized(b, "title", locale),
            "description": seo.localized(b, "description", locale),
            "image_url": b.image_url,
            "created_at": b.created_at,
            "url": f"{locale_prefix(locale)}{slugs.blog_path(b, slug_map.get(b.id))}",
        }
        for b in blogs
    ]


def _active_countries(session: Session) -> list[Country]:
    return list(
        session.exec(
            select(Country).where(Country.status == 1).order_by(Country.sorted, Country.name)
        ).all()
    )


@router.get("/", response_class=HTMLResponse)
@router.get("/en", response_class=HTMLResponse)
def home(request: Request, session: SessionDep) -> HTMLResponse:
    locale = page_locale(request)
    featured = session.exec(
        select(Blog)
        .where(Blog.status == 1, Blog.home == 1)
        .order_by(col(Blog.created_at).desc())
        .limit(6)
    ).all()
    title = (
        f"{settings.SITE_NAME} - Visa Consultancy"
        if locale == "en"
        else f"{settings.SITE_NAME} - Vize Danışmanlık"
    )
    description = (
        "Professional visa consultancy for Turkish citizens: requirements, documents and fees by country."
        if locale == "en"
        else "Türk vatandaşları için profesyonel vize danışmanlığı: ülke ülke vize şartları, belgeler ve ücretler."
    )
    return render(
        request,
        "home.html",
        {
            "title": title,
            "meta_description": description,
            "blogs": _blog_cards(session, list(featured), locale),
            "countries": _country_cards(session, _active_countries(session), locale),
        },
    )


@router.get("/ulkeler", response_class=HTMLResponse)
@router.get("/en/ulkeler", response_class=HTMLResponse)
def countries_page(request: Request, session: SessionDep) -> HTMLResponse:
    locale = page_locale(request)
    labels = LABELS[locale]
    groups: dict[str, list[dict[str, Any]]] = defaultdict(list)
    for card in _country_cards(session, _active_countries(session), locale):
        groups[card["continent"] or labels["other_continent"]].append(card)
    return render(
        request,
        "countries.html",
        {
            "title": f"{labels['all_countries']} - {settings.SITE_NAME}",
            "meta_description": labels["all_countries"],
            "groups": dict(sorted(groups.items())),
        },
    )


@router.get("/blog", response_class=HTMLResponse)
@router.get("/en/blog", response_class=HTMLResponse)
def blog_list(request: Request, session: SessionDep) -> HTMLResponse:
    locale = page_locale(request)
    blogs = session.exec(
        select(Blog).where(Blog.status == 1).order_by(col(Blog.created_at).desc())
    ).all()
    return render(
        request,
        "blog_list.html",
        {
            "title": f"Blog - {settings.SITE_NAME}",
            "meta_description": LABELS[locale]["blog"],
            "blogs": _blog_cards(session, list(blogs), locale),
        },
    )


@router.get("/blog/{slug:path}", response_class=HTMLResponse)
@router.get("/en/blog/{slug:path}", response_class=HTMLResponse)
def blog_detail(request: Request, session: SessionDep, slug: str) -> HTMLResponse:
    locale = page_locale(request)
    blog = slugs.resolve_blog(session, slug)
    if not blog:
        return not_found(request)
    blog = crud.increment_blog_views(session=session, blog=blog)

    contents = seo.localized(blog, "contents", locale)
    minutes = seo.reading_time(contents, locale)
    title = seo.localized(blog, "title", locale)
    return render(
        request,
        "blog_detail.html",
        {
            **seo_meta(blog, title, locale),
            "blog": blog,
            "heading": title,
            "contents": seo.anchor_headings(contents),
            "headings": seo.parse_h2_headings(contents),
            "reading_time": seo.format_reading_time(minutes, locale),
        },
    )


def _application_form(
    request: Request,
    session: Session,
    form: dict[str, Any],
    status: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    labels = LABELS[page_locale(request)]
    countries = _active_countries(session)
    names = {c.id: c.name for c in countries}
    products = session.exec(
        select(Product)
        .where(Product.status == 1)
        .order_by(col(Product.country_id), col(Product.price))
    ).all()
    return render(
        request,
        "application.html",
        {
            "title": f"{labels['application_title']} - {settings.SITE_NAME}",
            "meta_description": labels["application_title"],
            "countries": countries,
            "packages": [
                {"id": p.id, "label": f"{names[p.country_id]} - {p.name}"}
                for p in products
                if p.country_id in names
            ],
            "form": form,
            "status": status,
        },
        status_code=status_code,
    )


@router.get("/basvuru", response_class=HTMLResponse)
@router.get("/en/basvuru", response_class=HTMLResponse)
def application_page(
    request: Request,
    session: SessionDep,
    country_id: int | None = None,
    package_id: int | None = None,
    durum: str | None = None,
) -> HTMLResponse:
    form = {"country_id": country_id, "package_id": package_id}
    status = "sent" if durum == "gonderildi" else None
    return _application_form(request, session, form, status)


@router.post("/basvuru", response_class=HTMLResponse)
@router.post("/en/basvuru", response_class=HTMLResponse)
def application_submit(
    request: Request,
    session: SessionDep,
    full_name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    phone: Annotated[str, Form()] = "",
    country_id: Annotated[int | None, Form()] = None,
    package_id: Annotated[int | None, Form()] = None,
    notes: Annotated[str, Form()] = "",
) -> HTMLResponse:
    form = {
        "full_name": full_name,
        "email": email,
        "phone": phone,
        "country_id": country_id,
        "package_id": package_id,
        "notes": notes,
    }
    try:
        application_in = ApplicationCreate(**{**form, "notes": notes or None})
        submit_application(session, application_in)
    except (ValidationError, HTTPException) as e:
        logger.info("Rejected application form: %s", e)
        return _application_form(request, session, form, "invalid", status_code=400)
    prefix = locale_prefix(page_locale(request))
    return RedirectResponse(f"{prefix}/basvuru?durum=gonderildi", status_code=303)


@router.post("/{slug}/soru")
@router.post("/en/{slug}/soru")
def ask_question(
    request: Request,
    session: SessionDep,
    slug: str,
    name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    phone: Annotated[str, Form()] = "",
    question: Annotated[str, Form()] = "",
) -> RedirectResponse:
    page = f"{locale_prefix(page_locale(request))}/{slug}"
    country = slugs.resolve_country(session, slug)
    if not country:
        return RedirectResponse(page, status_code=303)
    try:
        question_in = QuestionCreate(
            country_id=country.id,
            name=name,
            email=email,
            phone=phone or None,
            question=question,
        )
    except ValidationError:
        return RedirectResponse(f"{page}?soru=hata#soru-sor", status_code=303)
    crud.create_question(session=session, question_in=question_in)
    return RedirectResponse(f"{page}?soru=gonderildi#soru-sor", status_code=303)


@router.get("/{slug}", response_class=HTMLResponse)
@router.get("/en/{slug}", response_class=HTMLResponse)
def country_page(request: Request, session: SessionDep, slug: str) -> HTMLResponse:
    locale = page_locale(request)
    country = slugs.resolve_country(session, slug)
    if not country:
        logger.info("No country page for slug %r", slug)
        return not_found(request)

    visa_requirement = None
    if country.country_code:
        visa_requirement = crud.get_visa_requirement(
            session=session, country_code=country.country_code
        )
    products = session.exec(
        select(Product)
        .where(Product.country_id == country.id, Product.status == 1)
        .order_by(col(Product.price))
    ).all()
    comments = session.exec(
        select(Comment)
        .where(
            Comment.target_type == CommentTarget.COUNTRY,
            Comment.target_id == country.id,
            Comment.status == 1,
            col(Comment.parent_id).is_(None),
        )
        .order_by(col(Comment.created_at).desc())
    ).all()

    title = seo.localized(country, "title", locale) or country.name
    visa_badge = None
    if visa_requirement:
        status = visa_requirement.visa_status.value
        visa_badge = {"status": status, "label": VISA_STATUS_LABELS[locale][status]}
    taxonomy = crud.get_taxonomy(session=session, type=TaxonomyType.COUNTRY, model_id=country.id)
    return render(
        request,
        "country.html",
        {
            **seo_meta(country, title, locale),
            "canonical_path": f"/{taxonomy.slug}" if taxonomy else f"/{slug}",
            "country": country,
            "heading": title,
            "description": seo.localized(country, "description", locale),
            "contents": seo.localized(country, "contents", locale),
            "req_document": seo.localized(country, "req_document", locale),
            "price_contents": seo.localized(country, "price_contents", locale),
            "warning_notes": seo.localized(country, "warning_notes", locale),
            "visa_requirement": visa_requirement,
            "visa_badge": visa_badge,
            "products": products,
            "comments": comments,
            "faq": country_faq(session, country.id),
            "question_action": f"{locale_prefix(locale)}/{slug}/soru",
            "question_status": request.query_params.get("soru"),
            "apply_url": f"{locale_prefix(locale)}/basvuru?country_id={country.id}",
        },
    )
