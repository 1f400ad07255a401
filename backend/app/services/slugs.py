import logging
import re
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app import crud
from app.core.config import settings
from app.models import Blog, Country, Taxonomy, TaxonomyType

logger = logging.getLogger(__name__)

TURKISH_MAP = str.maketrans(
    {
        "ç": "c", "Ç": "c",
        "ğ": "g", "Ğ": "g",
        "ı": "i", "İ": "i",
        "ö": "o", "Ö": "o",
        "ş": "s", "Ş": "s",
        "ü": "u", "Ü": "u",
    }
)

BLOG_SLUG_PREFIX = "blog/"


def normalize_turkish(text: str) -> str:
    return (text or "").translate(TURKISH_MAP)


def generate_slug(text: str) -> str:
    """URL-friendly slug: Turkish letters folded to ASCII, words joined by '-'."""
    slug = normalize_turkish(text).lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def country_slug(session: Session, country: Country) -> str:
    taxonomy = crud.get_taxonomy(
        session=session, type=TaxonomyType.COUNTRY, model_id=country.id
    )
    if taxonomy:
        return taxonomy.slug
    return f"country-{country.id}"


def country_slug_map(session: Session) -> dict[int, str]:
    taxonomies = session.exec(
        select(Taxonomy).where(Taxonomy.type == TaxonomyType.COUNTRY)
    ).all()
    return {t.model_id: t.slug for t in taxonomies}


def blog_slug_map(session: Session) -> dict[int, str]:
    taxonomies = session.exec(
        select(Taxonomy).where(Taxonomy.type == TaxonomyType.BLOG)
    ).all()
    return {t.model_id: t.slug for t in taxonomies}


def blog_path(blog: Blog, taxonomy_slug: str | None = None) -> str:
    if taxonomy_slug:
        return f"/{taxonomy_slug.lstrip('/')}"
    if blog.slug:
        slug = blog.slug.strip()
        return slug if slug.startswith("/") else f"/blog/{slug}"
    return f"/blog/{blog.id}"


def _active_country(session: Session, country_id: int) -> Country | None:
    country = session.get(Country, country_id)
    if country and country.status == 1:
        return country
    return None


def resolve_country(session: Session, slug: str) -> Country | None:
    candidates = [slug]
    normalized = normalize_turkish(slug).lower()
    if normalized != slug:
        candidates.append(normalized)
    for candidate in candidates:
        taxonomy = session.exec(
            select(Taxonomy).where(
                Taxonomy.type == TaxonomyType.COUNTRY, Taxonomy.slug == candidate
            )
        ).first()
        if taxonomy:
            country = _active_country(session, taxonomy.model_id)
            if country:
                return country
    return None


def resolve_blog(session: Session, slug: str) -> Blog | None:
    slug = slug.strip("/")
    if slug.startswith(BLOG_SLUG_PREFIX):
        slug = slug[len(BLOG_SLUG_PREFIX):]
    for candidate in (f"{BLOG_SLUG_PREFIX}{slug}", slug):
        taxonomy = session.exec(
            select(Taxonomy).where(
                Taxonomy.type == TaxonomyType.BLOG, Taxonomy.slug == candidate
            )
        ).first()
        if taxonomy:
            blog = session.get(Blog, taxonomy.model_id)
            if blog and blog.status == 1:
                return blog
    return session.exec(
        select(Blog).where(Blog.slug == slug, Blog.status == 1)
    ).first()


def slug_taken(session: Session, slug: str, *, exclude: Taxonomy | None = None) -> bool:
    statement = select(Taxonomy).where(Taxonomy.slug == slug)
    if exclude is not None and exclude.id is not None:
        statement = statement.where(Taxonomy.id != exclude.id)
    return session.exec(statement).first() is not None


def ensure_blog_taxonomy(session: Session, blog_id: int, slug: str) -> tuple[Taxonomy, bool]:
    existing = crud.get_taxonomy(session=session, type=TaxonomyType.BLOG, model_id=blog_id)
    if existing:
        return existing, False
    taxonomy = crud.set_taxonomy_slug(
        session=session,
        type=TaxonomyType.BLOG,
        model_id=blog_id,
        slug=f"{BLOG_SLUG_PREFIX}{slug.strip('/')}",
    )
    return taxonomy, True


def fix_blog_taxonomies(session: Session) -> dict[str, Any]:
    blogs = session.exec(select(Blog).where(Blog.status == 1)).all()
    fixed = 0
    errors: list[dict[str, Any]] = []
    for blog in blogs:
        if not blog.slug:
            continue
        try:
            _, created = ensure_blog_taxonomy(session, blog.id, blog.slug)
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Could not create taxonomy for blog %s: %s", blog.id, e)
            errors.append({"blog_id": blog.id, "error": str(e)})
            continue
        if created:
            fixed += 1
    logger.info("Fixed %s of %s blog taxonomies", fixed, len(blogs))
    return {
        "message": f"Fixed {fixed} blogs",
        "fixed": fixed,
        "total": len(blogs),
        "errors": errors,
    }


def _unique_slug(
    session: Session, slug: str, model_id: int, taxonomy: Taxonomy | None, claimed: set[str]
) -> str:
    if slug in claimed or slug_taken(session, slug, exclude=taxonomy):
        return f"{slug}-{model_id}"
    return slug


def fix_country_slugs(session: Session, *, dry_run: bool = True) -> dict[str, Any]:
    """Regenerate each country's taxonomy slug from its name."""
    countries = session.exec(select(Country).order_by(Country.id)).all()
    updated: list[dict[str, Any]] = []
    created: list[dict[str, Any]] = []
    unchanged: list[dict[str, Any]] = []
    # slugs handed out during this run, so dry runs see their own collisions
    claimed: set[str] = set()
    for country in countries:
        wanted = generate_slug(country.name)
        if not wanted:
            continue
        taxonomy = crud.get_taxonomy(
            session=session, type=TaxonomyType.COUNTRY, model_id=country.id
        )
        wanted = _unique_slug(session, wanted, country.id, taxonomy, claimed)
        claimed.add(wanted)
        if taxonomy and taxonomy.slug == wanted:
            unchanged.append({"id": country.id, "name": country.name, "slug": wanted})
            continue
        entry = {"id": country.id, "name": country.name, "new_slug": wanted}
        if taxonomy:
            entry["old_slug"] = taxonomy.slug
            updated.append(entry)
        else:
            created.append(entry)
        if not dry_run:
            crud.set_taxonomy_slug(
                session=session, type=TaxonomyType.COUNTRY, model_id=country.id, slug=wanted
            )
    logger.info(
        "Country slug fix (dry_run=%s): %s updated, %s created, %s unchanged",
        dry_run, len(updated), len(created), len(unchanged),
    )
    return {
        "dry_run": dry_run,
        "updated": updated,
        "created": created,
        "unchanged": unchanged,
    }


def restore_flat_slugs(session: Session, *, dry_run: bool = True) -> dict[str, Any]:
    """Strip nested country slugs like 'amerika/amerika-vizesi' back to their last segment."""
    taxonomies = session.exec(
        select(Taxonomy).where(
            Taxonomy.type == TaxonomyType.COUNTRY, Taxonomy.slug.contains("/")
        ).order_by(Taxonomy.id)
    ).all()
    restored: list[dict[str, str]] = []
    errors: list[dict[str, str]] = []
    claimed: set[str] = set()
    for taxonomy in taxonomies:
        old_slug = taxonomy.slug.rstrip("/").split("/")[-1]
        if not old_slug:
            continue
        if old_slug in claimed or slug_taken(session, old_slug, exclude=taxonomy):
            errors.append({"slug": taxonomy.slug, "error": f"'{old_slug}' already in use"})
            continue
        claimed.add(old_slug)
        restored.append({"from": taxonomy.slug, "to": old_slug})
        if not dry_run:
            taxonomy.slug = old_slug
            session.add(taxonomy)
    if not dry_run:
        session.commit()
    logger.info("Restored %s flat slugs (dry_run=%s)", len(restored), dry_run)
    return {
        "dry_run": dry_run,
        "total": len(taxonomies),
        "restored": restored,
        "errors": errors,
    }


def list_slugs(session: Session) -> list[dict[str, Any]]:
    taxonomies = session.exec(select(Taxonomy).order_by(Taxonomy.slug)).all()
    rows: list[dict[str, Any]] = []
    for taxonomy in taxonomies:
        model = Country if taxonomy.type == TaxonomyType.COUNTRY else Blog
        obj = session.get(model, taxonomy.model_id)
        if obj is None:
            name, status = "Unknown", 0
        else:
            name = obj.name if isinstance(obj, Country) else obj.title
            status = obj.status
        rows.append(
            {
                "id": taxonomy.id,
                "slug": taxonomy.slug,
                "type": taxonomy.type.value,
                "model_id": taxonomy.model_id,
                "content_name": name,
                "status": status,
                "url": f"{settings.SITE_URL.rstrip('/')}/{taxonomy.slug}",
            }
        )
    return rows
