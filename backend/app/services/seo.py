import logging
import math
import re
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Session, select

from app.models import Country, Taxonomy, TaxonomyType

logger = logging.getLogger(__name__)

MIN_META_DESCRIPTION = 120
META_DESCRIPTION_CUT = 155
WORDS_PER_MINUTE = {"tr": 200, "en": 238}

_TAG_RE = re.compile(r"<[^>]*>")
_H2_RE = re.compile(r"<h2([^>]*)>(.*?)</h2>", re.IGNORECASE | re.DOTALL)


def _brand_suffix_re(site_name: str) -> re.Pattern[str]:
    return re.compile(rf"\s*[-|]\s*{re.escape(site_name)}\s*$", re.IGNORECASE)


def backfill_country_seo(
    session: Session, *, site_name: str, dry_run: bool = True
) -> dict[str, Any]:
    """
    Normalise title/meta fields of active countries.

    - `title` loses a trailing "- <site>" or "| <site>".
    - `meta_title` ends with "- <site>" and never uses the pipe form.
    - `meta_description` is at least MIN_META_DESCRIPTION characters.
    """
    suffix_re = _brand_suffix_re(site_name)
    countries = session.exec(select(Country).where(Country.status == 1)).all()

    updates: list[dict[str, Any]] = []
    for country in countries:
        changes: dict[str, str] = {}
        before = {
            "title": country.title,
            "meta_title": country.meta_title,
            "meta_description": country.meta_description,
        }

        if country.title and suffix_re.search(country.title):
            changes["title"] = suffix_re.sub("", country.title).strip()

        meta_title = country.meta_title or ""
        if f"- {site_name}" not in meta_title or f"| {site_name}" in meta_title:
            base = country.title or f"{country.name} Vizesi"
            changes["meta_title"] = f"{suffix_re.sub('', base).strip()} - {site_name}"

        if len(country.meta_description or "") < MIN_META_DESCRIPTION:
            if country.description and len(country.description) >= MIN_META_DESCRIPTION:
                changes["meta_description"] = country.description[:META_DESCRIPTION_CUT]
            else:
                changes["meta_description"] = (
                    f"{country.name} vizesi için profesyonel danışmanlık hizmeti. "
                    f"{site_name} ile vize başvurunuzu hızlı ve güvenli şekilde tamamlayın. "
                    "Uzman ekibimiz size yardımcı olmak için hazır."
                )

        if not changes:
            continue
        if not dry_run:
            country.sqlmodel_update(changes)
            session.add(country)
        updates.append(
            {"id": country.id, "name": country.name, "before": before, "after": changes}
        )

    if not dry_run and updates:
        session.commit()
    logger.info(
        "SEO backfill (dry_run=%s): %s of %s countries changed",
        dry_run, len(updates), len(countries),
    )
    return {
        "dry_run": dry_run,
        "total_countries": len(countries),
        "fixed_countries": len(updates),
        "updates": updates,
    }


def _group_active_by_name(session: Session) -> dict[str, list[Country]]:
    countries = session.exec(
        select(Country).where(Country.status == 1).order_by(Country.name)
    ).all()
    groups: dict[str, list[Country]] = defaultdict(list)
    for country in countries:
        groups[country.name].append(country)
    return groups


def find_duplicate_countries(session: Session) -> dict[str, Any]:
    groups = _group_active_by_name(session)
    duplicates = [
        {"name": name, "count": len(group), "ids": [c.id for c in group]}
        for name, group in groups.items()
        if len(group) > 1
    ]
    total = sum(len(group) for group in groups.values())
    surplus = sum(d["count"] - 1 for d in duplicates)
    return {
        "total": total,
        "unique": len(groups),
        "duplicate_entries": surplus,
        "duplicates": duplicates,
    }


def _age_key(country: Country) -> tuple[datetime, int]:
    created = country.created_at or datetime.max
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created, country.id or 0


def delete_duplicate_countries(session: Session) -> list[int]:
    """Keep the oldest row of each duplicate name group and delete the rest."""
    to_delete: list[Country] = []
    for group in _group_active_by_name(session).values():
        if len(group) < 2:
            continue
        group.sort(key=_age_key)
        to_delete.extend(group[1:])

    deleted_ids = [c.id for c in to_delete]
    for country in to_delete:
        taxonomy = session.exec(
            select(Taxonomy).where(
                Taxonomy.type == TaxonomyType.COUNTRY, Taxonomy.model_id == country.id
            )
        ).first()
        if taxonomy:
            session.delete(taxonomy)
        session.delete(country)
    if to_delete:
        session.commit()
        logger.info("Deleted duplicate countries %s", deleted_ids)
    return deleted_ids


def strip_tags(html: str) -> str:
    return _TAG_RE.sub(" ", html or "")


def word_count(text: str) -> int:
    return len(text.split())


def reading_time(html: str, locale: str = "tr") -> int:
    words = word_count(strip_tags(html))
    wpm = WORDS_PER_MINUTE.get(locale, WORDS_PER_MINUTE["tr"])
    return max(1, math.ceil(words / wpm))


def format_reading_time(minutes: int, locale: str = "tr") -> str:
    if locale == "en":
        return "1 minute read" if minutes == 1 else f"{minutes} minutes read"
    return f"{minutes} dakika okuma"


def heading_anchor(title: str) -> str:
    anchor = re.sub(r"[^a-z0-9ğüşıöç\s-]", "", title.lower())
    anchor = re.sub(r"\s+", "-", anchor)
    return re.sub(r"-+", "-", anchor).strip("-")


def parse_h2_headings(html: str) -> list[dict[str, str]]:
    headings: list[dict[str, str]] = []
    for match in _H2_RE.finditer(html or ""):
        title = _TAG_RE.sub("", match.group(2)).strip()
        if title:
            headings.append({"id": heading_anchor(title), "title": title})
    return headings


def anchor_headings(html: str) -> str:
    """Give every H2 without an id the anchor used by the table of contents."""

    def _add_id(match: re.Match[str]) -> str:
        attrs, inner = match.group(1), match.group(2)
        title = _TAG_RE.sub("", inner).strip()
        if "id=" in attrs or not title:
            return match.group(0)
        return f'<h2{attrs} id="{heading_anchor(title)}">{inner}</h2>'

    return _H2_RE.sub(_add_id, html or "")


def localized(record: Any, field: str, locale: str) -> str:
    if locale == "en":
        value = getattr(record, f"{field}_en", None)
        if value:
            return value
    return getattr(record, field, None) or ""


def incomplete_countries(session: Session) -> list[dict[str, Any]]:
    countries = session.exec(select(Country).order_by(Country.name)).all()
    report: list[dict[str, Any]] = []
    for country in countries:
        missing = [
            field
            for field in ("contents", "meta_title", "meta_description", "title_en")
            if not getattr(country, field)
        ]
        if missing:
            report.append({"id": country.id, "name": country.name, "missing": missing})
    return report
