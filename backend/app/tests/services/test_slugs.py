import unittest

from sqlmodel import Session, select

from app.models import Blog, Country, Taxonomy, TaxonomyType
from app.services.slugs import (
    blog_path,
    fix_country_slugs,
    generate_slug,
    normalize_turkish,
    resolve_blog,
    resolve_country,
    restore_flat_slugs,
)


class SlugGenerationTests(unittest.TestCase):
    def test_turkish_letters_fold_to_ascii(self):
        self.assertEqual(normalize_turkish("ÇĞİÖŞÜ çğıöşü"), "cgiosu cgiosu")

    def test_generate_slug(self):
        self.assertEqual(generate_slug("Güney Kore Vizesi"), "guney-kore-vizesi")
        self.assertEqual(generate_slug("  Amerika (ABD) -- Vize!  "), "amerika-abd-vize")
        self.assertEqual(generate_slug("Fildişi Sahili"), "fildisi-sahili")
        self.assertEqual(generate_slug("!!!"), "")

    def test_blog_path_prefers_taxonomy(self):
        blog = Blog(id=7, title="x", slug="eski")
        self.assertEqual(blog_path(blog, "blog/yeni"), "/blog/yeni")
        self.assertEqual(blog_path(blog), "/blog/eski")
        self.assertEqual(blog_path(Blog(id=7, title="x", slug="/ozel/yol")), "/ozel/yol")
        self.assertEqual(blog_path(Blog(id=7, title="x")), "/blog/7")


def _country(db: Session, name: str, slug: str | None = None, status: int = 1) -> Country:
    country = Country(name=name, status=status)
    db.add(country)
    db.commit()
    db.refresh(country)
    if slug:
        db.add(Taxonomy(type=TaxonomyType.COUNTRY, model_id=country.id, slug=slug))
        db.commit()
    return country


def test_resolve_country_by_taxonomy(db: Session) -> None:
    country = _country(db, "Özbekistan", "ozbekistan")
    _country(db, "Kapalı", "kapali", status=0)

    assert resolve_country(db, "ozbekistan").id == country.id
    assert resolve_country(db, "Özbekistan").id == country.id
    assert resolve_country(db, "kapali") is None
    assert resolve_country(db, "yok") is None


def test_resolve_blog_with_and_without_prefix(db: Session) -> None:
    blog = Blog(title="Vize Rehberi", slug="vize-rehberi")
    legacy = Blog(title="Eski", slug="eski-yazi")
    db.add(blog)
    db.add(legacy)
    db.commit()
    db.refresh(blog)
    db.add(Taxonomy(type=TaxonomyType.BLOG, model_id=blog.id, slug="blog/vize-rehberi"))
    db.commit()

    assert resolve_blog(db, "vize-rehberi").id == blog.id
    assert resolve_blog(db, "blog/vize-rehberi").id == blog.id
    # blogs without a taxonomy row fall back to their own slug
    assert resolve_blog(db, "eski-yazi").title == "Eski"


def test_fix_country_slugs_updates_and_avoids_collisions(db: Session) -> None:
    georgia = _country(db, "Gürcistan", "gurcistan-vizesi")
    _country(db, "Polonya", "polonya")
    poland = _country(db, "Polonya")

    report = fix_country_slugs(db, dry_run=False)

    assert [e["slug"] for e in report["unchanged"]] == ["polonya"]
    assert report["updated"][0]["old_slug"] == "gurcistan-vizesi"
    assert report["updated"][0]["new_slug"] == "gurcistan"
    created = {e["id"]: e["new_slug"] for e in report["created"]}
    assert created[poland.id] == f"polonya-{poland.id}"
    db.expire_all()
    slug = db.exec(
        select(Taxonomy.slug).where(Taxonomy.model_id == georgia.id)
    ).one()
    assert slug == "gurcistan"


def test_restore_flat_slugs_reports_conflicts(db: Session) -> None:
    _country(db, "Amerika", "amerika")
    _country(db, "Eski Amerika", "abd/amerika")
    _country(db, "Kanada", "kanada/kanada-vizesi")

    report = restore_flat_slugs(db, dry_run=True)

    assert report["total"] == 2
    assert report["restored"] == [{"from": "kanada/kanada-vizesi", "to": "kanada-vizesi"}]
    assert report["errors"][0]["slug"] == "abd/amerika"
    db.expire_all()
    assert db.exec(
        select(Taxonomy).where(Taxonomy.slug == "kanada/kanada-vizesi")
    ).first() is not None


def test_fix_country_slugs_second_run_changes_nothing(db: Session) -> None:
    _country(db, "Polonya")
    _country(db, "Polonya")
    fix_country_slugs(db, dry_run=False)

    report = fix_country_slugs(db, dry_run=False)

    assert report["updated"] == []
    assert report["created"] == []
    assert len(report["unchanged"]) == 2


def test_fix_country_slugs_dry_run_sees_its_own_collisions(db: Session) -> None:
    first = _country(db, "Macaristan")
    second = _country(db, "Macaristan")

    report = fix_country_slugs(db, dry_run=True)

    created = {e["id"]: e["new_slug"] for e in report["created"]}
    assert created == {first.id: "macaristan", second.id: f"macaristan-{second.id}"}


def test_restore_flat_slugs_dry_run_reports_duplicate_targets(db: Session) -> None:
    _country(db, "Amerika", "abd/amerika")
    _country(db, "Amerika Vize", "vize/amerika")

    report = restore_flat_slugs(db, dry_run=True)

    assert report["restored"] == [{"from": "abd/amerika", "to": "amerika"}]
    assert report["errors"] == [{"slug": "vize/amerika", "error": "'amerika' already in use"}]
