import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, func, select

from app import crud
from app.ai.translator import translate_record_fields
from app.api.deps import SessionDep, get_current_active_superuser
from app.api.routes.ai import provider_errors
from app.core.config import settings
from app.models import (
    CountriesPublic,
    Country,
    CountryCreate,
    CountryDetail,
    CountryPublic,
    CountryUpdate,
    Message,
    Product,
    ProductPublic,
    TaxonomyType,
    VisaRequirementPublic,
)
from app.services import seo, slugs

router = APIRouter(prefix="/countries", tags=["countries"])
logger = logging.getLogger(__name__)


def _public(session: Session, country: Country, slug: str | None = None) -> CountryPublic:
    return CountryPublic.model_validate(
        country, update={"slug": slug or slugs.country_slug(session, country)}
    )


@router.get("/", response_model=CountriesPublic)
def read_countries(session: SessionDep, continent: str | None = None) -> Any:
    statement = select(Country).where(Country.status == 1)
    if continent:
        statement = statement.where(Country.continent == continent)
    countries = session.exec(statement.order_by(Country.sorted, Country.name)).all()
    slug_map = slugs.country_slug_map(session)
    data = [
        CountryPublic.model_validate(
            c, update={"slug": slug_map.get(c.id, f"country-{c.id}")}
        )
        for c in countries
    ]
    return CountriesPublic(data=data, count=len(data))


@router.get(
    "/admin/list",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=CountriesPublic,
)
def read_all_countries(session: SessionDep, skip: int = 0, limit: int = 500) -> Any:
    count = session.exec(select(func.count()).select_from(Country)).one()
    countries = session.exec(
        select(Country).order_by(Country.name).offset(skip).limit(limit)
    ).all()
    slug_map = slugs.country_slug_map(session)
    data = [
        CountryPublic.model_validate(c, update={"slug": slug_map.get(c.id, "")})
        for c in countries
    ]
    return CountriesPublic(data=data, count=count)


@router.get("/admin/duplicates", dependencies=[Depends(get_current_active_superuser)])
def read_duplicates(session: SessionDep) -> dict[str, Any]:
    return seo.find_duplicate_countries(session)


@router.delete("/admin/duplicates", dependencies=[Depends(get_current_active_superuser)])
def delete_duplicates(session: SessionDep) -> dict[str, Any]:
    deleted_ids = seo.delete_duplicate_countries(session)
    return {
        "message": f"Deleted {len(deleted_ids)} duplicate countries",
        "deleted_count": len(deleted_ids),
        "deleted_ids": deleted_ids,
    }


@router.get("/admin/fix-seo", dependencies=[Depends(get_current_active_superuser)])
def preview_seo_fix(session: SessionDep, dry_run: bool = True) -> dict[str, Any]:
    return seo.backfill_country_seo(session, site_name=settings.SITE_NAME, dry_run=dry_run)


@router.post("/admin/fix-seo", dependencies=[Depends(get_current_active_superuser)])
def apply_seo_fix(session: SessionDep) -> dict[str, Any]:
    return seo.backfill_country_seo(session, site_name=settings.SITE_NAME, dry_run=False)


@router.get("/admin/incomplete", dependencies=[Depends(get_current_active_superuser)])
def read_incomplete(session: SessionDep) -> dict[str, Any]:
    countries = seo.incomplete_countries(session)
    return {"count": len(countries), "countries": countries}


@router.get("/code/{code}", response_model=CountryPublic)
def read_country_by_code(session: SessionDep, code: str) -> Any:
    country = session.exec(
        select(Country).where(
            func.upper(Country.country_code) == code.upper(), Country.status == 1
        )
    ).first()
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")
    return _public(session, country)


@router.get("/{slug}", response_model=CountryDetail)
def read_country(session: SessionDep, slug: str) -> Any:
    country = slugs.resolve_country(session, slug)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")

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
    return CountryDetail.model_validate(
        country,
        update={
            "slug": slugs.country_slug(session, country),
            "visa_requirement": (
                VisaRequirementPublic.model_validate(visa_requirement)
                if visa_requirement
                else None
            ),
            "products": [ProductPublic.model_validate(p) for p in products],
        },
    )


@router.post(
    "/", dependencies=[Depends(get_current_active_superuser)], response_model=CountryPublic
)
def create_country(*, session: SessionDep, country_in: CountryCreate) -> Any:
    slug = slugs.generate_slug(country_in.slug or country_in.name)
    if not slug:
        raise HTTPException(status_code=400, detail="Could not derive a slug from the name")
    if slugs.slug_taken(session, slug):
        raise HTTPException(status_code=400, detail=f"Slug '{slug}' is already in use")

    country = crud.create_country(session=session, country_in=country_in)
    crud.set_taxonomy_slug(
        session=session, type=TaxonomyType.COUNTRY, model_id=country.id, slug=slug
    )
    logger.info("Created country %s with slug %s", country.id, slug)
    return _public(session, country, slug)


@router.patch(
    "/{id}", dependencies=[Depends(get_current_active_superuser)], response_model=CountryPublic
)
def update_country(*, session: SessionDep, id: int, country_in: CountryUpdate) -> Any:
    country = session.get(Country, id)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")

    if country_in.slug is not None:
        slug = slugs.generate_slug(country_in.slug)
        taxonomy = crud.get_taxonomy(
            session=session, type=TaxonomyType.COUNTRY, model_id=country.id
        )
        if not slug or slugs.slug_taken(session, slug, exclude=taxonomy):
            raise HTTPException(status_code=400, detail=f"Slug '{slug}' is already in use")
        crud.set_taxonomy_slug(
            session=session, type=TaxonomyType.COUNTRY, model_id=country.id, slug=slug
        )

    country = crud.update_country(session=session, db_country=country, country_in=country_in)
    return _public(session, country)


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_country(session: SessionDep, id: int) -> Message:
    country = session.get(Country, id)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")
    crud.delete_taxonomy(session=session, type=TaxonomyType.COUNTRY, model_id=id)
    session.delete(country)
    session.commit()
    logger.info("Deleted country %s", id)
    return Message(message="Country deleted successfully")


@router.post(
    "/{id}/translate",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=CountryPublic,
)
async def translate_country(session: SessionDep, id: int, overwrite: bool = False) -> Any:
    """Fill the English columns of a country from its Turkish content."""
    country = session.get(Country, id)
    if not country:
        raise HTTPException(status_code=404, detail="Country not found")

    with provider_errors("Country translation"):
        updates = await translate_record_fields(country, overwrite=overwrite)
    if updates:
        country = crud.update_country(
            session=session,
            db_country=country,
            country_in=CountryUpdate.model_validate(updates),
        )
        logger.info("Translated fields %s of country %s", sorted(updates), id)
    return _public(session, country)
