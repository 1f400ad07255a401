import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, func, select

from app import crud
from app.models import (
    VisaRequirement,
    VisaRequirementImportItem,
    VisaRequirementUpdate,
    VisaStatus,
)

logger = logging.getLogger(__name__)

# Ordered by how easy entry is; the first available method wins.
METHOD_STATUS_PRIORITY: list[tuple[str, VisaStatus]] = [
    ("visa-free", VisaStatus.VISA_FREE),
    ("visa-on-arrival", VisaStatus.VISA_ON_ARRIVAL),
    ("evisa", VisaStatus.ETA),
    ("embassy", VisaStatus.VISA_REQUIRED),
]
DEFAULT_APPLICATION_METHOD = "embassy"
MAX_ERROR_DETAILS = 10


def primary_visa_status(available_methods: list[str] | None) -> VisaStatus:
    methods = available_methods or []
    for method, status in METHOD_STATUS_PRIORITY:
        if method in methods:
            return status
    return VisaStatus.VISA_REQUIRED


def update_visa_requirement(
    session: Session, requirement_in: VisaRequirementUpdate
) -> VisaRequirement:
    methods = requirement_in.available_methods or []
    values = {
        "country_name": requirement_in.country_name,
        "visa_status": primary_visa_status(methods),
        "allowed_stay": requirement_in.allowed_stay,
        "conditions": requirement_in.conditions,
        "notes": requirement_in.notes,
        "application_method": methods[0] if methods else DEFAULT_APPLICATION_METHOD,
        "available_methods": methods,
    }
    requirement, _ = crud.upsert_visa_requirement(
        session=session, country_code=requirement_in.country_code, values=values
    )
    return requirement


def import_visa_requirements(
    session: Session, items: list[VisaRequirementImportItem], *, data_source: str = "import"
) -> dict[str, Any]:
    imported = updated = errors = 0
    error_details: list[dict[str, str]] = []

    for item in items:
        values = item.model_dump(exclude={"country_code"})
        values["data_source"] = data_source
        try:
            _, created = crud.upsert_visa_requirement(
                session=session, country_code=item.country_code, values=values
            )
        except SQLAlchemyError as e:
            session.rollback()
            errors += 1
            logger.warning("Visa requirement import failed for %s: %s", item.country_code, e)
            error_details.append({"country": item.country_code, "error": str(e)})
            continue
        if created:
            imported += 1
        else:
            updated += 1

    logger.info(
        "Visa requirement import complete: %s imported, %s updated, %s errors",
        imported, updated, errors,
    )
    return {
        "stats": {
            "total": len(items),
            "imported": imported,
            "updated": updated,
            "errors": errors,
        },
        "error_details": error_details[:MAX_ERROR_DETAILS],
    }


def visa_stats(session: Session) -> dict[str, Any]:
    rows = session.exec(
        select(VisaRequirement.visa_status, func.count()).group_by(VisaRequirement.visa_status)
    ).all()
    counts = {status.value: 0 for status in VisaStatus}
    for status, count in rows:
        counts[VisaStatus(status).value] = count
    last_updated = session.exec(select(func.max(VisaRequirement.updated_at))).one()
    return {
        "total": sum(counts.values()),
        "by_status": counts,
        "last_updated": last_updated,
    }
