from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from app import crud
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import VisaRequirementImportItem, VisaRequirementPublic, VisaRequirementUpdate
from app.services import visa

router = APIRouter(prefix="/visa-requirements", tags=["visa-requirements"])


@router.get("/")
def read_visa_requirement(session: SessionDep, country_code: str | None = None) -> dict[str, Any]:
    if not country_code:
        raise HTTPException(status_code=400, detail="country_code is required")
    requirement = crud.get_visa_requirement(session=session, country_code=country_code)
    return {
        "requirement": VisaRequirementPublic.model_validate(requirement) if requirement else None
    }


@router.get("/stats")
def read_stats(session: SessionDep) -> dict[str, Any]:
    return visa.visa_stats(session)


@router.post(
    "/",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=VisaRequirementPublic,
)
def upsert_visa_requirement(*, session: SessionDep, requirement_in: VisaRequirementUpdate) -> Any:
    return visa.update_visa_requirement(session, requirement_in)


@router.post("/import", dependencies=[Depends(get_current_active_superuser)])
def import_visa_requirements(
    *, session: SessionDep, items: list[VisaRequirementImportItem], data_source: str = "import"
) -> dict[str, Any]:
    if not items:
        raise HTTPException(status_code=400, detail="No visa requirements to import")
    result = visa.import_visa_requirements(session, items, data_source=data_source)
    return {"success": True, **result}
