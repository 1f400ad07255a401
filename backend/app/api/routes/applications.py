import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, col, func, select

from app import crud
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import (
    Application,
    ApplicationCreate,
    ApplicationPublic,
    ApplicationsPublic,
    ApplicationStatus,
    ApplicationStatusUpdate,
    Country,
    Message,
    Product,
)

router = APIRouter(prefix="/applications", tags=["applications"])
logger = logging.getLogger(__name__)


def submit_application(session: Session, application_in: ApplicationCreate) -> Application:
    """Store a visa application, copying the chosen country and package names.

    Raises 400 when the package does not belong to the chosen country.
    """
    country = None
    if application_in.country_id is not None:
        country = session.get(Country, application_in.country_id)
        if not country:
            raise HTTPException(status_code=404, detail="Country not found")
    product = None
    if application_in.package_id is not None:
        product = session.get(Product, application_in.package_id)
        if not product:
            raise HTTPException(status_code=404, detail="Product not found")
        if country and product.country_id != country.id:
            raise HTTPException(
                status_code=400, detail="Package does not belong to the selected country"
            )
    application = crud.create_application(
        session=session, application_in=application_in, country=country, product=product
    )
    logger.info(
        "New application %s for %s",
        application.id, application.country_name or "unspecified country",
    )
    return application


@router.post("/", response_model=ApplicationPublic, status_code=201)
def create_application(*, session: SessionDep, application_in: ApplicationCreate) -> Any:
    return submit_application(session, application_in)


@router.get(
    "/",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=ApplicationsPublic,
)
def read_applications(
    session: SessionDep,
    status: ApplicationStatus | None = None,
    skip: int = 0,
    limit: int = 100,
) -> Any:
    count_statement = select(func.count()).select_from(Application)
    statement = select(Application)
    if status is not None:
        count_statement = count_statement.where(Application.status == status)
        statement = statement.where(Application.status == status)
    count = session.exec(count_statement).one()
    applications = session.exec(
        statement.order_by(col(Application.created_at).desc(), col(Application.id).desc())
        .offset(skip)
        .limit(limit)
    ).all()
    return ApplicationsPublic(data=applications, count=count)


@router.patch(
    "/{id}",
    dependencies=[Depends(get_current_active_superuser)],
    response_model=ApplicationPublic,
)
def update_application_status(
    *, session: SessionDep, id: int, status_in: ApplicationStatusUpdate
) -> Any:
    application = session.get(Application, id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    application.status = status_in.status
    session.add(application)
    session.commit()
    session.refresh(application)
    return application


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_application(session: SessionDep, id: int) -> Message:
    application = session.get(Application, id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    session.delete(application)
    session.commit()
    return Message(message="Application deleted successfully")
