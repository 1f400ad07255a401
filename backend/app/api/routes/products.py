from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import col, select

from app import crud
from app.api.deps import SessionDep, get_current_active_superuser
from app.models import Country, Message, Product, ProductCreate, ProductPublic, ProductUpdate

router = APIRouter(prefix="/products", tags=["products"])


@router.get("/", response_model=list[ProductPublic])
def read_products(
    session: SessionDep, country_id: int | None = None, include_inactive: bool = False
) -> Any:
    statement = select(Product)
    if country_id is not None:
        statement = statement.where(Product.country_id == country_id)
    if not include_inactive:
        statement = statement.where(Product.status == 1)
    return session.exec(statement.order_by(col(Product.price))).all()


@router.post(
    "/", dependencies=[Depends(get_current_active_superuser)], response_model=ProductPublic
)
def create_product(*, session: SessionDep, product_in: ProductCreate) -> Any:
    if not session.get(Country, product_in.country_id):
        raise HTTPException(status_code=404, detail="Country not found")
    return crud.create_product(session=session, product_in=product_in)


@router.patch(
    "/{id}", dependencies=[Depends(get_current_active_superuser)], response_model=ProductPublic
)
def update_product(*, session: SessionDep, id: int, product_in: ProductUpdate) -> Any:
    product = session.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return crud.update_product(session=session, db_product=product, product_in=product_in)


@router.delete("/{id}", dependencies=[Depends(get_current_active_superuser)])
def delete_product(session: SessionDep, id: int) -> Message:
    product = session.get(Product, id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    session.delete(product)
    session.commit()
    return Message(message="Product deleted successfully")
