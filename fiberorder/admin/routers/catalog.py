"""Tariffs (products) and options (routers, TV, phone). Deactivate instead of deleting: promotions reference them."""
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from fiberorder.admin.deps import require_admin
from fiberorder.core.database import get_db
from fiberorder.models import Product, ProductOption
from fiberorder.schemas.catalog import (
    OptionCreate,
    OptionResponse,
    OptionUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("/products", response_model=list[ProductResponse])
def products_list(db: Session = Depends(get_db)):
    return db.exec(select(Product).order_by(Product.id)).all()


@router.post("/products", response_model=ProductResponse, status_code=201)
def product_create(data: ProductCreate, db: Session = Depends(get_db)):
    if db.exec(select(Product).where(Product.slug == data.slug)).first():
        raise HTTPException(status_code=400, detail="Dieser Slug ist bereits vergeben.")
    product = Product(**data.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.patch("/products/{product_id:int}", response_model=ProductResponse)
def product_update(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    product = db.get(Product, product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Produkt nicht gefunden.")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(product, key, value)
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.get("/options", response_model=list[OptionResponse])
def options_list(category: str | None = None, db: Session = Depends(get_db)):
    stmt = select(ProductOption).order_by(ProductOption.id)
    if category:
        stmt = stmt.where(ProductOption.category == category)
    return db.exec(stmt).all()


@router.post("/options", response_model=OptionResponse, status_code=201)
def option_create(data: OptionCreate, db: Session = Depends(get_db)):
    if db.exec(select(ProductOption).where(ProductOption.slug == data.slug)).first():
        raise HTTPException(status_code=400, detail="Dieser Slug ist bereits vergeben.")
    option = ProductOption(**data.model_dump())
    db.add(option)
    db.commit()
    db.refresh(option)
    return option


@router.patch("/options/{option_id:int}", response_model=OptionResponse)
def option_update(option_id: int, data: OptionUpdate, db: Session = Depends(get_db)):
    option = db.get(ProductOption, option_id)
    if not option:
        raise HTTPException(status_code=404, detail="Option nicht gefunden.")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(option, key, value)
    db.add(option)
    db.commit()
    db.refresh(option)
    return option
