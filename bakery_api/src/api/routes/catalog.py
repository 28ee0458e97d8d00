from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.session import get_async_session
from src.repositories.catalog import (
    CategoryRepository,
    ProductRepository,
    UnitConversionRepository,
    UnitRepository,
)
from src.schemas.catalog import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    ConvertRequest,
    ConvertResult,
    ProductCost,
    ProductCreate,
    ProductRead,
    ProductUpdate,
    UnitConversionCreate,
    UnitConversionRead,
    UnitConversionUpdate,
    UnitCreate,
    UnitRead,
    UnitUpdate,
)
from src.services.catalog import CatalogService

router = APIRouter(tags=["Catalog"])

read_products = require_permission("products", "read")
write_products = require_permission("products", "write")


async def _get_or_404(repo, entity_id: int, label: str):
    entity = await repo.get(entity_id)
    if entity is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return entity


async def _commit_unique(session: AsyncSession, coro, label: str):
    """Run a create/update and turn unique-constraint violations into 409."""
    try:
        return await coro
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"{label} already exists")


# Categories

# PUBLIC_INTERFACE
@router.get(
    "/categories",
    response_model=List[CategoryRead],
    summary="List product categories",
    dependencies=[Depends(read_products)],
)
async def list_categories(session: AsyncSession = Depends(get_async_session)) -> List[CategoryRead]:
    return [CategoryRead.model_validate(c) for c in await CategoryRepository(session).list(limit=1000)]


# PUBLIC_INTERFACE
@router.post(
    "/categories",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product category",
    dependencies=[Depends(write_products)],
)
async def create_category(
    payload: CategoryCreate, session: AsyncSession = Depends(get_async_session)
) -> CategoryRead:
    repo = CategoryRepository(session)
    created = await _commit_unique(session, repo.create(payload.model_dump()), "Category")
    return CategoryRead.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/categories/{category_id}",
    response_model=CategoryRead,
    summary="Update product category",
    dependencies=[Depends(write_products)],
)
async def update_category(
    payload: CategoryUpdate,
    category_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> CategoryRead:
    repo = CategoryRepository(session)
    category = await _get_or_404(repo, category_id, "Category")
    updated = await _commit_unique(session, repo.update(category, payload.model_dump(exclude_unset=True)), "Category")
    return CategoryRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete product category",
    dependencies=[Depends(write_products)],
)
async def delete_category(category_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = CategoryRepository(session)
    await repo.delete(await _get_or_404(repo, category_id, "Category"))


# Products

# PUBLIC_INTERFACE
@router.get(
    "/products",
    response_model=List[ProductRead],
    summary="List products",
    dependencies=[Depends(read_products)],
)
async def list_products(
    session: AsyncSession = Depends(get_async_session),
    category_id: Optional[int] = Query(None),
    active_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProductRead]:
    items = await ProductRepository(session).list_products(
        category_id=category_id, active_only=active_only, limit=limit, offset=offset
    )
    return [ProductRead.model_validate(p) for p in items]


# PUBLIC_INTERFACE
@router.post(
    "/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create product",
    dependencies=[Depends(write_products)],
)
async def create_product(payload: ProductCreate, session: AsyncSession = Depends(get_async_session)) -> ProductRead:
    data = payload.model_dump(exclude={"ingredients"})
    ingredients = [i.model_dump() for i in payload.ingredients] if payload.ingredients is not None else None
    created = await _commit_unique(session, CatalogService(session).save_product(data, ingredients), "Product SKU")
    return ProductRead.model_validate(created)


# PUBLIC_INTERFACE
@router.get(
    "/products/{product_id}",
    response_model=ProductRead,
    summary="Get product",
    dependencies=[Depends(read_products)],
)
async def get_product(product_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> ProductRead:
    return ProductRead.model_validate(await _get_or_404(ProductRepository(session), product_id, "Product"))


# PUBLIC_INTERFACE
@router.put(
    "/products/{product_id}",
    response_model=ProductRead,
    summary="Update product",
    description="Partial update. A supplied ingredient list replaces the existing recipe.",
    dependencies=[Depends(write_products)],
)
async def update_product(
    payload: ProductUpdate,
    product_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ProductRead:
    data = payload.model_dump(exclude_unset=True, exclude={"ingredients"})
    ingredients = [i.model_dump() for i in payload.ingredients] if payload.ingredients is not None else None
    updated = await _commit_unique(
        session, CatalogService(session).save_product(data, ingredients, product_id=product_id), "Product SKU"
    )
    return ProductRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete product",
    dependencies=[Depends(write_products)],
)
async def delete_product(product_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = ProductRepository(session)
    await repo.delete(await _get_or_404(repo, product_id, "Product"))


# PUBLIC_INTERFACE
@router.get(
    "/products/{product_id}/cost",
    response_model=ProductCost,
    summary="Calculate product cost",
    description="Recipe cost with each ingredient converted to its inventory unit.",
    dependencies=[Depends(read_products)],
)
async def product_cost(product_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> ProductCost:
    return ProductCost(**await CatalogService(session).calculate_cost(product_id))


# PUBLIC_INTERFACE
@router.post(
    "/products/{product_id}/update-cost",
    response_model=ProductRead,
    summary="Store calculated cost",
    description="Persist the calculated recipe cost and resulting margin on the product.",
    dependencies=[Depends(write_products)],
)
async def update_product_cost(
    product_id: int = Path(...), session: AsyncSession = Depends(get_async_session)
) -> ProductRead:
    return ProductRead.model_validate(await CatalogService(session).update_cost(product_id))


# Units

# PUBLIC_INTERFACE
@router.get("/units", response_model=List[UnitRead], summary="List units", dependencies=[Depends(read_products)])
async def list_units(session: AsyncSession = Depends(get_async_session)) -> List[UnitRead]:
    return [UnitRead.model_validate(u) for u in await UnitRepository(session).list(limit=1000)]


# PUBLIC_INTERFACE
@router.post(
    "/units",
    response_model=UnitRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create unit",
    dependencies=[Depends(write_products)],
)
async def create_unit(payload: UnitCreate, session: AsyncSession = Depends(get_async_session)) -> UnitRead:
    created = await _commit_unique(session, UnitRepository(session).create(payload.model_dump()), "Unit")
    return UnitRead.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/units/{unit_id}",
    response_model=UnitRead,
    summary="Update unit",
    dependencies=[Depends(write_products)],
)
async def update_unit(
    payload: UnitUpdate, unit_id: int = Path(...), session: AsyncSession = Depends(get_async_session)
) -> UnitRead:
    repo = UnitRepository(session)
    unit = await _get_or_404(repo, unit_id, "Unit")
    updated = await _commit_unique(session, repo.update(unit, payload.model_dump(exclude_unset=True)), "Unit")
    return UnitRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/units/{unit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete unit",
    dependencies=[Depends(write_products)],
)
async def delete_unit(unit_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = UnitRepository(session)
    await repo.delete(await _get_or_404(repo, unit_id, "Unit"))


# PUBLIC_INTERFACE
@router.post(
    "/units/convert",
    response_model=ConvertResult,
    summary="Convert a quantity",
    dependencies=[Depends(read_products)],
)
async def convert_units(payload: ConvertRequest, session: AsyncSession = Depends(get_async_session)) -> ConvertResult:
    result = await CatalogService(session).convert(payload.quantity, payload.from_unit, payload.to_unit)
    return ConvertResult(**payload.model_dump(), result=result)


# PUBLIC_INTERFACE
@router.get(
    "/unit-conversions",
    response_model=List[UnitConversionRead],
    summary="List unit conversions",
    dependencies=[Depends(read_products)],
)
async def list_conversions(session: AsyncSession = Depends(get_async_session)) -> List[UnitConversionRead]:
    return [UnitConversionRead.model_validate(c) for c in await UnitConversionRepository(session).list(limit=1000)]


# PUBLIC_INTERFACE
@router.post(
    "/unit-conversions",
    response_model=UnitConversionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create unit conversion",
    dependencies=[Depends(write_products)],
)
async def create_conversion(
    payload: UnitConversionCreate, session: AsyncSession = Depends(get_async_session)
) -> UnitConversionRead:
    units = UnitRepository(session)
    await _get_or_404(units, payload.from_unit_id, "Unit")
    await _get_or_404(units, payload.to_unit_id, "Unit")
    created = await _commit_unique(
        session, UnitConversionRepository(session).create(payload.model_dump()), "Unit conversion"
    )
    return UnitConversionRead.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/unit-conversions/{conversion_id}",
    response_model=UnitConversionRead,
    summary="Update unit conversion",
    dependencies=[Depends(write_products)],
)
async def update_conversion(
    payload: UnitConversionUpdate,
    conversion_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UnitConversionRead:
    repo = UnitConversionRepository(session)
    conversion = await _get_or_404(repo, conversion_id, "Unit conversion")
    return UnitConversionRead.model_validate(await repo.update(conversion, payload.model_dump(exclude_unset=True)))


# PUBLIC_INTERFACE
@router.delete(
    "/unit-conversions/{conversion_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete unit conversion",
    dependencies=[Depends(write_products)],
)
async def delete_conversion(conversion_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = UnitConversionRepository(session)
    await repo.delete(await _get_or_404(repo, conversion_id, "Unit conversion"))
