from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from framework.config import settings
from framework.logging.logger import StructuredLogger
from framework.response import ResponseModel
from ..schemas import ProductIn, ProductRead, ProductUpdate, ProductWithCategory
from ..unit_of_work import CatalogUnitOfWork
from .deps import get_app_logger, get_uow

router = APIRouter()


def not_found(product_id: int) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ResponseModel.fail(code=404, message=f"Product id={product_id} not found"),
    )


def unknown_category(category_id: int) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ResponseModel.fail(code=400, message=f"Category id={category_id} does not exist"),
    )


@router.get("")
async def list_products(
    uow: CatalogUnitOfWork = Depends(get_uow),
    logger: StructuredLogger = Depends(get_app_logger),
):
    """First page of products."""
    logger.info("========== GET products ==========")
    products = await uow.products.take(settings.CATALOG_PAGE_SIZE)
    return ResponseModel.success(data=[ProductRead.model_validate(p) for p in products])


@router.get("/by-price")
async def list_products_by_price(
    limit: int = settings.CATALOG_PAGE_SIZE,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Cheapest products first."""
    products = await uow.products.get_by_price(limit)
    return ResponseModel.success(data=[ProductRead.model_validate(p) for p in products])


@router.get("/with-category")
async def list_products_with_category(
    limit: int = settings.CATALOG_PAGE_SIZE,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Products together with their category."""
    products = await uow.products.get_with_category(limit)
    return ResponseModel.success(data=[ProductWithCategory.model_validate(p) for p in products])


@router.get("/{product_id}", name="get_product")
async def get_product(
    product_id: int,
    uow: CatalogUnitOfWork = Depends(get_uow),
    logger: StructuredLogger = Depends(get_app_logger),
):
    """Get product by id."""
    logger.info(f"========== GET products/id = {product_id} ==========")
    product = await uow.products.get_by_id(product_id)
    if product is None:
        logger.info(f"========== GET products/id = {product_id} NOT FOUND ==========")
        return not_found(product_id)
    return ResponseModel.success(data=ProductRead.model_validate(product))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductIn,
    request: Request,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Create product under an existing category."""
    if await uow.categories.get_by_id(payload.category_id) is None:
        return unknown_category(payload.category_id)

    product = await uow.products.add(payload.to_entity())
    await uow.commit()

    body = ProductRead.model_validate(product)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ResponseModel.success(data=body.model_dump(mode="json"), code=201),
        headers={"Location": str(request.url_for("get_product", product_id=product.id))},
    )


@router.put("/{product_id}")
async def update_product(
    product_id: int,
    payload: ProductUpdate,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Full update; the id in the body must match the path."""
    if payload.id != product_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ResponseModel.fail(
                code=400,
                message=f"Path id ({product_id}) does not match body id ({payload.id})",
            ),
        )

    existing = await uow.products.get_by_id(product_id)
    if existing is None:
        return not_found(product_id)
    if await uow.categories.get_by_id(payload.category_id) is None:
        return unknown_category(payload.category_id)

    product = payload.to_entity(product_id)
    product.created_at = existing.created_at
    product = await uow.products.update(product)
    await uow.commit()
    return ResponseModel.success(data=ProductRead.model_validate(product))


@router.delete("/{product_id}")
async def delete_product(
    product_id: int,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Delete product."""
    product = await uow.products.get_by_id(product_id)
    if product is None:
        return not_found(product_id)

    body = ProductRead.model_validate(product)
    await uow.products.delete(product)
    await uow.commit()
    return ResponseModel.success(data=body)
