from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from framework.config import settings
from framework.logging.logger import StructuredLogger
from framework.response import ResponseModel
from ..schemas import CategoryIn, CategoryRead, CategoryUpdate, CategoryWithProducts
from ..unit_of_work import CatalogUnitOfWork
from .deps import get_app_logger, get_uow

router = APIRouter()


def not_found(category_id: int) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ResponseModel.fail(code=404, message=f"Category id={category_id} not found"),
    )


@router.get("")
async def list_categories(
    uow: CatalogUnitOfWork = Depends(get_uow),
    logger: StructuredLogger = Depends(get_app_logger),
):
    """First page of categories."""
    logger.info("========== GET categories ==========")
    categories = await uow.categories.take(settings.CATALOG_PAGE_SIZE)
    return ResponseModel.success(data=[CategoryRead.model_validate(c) for c in categories])


@router.get("/products")
async def list_categories_with_products(
    limit: int = settings.CATALOG_PAGE_SIZE,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Categories with their products (bounded)."""
    categories = await uow.categories.get_with_products(limit)
    return ResponseModel.success(data=[CategoryWithProducts.model_validate(c) for c in categories])


@router.get("/{category_id}", name="get_category")
async def get_category(
    category_id: int,
    uow: CatalogUnitOfWork = Depends(get_uow),
    logger: StructuredLogger = Depends(get_app_logger),
):
    """Get category by id."""
    logger.info(f"========== GET categories/id = {category_id} ==========")
    category = await uow.categories.get_by_id(category_id)
    if category is None:
        logger.info(f"========== GET categories/id = {category_id} NOT FOUND ==========")
        return not_found(category_id)
    return ResponseModel.success(data=CategoryRead.model_validate(category))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryIn,
    request: Request,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Create category; Location points at the new resource."""
    category = await uow.categories.add(payload.to_entity())
    await uow.commit()

    body = CategoryRead.model_validate(category)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content=ResponseModel.success(data=body.model_dump(mode="json"), code=201),
        headers={"Location": str(request.url_for("get_category", category_id=category.id))},
    )


@router.put("/{category_id}")
async def update_category(
    category_id: int,
    payload: CategoryUpdate,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Full update; the id in the body must match the path."""
    if payload.id != category_id:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ResponseModel.fail(
                code=400,
                message=f"Path id ({category_id}) does not match body id ({payload.id})",
            ),
        )

    if await uow.categories.get_by_id(category_id) is None:
        return not_found(category_id)

    category = await uow.categories.update(payload.to_entity(category_id))
    await uow.commit()
    return ResponseModel.success(data=CategoryRead.model_validate(category))


@router.delete("/{category_id}")
async def delete_category(
    category_id: int,
    uow: CatalogUnitOfWork = Depends(get_uow),
):
    """Delete category (and its products)."""
    category = await uow.categories.get_by_id(category_id)
    if category is None:
        return not_found(category_id)

    body = CategoryRead.model_validate(category)
    await uow.categories.delete(category)
    await uow.commit()
    return ResponseModel.success(data=body)
