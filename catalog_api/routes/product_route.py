from typing import Any, List
from fastapi import APIRouter, Body, Depends, Path, Request, status
from azure.cosmos.aio import ContainerProxy

from catalog_api.config import ValidationPolicy
from catalog_api.models.product import Invalid, ProductResponse
from catalog_api.validation import validate_create, validate_update
from catalog_api.crud.product_crud import (
    get_product_by_id,
    list_products,
    create_product,
    delete_product,
    update_product,
)
from catalog_api.exceptions import ProductValidationError

from catalog_api.logging_config import tracer, get_child_logger

logger = get_child_logger("routes.product")

router = APIRouter(prefix="/products", tags=["products"])


def get_products_container(request: Request) -> ContainerProxy:
    return request.app.state.store.container


def get_validation_policy(request: Request) -> ValidationPolicy:
    return request.app.state.settings.validation


@router.get("", response_model=List[ProductResponse], include_in_schema=False)
@router.get("/", response_model=List[ProductResponse])
async def get_products(container: ContainerProxy = Depends(get_products_container)):
    with tracer.start_as_current_span("api_get_products") as span:
        logger.info("Handling GET /products request")
        result = await list_products(container=container)
        span.set_attribute("products.count", len(result))
        return result


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
async def add_new_product(
    body: Any = Body(None, description="Product information to create"),
    container: ContainerProxy = Depends(get_products_container),
    policy: ValidationPolicy = Depends(get_validation_policy),
):
    with tracer.start_as_current_span("api_add_new_product"):
        result = validate_create(body, policy)
        if isinstance(result, Invalid):
            raise ProductValidationError(result.errors)
        return await create_product(container=container, attrs=result.payload)


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: str = Path(..., title="The ID of the product to retrieve"),
    container: ContainerProxy = Depends(get_products_container),
):
    with tracer.start_as_current_span("api_get_product") as span:
        span.set_attribute("product.id", product_id)
        return await get_product_by_id(container=container, product_id=product_id)


@router.put("/{product_id}", response_model=ProductResponse)
async def update_existing_product(
    product_id: str = Path(..., title="The ID of the product to update"),
    body: Any = Body(None, description="Product fields to replace"),
    container: ContainerProxy = Depends(get_products_container),
    policy: ValidationPolicy = Depends(get_validation_policy),
):
    with tracer.start_as_current_span("api_update_product") as span:
        span.set_attribute("product.id", product_id)
        result = validate_update(body, policy)
        if isinstance(result, Invalid):
            raise ProductValidationError(result.errors)
        return await update_product(
            container=container, product_id=product_id, changes=result.payload
        )


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_existing_product(
    product_id: str = Path(..., title="The ID of the product to delete"),
    container: ContainerProxy = Depends(get_products_container),
):
    with tracer.start_as_current_span("api_delete_product") as span:
        span.set_attribute("product.id", product_id)
        await delete_product(container=container, product_id=product_id)
