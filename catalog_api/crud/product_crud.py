from azure.cosmos.exceptions import CosmosHttpResponseError
from azure.cosmos.aio import ContainerProxy
import uuid
from typing import Any, Dict, List

from catalog_api.models.product import ProductResponse

from catalog_api.exceptions import (
    ProductNotFoundError,
    DatabaseError,
)

from catalog_api.logging_config import get_child_logger, tracer

logger = get_child_logger("crud.product")


def is_valid_product_id(product_id: str) -> bool:
    """
    Check that an id has the shape of the ids this store generates.

    Malformed ids are reported as not found, never as a database error.
    """
    try:
        uuid.UUID(product_id)
    except (ValueError, TypeError, AttributeError):
        return False
    return True


def _database_error(operation: str, span, e: Exception) -> DatabaseError:
    span.set_attribute("error", True)
    if isinstance(e, CosmosHttpResponseError):
        span.set_attribute("error.type", "cosmos_http_error")
        span.set_attribute("error.status_code", e.status_code)
        logger.error(
            f"Cosmos DB error during {operation}",
            extra={"status_code": e.status_code, "cosmos_message": e.message},
            exc_info=True,
        )
        return DatabaseError(
            f"Cosmos DB error during {operation}: Status Code {e.status_code}, Message: {e.message}",
            original_exception=e,
        )

    span.set_attribute("error.type", type(e).__name__)
    logger.error(
        f"Unexpected error during {operation}",
        extra={"error_type": type(e).__name__},
        exc_info=True,
    )
    return DatabaseError(
        "An unexpected error occurred during database operation.",
        original_exception=e,
    )


def _not_found(product_id: str, span) -> ProductNotFoundError:
    span.set_attribute("product.found", False)
    logger.warning("Product not found", extra={"product_id": product_id})
    return ProductNotFoundError(product_id)


async def list_products(container: ContainerProxy) -> List[ProductResponse]:
    """
    Retrieve every product. Order is not guaranteed.
    """
    with tracer.start_as_current_span("list_products") as span:
        logger.info("Listing products")

        try:
            items = [
                ProductResponse.model_validate(item)
                async for item in container.query_items(query="SELECT * FROM c")
            ]
        except Exception as e:
            raise _database_error("product listing", span, e) from e

        span.set_attribute("products.count", len(items))
        logger.info(f"Retrieved {len(items)} products", extra={"count": len(items)})
        return items


async def create_product(
    container: ContainerProxy, attrs: Dict[str, Any]
) -> ProductResponse:
    """
    Create a new product in the database.

    Args:
        container: Cosmos DB container client
        attrs: Validated product fields

    Returns:
        Newly created product including its generated id

    Raises:
        DatabaseError: If a database operation fails
    """
    with tracer.start_as_current_span("create_product") as span:
        data = dict(attrs)
        data["id"] = str(uuid.uuid4())

        span.set_attribute("product.id", data["id"])
        span.set_attribute("product.name", data["name"])

        logger.info(
            "Creating new product",
            extra={"product_id": data["id"], "product_name": data["name"]},
        )

        try:
            result = await container.create_item(body=data)
        except Exception as e:
            raise _database_error("product creation", span, e) from e

        logger.info("Product created successfully", extra={"product_id": data["id"]})
        return ProductResponse.model_validate(result)


async def get_product_by_id(
    container: ContainerProxy, product_id: str
) -> ProductResponse:
    """
    Retrieve a product by its ID.

    Raises:
        ProductNotFoundError: If the product doesn't exist or the id is malformed
        DatabaseError: If a database operation fails
    """
    with tracer.start_as_current_span("get_product_by_id") as span:
        span.set_attribute("product.id", str(product_id))
        logger.info("Retrieving product by ID", extra={"product_id": product_id})

        if not is_valid_product_id(product_id):
            raise _not_found(product_id, span)

        try:
            item = await container.read_item(item=product_id, partition_key=product_id)
        except CosmosHttpResponseError as e:
            if e.status_code == 404:
                raise _not_found(product_id, span) from e
            raise _database_error("product retrieval", span, e) from e
        except Exception as e:
            raise _database_error("product retrieval", span, e) from e

        return ProductResponse.model_validate(item)


async def update_product(
    container: ContainerProxy,
    product_id: str,
    changes: Dict[str, Any],
) -> ProductResponse:
    """
    Apply the supplied fields to an existing product.

    Fields missing from changes are left as they are. With no changes the
    current product is returned untouched.

    Returns:
        The product as stored after the update

    Raises:
        ProductNotFoundError: If the product doesn't exist or the id is malformed
        DatabaseError: If a database operation fails
    """
    if not changes:
        return await get_product_by_id(container, product_id)

    with tracer.start_as_current_span("update_product") as span:
        span.set_attribute("product.id", str(product_id))
        span.set_attribute("update.fields", sorted(changes))
        logger.info(
            "Updating product",
            extra={"product_id": product_id, "fields": sorted(changes)},
        )

        if not is_valid_product_id(product_id):
            raise _not_found(product_id, span)

        patch_operations = [
            {"op": "set", "path": f"/{key}", "value": value}
            for key, value in changes.items()
            if key != "id"
        ]

        try:
            result = await container.patch_item(
                item=product_id,
                partition_key=product_id,
                patch_operations=patch_operations,
            )
        except CosmosHttpResponseError as e:
            if e.status_code == 404:
                raise _not_found(product_id, span) from e
            raise _database_error("product update", span, e) from e
        except Exception as e:
            raise _database_error("product update", span, e) from e

        logger.info("Product updated successfully", extra={"product_id": product_id})
        return ProductResponse.model_validate(result)


async def delete_product(container: ContainerProxy, product_id: str) -> None:
    """
    Delete a product from the database.

    Raises:
        ProductNotFoundError: If the product doesn't exist or the id is malformed
        DatabaseError: If a database operation fails
    """
    with tracer.start_as_current_span("delete_product") as span:
        span.set_attribute("product.id", str(product_id))
        logger.info("Deleting product", extra={"product_id": product_id})

        if not is_valid_product_id(product_id):
            raise _not_found(product_id, span)

        try:
            await container.delete_item(item=product_id, partition_key=product_id)
        except CosmosHttpResponseError as e:
            if e.status_code == 404:
                raise _not_found(product_id, span) from e
            raise _database_error("product deletion", span, e) from e
        except Exception as e:
            raise _database_error("product deletion", span, e) from e

        logger.info("Product deleted successfully", extra={"product_id": product_id})
