"""Tests for the Cosmos DB product gateway."""

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError

from catalog_api.crud.product_crud import (
    create_product,
    delete_product,
    get_product_by_id,
    is_valid_product_id,
    list_products,
    update_product,
)
from catalog_api.exceptions import DatabaseError, ProductNotFoundError

MISSING_ID = "0f5b3c1e-8a7d-4c1b-9e2f-6a1d2b3c4d5e"


@pytest.mark.parametrize(
    "value, expected",
    [
        (MISSING_ID, True),
        ("6436b0784a513e9668096865", False),
        ("", False),
        ("not-an-id", False),
    ],
)
def test_is_valid_product_id(value, expected) -> None:
    assert is_valid_product_id(value) is expected


@pytest.mark.asyncio
async def test_create_generates_id_and_stores_document(container) -> None:
    product = await create_product(container, {"name": "iPhone", "price": 10000.0})

    assert is_valid_product_id(product.id)
    assert container.items[product.id]["name"] == "iPhone"
    assert container.items[product.id]["id"] == product.id


@pytest.mark.asyncio
async def test_create_does_not_mutate_input(container) -> None:
    attrs = {"name": "iPhone", "price": 1.0}
    await create_product(container, attrs)
    assert "id" not in attrs


@pytest.mark.asyncio
async def test_list_returns_all_products(container) -> None:
    for name in ("a", "b"):
        await create_product(container, {"name": name, "price": 1.0})

    products = await list_products(container)

    assert sorted(p.name for p in products) == ["a", "b"]


@pytest.mark.asyncio
async def test_update_applies_only_supplied_fields(container) -> None:
    created = await create_product(
        container, {"name": "iPhone", "description": "Good phone", "price": 10000.0}
    )

    updated = await update_product(container, created.id, {"name": "Samsung"})

    assert updated.name == "Samsung"
    assert updated.description == "Good phone"
    assert updated.price == 10000.0
    assert updated.id == created.id


@pytest.mark.asyncio
async def test_empty_update_returns_current_product(container) -> None:
    created = await create_product(container, {"name": "iPhone", "price": 1.0})

    result = await update_product(container, created.id, {})

    assert result == created
    assert "patch_item" not in container.calls


@pytest.mark.asyncio
@pytest.mark.parametrize("product_id", [MISSING_ID, "6436b0784a513e9668096865"])
async def test_missing_or_malformed_id_is_not_found(container, product_id) -> None:
    with pytest.raises(ProductNotFoundError):
        await get_product_by_id(container, product_id)
    with pytest.raises(ProductNotFoundError):
        await update_product(container, product_id, {"name": "Samsung"})
    with pytest.raises(ProductNotFoundError):
        await delete_product(container, product_id)


@pytest.mark.asyncio
async def test_delete_removes_document(container) -> None:
    created = await create_product(container, {"name": "iPhone", "price": 1.0})

    await delete_product(container, created.id)

    assert container.items == {}
    with pytest.raises(ProductNotFoundError):
        await get_product_by_id(container, created.id)


@pytest.mark.asyncio
async def test_cosmos_errors_become_database_errors(container) -> None:
    created = await create_product(container, {"name": "iPhone", "price": 1.0})
    fault = CosmosHttpResponseError(status_code=503, message="Service unavailable")
    container.fail_with = fault

    with pytest.raises(DatabaseError) as exc_info:
        await get_product_by_id(container, created.id)

    assert exc_info.value.original_exception is fault
    with pytest.raises(DatabaseError):
        await list_products(container)
    with pytest.raises(DatabaseError):
        await create_product(container, {"name": "Pixel", "price": 1.0})


@pytest.mark.asyncio
async def test_unexpected_driver_errors_become_database_errors(container) -> None:
    created = await create_product(container, {"name": "iPhone", "price": 1.0})
    container.fail_with = ConnectionResetError("connection reset")

    with pytest.raises(DatabaseError):
        await delete_product(container, created.id)


@pytest.mark.asyncio
async def test_update_store_fault_becomes_database_error(container) -> None:
    created = await create_product(container, {"name": "iPhone", "price": 1.0})
    container.fail_with = CosmosHttpResponseError(status_code=503, message="Service unavailable")

    with pytest.raises(DatabaseError):
        await update_product(container, created.id, {"name": "Samsung"})

    assert container.items[created.id]["name"] == "iPhone"
