"""
Shared fixtures: an in-memory stand-in for the Cosmos DB products container
and a FastAPI app wired to it.
"""

import time
import uuid
from typing import Any, Dict, List, Optional

import pytest
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from fastapi.testclient import TestClient

from catalog_api.app import create_app
from catalog_api.config import Settings, ValidationPolicy


class FakeContainer:
    """Implements the ContainerProxy calls the gateway makes."""

    def __init__(self) -> None:
        self.items: Dict[str, Dict[str, Any]] = {}
        self.fail_with: Optional[Exception] = None
        self.calls: List[str] = []

    def _enter(self, call: str) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def _missing(self, item: str) -> CosmosResourceNotFoundError:
        return CosmosResourceNotFoundError(
            status_code=404,
            message=f"Entity with the specified id '{item}' does not exist in the system.",
        )

    def _stamp(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc["_etag"] = f'"{uuid.uuid4()}"'
        doc["_ts"] = int(time.time())
        doc["_rid"] = "rid"
        return dict(doc)

    async def create_item(self, body: Dict[str, Any]) -> Dict[str, Any]:
        self._enter("create_item")
        doc = dict(body)
        self.items[doc["id"]] = doc
        return self._stamp(doc)

    async def read_item(self, item: str, partition_key: str) -> Dict[str, Any]:
        self._enter("read_item")
        if item not in self.items or partition_key != item:
            raise self._missing(item)
        return dict(self.items[item])

    def query_items(self, query: str, **kwargs):
        self.calls.append("query_items")
        return self._iterate()

    async def _iterate(self):
        if self.fail_with is not None:
            raise self.fail_with
        for doc in list(self.items.values()):
            yield dict(doc)

    async def patch_item(
        self, item: str, partition_key: str, patch_operations: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        self._enter("patch_item")
        if item not in self.items:
            raise self._missing(item)
        doc = self.items[item]
        for operation in patch_operations:
            assert operation["op"] == "set"
            doc[operation["path"].lstrip("/")] = operation["value"]
        return self._stamp(doc)

    async def delete_item(self, item: str, partition_key: str) -> None:
        self._enter("delete_item")
        if item not in self.items:
            raise self._missing(item)
        del self.items[item]


class FakeStore:
    """Stands in for ProductStore and records its lifecycle."""

    def __init__(self, container: FakeContainer) -> None:
        self._container = container
        self.opened = False
        self.closed = False

    async def open(self) -> None:
        self.opened = True

    async def close(self) -> None:
        self.closed = True

    @property
    def container(self) -> FakeContainer:
        return self._container


def make_settings(**validation: Any) -> Settings:
    return Settings(
        connection_string=None,
        endpoint=None,
        database_name="catalog-test",
        products_container="products",
        validation=ValidationPolicy(**validation),
    )


@pytest.fixture
def container() -> FakeContainer:
    return FakeContainer()


@pytest.fixture
def store(container: FakeContainer) -> FakeStore:
    return FakeStore(container)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings, store: FakeStore):
    return create_app(settings=settings, store=store)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def valid_product() -> Dict[str, Any]:
    return {"name": "iPhone", "description": "Good phone", "price": 10000}
