import asyncio
from typing import Optional

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient
from azure.identity.aio import DefaultAzureCredential

from catalog_api.config import ConfigurationError, Settings
from catalog_api.logging_config import get_child_logger

logger = get_child_logger("db")

# Products are addressed by id alone, so id is also the partition key
PRODUCTS_PARTITION_KEY_PATH = "/id"


class ProductStore:
    """
    Owns the Cosmos DB client for the lifetime of the application.

    Opened once at startup and closed on shutdown; handlers reach the
    products container through it instead of module-level globals.
    """

    def __init__(self, settings: Settings):
        self._settings = settings
        self._client: Optional[CosmosClient] = None
        self._credential: Optional[DefaultAzureCredential] = None
        self._container: Optional[ContainerProxy] = None
        self._open_lock = asyncio.Lock()

    def _build_client(self) -> CosmosClient:
        if self._settings.connection_string:
            logger.info("Creating CosmosDB client from connection string")
            return CosmosClient.from_connection_string(self._settings.connection_string)

        if self._settings.endpoint:
            # Managed identity in Azure, developer credentials locally
            logger.info("Creating CosmosDB client with DefaultAzureCredential")
            self._credential = DefaultAzureCredential()
            return CosmosClient(url=self._settings.endpoint, credential=self._credential)

        raise ConfigurationError(
            "Either COSMOSDB_CONNECTION_STRING or COSMOSDB_ENDPOINT must be set"
        )

    async def open(self) -> None:
        """Connect and make sure the database and products container exist."""
        if self._container is not None:
            return

        async with self._open_lock:
            # Another request may have finished opening while this one waited
            if self._container is not None:
                return

            self._client = self._build_client()
            try:
                database = await self._client.create_database_if_not_exists(
                    id=self._settings.database_name
                )
                container = await database.create_container_if_not_exists(
                    id=self._settings.products_container,
                    partition_key=PartitionKey(path=PRODUCTS_PARTITION_KEY_PATH),
                )
            except Exception:
                logger.error("Failed to open products container", exc_info=True)
                await self.close()
                raise

            self._container = container

        logger.info(
            "Connected to products container",
            extra={
                "database": self._settings.database_name,
                "container": self._settings.products_container,
            },
        )

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        if self._credential is not None:
            await self._credential.close()
        self._client = None
        self._credential = None
        self._container = None

    @property
    def container(self) -> ContainerProxy:
        if self._container is None:
            raise RuntimeError("ProductStore is not open. Call open() first.")
        return self._container
