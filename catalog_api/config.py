"""
Runtime settings read from the process environment.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


class PricePolicy(str, Enum):
    """
    Lower bound applied to product prices.
    ANY: no bound is enforced
    NON_NEGATIVE: price must be >= 0
    POSITIVE: price must be > 0
    """

    ANY = "any"
    NON_NEGATIVE = "non_negative"
    POSITIVE = "positive"


@dataclass(frozen=True)
class ValidationPolicy:
    price_policy: PricePolicy = PricePolicy.ANY
    allow_empty_update: bool = True


@dataclass(frozen=True)
class Settings:
    connection_string: Optional[str]
    endpoint: Optional[str]
    database_name: str
    products_container: str
    validation: ValidationPolicy
    log_level: str = "INFO"
    cors_allow_origins: Tuple[str, ...] = ("*",)


def _get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None or value == "":
        return default
    normalized = value.strip().lower()
    if normalized in ("1", "true", "yes", "on"):
        return True
    if normalized in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Environment variable '{key}' must be a boolean, got '{value}'")


def _get_list_env(key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    """Comma separated values, blanks dropped."""
    value = os.environ.get(key)
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_price_policy() -> PricePolicy:
    value = os.environ.get("PRODUCT_PRICE_POLICY", PricePolicy.ANY.value)
    try:
        return PricePolicy(value.strip().lower())
    except ValueError:
        raise ConfigurationError(
            f"Invalid PRODUCT_PRICE_POLICY '{value}'. "
            f"Valid options: {[p.value for p in PricePolicy]}"
        ) from None


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    The store location is not checked here; ProductStore raises
    ConfigurationError when neither a connection string nor an endpoint is set.
    """
    return Settings(
        connection_string=os.environ.get("COSMOSDB_CONNECTION_STRING") or None,
        endpoint=os.environ.get("COSMOSDB_ENDPOINT") or None,
        database_name=os.environ.get("COSMOSDB_DATABASE", "catalog"),
        products_container=os.environ.get("COSMOSDB_CONTAINER_PRODUCTS", "products"),
        validation=ValidationPolicy(
            price_policy=_get_price_policy(),
            allow_empty_update=_get_bool_env("PRODUCT_ALLOW_EMPTY_UPDATE", True),
        ),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        cors_allow_origins=_get_list_env("CORS_ALLOW_ORIGINS", ("*",)),
    )
