from typing import Any, Dict, List

from catalog_api.config import PricePolicy, ValidationPolicy
from catalog_api.models.product import (
    Invalid,
    ProductCreate,
    ProductUpdate,
    ValidationResult,
    field_error,
    validate,
)


def _check_price(payload: Dict[str, Any], policy: ValidationPolicy) -> List[Dict[str, str]]:
    if "price" not in payload:
        return []
    price = payload["price"]
    if policy.price_policy == PricePolicy.NON_NEGATIVE and price < 0:
        return [field_error("price", "Price must not be negative")]
    if policy.price_policy == PricePolicy.POSITIVE and price <= 0:
        return [field_error("price", "Price must be greater than zero")]
    return []


def validate_create(body: Any, policy: ValidationPolicy = ValidationPolicy()) -> ValidationResult:
    """Validate a create payload: name and price required, description optional."""
    result = validate(ProductCreate, body)
    if isinstance(result, Invalid):
        return result

    errors = _check_price(result.payload, policy)
    return Invalid(errors) if errors else result


def validate_update(body: Any, policy: ValidationPolicy = ValidationPolicy()) -> ValidationResult:
    """
    Validate a partial update payload.

    Any subset of fields is accepted, each typed as for create. An empty
    body is a no-op unless the policy disallows it.
    """
    result = validate(ProductUpdate, body)
    if isinstance(result, Invalid):
        return result

    if not result.payload and not policy.allow_empty_update:
        return Invalid([field_error("body", "No fields provided for update")])

    errors = _check_price(result.payload, policy)
    return Invalid(errors) if errors else result
