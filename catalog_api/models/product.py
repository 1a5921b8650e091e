from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class ProductCreate(BaseModel):
    """
    Fields a client needs to provide to create a product.
    """

    name: str = Field(min_length=1)  # Product display name
    description: Optional[str] = None  # Detailed product description
    price: float = Field(strict=True, allow_inf_nan=False)  # Current product price

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)


class ProductUpdate(BaseModel):
    """
    Fields a client can provide to update a product.
    Only the fields actually sent are applied.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, strict=True, allow_inf_nan=False)

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    @field_validator("name", "price")
    @classmethod
    def reject_null(cls, value):
        # description may be cleared, required fields may not
        if value is None:
            raise ValueError("Field may not be null")
        return value


class ProductResponse(BaseModel):
    """
    All product fields plus the store-generated id.
    Cosmos DB system properties (_rid, _etag, _ts, ...) are dropped.
    """

    id: str
    name: str
    description: Optional[str] = None
    price: float

    model_config = ConfigDict(extra="ignore")


@dataclass(frozen=True)
class Valid:
    """Payload accepted by the schema, holding only the supplied fields."""

    payload: Dict[str, Any]


@dataclass(frozen=True)
class Invalid:
    """Payload rejected by the schema, one entry per field-level problem."""

    errors: List[Dict[str, str]] = field(default_factory=list)


ValidationResult = Union[Valid, Invalid]


def field_error(field_name: str, message: str) -> Dict[str, str]:
    return {"field": field_name, "message": message}


def validate(model: Type[BaseModel], payload: Any) -> ValidationResult:
    """
    Check a decoded JSON payload against one of the product models.

    Args:
        model: ProductCreate or ProductUpdate
        payload: The decoded request body

    Returns:
        Valid with the normalized payload, or Invalid with field messages
    """
    if not isinstance(payload, dict):
        return Invalid([field_error("body", "Request body must be a JSON object")])

    try:
        parsed = model.model_validate(payload)
    except ValidationError as e:
        return Invalid(
            [
                field_error(".".join(str(part) for part in err["loc"]) or "body", err["msg"])
                for err in e.errors()
            ]
        )

    return Valid(parsed.model_dump(exclude_unset=True))
