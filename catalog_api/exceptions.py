from typing import List, Optional


class ApplicationError(Exception):
    """Base class for application-specific errors."""
    pass


class ProductValidationError(ApplicationError):
    """Raised when a request payload fails schema validation."""
    def __init__(self, errors: List[dict], message="Product validation failed."):
        super().__init__(message)
        self.errors = errors


class UnauthorizedError(ApplicationError):
    """Raised when the caller presents no usable credentials."""
    pass


class ForbiddenError(ApplicationError):
    """Raised when the caller is not allowed to perform the operation."""
    pass


class ProductNotFoundError(ApplicationError):
    """Raised when a product is not found."""
    def __init__(self, product_id: str):
        super().__init__(f"Product with ID '{product_id}' not found")
        self.product_id = product_id


class DatabaseError(ApplicationError):
    """Raised for database failures that are not a missing product."""
    def __init__(
        self,
        message="A database error occurred.",
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.original_exception = original_exception
