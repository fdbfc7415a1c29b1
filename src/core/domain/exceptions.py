"""Base domain exceptions.

所有领域异常都应继承自 DomainException，并可以通过定义 error_code
类属性来指定调用方识别的错误代码。
"""


class DomainException(Exception):
    """Base exception for all domain errors.

    子类可以通过定义 error_code 类属性（默认 "DOMAIN_ERROR"）来区分错误类型。
    """

    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str = "A domain error occurred"):
        self.message = message
        super().__init__(self.message)


class EntityNotFoundError(DomainException):
    """Raised when an entity is not found."""

    error_code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str | None = None):
        message = f"{entity_type} not found"
        if entity_id:
            message = f"{entity_type} with id '{entity_id}' not found"
        super().__init__(message)


class DuplicateEntityError(DomainException):
    """Raised when a duplicate entity is detected."""

    error_code = "DUPLICATE_ENTITY"

    def __init__(self, entity_type: str, field: str, value: str):
        message = f"{entity_type} with {field} '{value}' already exists"
        super().__init__(message)


class ValidationError(DomainException):
    """Raised when validation fails."""

    error_code = "VALIDATION_ERROR"
