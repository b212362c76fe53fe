"""
Classification and severity policy of the request boundary.

``classify`` turns any exception into a member of the closed error
taxonomy; ``severity_for`` picks the log level from the variant alone,
independent of the HTTP status.
"""

import logging

from invoicing.domain.errors import (
    ERROR_VARIANTS,
    ApplicationError,
    ArgumentError,
    BusinessRuleError,
    ConfigurationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    FileOperationError,
    ForbiddenError,
    ImageProcessingError,
    NotFoundError,
    UnauthorizedError,
    UnclassifiedError,
    ValidationError,
)

SEVERITY_BY_VARIANT: dict[type[ApplicationError], int] = {
    ValidationError: logging.WARNING,
    BusinessRuleError: logging.WARNING,
    ConflictError: logging.WARNING,
    UnauthorizedError: logging.WARNING,
    ForbiddenError: logging.WARNING,
    ImageProcessingError: logging.WARNING,
    NotFoundError: logging.INFO,
    DatabaseError: logging.ERROR,
    ExternalServiceError: logging.ERROR,
    FileOperationError: logging.ERROR,
    UnclassifiedError: logging.ERROR,
    ConfigurationError: logging.CRITICAL,
}


def classify(exc: BaseException) -> ApplicationError:
    """Return ``exc`` itself if it belongs to the taxonomy, else wrap it.

    A bare ValueError is a bad argument (ARGUMENT_ERROR, 400). Its
    subclasses (pydantic model errors, decode errors) come from server-side
    code and stay unclassified (INTERNAL_SERVER_ERROR, 500), like anything
    else.
    """
    if isinstance(exc, ERROR_VARIANTS):
        return exc
    if type(exc) is ValueError:
        return ArgumentError.wrap(exc)
    return UnclassifiedError.wrap(exc)


def severity_for(error: ApplicationError) -> int:
    for klass in type(error).__mro__:
        if klass in SEVERITY_BY_VARIANT:
            return SEVERITY_BY_VARIANT[klass]
    return logging.ERROR
