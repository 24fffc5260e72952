import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from domain.shared.exceptions import (
    BusinessRuleViolationException,
    DomainException,
    EntityNotFoundException,
    ValidationException,
)

logger = logging.getLogger(__name__)

# Most specific first
DOMAIN_STATUS_CODES = (
    (EntityNotFoundException, status.HTTP_404_NOT_FOUND),
    (ValidationException, status.HTTP_400_BAD_REQUEST),
    (BusinessRuleViolationException, status.HTTP_409_CONFLICT),
)


def custom_exception_handler(exc, context):
    """
    Translate domain exceptions into API responses of the form
    `{detail, error, details}`; everything else goes to the DRF handler.
    """
    if isinstance(exc, DomainException):
        status_code = status.HTTP_400_BAD_REQUEST
        for exception_class, code in DOMAIN_STATUS_CODES:
            if isinstance(exc, exception_class):
                status_code = code
                break

        request = context.get('request')
        logger.info(f"{exc.code} on {getattr(request, 'path', '-')}: {exc.message}")
        return Response(
            {
                'detail': exc.message,
                'error': exc.code,
                'details': exc.details,
            },
            status=status_code,
        )

    return exception_handler(exc, context)
