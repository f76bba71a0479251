import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from apps.core.exceptions import InventoryError

logger = logging.getLogger(__name__)


def inventory_exception_handler(exc, context):
    """
    Renders taxonomy errors as {"error": code, "detail": message}.
    Anything unexpected is logged and answered with a generic 500 body.
    """
    if isinstance(exc, InventoryError):
        return Response({'error': exc.code, 'detail': exc.message}, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        return Response({'error': 'validation_error', 'detail': exc.messages}, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get('view')
    logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'API'}: {exc}")
    return Response(
        {'error': 'internal_error', 'detail': 'Error interno del servidor.'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
