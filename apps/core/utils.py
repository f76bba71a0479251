from decimal import Decimal, InvalidOperation

from apps.core.exceptions import InventoryValidationError


def to_decimal(value, field='cantidad'):
    """Coerce user input into a finite Decimal"""
    if value is None or isinstance(value, bool):
        raise InventoryValidationError(f"El campo '{field}' es requerido y debe ser numérico.")
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise InventoryValidationError(f"El campo '{field}' debe ser numérico.") from None
    if not result.is_finite():
        raise InventoryValidationError(f"El campo '{field}' debe ser un número finito.")
    return result


def to_positive_decimal(value, field='cantidad'):
    result = to_decimal(value, field)
    if result <= 0:
        raise InventoryValidationError(f"El campo '{field}' debe ser mayor que cero.")
    return result


def format_quantity(value) -> str:
    """Plain notation without trailing zeros: Decimal('2000.0000') -> '2000'"""
    return format(Decimal(value).normalize(), 'f')
