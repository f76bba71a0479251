"""
Inventory error taxonomy.

Every business-rule or infrastructure failure raised by the ledger services
derives from InventoryError. Each class carries a stable ``code`` and the HTTP
status the API layer answers with.
"""


class InventoryError(Exception):
    """Base class for all inventory errors"""
    code = 'inventory_error'
    status_code = 400
    default_message = 'Error de inventario.'

    def __init__(self, message=None, **context):
        self.message = message or self.default_message
        self.context = context
        super().__init__(self.message)


class InventoryValidationError(InventoryError):
    """Malformed input, non-positive quantities"""
    code = 'validation_error'
    default_message = 'Datos inválidos.'


class CategoryMismatch(InventoryError):
    code = 'category_mismatch'
    default_message = 'Las unidades deben ser de la misma categoría.'


class NoDirectConversion(InventoryError):
    code = 'no_direct_conversion'
    default_message = 'No existe conversión directa entre estas unidades.'


class InsufficientStock(InventoryError):
    code = 'insufficient_stock'
    status_code = 409
    default_message = 'Stock insuficiente para realizar la salida.'


class InsufficientLotQuantity(InventoryError):
    code = 'insufficient_lot_quantity'
    status_code = 409
    default_message = 'Stock insuficiente en el lote.'


class Unauthorized(InventoryError):
    code = 'unauthorized'
    status_code = 403
    default_message = 'Este tipo de ajuste requiere autorización de un administrador.'


class DuplicateEdge(InventoryError):
    code = 'duplicate_edge'
    status_code = 409
    default_message = 'Ya existe una conversión entre estas unidades.'


class DuplicateCode(InventoryError):
    code = 'duplicate_code'
    status_code = 409
    default_message = 'Ya existe un lote con ese código para esta materia prima.'


class HasMovements(InventoryError):
    code = 'has_movements'
    status_code = 409
    default_message = 'El registro tiene movimientos de inventario asociados.'


class HasOpenLots(InventoryError):
    code = 'has_open_lots'
    status_code = 409
    default_message = 'El registro tiene lotes con existencias.'


class UnitInUse(InventoryError):
    code = 'unit_in_use'
    status_code = 409
    default_message = 'La unidad de medida está en uso por conversiones o materias primas.'


class NotFound(InventoryError):
    code = 'not_found'
    status_code = 404
    default_message = 'Registro no encontrado.'


class LedgerTimeout(InventoryError):
    """Lock wait exceeded; the only error that is safe to retry"""
    code = 'timeout'
    status_code = 503
    default_message = 'Tiempo de espera agotado al bloquear el inventario. Intente de nuevo.'


class ImmutableMovement(InventoryError):
    """Raised on any attempt to rewrite or remove a ledger row"""
    code = 'immutable_movement'
    status_code = 409
    default_message = 'Los movimientos de inventario no se pueden modificar ni eliminar.'
