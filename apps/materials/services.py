"""
Item catalog and lot registry services.

Balances (material stock, material cost, lot quantity) are only ever changed
from inside a ledger transaction on rows the ledger has already locked; the
helpers here that mutate them expect such a row.
"""
import logging
from datetime import timedelta
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from apps.alerts.services import AlertEngine
from apps.core.exceptions import (
    DuplicateCode,
    HasMovements,
    HasOpenLots,
    InsufficientLotQuantity,
    InventoryValidationError,
)
from apps.core.utils import to_decimal, to_positive_decimal

from .models import Lot, RawMaterial

logger = logging.getLogger(__name__)

COST_PRECISION = Decimal('0.0001')


def _non_negative(value, field):
    result = to_decimal(value, field)
    if result < 0:
        raise InventoryValidationError(f"El campo '{field}' no puede ser negativo.")
    return result


class CatalogService:
    EDITABLE_FIELDS = ('name', 'description', 'minimum_stock', 'unit')
    LEDGER_FIELDS = RawMaterial.LEDGER_FIELDS

    @staticmethod
    def create_item(name, unit, minimum_stock=0, unit_cost=0, description=''):
        if not unit.is_active:
            raise InventoryValidationError('La unidad de medida no está activa.')
        if RawMaterial.objects.filter(name__iexact=name).exists():
            raise InventoryValidationError(f"Ya existe una materia prima con el nombre '{name}'.")

        material = RawMaterial.objects.create(
            name=name,
            unit=unit,
            description=description or '',
            minimum_stock=_non_negative(minimum_stock, 'stock_minimo'),
            unit_cost=_non_negative(unit_cost, 'costo_unitario'),
            current_stock=Decimal('0'),
        )
        logger.info(f"Material created: {material.name} ({unit.abbreviation})")
        return material

    @staticmethod
    def adjust_cost(material, entry_quantity, entry_unit_cost) -> Decimal:
        """
        Weighted average on pre-entry stock:
        (stock * cost + q * c) / (stock + q).
        Mutates the locked material in memory; the ledger saves it.
        """
        stock = material.current_stock
        total = stock + entry_quantity
        if total <= 0:
            return material.unit_cost
        blended = (stock * material.unit_cost + entry_quantity * entry_unit_cost) / total
        material.unit_cost = blended.quantize(COST_PRECISION)
        return material.unit_cost

    @classmethod
    @transaction.atomic
    def update_item(cls, material, **fields):
        blocked = [name for name in cls.LEDGER_FIELDS if name in fields]
        if blocked:
            raise InventoryValidationError(
                f"Los campos {', '.join(blocked)} solo pueden cambiar mediante movimientos de inventario."
            )
        unknown = [name for name in fields if name not in cls.EDITABLE_FIELDS]
        if unknown:
            raise InventoryValidationError(f"Campos no editables: {', '.join(unknown)}.")

        material = RawMaterial.objects.select_for_update().get(pk=material.pk)

        unit = fields.get('unit')
        if unit is not None and unit.pk != material.unit_id:
            if material.movements.exists():
                raise HasMovements('No se puede cambiar la unidad de una materia prima con movimientos.')
            if not unit.is_active:
                raise InventoryValidationError('La unidad de medida no está activa.')

        name = fields.get('name')
        if name and RawMaterial.objects.filter(name__iexact=name).exclude(pk=material.pk).exists():
            raise InventoryValidationError(f"Ya existe una materia prima con el nombre '{name}'.")

        if 'minimum_stock' in fields:
            fields['minimum_stock'] = _non_negative(fields['minimum_stock'], 'stock_minimo')
        minimum_changed = 'minimum_stock' in fields and fields['minimum_stock'] != material.minimum_stock

        for field, value in fields.items():
            setattr(material, field, value)
        material.save()

        if minimum_changed:
            AlertEngine.evaluate_material(material)
        return material

    @staticmethod
    def delete_item(material):
        if material.lots.filter(current_quantity__gt=0).exists():
            raise HasOpenLots('No se puede eliminar la materia prima porque tiene lotes con existencias.')
        if material.movements.exists():
            raise HasMovements('No se puede eliminar la materia prima porque tiene movimientos registrados.')
        material.soft_delete()
        logger.info(f"Material archived: {material.name}")

    @staticmethod
    def low_stock_items():
        return RawMaterial.objects.filter(
            is_active=True,
            current_stock__lte=F('minimum_stock'),
        ).select_related('unit')


class LotService:
    EDITABLE_FIELDS = ('code', 'production_date', 'expiration_date', 'unit_cost')

    @staticmethod
    def _check_dates(production_date, expiration_date):
        if production_date and expiration_date and expiration_date <= production_date:
            raise InventoryValidationError('La fecha de caducidad debe ser posterior a la fecha de producción.')

    @classmethod
    def open_lot(cls, material, code, initial_quantity, expiration_date=None,
                 production_date=None, unit_cost=None):
        """
        Register a new lot already holding ``initial_quantity``.
        Ledger-only: the caller appends the matching entry movement.
        """
        code = (code or '').strip()
        if not code:
            raise InventoryValidationError('El código de lote es requerido.')
        initial_quantity = to_positive_decimal(initial_quantity, 'cantidad_inicial')
        if unit_cost is not None:
            unit_cost = _non_negative(unit_cost, 'costo_unitario')
        cls._check_dates(production_date, expiration_date)

        if Lot.objects.filter(material=material, code=code).exists():
            raise DuplicateCode(f"Ya existe el lote '{code}' para {material.name}.")
        try:
            with transaction.atomic():
                lot = Lot.objects.create(
                    material=material,
                    code=code,
                    initial_quantity=initial_quantity,
                    current_quantity=initial_quantity,
                    production_date=production_date,
                    expiration_date=expiration_date,
                    unit_cost=unit_cost,
                )
        except IntegrityError:
            raise DuplicateCode(f"Ya existe el lote '{code}' para {material.name}.") from None
        return lot

    @staticmethod
    def deplete(lot, quantity):
        """Take ``quantity`` out of a locked lot"""
        if quantity > lot.current_quantity:
            raise InsufficientLotQuantity(
                f"Stock insuficiente en el lote {lot.code}. Disponible: {lot.current_quantity}",
                available=lot.current_quantity,
            )
        lot.current_quantity -= quantity
        lot.save_balances('current_quantity')
        return lot

    @staticmethod
    def replenish(lot, quantity):
        """Put ``quantity`` back into a locked lot, never above its initial quantity"""
        if lot.current_quantity + quantity > lot.initial_quantity:
            raise InventoryValidationError(
                f"La cantidad resultante excede la cantidad inicial del lote {lot.code} "
                f"({lot.initial_quantity})."
            )
        lot.current_quantity += quantity
        lot.save_balances('current_quantity')
        return lot

    @staticmethod
    def available_lots(material):
        """Open lots in consumption order: earliest expiration first, undated lots last"""
        return Lot.objects.filter(
            material=material,
            is_active=True,
            current_quantity__gt=0,
        ).order_by(F('expiration_date').asc(nulls_last=True), 'created_at', 'pk')

    @staticmethod
    def expiring_within(days=7, include_expired=False, today=None):
        today = today or timezone.localdate()
        queryset = Lot.objects.filter(
            is_active=True,
            current_quantity__gt=0,
            expiration_date__lte=today + timedelta(days=days),
        )
        if not include_expired:
            queryset = queryset.filter(expiration_date__gte=today)
        return queryset.select_related('material', 'material__unit').order_by('expiration_date', 'pk')

    @classmethod
    @transaction.atomic
    def update_lot(cls, lot, **fields):
        unknown = [name for name in fields if name not in cls.EDITABLE_FIELDS]
        if unknown:
            raise InventoryValidationError(f"Campos no editables: {', '.join(unknown)}.")

        lot = Lot.objects.select_for_update().get(pk=lot.pk)
        code = fields.get('code')
        if code and code != lot.code and Lot.objects.filter(material_id=lot.material_id, code=code).exists():
            raise DuplicateCode(f"Ya existe el lote '{code}' para esta materia prima.")
        if fields.get('unit_cost') is not None:
            fields['unit_cost'] = _non_negative(fields['unit_cost'], 'costo_unitario')
        cls._check_dates(
            fields.get('production_date', lot.production_date),
            fields.get('expiration_date', lot.expiration_date),
        )
        expiration_changed = 'expiration_date' in fields and fields['expiration_date'] != lot.expiration_date

        for field, value in fields.items():
            setattr(lot, field, value)
        lot.save()

        if expiration_changed:
            AlertEngine.evaluate_lot(lot)
        return lot

    @staticmethod
    def archive_lot(lot):
        if lot.current_quantity > 0:
            raise HasOpenLots('No se puede eliminar un lote que aún tiene existencias.')
        lot.soft_delete()
        logger.info(f"Lot archived: {lot.code} ({lot.material_id})")
