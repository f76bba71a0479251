"""
Movement ledger.

Every mutation follows the same shape: open a ledger transaction (bounded
lock wait), lock the material row, then its lot rows, validate, mutate the
balances, append the movement and re-evaluate alerts. Any error aborts the
whole block, so callers never observe a half-applied movement.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from django.db.models import Case, DecimalField, F, Sum, When

from apps.accounts.models import can_authorize_adjustments
from apps.alerts.services import AlertEngine
from apps.core.exceptions import (
    InsufficientLotQuantity,
    InsufficientStock,
    InventoryError,
    InventoryValidationError,
    Unauthorized,
)
from apps.core.locking import ledger_transaction, lock_for_update
from apps.core.utils import format_quantity, to_decimal, to_positive_decimal
from apps.materials.models import Lot, RawMaterial
from apps.materials.services import COST_PRECISION, CatalogService, LotService
from apps.measurements.services import ConversionService

from ..models import MovementType, StockMovement

logger = logging.getLogger(__name__)

QUANTITY_PRECISION = Decimal('0.0001')


@dataclass(frozen=True)
class LotSpec:
    """A lot to open together with the entry that fills it"""
    code: str
    expiration_date: Optional[date] = None
    production_date: Optional[date] = None
    unit_cost: Optional[Decimal] = None


@dataclass(frozen=True)
class EntryCommand:
    material: RawMaterial
    quantity: Any
    unit: Any = None
    unit_cost: Any = None
    lot: Optional[Lot] = None
    new_lot: Optional[LotSpec] = None
    supplier: Any = None
    description: str = ''
    actor: Any = None

    def __post_init__(self):
        if self.lot is not None and self.new_lot is not None:
            raise InventoryValidationError('Indique un lote existente o uno nuevo, no ambos.')


@dataclass(frozen=True)
class ExitCommand:
    material: RawMaterial
    quantity: Any
    adjustment_type: Any = None
    unit: Any = None
    lot: Optional[Lot] = None
    description: str = ''
    actor: Any = None


def _user(actor):
    return actor if getattr(actor, 'is_authenticated', False) else None


class LedgerService:

    @staticmethod
    def _quantity(value):
        """Positive quantity at the precision the ledger stores"""
        quantity = to_positive_decimal(value).quantize(QUANTITY_PRECISION)
        if quantity <= 0:
            raise InventoryValidationError(
                f"La cantidad {value} es menor que la precisión registrable ({QUANTITY_PRECISION})."
            )
        return quantity

    @staticmethod
    def _to_material_unit(material, quantity, unit, unit_cost=None):
        """
        Express a typed quantity (and its per-unit cost) in the material's unit.
        Returns (quantity, unit_cost, entered) where ``entered`` keeps the
        original figures for the movement row, or None when no conversion ran.
        """
        if unit is None or unit.pk == material.unit_id:
            return quantity, unit_cost, None

        converted = ConversionService.convert(quantity, unit, material.unit).quantize(QUANTITY_PRECISION)
        if converted <= 0:
            raise InventoryValidationError(
                f"La cantidad {format_quantity(quantity)} {unit.abbreviation} es demasiado pequeña "
                f"para registrarse en {material.unit.abbreviation}."
            )
        if unit_cost is not None:
            unit_cost = (quantity * unit_cost / converted).quantize(COST_PRECISION)
        return converted, unit_cost, {'entered_quantity': quantity, 'entered_unit': unit}

    @staticmethod
    def _check_stock(material, quantity):
        if material.current_stock < quantity:
            raise InsufficientStock(
                f"Stock insuficiente para {material.name}. "
                f"Disponible: {format_quantity(material.current_stock)} {material.unit.abbreviation}",
                available=material.current_stock,
            )

    @staticmethod
    def _check_authorization(adjustment_type, actor, material, quantity):
        if adjustment_type is None or not adjustment_type.requires_authorization:
            return
        if not can_authorize_adjustments(actor):
            raise Unauthorized(
                f"El ajuste '{adjustment_type.name}' requiere autorización de un administrador.",
                material=material,
                quantity=quantity,
            )

    @staticmethod
    def _apply_exit(material, quantity, lot=None, adjustment_type=None, actor=None,
                    description='', entered=None):
        if lot is not None:
            LotService.deplete(lot, quantity)
        material.current_stock -= quantity
        material.save_balances('current_stock')
        return StockMovement.objects.create(
            material=material,
            lot=lot,
            movement_type=MovementType.EXIT,
            quantity=quantity,
            balance_after=material.current_stock,
            cost_impact=bool(adjustment_type and adjustment_type.affects_cost),
            adjustment_type=adjustment_type,
            description=description or '',
            user=_user(actor),
            **(entered or {}),
        )

    @classmethod
    def record_entry(cls, command: EntryCommand) -> StockMovement:
        """
        Apply an entrada: optional new lot, weighted-average cost on the
        pre-entry stock, stock increment, movement row, alert evaluation.
        """
        quantity = cls._quantity(command.quantity)
        unit_cost = None
        if command.unit_cost is not None:
            unit_cost = to_decimal(command.unit_cost, 'costo_unitario')
            if unit_cost < 0:
                raise InventoryValidationError("El campo 'costo_unitario' no puede ser negativo.")

        try:
            with ledger_transaction():
                material = lock_for_update(RawMaterial, command.material.pk)
                if not material.is_active:
                    raise InventoryValidationError(f"La materia prima '{material.name}' no está activa.")
                quantity, unit_cost, entered = cls._to_material_unit(material, quantity, command.unit, unit_cost)

                lot = None
                if command.new_lot is not None:
                    spec = command.new_lot
                    lot = LotService.open_lot(
                        material,
                        spec.code,
                        quantity,
                        expiration_date=spec.expiration_date,
                        production_date=spec.production_date,
                        unit_cost=spec.unit_cost if spec.unit_cost is not None else unit_cost,
                    )
                elif command.lot is not None:
                    lot = lock_for_update(Lot, command.lot.pk, material=material)
                    if not lot.is_active:
                        raise InventoryValidationError(f"El lote {lot.code} no está activo.")
                    LotService.replenish(lot, quantity)

                if unit_cost is not None:
                    CatalogService.adjust_cost(material, quantity, unit_cost)
                material.current_stock += quantity
                material.save_balances('current_stock', 'unit_cost')

                movement = StockMovement.objects.create(
                    material=material,
                    lot=lot,
                    movement_type=MovementType.ENTRY,
                    quantity=quantity,
                    unit_cost=unit_cost,
                    balance_after=material.current_stock,
                    supplier=command.supplier,
                    description=command.description or '',
                    user=_user(command.actor),
                    **(entered or {}),
                )

                AlertEngine.evaluate_material(material)
                if lot is not None:
                    AlertEngine.evaluate_lot(lot)
        except InventoryError as exc:
            logger.warning(f"Entry rejected for material {command.material.pk}: {exc.code} - {exc.message}")
            raise

        logger.info(
            f"Entry applied: {format_quantity(quantity)} {material.unit.abbreviation} of {material.name} "
            f"(balance {format_quantity(material.current_stock)})"
        )
        return movement

    @classmethod
    def record_exit(cls, command: ExitCommand) -> StockMovement:
        """
        Apply a salida. Stock is checked before authorization, and an
        unauthorized attempt leaves an ajuste_requerido alert behind.
        """
        quantity = cls._quantity(command.quantity)
        adjustment_type = command.adjustment_type
        if adjustment_type is not None and not adjustment_type.is_active:
            raise InventoryValidationError(f"El tipo de ajuste '{adjustment_type.name}' no está activo.")

        try:
            with ledger_transaction():
                material = lock_for_update(RawMaterial, command.material.pk)
                quantity, _, entered = cls._to_material_unit(material, quantity, command.unit)
                cls._check_stock(material, quantity)
                cls._check_authorization(adjustment_type, command.actor, material, quantity)

                lot = None
                if command.lot is not None:
                    lot = lock_for_update(Lot, command.lot.pk, material=material)

                movement = cls._apply_exit(
                    material,
                    quantity,
                    lot=lot,
                    adjustment_type=adjustment_type,
                    actor=command.actor,
                    description=command.description,
                    entered=entered,
                )

                AlertEngine.evaluate_material(material)
                if lot is not None:
                    AlertEngine.evaluate_lot(lot)
        except Unauthorized as exc:
            logger.warning(f"Exit rejected for material {command.material.pk}: {exc.code} - {exc.message}")
            AlertEngine.raise_adjustment_request(
                exc.context.get('material', command.material), adjustment_type, command.actor,
                exc.context.get('quantity', quantity)
            )
            raise
        except InventoryError as exc:
            logger.warning(f"Exit rejected for material {command.material.pk}: {exc.code} - {exc.message}")
            raise

        logger.info(
            f"Exit applied: {format_quantity(quantity)} {material.unit.abbreviation} of {material.name} "
            f"(balance {format_quantity(material.current_stock)})"
        )
        return movement

    @classmethod
    def consume_fifo(cls, material, quantity, adjustment_type=None, actor=None, description='', unit=None):
        """
        Spread one logical exit across the material's open lots, earliest
        expiration first. Returns one movement per lot touched.
        """
        quantity = cls._quantity(quantity)
        if adjustment_type is not None and not adjustment_type.is_active:
            raise InventoryValidationError(f"El tipo de ajuste '{adjustment_type.name}' no está activo.")

        try:
            with ledger_transaction():
                locked = lock_for_update(RawMaterial, material.pk)
                quantity, _, _ = cls._to_material_unit(locked, quantity, unit)
                cls._check_stock(locked, quantity)
                cls._check_authorization(adjustment_type, actor, locked, quantity)

                lots = list(LotService.available_lots(locked).select_for_update())
                covered = sum((lot.current_quantity for lot in lots), Decimal('0'))
                if covered < quantity:
                    raise InsufficientLotQuantity(
                        f"Los lotes de {locked.name} solo cubren "
                        f"{format_quantity(covered)} {locked.unit.abbreviation}.",
                        available=covered,
                    )

                movements = []
                remaining = quantity
                for lot in lots:
                    if remaining <= 0:
                        break
                    take = min(lot.current_quantity, remaining)
                    movements.append(cls._apply_exit(
                        locked,
                        take,
                        lot=lot,
                        adjustment_type=adjustment_type,
                        actor=actor,
                        description=description,
                    ))
                    remaining -= take

                AlertEngine.evaluate_material(locked)
                for movement in movements:
                    AlertEngine.evaluate_lot(movement.lot)
        except Unauthorized as exc:
            logger.warning(f"FIFO exit rejected for material {material.pk}: {exc.code} - {exc.message}")
            AlertEngine.raise_adjustment_request(
                exc.context.get('material', material), adjustment_type, actor, exc.context.get('quantity', quantity)
            )
            raise
        except InventoryError as exc:
            logger.warning(f"FIFO exit rejected for material {material.pk}: {exc.code} - {exc.message}")
            raise

        logger.info(
            f"FIFO exit applied: {format_quantity(quantity)} {locked.unit.abbreviation} of {locked.name} "
            f"across {len(movements)} lots"
        )
        return movements

    @staticmethod
    def query_movements(material=None, lot=None, date_from=None, date_to=None, movement_type=None):
        """Read-only view of the ledger, newest first"""
        queryset = StockMovement.objects.select_related(
            'material', 'material__unit', 'lot', 'supplier', 'adjustment_type', 'entered_unit', 'user'
        )
        if material is not None:
            queryset = queryset.filter(material=material)
        if lot is not None:
            queryset = queryset.filter(lot=lot)
        if date_from is not None:
            if isinstance(date_from, datetime):
                queryset = queryset.filter(created_at__gte=date_from)
            else:
                queryset = queryset.filter(created_at__date__gte=date_from)
        if date_to is not None:
            if isinstance(date_to, datetime):
                queryset = queryset.filter(created_at__lte=date_to)
            else:
                queryset = queryset.filter(created_at__date__lte=date_to)
        if movement_type:
            if movement_type not in MovementType.values:
                raise InventoryValidationError(f"Tipo de movimiento inválido: '{movement_type}'.")
            queryset = queryset.filter(movement_type=movement_type)
        return queryset.order_by('-created_at')

    @staticmethod
    def verify_balances():
        """
        Fold the full history and compare it with the stored balances.
        Returns a list of mismatches; empty means the ledger is consistent.
        """
        signed = Case(
            When(movement_type=MovementType.ENTRY, then=F('quantity')),
            default=-F('quantity'),
            output_field=DecimalField(max_digits=14, decimal_places=4),
        )
        zero = Decimal('0')

        material_totals = {
            row['material']: row['balance']
            for row in StockMovement.objects.values('material').annotate(balance=Sum(signed))
        }
        lot_totals = {
            row['lot']: row['balance']
            for row in StockMovement.objects.filter(lot__isnull=False).values('lot').annotate(balance=Sum(signed))
        }

        mismatches = []
        for material in RawMaterial.objects.order_by('pk'):
            expected = (material_totals.get(material.pk) or zero).quantize(QUANTITY_PRECISION)
            if expected != material.current_stock:
                mismatches.append({
                    'kind': 'material',
                    'id': material.pk,
                    'name': material.name,
                    'recorded': material.current_stock,
                    'expected': expected,
                })

        for lot in Lot.objects.select_related('material').order_by('pk'):
            expected = (lot_totals.get(lot.pk) or zero).quantize(QUANTITY_PRECISION)
            out_of_bounds = not (zero <= lot.current_quantity <= lot.initial_quantity)
            if expected != lot.current_quantity or out_of_bounds:
                mismatches.append({
                    'kind': 'lot',
                    'id': lot.pk,
                    'name': str(lot),
                    'recorded': lot.current_quantity,
                    'expected': expected,
                })

        if mismatches:
            logger.error(f"Ledger verification found {len(mismatches)} mismatches")
        return mismatches
