import logging

from django.db import transaction

from apps.core.exceptions import HasMovements, InventoryValidationError

from ..models import AdjustmentType

logger = logging.getLogger(__name__)


class AdjustmentTypeService:
    EDITABLE_FIELDS = ('name', 'description', 'affects_cost', 'requires_authorization')

    @staticmethod
    def create_type(name, description='', affects_cost=True, requires_authorization=False):
        if AdjustmentType.objects.filter(name__iexact=name).exists():
            raise InventoryValidationError(f"Ya existe un tipo de ajuste con el nombre '{name}'.")
        return AdjustmentType.objects.create(
            name=name,
            description=description or '',
            affects_cost=affects_cost,
            requires_authorization=requires_authorization,
        )

    @classmethod
    @transaction.atomic
    def update_type(cls, adjustment_type, **fields):
        unknown = [name for name in fields if name not in cls.EDITABLE_FIELDS]
        if unknown:
            raise InventoryValidationError(f"Campos no editables: {', '.join(unknown)}.")
        name = fields.get('name')
        if name and AdjustmentType.objects.filter(name__iexact=name).exclude(pk=adjustment_type.pk).exists():
            raise InventoryValidationError(f"Ya existe un tipo de ajuste con el nombre '{name}'.")

        adjustment_type = AdjustmentType.objects.select_for_update().get(pk=adjustment_type.pk)
        for field, value in fields.items():
            setattr(adjustment_type, field, value)
        adjustment_type.save()
        return adjustment_type

    @staticmethod
    def delete_type(adjustment_type):
        if adjustment_type.movements.exists():
            raise HasMovements('No se puede eliminar el tipo de ajuste porque tiene movimientos asociados.')
        adjustment_type.soft_delete()
        logger.info(f"Adjustment type archived: {adjustment_type.name}")

    @staticmethod
    def requiring_authorization():
        return AdjustmentType.objects.filter(is_active=True, requires_authorization=True)

    @staticmethod
    def by_cost_effect(affects_cost):
        return AdjustmentType.objects.filter(is_active=True, affects_cost=affects_cost)
