"""
Inventory App - Adjustment types and the append-only movement ledger
"""
import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

from apps.core.exceptions import ImmutableMovement
from apps.core.models import ActiveModel


class MovementType(models.TextChoices):
    ENTRY = 'entrada', 'Entrada'
    EXIT = 'salida', 'Salida'


class AdjustmentType(ActiveModel):
    """
    Motivo de una salida que no es consumo de proveedor (merma, caducado...).

    Attributes:
        affects_cost: Las salidas de este tipo se marcan con impacto en costos
        requires_authorization: Solo un administrador puede registrar la salida
    """
    name = models.CharField(max_length=50, unique=True, verbose_name='Nombre')
    description = models.TextField(blank=True, verbose_name='Descripción')
    affects_cost = models.BooleanField(default=True, verbose_name='Afecta Costos')
    requires_authorization = models.BooleanField(default=False, verbose_name='Requiere Autorización')

    class Meta:
        verbose_name = 'Tipo de Ajuste'
        verbose_name_plural = 'Tipos de Ajuste'
        ordering = ['name']
        permissions = [
            ('authorize_adjustment', 'Puede autorizar ajustes de inventario'),
        ]

    def __str__(self):
        return self.name

    @classmethod
    def seed_defaults(cls):
        types = [
            {'name': 'Merma', 'description': 'Pérdida por manejo o preparación'},
            {'name': 'Caducado', 'description': 'Producto vencido desechado'},
            {
                'name': 'Corrección',
                'description': 'Corrección de inventario tras conteo físico',
                'affects_cost': False,
                'requires_authorization': True,
            },
            {'name': 'Consumo', 'description': 'Consumo en producción'},
        ]
        created = []
        for t in types:
            obj, _ = cls.objects.get_or_create(name=t['name'], defaults=t)
            created.append(obj)
        return created


class StockMovementQuerySet(models.QuerySet):
    """Bulk writes are refused: the ledger only grows"""

    def update(self, **kwargs):
        raise ImmutableMovement()

    def delete(self):
        raise ImmutableMovement()


class StockMovement(models.Model):
    """
    Immutable record of a stock change.

    An entrada may reference a supplier and never an adjustment type; a
    salida may reference an adjustment type and never a supplier. ``quantity``
    is always expressed in the material's unit; when the operator typed it in
    another unit, the original figure is kept in entered_quantity/entered_unit.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    material = models.ForeignKey(
        'materials.RawMaterial',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name='Materia Prima'
    )
    lot = models.ForeignKey(
        'materials.Lot',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name='Lote'
    )
    movement_type = models.CharField(max_length=10, choices=MovementType.choices, verbose_name='Tipo')
    quantity = models.DecimalField(max_digits=14, decimal_places=4, verbose_name='Cantidad')
    entered_quantity = models.DecimalField(max_digits=14, decimal_places=4, null=True, blank=True)
    entered_unit = models.ForeignKey(
        'measurements.MeasurementUnit',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='+'
    )
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4, null=True, blank=True, verbose_name='Costo Unitario')
    balance_after = models.DecimalField(max_digits=14, decimal_places=4, verbose_name='Saldo')
    cost_impact = models.BooleanField(default=False, verbose_name='Impacto en Costos')
    supplier = models.ForeignKey(
        'partners.Supplier',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name='Proveedor'
    )
    adjustment_type = models.ForeignKey(
        AdjustmentType,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name='Tipo de Ajuste'
    )
    description = models.CharField(max_length=255, blank=True, verbose_name='Descripción')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    objects = StockMovementQuerySet.as_manager()

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Movimiento de Inventario'
        verbose_name_plural = 'Movimientos de Inventario'
        indexes = [
            models.Index(fields=['material', 'created_at'], name='movement_material_date_idx'),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(quantity__gt=0), name='movement_quantity_positive'),
            models.CheckConstraint(condition=Q(balance_after__gte=0), name='movement_balance_non_negative'),
            models.CheckConstraint(
                condition=(
                    Q(movement_type=MovementType.ENTRY, adjustment_type__isnull=True)
                    | Q(movement_type=MovementType.EXIT, supplier__isnull=True, unit_cost__isnull=True)
                ),
                name='movement_tagged_variant'
            ),
        ]

    def __str__(self):
        return f'{self.get_movement_type_display()} {self.quantity} {self.material_id}'

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableMovement()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableMovement()

    @property
    def is_entry(self):
        return self.movement_type == MovementType.ENTRY

    @property
    def signed_quantity(self):
        return self.quantity if self.is_entry else -self.quantity
