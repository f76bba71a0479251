"""
Materials App - Raw materials (item catalog) and their lots
"""
from datetime import date
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from apps.core.models import ActiveModel


class LedgerOwnedFieldsMixin:
    """
    Blocks edits of balance fields outside the ledger.

    The ledger sets ``_allow_stock_change`` on the locked instance before
    saving; any other update leaves the balance columns out of the UPDATE,
    so a stale instance never overwrites a committed movement.
    """
    LEDGER_FIELDS = ()
    _allow_stock_change = False

    def _ledger_safe_kwargs(self, kwargs):
        if self._state.adding or getattr(self, '_allow_stock_change', False):
            return kwargs
        update_fields = kwargs.get('update_fields')
        if update_fields is None:
            update_fields = [
                field.name for field in self._meta.concrete_fields
                if not field.primary_key
            ]
        kwargs['update_fields'] = [name for name in update_fields if name not in self.LEDGER_FIELDS]
        return kwargs

    def save_balances(self, *fields):
        """Persist ledger-owned fields; only the ledger services call this"""
        self._allow_stock_change = True
        try:
            self.save(update_fields=[*fields, 'updated_at'])
        finally:
            self._allow_stock_change = False


class RawMaterial(LedgerOwnedFieldsMixin, ActiveModel):
    """
    Materia prima.

    ``current_stock`` and ``unit_cost`` are owned by the movement ledger:
    stock always equals entries minus exits and the cost is the weighted
    average of every costed entry.
    """
    LEDGER_FIELDS = ('current_stock', 'unit_cost')

    name = models.CharField(max_length=100, unique=True, verbose_name='Nombre')
    description = models.TextField(blank=True, verbose_name='Descripción')
    unit = models.ForeignKey(
        'measurements.MeasurementUnit',
        on_delete=models.PROTECT,
        related_name='materials',
        verbose_name='Unidad de Medida'
    )
    current_stock = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal('0'), verbose_name='Stock Actual')
    minimum_stock = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal('0'), verbose_name='Stock Mínimo')
    unit_cost = models.DecimalField(max_digits=14, decimal_places=4, default=Decimal('0'), verbose_name='Costo Unitario')

    class Meta:
        verbose_name = 'Materia Prima'
        verbose_name_plural = 'Materias Primas'
        ordering = ['name']
        constraints = [
            models.CheckConstraint(condition=Q(current_stock__gte=0), name='material_stock_non_negative'),
            models.CheckConstraint(condition=Q(minimum_stock__gte=0), name='material_minimum_non_negative'),
            models.CheckConstraint(condition=Q(unit_cost__gte=0), name='material_cost_non_negative'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        super().save(*args, **self._ledger_safe_kwargs(kwargs))

    @property
    def is_low_stock(self):
        return self.current_stock <= self.minimum_stock

    @property
    def stock_value(self) -> Decimal:
        return self.current_stock * self.unit_cost


class Lot(LedgerOwnedFieldsMixin, ActiveModel):
    """
    Lote trazable de una materia prima.
    0 <= current_quantity <= initial_quantity is enforced by the database.
    """
    LEDGER_FIELDS = ('current_quantity',)

    material = models.ForeignKey(
        RawMaterial,
        on_delete=models.PROTECT,
        related_name='lots',
        verbose_name='Materia Prima'
    )
    code = models.CharField(max_length=50, verbose_name='Código de Lote')
    initial_quantity = models.DecimalField(max_digits=14, decimal_places=4, verbose_name='Cantidad Inicial')
    current_quantity = models.DecimalField(max_digits=14, decimal_places=4, verbose_name='Cantidad Actual')
    production_date = models.DateField(null=True, blank=True, verbose_name='Fecha de Producción')
    expiration_date = models.DateField(null=True, blank=True, db_index=True, verbose_name='Fecha de Caducidad')
    unit_cost = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name='Costo Unitario'
    )

    class Meta:
        verbose_name = 'Lote'
        verbose_name_plural = 'Lotes'
        ordering = ['expiration_date', 'created_at']
        constraints = [
            models.UniqueConstraint(fields=['material', 'code'], name='uniq_lot_code_per_material'),
            models.CheckConstraint(condition=Q(initial_quantity__gt=0), name='lot_initial_positive'),
            models.CheckConstraint(condition=Q(current_quantity__gte=0), name='lot_current_non_negative'),
            models.CheckConstraint(
                condition=Q(current_quantity__lte=F('initial_quantity')),
                name='lot_current_within_initial'
            ),
        ]

    def __str__(self):
        return f'{self.material.name} / {self.code}'

    def clean(self):
        if self.production_date and self.expiration_date and self.expiration_date <= self.production_date:
            raise ValidationError('La fecha de caducidad debe ser posterior a la fecha de producción.')

    def save(self, *args, **kwargs):
        super().save(*args, **self._ledger_safe_kwargs(kwargs))

    def days_to_expiration(self, today: date = None):
        if self.expiration_date is None:
            return None
        today = today or timezone.localdate()
        return (self.expiration_date - today).days

    @property
    def is_open(self):
        return self.current_quantity > 0
