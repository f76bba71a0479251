"""
Measurements App - Measurement units and the conversion table
"""
from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from apps.core.models import ActiveModel
from apps.core.utils import format_quantity


class UnitCategory(models.TextChoices):
    MASS = 'mass', 'Masa'
    VOLUME = 'volume', 'Volumen'
    COUNT = 'count', 'Unidad'
    LENGTH = 'length', 'Longitud'
    AREA = 'area', 'Área'


class MeasurementUnit(ActiveModel):
    """
    Unidad de medida (kg, g, l, ml, pz...).
    Category and abbreviation are frozen once a conversion or material references the unit.
    """
    name = models.CharField(max_length=50, unique=True, verbose_name='Nombre')
    abbreviation = models.CharField(max_length=10, unique=True, verbose_name='Abreviatura')
    category = models.CharField(max_length=20, choices=UnitCategory.choices, verbose_name='Categoría')

    class Meta:
        verbose_name = 'Unidad de Medida'
        verbose_name_plural = 'Unidades de Medida'
        ordering = ['category', 'name']

    def __str__(self):
        return f'{self.name} ({self.abbreviation})'

    @property
    def is_referenced(self):
        return (
            self.conversions_from.exists()
            or self.conversions_to.exists()
            or self.materials.exists()
        )


class UnitConversion(models.Model):
    """
    Directed conversion edge: quantity_destination = quantity_origin * factor.
    Always stored together with its reciprocal edge (see ConversionService).
    """
    origin = models.ForeignKey(
        MeasurementUnit,
        on_delete=models.PROTECT,
        related_name='conversions_from',
        verbose_name='Unidad Origen'
    )
    destination = models.ForeignKey(
        MeasurementUnit,
        on_delete=models.PROTECT,
        related_name='conversions_to',
        verbose_name='Unidad Destino'
    )
    factor = models.DecimalField(max_digits=24, decimal_places=12, verbose_name='Factor de Conversión')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Conversión de Medida'
        verbose_name_plural = 'Conversiones de Medida'
        ordering = ['origin__name', 'destination__name']
        constraints = [
            models.UniqueConstraint(fields=['origin', 'destination'], name='uniq_conversion_pair'),
            models.CheckConstraint(condition=Q(factor__gt=0), name='conversion_factor_positive'),
            models.CheckConstraint(condition=~Q(origin=F('destination')), name='conversion_distinct_units'),
        ]

    def __str__(self):
        return f'1 {self.origin.abbreviation} = {format_quantity(self.factor)} {self.destination.abbreviation}'

    def apply(self, quantity: Decimal) -> Decimal:
        return quantity * self.factor
