"""
Unit registry and conversion table services.

Conversion edges are always written in pairs: defining A->B with factor f
also stores B->A with 1/f, and removing or re-factoring one direction does
the same to the other inside the same transaction. Conversion is a lookup of
the direct edge only; no path through intermediate units is searched.
"""
import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.core.exceptions import (
    CategoryMismatch,
    DuplicateEdge,
    InventoryValidationError,
    NoDirectConversion,
    NotFound,
    UnitInUse,
)
from apps.core.utils import to_decimal, to_positive_decimal

from .models import MeasurementUnit, UnitCategory, UnitConversion

logger = logging.getLogger(__name__)

FACTOR_PRECISION = Decimal('0.000000000001')


def reciprocal(factor: Decimal) -> Decimal:
    return (Decimal(1) / factor).quantize(FACTOR_PRECISION)


class UnitService:
    FROZEN_FIELDS = ('category', 'abbreviation')

    @staticmethod
    def create_unit(name, abbreviation, category):
        if category not in UnitCategory.values:
            raise InventoryValidationError(f"Categoría de unidad inválida: '{category}'.")
        if MeasurementUnit.objects.filter(Q(name__iexact=name) | Q(abbreviation__iexact=abbreviation)).exists():
            raise InventoryValidationError('Ya existe una unidad con ese nombre o abreviatura.')
        return MeasurementUnit.objects.create(name=name, abbreviation=abbreviation, category=category)

    @classmethod
    @transaction.atomic
    def update_unit(cls, unit, **fields):
        unit = MeasurementUnit.objects.select_for_update().get(pk=unit.pk)
        changed = [
            name for name in cls.FROZEN_FIELDS
            if name in fields and fields[name] != getattr(unit, name)
        ]
        if changed and unit.is_referenced:
            raise UnitInUse(
                f"No se puede cambiar {', '.join(changed)} de '{unit.abbreviation}': "
                f"la unidad ya está referenciada."
            )
        if 'category' in fields and fields['category'] not in UnitCategory.values:
            raise InventoryValidationError(f"Categoría de unidad inválida: '{fields['category']}'.")

        for name, value in fields.items():
            setattr(unit, name, value)
        unit.save()
        return unit

    @staticmethod
    def deactivate_unit(unit):
        if unit.is_referenced:
            raise UnitInUse()
        unit.soft_delete()
        logger.info(f"Unit {unit.abbreviation} archived")


class ConversionService:

    @staticmethod
    def _pair(origin, destination):
        return UnitConversion.objects.filter(
            Q(origin=origin, destination=destination) | Q(origin=destination, destination=origin)
        )

    @classmethod
    def define_conversion(cls, origin, destination, factor):
        """Create the edge origin->destination and its reciprocal atomically"""
        factor = to_positive_decimal(factor, 'factor')
        if origin.pk == destination.pk:
            raise InventoryValidationError('La unidad origen y destino deben ser distintas.')
        if not origin.is_active or not destination.is_active:
            raise InventoryValidationError('Una o ambas unidades de medida no están activas.')
        if origin.category != destination.category:
            raise CategoryMismatch(
                f"No se puede convertir {origin.abbreviation} ({origin.get_category_display()}) "
                f"a {destination.abbreviation} ({destination.get_category_display()})."
            )

        try:
            with transaction.atomic():
                if cls._pair(origin, destination).exists():
                    raise DuplicateEdge()
                edge = UnitConversion.objects.create(origin=origin, destination=destination, factor=factor)
                UnitConversion.objects.create(origin=destination, destination=origin, factor=reciprocal(factor))
        except IntegrityError:
            raise DuplicateEdge() from None

        logger.info(f"Conversion defined: {origin.abbreviation} -> {destination.abbreviation} x{factor}")
        return edge

    @classmethod
    @transaction.atomic
    def update_factor(cls, origin, destination, factor):
        """Rewrite both directions of an existing pair"""
        factor = to_positive_decimal(factor, 'factor')
        edges = {
            (edge.origin_id, edge.destination_id): edge
            for edge in cls._pair(origin, destination).select_for_update()
        }
        forward = edges.get((origin.pk, destination.pk))
        backward = edges.get((destination.pk, origin.pk))
        if forward is None or backward is None:
            raise NotFound('Conversión no encontrada.')

        forward.factor = factor
        backward.factor = reciprocal(factor)
        forward.save(update_fields=['factor', 'updated_at'])
        backward.save(update_fields=['factor', 'updated_at'])
        return forward

    @classmethod
    @transaction.atomic
    def remove_conversion(cls, origin, destination):
        deleted, _ = cls._pair(origin, destination).delete()
        if not deleted:
            raise NotFound('Conversión no encontrada.')
        logger.info(f"Conversion removed: {origin.abbreviation} <-> {destination.abbreviation}")
        return deleted

    @staticmethod
    def get_edge(origin, destination):
        edge = UnitConversion.objects.filter(origin=origin, destination=destination).first()
        if edge is None:
            raise NoDirectConversion(
                f"No existe conversión directa de {origin.abbreviation} a {destination.abbreviation}."
            )
        return edge

    @classmethod
    def convert(cls, quantity, origin, destination) -> Decimal:
        quantity = to_decimal(quantity)
        if origin.pk == destination.pk:
            return quantity
        if origin.category != destination.category:
            raise CategoryMismatch(
                f"No se puede convertir {origin.abbreviation} a {destination.abbreviation}: categorías distintas."
            )
        return cls.get_edge(origin, destination).apply(quantity)

    @staticmethod
    def conversions_for(unit):
        return UnitConversion.objects.filter(
            Q(origin=unit) | Q(destination=unit)
        ).select_related('origin', 'destination')
