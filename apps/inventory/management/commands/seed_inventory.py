from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from apps.inventory.models import AdjustmentType
from apps.measurements.models import MeasurementUnit, UnitCategory, UnitConversion
from apps.measurements.services import ConversionService

UNITS = [
    {'name': 'Kilogramo', 'abbreviation': 'kg', 'category': UnitCategory.MASS},
    {'name': 'Gramo', 'abbreviation': 'g', 'category': UnitCategory.MASS},
    {'name': 'Miligramo', 'abbreviation': 'mg', 'category': UnitCategory.MASS},
    {'name': 'Litro', 'abbreviation': 'l', 'category': UnitCategory.VOLUME},
    {'name': 'Mililitro', 'abbreviation': 'ml', 'category': UnitCategory.VOLUME},
    {'name': 'Pieza', 'abbreviation': 'pz', 'category': UnitCategory.COUNT},
    {'name': 'Metro', 'abbreviation': 'm', 'category': UnitCategory.LENGTH},
    {'name': 'Centímetro', 'abbreviation': 'cm', 'category': UnitCategory.LENGTH},
    {'name': 'Metro cuadrado', 'abbreviation': 'm2', 'category': UnitCategory.AREA},
]

CONVERSIONS = [
    ('kg', 'g', Decimal('1000')),
    ('g', 'mg', Decimal('1000')),
    ('kg', 'mg', Decimal('1000000')),
    ('l', 'ml', Decimal('1000')),
    ('m', 'cm', Decimal('100')),
]


class Command(BaseCommand):
    help = 'Crea unidades de medida, conversiones y tipos de ajuste por defecto'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('🔄 Iniciando seed_inventory...')

        units = {}
        for u in UNITS:
            unit, created = MeasurementUnit.objects.get_or_create(abbreviation=u['abbreviation'], defaults=u)
            units[unit.abbreviation] = unit
            if created:
                self.stdout.write(f'  + Unidad {unit}')

        for origin, destination, factor in CONVERSIONS:
            exists = UnitConversion.objects.filter(
                origin=units[origin], destination=units[destination]
            ).exists()
            if not exists:
                ConversionService.define_conversion(units[origin], units[destination], factor)
                self.stdout.write(f'  + Conversión {origin} -> {destination} x{factor}')

        types = AdjustmentType.seed_defaults()

        self.stdout.write(self.style.SUCCESS(
            f'✅ {len(units)} unidades, {len(CONVERSIONS)} conversiones y {len(types)} tipos de ajuste listos.'
        ))
