from decimal import Decimal

import pytest

from apps.core.exceptions import (
    CategoryMismatch,
    DuplicateEdge,
    InventoryValidationError,
    NoDirectConversion,
    NotFound,
    UnitInUse,
)
from apps.measurements.models import UnitCategory, UnitConversion
from apps.measurements.services import ConversionService, UnitService
from tests.factories import MeasurementUnitFactory, RawMaterialFactory


@pytest.mark.django_db
class TestConversionTable:

    def test_define_stores_reciprocal_pair(self, kg, gram):
        """Defining kg->g also stores g->kg with the inverse factor"""
        forward = UnitConversion.objects.get(origin=kg, destination=gram)
        backward = UnitConversion.objects.get(origin=gram, destination=kg)

        assert forward.factor == Decimal('1000')
        assert backward.factor == Decimal('0.001')

    def test_convert_both_directions(self, kg, gram):
        """2 kg are 2000 g and 2000 g are 2 kg"""
        assert ConversionService.convert(2, kg, gram) == Decimal('2000')
        assert ConversionService.convert(2000, gram, kg) == Decimal('2')

    def test_round_trip_is_stable(self, kg, gram):
        """Converting there and back returns the original quantity"""
        grams = ConversionService.convert(Decimal('3.5'), kg, gram)
        assert ConversionService.convert(grams, gram, kg) == Decimal('3.5')

    def test_same_unit_is_identity(self, kg):
        assert ConversionService.convert(7, kg, kg) == Decimal('7')

    def test_duplicate_pair_is_rejected(self, kg, gram):
        """Either direction of an existing pair counts as a duplicate"""
        with pytest.raises(DuplicateEdge):
            ConversionService.define_conversion(gram, kg, Decimal('0.001'))

        assert UnitConversion.objects.count() == 2

    def test_category_mismatch(self, kg, liter):
        """Mass cannot be converted into volume"""
        with pytest.raises(CategoryMismatch):
            ConversionService.define_conversion(kg, liter, 1)

        with pytest.raises(CategoryMismatch):
            ConversionService.convert(1, kg, liter)

    def test_non_positive_factor_is_rejected(self, kg):
        other = MeasurementUnitFactory(abbreviation='lb', name='Libra')
        with pytest.raises(InventoryValidationError, match='mayor que cero'):
            ConversionService.define_conversion(kg, other, 0)

    def test_same_unit_edge_is_rejected(self, kg):
        with pytest.raises(InventoryValidationError, match='distintas'):
            ConversionService.define_conversion(kg, kg, 1)

    def test_no_transitive_conversion(self, kg, gram):
        """kg->g and g->mg exist, but kg->mg is not composed"""
        mg = MeasurementUnitFactory(abbreviation='mg', name='Miligramo')
        ConversionService.define_conversion(gram, mg, 1000)

        with pytest.raises(NoDirectConversion):
            ConversionService.convert(1, kg, mg)

    def test_update_factor_rewrites_both_directions(self, kg, gram):
        ConversionService.update_factor(gram, kg, Decimal('0.002'))

        assert UnitConversion.objects.get(origin=gram, destination=kg).factor == Decimal('0.002')
        assert UnitConversion.objects.get(origin=kg, destination=gram).factor == Decimal('500')

    def test_remove_conversion_removes_pair(self, kg, gram):
        ConversionService.remove_conversion(kg, gram)

        assert not UnitConversion.objects.exists()
        with pytest.raises(NoDirectConversion):
            ConversionService.convert(1, gram, kg)

    def test_remove_missing_pair(self, kg):
        other = MeasurementUnitFactory(abbreviation='oz', name='Onza')
        with pytest.raises(NotFound):
            ConversionService.remove_conversion(kg, other)


@pytest.mark.django_db
class TestUnitRegistry:

    def test_create_unit_rejects_duplicates(self, kg):
        with pytest.raises(InventoryValidationError, match='Ya existe'):
            UnitService.create_unit('Kilo', 'KG', UnitCategory.MASS)

    def test_create_unit_rejects_unknown_category(self):
        with pytest.raises(InventoryValidationError, match='Categoría'):
            UnitService.create_unit('Grado', 'deg', 'temperature')

    def test_category_frozen_once_referenced(self, kg, gram):
        """A unit used by a conversion keeps its category and abbreviation"""
        with pytest.raises(UnitInUse):
            UnitService.update_unit(kg, category=UnitCategory.VOLUME)

        renamed = UnitService.update_unit(kg, name='Kilogramos')
        assert renamed.name == 'Kilogramos'

    def test_unreferenced_unit_can_change_category(self):
        unit = MeasurementUnitFactory(abbreviation='x', category=UnitCategory.COUNT)
        updated = UnitService.update_unit(unit, category=UnitCategory.LENGTH)
        assert updated.category == UnitCategory.LENGTH

    def test_deactivate_referenced_unit(self, kg):
        """A unit used by a material cannot be archived"""
        RawMaterialFactory(unit=kg)
        with pytest.raises(UnitInUse):
            UnitService.deactivate_unit(kg)

    def test_deactivate_free_unit(self):
        unit = MeasurementUnitFactory(abbreviation='t')
        UnitService.deactivate_unit(unit)

        unit.refresh_from_db()
        assert unit.is_active is False
