from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from apps.alerts.models import InventoryAlert
from apps.inventory.models import AdjustmentType
from apps.materials.models import RawMaterial
from apps.measurements.models import MeasurementUnit, UnitConversion
from apps.measurements.services import ConversionService


@pytest.mark.django_db
class TestManagementCommands:

    def test_seed_inventory_is_idempotent(self):
        call_command('seed_inventory', stdout=StringIO())
        call_command('seed_inventory', stdout=StringIO())

        assert MeasurementUnit.objects.count() == 9
        assert UnitConversion.objects.count() == 10
        assert AdjustmentType.objects.count() == 4

        kg = MeasurementUnit.objects.get(abbreviation='kg')
        mg = MeasurementUnit.objects.get(abbreviation='mg')
        assert ConversionService.convert(Decimal('0.5'), kg, mg) == Decimal('500000')

    def test_verify_ledger_clean(self, material, receive):
        receive(material, 10)
        out = StringIO()

        call_command('verify_ledger', stdout=out)

        assert 'coinciden' in out.getvalue()

    def test_verify_ledger_reports_drift(self, material, receive):
        receive(material, 10)
        RawMaterial.objects.filter(pk=material.pk).update(current_stock=Decimal('12'))
        out = StringIO()

        with pytest.raises(CommandError, match='1 saldos'):
            call_command('verify_ledger', stdout=out)

        assert 'registrado 12, esperado 10' in out.getvalue()

    def test_sweep_alerts(self, material):
        out = StringIO()
        call_command('sweep_alerts', stdout=out)

        assert InventoryAlert.objects.filter(material=material).count() == 1
        assert '1 alertas nuevas' in out.getvalue()
