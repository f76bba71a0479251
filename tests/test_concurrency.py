import threading
from decimal import Decimal

import pytest
from django.db import connection

from apps.core.exceptions import InventoryError
from apps.inventory.services import ExitCommand, LedgerService
from apps.materials.models import RawMaterial
from tests.factories import RawMaterialFactory


def run_concurrently(*commands):
    """Start every exit at the same time and collect 'ok' or the error code"""
    barrier = threading.Barrier(len(commands))
    results = [None] * len(commands)

    def worker(index, command):
        try:
            barrier.wait()
            LedgerService.record_exit(command)
            results[index] = 'ok'
        except InventoryError as exc:
            results[index] = exc.code
        finally:
            connection.close()

    threads = [threading.Thread(target=worker, args=(i, c)) for i, c in enumerate(commands)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return results


@pytest.mark.django_db(transaction=True)
class TestConcurrentExits:

    def test_same_material_never_overdraws(self, material, receive):
        """Two salidas racing for the last unit: exactly one wins"""
        receive(material, 1)

        results = run_concurrently(
            ExitCommand(material=material, quantity=1),
            ExitCommand(material=material, quantity=1),
        )

        assert sorted(results) == ['insufficient_stock', 'ok']
        material.refresh_from_db()
        assert material.current_stock == Decimal('0')
        assert LedgerService.verify_balances() == []

    def test_disjoint_materials_both_succeed(self, kg, receive):
        first = RawMaterialFactory(unit=kg)
        second = RawMaterialFactory(unit=kg)
        receive(first, 5)
        receive(second, 5)

        results = run_concurrently(
            ExitCommand(material=first, quantity=1),
            ExitCommand(material=second, quantity=1),
        )

        assert results == ['ok', 'ok']
        assert RawMaterial.objects.get(pk=first.pk).current_stock == Decimal('4')
        assert RawMaterial.objects.get(pk=second.pk).current_stock == Decimal('4')
        assert LedgerService.verify_balances() == []
