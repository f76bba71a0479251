import pytest
from rest_framework.test import APIClient

from apps.inventory.services import EntryCommand, ExitCommand, LedgerService
from apps.measurements.models import UnitCategory
from apps.measurements.services import ConversionService
from tests.factories import AdminUserFactory, MeasurementUnitFactory, RawMaterialFactory, UserFactory


@pytest.fixture
def client():
    return APIClient()

@pytest.fixture
def user():
    return UserFactory()

@pytest.fixture
def manager():
    return AdminUserFactory()

@pytest.fixture
def auth_client(client, user):
    client.force_authenticate(user=user)
    return client

@pytest.fixture
def kg():
    return MeasurementUnitFactory(name='Kilogramo', abbreviation='kg', category=UnitCategory.MASS)

@pytest.fixture
def gram(kg):
    unit = MeasurementUnitFactory(name='Gramo', abbreviation='g', category=UnitCategory.MASS)
    ConversionService.define_conversion(kg, unit, 1000)
    return unit

@pytest.fixture
def liter():
    return MeasurementUnitFactory(name='Litro', abbreviation='l', category=UnitCategory.VOLUME)

@pytest.fixture
def material(kg):
    return RawMaterialFactory(name='Harina', unit=kg, minimum_stock=5)

@pytest.fixture
def receive():
    """Record an entrada and return the movement"""
    def _receive(material, quantity, **kwargs):
        return LedgerService.record_entry(EntryCommand(material=material, quantity=quantity, **kwargs))
    return _receive

@pytest.fixture
def issue():
    """Record a salida and return the movement"""
    def _issue(material, quantity, **kwargs):
        return LedgerService.record_exit(ExitCommand(material=material, quantity=quantity, **kwargs))
    return _issue
