import factory
from django.contrib.auth import get_user_model

from apps.accounts.models import StaffRole
from apps.inventory.models import AdjustmentType
from apps.materials.models import RawMaterial
from apps.measurements.models import MeasurementUnit, UnitCategory
from apps.partners.models import Supplier

User = get_user_model()

class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f'user_{n}')
    email = factory.LazyAttribute(lambda o: f'{o.username}@example.com')

    @factory.post_generation
    def password(self, create, extracted, **kwargs):
        password = extracted or "password123"
        self.set_password(password)
        if create:
            self.save(update_fields=['password'])

class AdminUserFactory(UserFactory):
    """Staff member whose profile carries the ADMIN role"""

    @factory.post_generation
    def role(self, create, extracted, **kwargs):
        if create:
            self.profile.role = extracted or StaffRole.ADMIN
            self.profile.save()

class MeasurementUnitFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = MeasurementUnit

    name = factory.Sequence(lambda n: f'Unidad {n}')
    abbreviation = factory.Sequence(lambda n: f'u{n}')
    category = UnitCategory.MASS

class RawMaterialFactory(factory.django.DjangoModelFactory):
    """Starts with zero stock; stock only arrives through ledger entries"""
    class Meta:
        model = RawMaterial

    name = factory.Sequence(lambda n: f'Materia Prima {n}')
    unit = factory.SubFactory(MeasurementUnitFactory)
    minimum_stock = 0
    unit_cost = 0

class AdjustmentTypeFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = AdjustmentType

    name = factory.Sequence(lambda n: f'Ajuste {n}')
    affects_cost = True
    requires_authorization = False

class SupplierFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Supplier

    name = factory.Sequence(lambda n: f'Proveedor {n}')
    tax_id = 'ABC123456XY9'
    lead_time_days = 3
