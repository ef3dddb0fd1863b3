from decimal import Decimal

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from buildings.models import Building, UnitType, BuildingUnitType, Unit
from core.constants import UserRole
from tenants.models import Tenant
from users.models import User


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def admin_user(db):
    return User.objects.create_user(
        username='admin', password='Str0ng-pass!', email='admin@example.com', role=UserRole.ADMIN
    )


@pytest.fixture
def viewer_user(db):
    return User.objects.create_user(
        username='viewer', password='Str0ng-pass!', email='viewer@example.com', role=UserRole.VIEWER
    )


@pytest.fixture
def admin_client(admin_user):
    client = APIClient()
    client.force_authenticate(user=admin_user)
    return client


@pytest.fixture
def viewer_client(viewer_user):
    client = APIClient()
    client.force_authenticate(user=viewer_user)
    return client


@pytest.fixture
def building(db):
    return Building.objects.create(name='Sunrise Apartments', city='Nairobi', wifi_installed=True)


@pytest.fixture
def bedsitter(building):
    unit_type = UnitType.objects.create(name='Bedsitter')
    return BuildingUnitType.objects.create(building=building, unit_type=unit_type, monthly_rent=Decimal('10000'))


@pytest.fixture
def tenant(building, bedsitter):
    unit = Unit.objects.create(building=building, unit_type=bedsitter, unit_number='A1', is_occupied=True)
    return Tenant.objects.create(
        name='Jane Wanjiku',
        mobile='0712345678',
        building=building,
        unit=unit,
        house_number='A1',
        house_size='Bedsitter',
        monthly_rent=Decimal('10000'),
        default_water_bill=Decimal('500'),
        garbage_bill=Decimal('150'),
        entry_date=timezone.localdate().replace(day=1),
    )
