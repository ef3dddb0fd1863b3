from django.db import models
from django.core.validators import MinValueValidator

from core.constants import BuildingType, BUILDING_ICONS


class Building(models.Model):
    """A rental property. Tenants, units, staff and penalties hang off it."""
    ICON_CHOICES = [(icon, icon) for icon in BUILDING_ICONS]

    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=20, unique=True, help_text="Short code used in receipts and reports")
    type = models.CharField(max_length=20, choices=BuildingType.CHOICES, default=BuildingType.RESIDENTIAL)
    city = models.CharField(max_length=100, blank=True)
    address = models.TextField(blank=True)
    wifi_installed = models.BooleanField(default=False)
    icon = models.CharField(max_length=3, choices=ICON_CHOICES, default='b1')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = "Building"
        verbose_name_plural = "Buildings"

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.code:
            self.code = self.generate_code(self.name)
        super().save(*args, **kwargs)

    @classmethod
    def generate_code(cls, name):
        """'Sunrise Apartments' -> 'SA', made unique with a numeric suffix"""
        words = [w for w in name.split() if w[:1].isalnum()]
        base = ''.join(w[0] for w in words).upper()[:6] or 'BLD'
        code, n = base, 1
        while cls.objects.filter(code=code).exists():
            n += 1
            code = f"{base}{n}"
        return code

    @property
    def total_units(self):
        if not hasattr(self, '_total_units_cache'):
            self._total_units_cache = self.units.count()
        return self._total_units_cache

    @property
    def occupied_units(self):
        if not hasattr(self, '_occupied_units_cache'):
            self._occupied_units_cache = self.units.filter(is_occupied=True).count()
        return self._occupied_units_cache

    @property
    def vacant_units(self):
        return self.total_units - self.occupied_units


class UnitType(models.Model):
    """Kind of unit, e.g. Bedsitter, Single Room, 1 Bedroom"""
    name = models.CharField(max_length=100, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class BuildingUnitType(models.Model):
    """The monthly rent a building charges for a unit type"""
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name='unit_types')
    unit_type = models.ForeignKey(UnitType, on_delete=models.PROTECT, related_name='building_configs')
    monthly_rent = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['building__name', 'monthly_rent']
        unique_together = ['building', 'unit_type']

    def __str__(self):
        return f"{self.building.name} - {self.unit_type.name} ({self.monthly_rent})"


class Unit(models.Model):
    """A rentable unit (house) in a building"""
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name='units')
    unit_type = models.ForeignKey(
        BuildingUnitType, on_delete=models.SET_NULL, null=True, blank=True, related_name='units'
    )
    unit_number = models.CharField(max_length=20)
    is_occupied = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['building__name', 'unit_number']
        unique_together = ['building', 'unit_number']
        indexes = [
            models.Index(fields=['building', 'is_occupied']),
        ]

    def __str__(self):
        return f"{self.building.name} - {self.unit_number}"

    @property
    def current_tenant(self):
        from core.constants import TenantStatus
        return self.tenants.filter(status=TenantStatus.ACTIVE).first()


class Staff(models.Model):
    """Caretakers, security and other building staff"""
    building = models.ForeignKey(Building, on_delete=models.CASCADE, related_name='staff')
    role = models.CharField(max_length=100)
    name = models.CharField(max_length=255)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['building__name', 'name']
        verbose_name_plural = "Staff"

    def __str__(self):
        return f"{self.name} ({self.role})"
