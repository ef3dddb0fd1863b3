from django.utils import timezone
from rest_framework import serializers

from billing import calculations
from buildings.models import Building, BuildingUnitType
from core.constants import TenantStatus
from core.validators import MOBILE_PATTERN
from .models import Tenant

money = dict(max_digits=12, decimal_places=2, min_value=0)


class TenantSerializer(serializers.ModelSerializer):
    """
    Tenant with the dashboard's camelCase keys.

    The building can be given as buildingId or buildingName. houseTypeId
    (a building unit type) sets the rent and house size unless monthlyRent
    is sent explicitly.
    """
    nextOfKinName = serializers.CharField(source='next_of_kin_name', max_length=100, required=False, allow_blank=True)
    nextOfKinMobile = serializers.CharField(
        source='next_of_kin_mobile', max_length=16, required=False, allow_blank=True, allow_null=True
    )
    buildingId = serializers.PrimaryKeyRelatedField(
        source='building', queryset=Building.objects.all(), required=False
    )
    buildingName = serializers.CharField(write_only=True, required=False)
    houseTypeId = serializers.PrimaryKeyRelatedField(
        queryset=BuildingUnitType.objects.select_related('unit_type'), write_only=True, required=False,
        allow_null=True
    )
    houseNumber = serializers.CharField(source='house_number', min_length=1, max_length=20)
    houseSize = serializers.CharField(source='house_size', max_length=100, required=False, allow_blank=True)
    unitId = serializers.IntegerField(source='unit_id', read_only=True)
    monthlyRent = serializers.DecimalField(source='monthly_rent', required=False, **money)
    defaultWaterBill = serializers.DecimalField(source='default_water_bill', required=False, **money)
    garbageBill = serializers.DecimalField(source='garbage_bill', required=False, **money)
    depositRequired = serializers.DecimalField(source='deposit_required', required=False, **money)
    depositPaid = serializers.DecimalField(source='deposit_paid', required=False, **money)
    expenses = serializers.DecimalField(required=False, **money)
    tenantCredit = serializers.DecimalField(source='tenant_credit', max_digits=12, decimal_places=2, read_only=True)
    entryDate = serializers.DateField(source='entry_date', required=False)
    leavingDate = serializers.DateField(source='leaving_date', required=False, allow_null=True)

    class Meta:
        model = Tenant
        fields = [
            'id', 'name', 'mobile', 'email', 'nextOfKinName', 'nextOfKinMobile',
            'buildingId', 'buildingName', 'houseTypeId', 'houseNumber', 'houseSize', 'unitId', 'area',
            'monthlyRent', 'defaultWaterBill', 'garbageBill', 'depositRequired', 'depositPaid',
            'expenses', 'tenantCredit', 'status', 'entryDate', 'leavingDate',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {
            'name': {'min_length': 2, 'max_length': 100},
            'email': {'required': False, 'allow_blank': True},
            'area': {'required': False, 'allow_blank': True},
        }

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['buildingName'] = instance.building.name
        return data

    def validate_name(self, value):
        value = value.strip()
        if len(value) < 2:
            raise serializers.ValidationError("Name must be at least 2 characters")
        return value

    def validate_mobile(self, value):
        value = value.replace(' ', '')
        if not MOBILE_PATTERN.match(value):
            raise serializers.ValidationError("Please enter a valid phone number (10-15 digits)")
        return value

    def validate_nextOfKinMobile(self, value):
        value = (value or '').replace(' ', '')
        if value and not MOBILE_PATTERN.match(value):
            raise serializers.ValidationError("Please enter a valid phone number")
        return value

    def validate(self, attrs):
        name = attrs.pop('buildingName', None)
        if 'building' not in attrs and name:
            building = Building.objects.filter(name__iexact=name.strip()).first()
            if not building:
                raise serializers.ValidationError({'buildingName': f"Building '{name}' not found"})
            attrs['building'] = building
        building = attrs.get('building', getattr(self.instance, 'building', None))
        if building is None:
            raise serializers.ValidationError({'buildingId': 'Please select a building'})

        house_type = attrs.pop('houseTypeId', None)
        if house_type:
            if house_type.building_id != building.id:
                raise serializers.ValidationError({'houseTypeId': 'House type is not configured for this building'})
            attrs['unit_type'] = house_type
            attrs.setdefault('monthly_rent', house_type.monthly_rent)
            attrs['house_size'] = house_type.unit_type.name

        status = attrs.get('status', getattr(self.instance, 'status', TenantStatus.ACTIVE))
        if status == TenantStatus.LEFT:
            attrs.setdefault('leaving_date', getattr(self.instance, 'leaving_date', None) or timezone.localdate())
        elif 'status' in attrs:
            attrs['leaving_date'] = None

        entry_date = attrs.get('entry_date', getattr(self.instance, 'entry_date', None))
        leaving_date = attrs.get('leaving_date', getattr(self.instance, 'leaving_date', None))
        if entry_date and leaving_date and leaving_date < entry_date:
            raise serializers.ValidationError({'leavingDate': 'Leaving date cannot be before entry date'})

        house_number = attrs.get('house_number', getattr(self.instance, 'house_number', None))
        if status == TenantStatus.ACTIVE and house_number:
            taken = Tenant.objects.active().filter(building=building, house_number__iexact=house_number.strip())
            if self.instance:
                taken = taken.exclude(pk=self.instance.pk)
            if taken.exists():
                raise serializers.ValidationError(
                    {'houseNumber': f"House {house_number} in {building.name} is already occupied"}
                )
        return attrs


class TenantMonthSerializer(TenantSerializer):
    """
    Tenant merged with one month's bill, as listed on the tenants page.
    Expects `records` ({tenant_id: MonthlyRecord}), `billing`, `month` and
    `year` in the context.
    """

    def to_representation(self, instance):
        data = super().to_representation(instance)
        record = self.context['records'].get(instance.id)
        service = self.context['billing']

        if record is not None:
            total = record.total_due
            effective = record.effective_balance
            data.update({
                'recordId': record.id,
                'monthlyRent': record.monthly_rent,
                'waterBill': record.water_bill,
                'garbageBill': record.garbage_bill,
                'penalties': record.penalties,
                'advanceBalance': record.advance_balance,
                'advanceThisMonth': record.carried_forward,
                'totalPaid': record.total_applied,
                'depositPaidThisMonth': record.deposit_paid,
                'paymentStatus': service.payment_status(record),
            })
        else:
            charges = {
                'rent': instance.monthly_rent, 'water': instance.default_water_bill,
                'garbage': instance.garbage_bill, 'penalties': calculations.ZERO,
            }
            total = calculations.total_due(*charges.values())
            effective = total
            data.update({
                'recordId': None,
                'waterBill': instance.default_water_bill,
                'penalties': calculations.ZERO,
                'advanceBalance': calculations.ZERO,
                'advanceThisMonth': calculations.ZERO,
                'totalPaid': calculations.ZERO,
                'depositPaidThisMonth': calculations.ZERO,
                'paymentStatus': calculations.status_for_period(
                    effective, self.context['month'], self.context['year'], service.today, service.due_day
                ),
            })

        data['totalBill'] = total
        data['balanceDue'] = effective
        return data


class MonthlyHistorySerializer(serializers.Serializer):
    """One month of a tenant's payment history"""

    def to_representation(self, record):
        from billing.serializers import TransactionSerializer
        applied = record.total_applied
        return {
            'id': record.id,
            'month': record.month_name,
            'monthKey': record.month_key,
            'year': record.year,
            'expectedRent': record.monthly_rent,
            'waterBill': record.water_bill,
            'garbageBill': record.garbage_bill,
            'penalties': record.penalties,
            'totalDue': record.total_due,
            'rentPaid': record.rent_paid,
            'waterPaid': record.water_paid,
            'garbagePaid': record.garbage_paid,
            'depositPaid': record.deposit_paid,
            'penaltyPaid': record.penalties_paid,
            'totalPaid': applied,
            'advanceBalance': record.advance_balance,
            'balanceDue': record.effective_balance,
            'status': calculations.history_status(record.effective_balance, applied, record.deposit_paid),
            'payments': TransactionSerializer(record.transactions.all(), many=True).data,
        }
