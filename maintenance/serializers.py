from rest_framework import serializers

from buildings.models import Building, Unit
from tenants.models import Tenant
from .models import MaintenanceRequest, MaintenanceExpense

# The dashboard posts camelCase and reads snake_case
INPUT_ALIASES = {
    'tenantId': 'tenant_id',
    'buildingId': 'building_id',
    'unitId': 'unit_id',
    'issueTitle': 'issue_title',
    'assignedTo': 'assigned_to',
    'paidBy': 'paid_by',
    'paymentMethod': 'payment_method',
    'receiptNumber': 'receipt_number',
}


class AliasedInputMixin:

    def to_internal_value(self, data):
        if hasattr(data, 'items'):
            data = {INPUT_ALIASES.get(key, key): value for key, value in data.items()}
        return super().to_internal_value(data)


class MaintenanceRequestSerializer(AliasedInputMixin, serializers.ModelSerializer):
    building_id = serializers.PrimaryKeyRelatedField(source='building', queryset=Building.objects.all())
    building_name = serializers.CharField(source='building.name', read_only=True)
    building_icon = serializers.CharField(source='building.icon', read_only=True)
    unit_id = serializers.PrimaryKeyRelatedField(
        source='unit', queryset=Unit.objects.all(), required=False, allow_null=True
    )
    unit_number = serializers.CharField(source='unit.unit_number', read_only=True, default=None)
    tenant_id = serializers.PrimaryKeyRelatedField(
        source='tenant', queryset=Tenant.objects.all(), required=False, allow_null=True
    )
    tenant_name = serializers.CharField(source='tenant.name', read_only=True, default=None)
    tenant_mobile = serializers.CharField(source='tenant.mobile', read_only=True, default=None)
    month = serializers.SerializerMethodField()
    year = serializers.SerializerMethodField()

    class Meta:
        model = MaintenanceRequest
        fields = [
            'id', 'tenant_id', 'tenant_name', 'tenant_mobile', 'building_id', 'building_name',
            'building_icon', 'unit_id', 'unit_number', 'issue_title', 'description', 'priority',
            'status', 'cost', 'assigned_to', 'date', 'month', 'year',
            'created_at', 'updated_at', 'completed_at',
        ]
        read_only_fields = ['id', 'status', 'cost', 'created_at', 'updated_at', 'completed_at']
        extra_kwargs = {
            'description': {'required': False, 'allow_blank': True, 'allow_null': True},
            'assigned_to': {'required': False, 'allow_blank': True, 'allow_null': True},
        }

    def get_month(self, obj):
        return obj.date.strftime('%B')

    def get_year(self, obj):
        return obj.date.year

    def validate_issue_title(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Issue title is required")
        return value

    def validate_description(self, value):
        return value or ''

    def validate_assigned_to(self, value):
        return value or ''

    def validate(self, attrs):
        building = attrs.get('building', getattr(self.instance, 'building', None))
        unit = attrs.get('unit', getattr(self.instance, 'unit', None))
        tenant = attrs.get('tenant', getattr(self.instance, 'tenant', None))
        if unit and unit.building_id != building.id:
            raise serializers.ValidationError({'unit_id': f"Unit is not in {building.name}"})
        if tenant and tenant.building_id != building.id:
            raise serializers.ValidationError({'tenant_id': f"Tenant does not live in {building.name}"})
        if tenant and not unit and tenant.unit_id:
            attrs['unit'] = tenant.unit
        return attrs


class MaintenanceExpenseSerializer(AliasedInputMixin, serializers.ModelSerializer):
    maintenance_request_id = serializers.IntegerField(source='request_id', read_only=True)
    issue_title = serializers.CharField(source='request.issue_title', read_only=True)
    building_id = serializers.IntegerField(source='request.building_id', read_only=True)
    building_name = serializers.CharField(source='request.building.name', read_only=True)
    unit_number = serializers.CharField(source='request.unit.unit_number', read_only=True, default=None)

    class Meta:
        model = MaintenanceExpense
        fields = [
            'id', 'maintenance_request_id', 'description', 'amount', 'category', 'paid_by',
            'payment_method', 'receipt_number', 'date', 'created_at',
            'issue_title', 'building_name', 'building_id', 'unit_number',
        ]
        read_only_fields = ['id', 'created_at']
        extra_kwargs = {
            'category': {'required': False, 'allow_blank': True},
            'paid_by': {'required': False, 'allow_blank': True, 'allow_null': True},
            'payment_method': {'required': False, 'allow_blank': True, 'allow_null': True},
            'receipt_number': {'required': False, 'allow_blank': True, 'allow_null': True},
        }

    def validate(self, attrs):
        for field in ('paid_by', 'payment_method', 'receipt_number'):
            if attrs.get(field) is None and field in attrs:
                attrs[field] = ''
        return attrs


class StatusSerializer(serializers.Serializer):
    status = serializers.CharField()
