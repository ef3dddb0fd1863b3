from rest_framework import serializers
from .models import Building, UnitType, BuildingUnitType, Unit, Staff


class BuildingUnitTypeSerializer(serializers.ModelSerializer):
    """Unit type price for a building; accepts a unit type name and creates it on first use"""
    building_id = serializers.PrimaryKeyRelatedField(
        queryset=Building.objects.all(), source='building'
    )
    unit_type_id = serializers.IntegerField(source='unit_type.id', read_only=True)
    unit_type_name = serializers.CharField(source='unit_type.name', read_only=True)
    name = serializers.CharField(write_only=True, max_length=100, required=False)

    class Meta:
        model = BuildingUnitType
        fields = ['id', 'building_id', 'unit_type_id', 'unit_type_name', 'name', 'monthly_rent', 'created_at']
        read_only_fields = ['id', 'created_at']

    def validate(self, attrs):
        name = attrs.pop('name', None)
        if name:
            attrs['unit_type'], _ = UnitType.objects.get_or_create(name=name.strip())
        elif not self.instance:
            raise serializers.ValidationError({'name': 'Unit type name is required'})

        building = attrs.get('building', getattr(self.instance, 'building', None))
        unit_type = attrs.get('unit_type', getattr(self.instance, 'unit_type', None))
        duplicate = BuildingUnitType.objects.filter(building=building, unit_type=unit_type)
        if self.instance:
            duplicate = duplicate.exclude(pk=self.instance.pk)
        if duplicate.exists():
            raise serializers.ValidationError(
                f"{unit_type.name} is already configured for {building.name}"
            )
        return attrs


class UnitSerializer(serializers.ModelSerializer):
    building_id = serializers.PrimaryKeyRelatedField(
        queryset=Building.objects.all(), source='building'
    )
    unit_type_id = serializers.PrimaryKeyRelatedField(
        queryset=BuildingUnitType.objects.all(), source='unit_type', required=False, allow_null=True
    )
    unit_type_name = serializers.CharField(source='unit_type.unit_type.name', read_only=True, default=None)
    monthly_rent = serializers.DecimalField(
        source='unit_type.monthly_rent', max_digits=12, decimal_places=2, read_only=True, default=None
    )
    tenant_name = serializers.SerializerMethodField()
    tenant_phone = serializers.SerializerMethodField()

    class Meta:
        model = Unit
        fields = [
            'id', 'building_id', 'unit_type_id', 'unit_type_name', 'monthly_rent',
            'unit_number', 'is_occupied', 'tenant_name', 'tenant_phone', 'created_at'
        ]
        read_only_fields = ['id', 'is_occupied', 'created_at']

    def _tenant(self, obj):
        if not hasattr(obj, '_tenant_cache'):
            obj._tenant_cache = obj.current_tenant
        return obj._tenant_cache

    def get_tenant_name(self, obj):
        tenant = self._tenant(obj)
        return tenant.name if tenant else None

    def get_tenant_phone(self, obj):
        tenant = self._tenant(obj)
        return tenant.mobile if tenant else None

    def validate(self, attrs):
        building = attrs.get('building', getattr(self.instance, 'building', None))
        unit_type = attrs.get('unit_type', getattr(self.instance, 'unit_type', None))
        if unit_type and unit_type.building_id != building.id:
            raise serializers.ValidationError({'unit_type_id': 'Unit type is not configured for this building'})
        unit_number = attrs.get('unit_number', getattr(self.instance, 'unit_number', None))
        duplicate = Unit.objects.filter(building=building, unit_number__iexact=unit_number)
        if self.instance:
            duplicate = duplicate.exclude(pk=self.instance.pk)
        if duplicate.exists():
            raise serializers.ValidationError({'unit_number': f'Unit {unit_number} already exists in {building.name}'})
        return attrs


class StaffSerializer(serializers.ModelSerializer):
    building_id = serializers.PrimaryKeyRelatedField(
        queryset=Building.objects.all(), source='building'
    )

    class Meta:
        model = Staff
        fields = ['id', 'building_id', 'role', 'name', 'phone', 'email', 'address', 'created_at']
        read_only_fields = ['id', 'created_at']


class BuildingSerializer(serializers.ModelSerializer):
    """Building with counts, used for create/update and list views"""
    total_units = serializers.ReadOnlyField()
    occupied_units = serializers.ReadOnlyField()
    vacant_units = serializers.ReadOnlyField()

    class Meta:
        model = Building
        fields = [
            'id', 'name', 'code', 'type', 'city', 'address', 'wifi_installed', 'icon',
            'total_units', 'occupied_units', 'vacant_units', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']
        extra_kwargs = {'code': {'required': False}}


class BuildingDetailSerializer(BuildingSerializer):
    """Building with its units, staff and unit type prices nested"""
    units = UnitSerializer(many=True, read_only=True)
    staff = StaffSerializer(many=True, read_only=True)
    unitTypes = BuildingUnitTypeSerializer(source='unit_types', many=True, read_only=True)

    class Meta(BuildingSerializer.Meta):
        fields = BuildingSerializer.Meta.fields + ['units', 'staff', 'unitTypes']


class BuildingWithUnitTypesSerializer(serializers.ModelSerializer):
    """Settings page: buildings and the rent configured per unit type"""
    unitTypes = BuildingUnitTypeSerializer(source='unit_types', many=True, read_only=True)

    class Meta:
        model = Building
        fields = ['id', 'name', 'code', 'icon', 'type', 'city', 'wifi_installed', 'unitTypes']
