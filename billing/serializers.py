from rest_framework import serializers

from buildings.models import Building
from core.constants import PaymentMethod
from core.validators import PeriodValidator
from .models import MonthlyRecord, Transaction, Penalty

money = dict(max_digits=12, decimal_places=2, min_value=0)


def amount(source):
    return serializers.DecimalField(source=source, max_digits=12, decimal_places=2, read_only=True)


class TransactionSerializer(serializers.ModelSerializer):
    """Payment as listed on the monthly updates page"""
    tenantId = serializers.IntegerField(source='tenant_id', read_only=True)
    tenantName = serializers.CharField(source='tenant.name', read_only=True)
    houseNumber = serializers.CharField(source='tenant.house_number', read_only=True)
    buildingName = serializers.CharField(source='tenant.building.name', read_only=True)
    month = serializers.CharField(source='month_name', read_only=True)
    monthNumber = serializers.IntegerField(source='month', read_only=True)
    totalAmount = amount('total_amount')
    waterBill = amount('water_bill')
    appliedRent = amount('applied_rent')
    appliedWater = amount('applied_water')
    appliedGarbage = amount('applied_garbage')
    appliedPenalties = amount('applied_penalties')
    createdBy = serializers.CharField(source='created_by.username', read_only=True, default=None)
    timestamp = serializers.DateTimeField(read_only=True)

    class Meta:
        model = Transaction
        fields = [
            'id', 'tenantId', 'tenantName', 'houseNumber', 'buildingName',
            'month', 'monthNumber', 'year', 'rent', 'water', 'garbage', 'penalty', 'deposit',
            'totalAmount', 'waterBill', 'appliedRent', 'appliedWater', 'appliedGarbage',
            'appliedPenalties', 'credit', 'method', 'reference', 'date', 'notes',
            'createdBy', 'timestamp',
        ]
        read_only_fields = fields


class MonthlyRecordSerializer(serializers.ModelSerializer):
    """
    A tenant's month. balanceDue is the stored balance after applied payments;
    effectiveBalance also offsets any unapplied advance.
    """
    tenantId = serializers.IntegerField(source='tenant_id', read_only=True)
    name = serializers.CharField(source='tenant.name', read_only=True)
    houseNumber = serializers.CharField(source='tenant.house_number', read_only=True)
    mobile = serializers.CharField(source='tenant.mobile', read_only=True)
    buildingName = serializers.CharField(source='tenant.building.name', read_only=True)
    month = serializers.CharField(source='month_name', read_only=True)
    monthNumber = serializers.IntegerField(source='month', read_only=True)
    monthKey = serializers.CharField(source='month_key', read_only=True)
    monthlyRent = amount('monthly_rent')
    waterBill = amount('water_bill')
    garbageBill = amount('garbage_bill')
    rentPaid = amount('rent_paid')
    waterPaid = amount('water_paid')
    garbagePaid = amount('garbage_paid')
    penaltiesPaid = amount('penalties_paid')
    depositPaid = amount('deposit_paid')
    carriedForward = amount('carried_forward')
    advanceBalance = amount('advance_balance')
    balanceDue = amount('balance_due')
    totalDue = amount('total_due')
    effectiveBalance = amount('effective_balance')
    status = serializers.SerializerMethodField()
    transactions = TransactionSerializer(many=True, read_only=True)
    lastUpdated = serializers.DateTimeField(source='last_updated', read_only=True)

    class Meta:
        model = MonthlyRecord
        fields = [
            'id', 'tenantId', 'name', 'houseNumber', 'mobile', 'buildingName',
            'month', 'monthNumber', 'monthKey', 'year',
            'monthlyRent', 'waterBill', 'garbageBill', 'penalties',
            'rentPaid', 'waterPaid', 'garbagePaid', 'penaltiesPaid', 'depositPaid',
            'carriedForward', 'advanceBalance', 'balanceDue', 'totalDue', 'effectiveBalance',
            'status', 'transactions', 'lastUpdated',
        ]
        read_only_fields = fields

    def get_status(self, obj):
        service = self.context.get('billing')
        if service is None:
            from .services import BillingService
            service = BillingService()
            self.context['billing'] = service
        return service.payment_status(obj)


class PaymentInputSerializer(serializers.Serializer):
    """The `transaction` part of an upsert request"""
    rent = serializers.DecimalField(default=0, **money)
    water = serializers.DecimalField(default=0, **money)
    garbage = serializers.DecimalField(default=0, **money)
    penalty = serializers.DecimalField(default=0, **money)
    deposit = serializers.DecimalField(default=0, **money)
    waterBill = serializers.DecimalField(required=False, allow_null=True, **money)
    method = serializers.ChoiceField(choices=PaymentMethod.CHOICES, default=PaymentMethod.MPESA)
    reference = serializers.CharField(allow_blank=True, max_length=100, default='')
    date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(allow_blank=True, default='')
    month = serializers.CharField(required=False, allow_blank=True)
    year = serializers.IntegerField(required=False, allow_null=True)


class UpsertSerializer(serializers.Serializer):
    """POST admin/transactions/upsert {tenantId, transaction, record}"""
    tenantId = serializers.IntegerField()
    transaction = PaymentInputSerializer()
    record = serializers.DictField(default=dict)

    def validate(self, attrs):
        payment = attrs['transaction']
        record = attrs['record']
        month = payment.get('month') or record.get('month')
        year = payment.get('year') or record.get('year')
        attrs['month'], attrs['year'] = PeriodValidator.parse_period(month, year)

        water_bill = payment.get('waterBill')
        if water_bill is None and record.get('waterBill') not in (None, ''):
            water_bill = record['waterBill']
        attrs['water_bill'] = water_bill
        return attrs


class PeriodSerializer(serializers.Serializer):
    """{tenantId?, month?, year?} with the month given as a name or number"""
    tenantId = serializers.IntegerField(required=False)
    month = serializers.CharField(required=False, allow_blank=True)
    year = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        attrs['month'], attrs['year'] = PeriodValidator.parse_period(attrs.get('month'), attrs.get('year'))
        return attrs


class SettleSerializer(PeriodSerializer):
    tenantId = serializers.IntegerField()


class PenaltySerializer(serializers.ModelSerializer):
    buildingId = serializers.PrimaryKeyRelatedField(
        source='building', queryset=Building.objects.all()
    )
    buildingName = serializers.CharField(source='building.name', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    updatedAt = serializers.DateTimeField(source='updated_at', read_only=True)

    class Meta:
        model = Penalty
        fields = ['id', 'buildingId', 'buildingName', 'percentage', 'createdAt', 'updatedAt']
        validators = []

    def validate_buildingId(self, building):
        existing = Penalty.objects.filter(building=building)
        if self.instance:
            existing = existing.exclude(pk=self.instance.pk)
        if existing.exists():
            raise serializers.ValidationError("This building already has a penalty")
        return building


class SendReceiptEmailSerializer(serializers.Serializer):
    email = serializers.EmailField()
    tenantId = serializers.IntegerField()
    month = serializers.CharField(required=False, allow_blank=True)
    year = serializers.IntegerField(required=False, allow_null=True)

    def validate(self, attrs):
        attrs['month'], attrs['year'] = PeriodValidator.parse_period(attrs.get('month'), attrs.get('year'))
        return attrs


class SendReceiptSmsSerializer(serializers.Serializer):
    phone = serializers.CharField()
    tenantName = serializers.CharField(max_length=100)
    month = serializers.CharField()
    year = serializers.IntegerField()
    amountPaid = serializers.DecimalField(**money)
    balanceDue = serializers.DecimalField(**money)
    receiptNo = serializers.CharField(max_length=40)
