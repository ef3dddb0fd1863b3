from rest_framework import serializers

from .models import SiteSettings


class SiteSettingsSerializer(serializers.ModelSerializer):
    currency_symbol = serializers.CharField(read_only=True)

    class Meta:
        model = SiteSettings
        fields = [
            'company_name', 'company_email', 'company_phone', 'company_address',
            'enable_sms_notifications', 'enable_email_notifications',
            'auto_generate_records', 'rent_due_day', 'default_garbage_bill', 'default_water_bill',
            'currency_code', 'currency_symbol', 'updated_at',
        ]
        read_only_fields = ['updated_at']
        extra_kwargs = {
            'default_garbage_bill': {'min_value': 0},
            'default_water_bill': {'min_value': 0},
        }
