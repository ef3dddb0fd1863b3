from django.contrib import admin
from .models import MonthlyRecord, Transaction, Penalty


class TransactionInline(admin.TabularInline):
    model = Transaction
    extra = 0
    fields = ['date', 'total_amount', 'deposit', 'method', 'reference', 'credit']
    readonly_fields = fields
    can_delete = False


@admin.register(MonthlyRecord)
class MonthlyRecordAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'month', 'year', 'monthly_rent', 'water_bill', 'penalties',
                    'balance_due', 'advance_balance']
    list_filter = ['year', 'month', 'tenant__building']
    search_fields = ['tenant__name', 'tenant__house_number']
    readonly_fields = ['balance_due', 'carried_forward', 'created_at', 'last_updated']
    inlines = [TransactionInline]

    fieldsets = (
        ('Period', {
            'fields': ('tenant', 'month', 'year')
        }),
        ('Charges', {
            'fields': ('monthly_rent', 'water_bill', 'garbage_bill', 'penalties')
        }),
        ('Payments', {
            'fields': ('rent_paid', 'water_paid', 'garbage_paid', 'penalties_paid', 'deposit_paid')
        }),
        ('Balance', {
            'fields': ('carried_forward', 'advance_balance', 'balance_due', 'created_at', 'last_updated'),
            'classes': ('collapse',)
        }),
    )


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['tenant', 'month', 'year', 'total_amount', 'deposit', 'method', 'reference', 'date']
    list_filter = ['method', 'year', 'month']
    search_fields = ['tenant__name', 'reference']
    date_hierarchy = 'date'
    readonly_fields = ['timestamp', 'created_by']


@admin.register(Penalty)
class PenaltyAdmin(admin.ModelAdmin):
    list_display = ['building', 'percentage', 'updated_at']
