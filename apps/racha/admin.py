# ==========================================
# apps/racha/admin.py
# ==========================================

from django.contrib import admin
from apps.racha.models import Participant, Expense, ExpenseShare, Payment, PaymentCredit


class ExpenseShareInline(admin.TabularInline):
    """Inline admin for expense shares."""
    model = ExpenseShare
    extra = 0
    fields = ['participant', 'share_amount']
    readonly_fields = ['participant', 'share_amount']
    can_delete = False


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ['name', 'event', 'user', 'is_active', 'created_at']
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'event__name', 'user__email']
    readonly_fields = ['created_at']


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    """
    Admin interface for expenses.

    Shares are read-only here; editing them by hand would break the
    sum-of-shares guarantee. Use the API to record or rebalance.
    """

    list_display = ['description', 'event', 'payer', 'total_amount', 'created_at']
    list_filter = ['created_at']
    search_fields = ['description', 'event__name', 'payer__name']
    readonly_fields = ['created_at']
    inlines = [ExpenseShareInline]
    date_hierarchy = 'created_at'


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['participant', 'event', 'amount', 'status', 'provider', 'created_at']
    list_filter = ['status', 'provider', 'created_at']
    search_fields = ['participant__name', 'event__name', 'provider_payment_id']
    readonly_fields = ['created_at', 'updated_at', 'provider_payload']

    fieldsets = (
        ('Payment', {
            'fields': ('event', 'participant', 'amount', 'status')
        }),
        ('Provider', {
            'fields': ('provider', 'provider_payment_id', 'provider_payload')
        }),
        ('Metadata', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


@admin.register(PaymentCredit)
class PaymentCreditAdmin(admin.ModelAdmin):
    list_display = ['idempotency_key', 'payment', 'amount', 'created_at']
    search_fields = ['idempotency_key']
    readonly_fields = ['payment', 'idempotency_key', 'amount', 'created_at']
