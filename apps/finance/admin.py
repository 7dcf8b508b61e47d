from django.contrib import admin
from .models import Payment


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ('payment_number', 'enrollment', 'amount', 'method', 'payment_type', 'status', 'payment_date')
    list_filter = ('method', 'payment_type', 'status', 'payment_date')
    search_fields = ('payment_number', 'transaction_id', 'enrollment__student_name')
    date_hierarchy = 'payment_date'
    ordering = ('-payment_date',)

    # Ledger rows are written by PaymentService only
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
