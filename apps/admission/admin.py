from django.contrib import admin
from .models import Enrollment
from apps.finance.models import Payment


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    can_delete = False
    fields = ('payment_number', 'amount', 'method', 'payment_type', 'status', 'payment_date')
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('student_name', 'class_level', 'batch', 'mode', 'status', 'total_fee', 'paid_amount', 'payment_status')
    list_filter = ('status', 'mode', 'payment_status', 'class_level')
    search_fields = ('student_name', 'email', 'phone', 'register_number')
    date_hierarchy = 'submitted_date'
    readonly_fields = ('paid_amount', 'payment_status')
    inlines = [PaymentInline]
