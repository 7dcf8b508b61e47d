from apps.core.decorators import json_view
from apps.finance.services import PaymentService


@json_view(['POST'])
def record_payment(request):
    data = request.data
    payment = PaymentService.record_payment(
        data.get('enrollment_id'),
        data.get('amount'),
        data.get('method'),
        transaction_id=data.get('transaction_id'),
        payment_type=data.get('payment_type'),
        payment_date=data.get('payment_date'),
    )
    summary = PaymentService.payment_summary(payment.enrollment_id)
    summary['payment_id'] = payment.pk
    return summary


@json_view(['GET'])
def payment_summary(request, enrollment_id):
    return PaymentService.payment_summary(enrollment_id)


@json_view(['GET'])
def parent_fees(request, parent_id):
    return PaymentService.parent_fee_overview(parent_id)
