from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.admission.models import Enrollment
from apps.admission.services import AdmissionService
from apps.core.exceptions import NotFound
from apps.finance.models import Payment
from apps.finance.services import PaymentService
from apps.finance.utils import derive_payment_status


@pytest.mark.parametrize('paid, total, expected', [
    (0, 15000, 'pending'),
    (1, 15000, 'partial'),
    (14999, 15000, 'partial'),
    (15000, 15000, 'paid'),
    (0, 0, 'paid'),
    (Decimal('7500.50'), Decimal('15000.00'), 'partial'),
])
def test_derive_payment_status(paid, total, expected):
    assert derive_payment_status(paid, total) == expected


def test_full_payment_marks_enrollment_paid(make_enrollment):
    enrollment = make_enrollment(total_fee=15000)

    PaymentService.record_payment(enrollment.pk, 15000, 'online', transaction_id='TXN1')

    enrollment.refresh_from_db()
    assert enrollment.paid_amount == Decimal('15000')
    assert enrollment.payment_status == 'paid'
    assert enrollment.balance == 0


def test_two_installments_leave_enrollment_partial(make_enrollment):
    enrollment = make_enrollment(total_fee=15000)

    PaymentService.record_payment(enrollment.pk, 5000, 'cash', payment_type='installment_1')
    PaymentService.record_payment(enrollment.pk, 5000, 'cash', payment_type='installment_2')

    enrollment.refresh_from_db()
    assert enrollment.paid_amount == Decimal('10000')
    assert enrollment.payment_status == 'partial'
    assert enrollment.payments.count() == 2


def test_ledger_matches_cached_amount_after_every_payment(make_enrollment):
    enrollment = make_enrollment(total_fee=12000)

    for amount in ('2500', '2500.50', '6999.50'):
        PaymentService.record_payment(enrollment.pk, amount, 'transfer')
        enrollment.refresh_from_db()
        assert PaymentService.ledger_total(enrollment) == enrollment.paid_amount
        assert PaymentService.verify_ledger(enrollment)

    assert enrollment.payment_status == 'paid'


def test_overpayment_is_rejected_and_nothing_changes(make_enrollment):
    enrollment = make_enrollment(total_fee=15000)
    PaymentService.record_payment(enrollment.pk, 10000, 'cash')

    with pytest.raises(ValidationError):
        PaymentService.record_payment(enrollment.pk, 5001, 'cash')

    enrollment.refresh_from_db()
    assert enrollment.paid_amount == Decimal('10000')
    assert enrollment.payments.count() == 1


@pytest.mark.parametrize('amount', [0, -100, 'abc', None, True])
def test_amount_must_be_a_positive_number(make_enrollment, amount):
    enrollment = make_enrollment()
    with pytest.raises(ValidationError):
        PaymentService.record_payment(enrollment.pk, amount, 'cash')
    assert not Payment.objects.exists()


def test_unknown_method_and_type_are_rejected(make_enrollment):
    enrollment = make_enrollment()
    with pytest.raises(ValidationError):
        PaymentService.record_payment(enrollment.pk, 100, 'cheque')
    with pytest.raises(ValidationError):
        PaymentService.record_payment(enrollment.pk, 100, 'cash', payment_type='deposit')


def test_unknown_enrollment_raises_not_found(db):
    with pytest.raises(NotFound):
        PaymentService.record_payment('enr_missing', 100, 'cash')


def test_rejected_enrollment_cannot_be_paid(make_enrollment):
    enrollment = make_enrollment(status=Enrollment.REJECTED)
    with pytest.raises(ValidationError):
        PaymentService.record_payment(enrollment.pk, 100, 'cash')


def test_failed_write_rolls_back_the_ledger_row(make_enrollment, monkeypatch):
    enrollment = make_enrollment(total_fee=15000)

    def boom(self, *args, **kwargs):
        raise RuntimeError('disk full')

    monkeypatch.setattr(Enrollment, 'save', boom)
    with pytest.raises(RuntimeError):
        PaymentService.record_payment(enrollment.pk, 5000, 'cash')

    assert not Payment.objects.filter(enrollment_id=enrollment.pk).exists()


def test_payments_are_immutable(make_enrollment):
    enrollment = make_enrollment()
    payment = PaymentService.record_payment(enrollment.pk, 100, 'cash')

    payment.amount = Decimal('1')
    with pytest.raises(ValidationError):
        payment.save()
    with pytest.raises(ValidationError):
        payment.delete()

    assert Payment.objects.get(pk=payment.pk).amount == Decimal('100')


def test_payment_numbers_are_sequential(make_enrollment):
    enrollment = make_enrollment()
    first = PaymentService.record_payment(enrollment.pk, 100, 'cash')
    second = PaymentService.record_payment(enrollment.pk, 100, 'cash')

    assert first.payment_number.startswith('PAY-')
    assert int(second.payment_number.split('-')[-1]) == int(first.payment_number.split('-')[-1]) + 1


def test_payment_numbers_continue_past_four_digits(make_enrollment):
    enrollment = make_enrollment()
    now = timezone.now()
    prefix = f"PAY-{now.year}-{now.month:02d}-"
    for number in ('9999', '10000'):
        Payment.objects.create(enrollment=enrollment, amount=1, method='cash', payment_number=f'{prefix}{number}')

    payment = PaymentService.record_payment(enrollment.pk, 100, 'cash')

    assert payment.payment_number == f'{prefix}10001'


def test_payment_summary(demo_data):
    summary = PaymentService.payment_summary('e2')

    assert summary['total_fee'] == Decimal('15000')
    assert summary['paid_amount'] == Decimal('7500')
    assert summary['balance'] == Decimal('7500')
    assert summary['payment_status'] == 'partial'
    assert summary['status_label'] == 'Partially Paid'
    assert [p['payment_type'] for p in summary['payments']] == ['installment_1']


def test_parent_fee_overview_lists_enrolled_children(demo_data):
    overview = PaymentService.parent_fee_overview('p1')

    # s5 has no enrollment
    assert [child['student_id'] for child in overview['children']] == ['s1']
    assert overview['total_paid'] == Decimal('15000')
    assert overview['total_balance'] == 0


def test_revenue_collected(demo_data):
    assert PaymentService.revenue_collected() == Decimal('34500')
    assert PaymentService.revenue_collected(status='paid') == Decimal('27000')
    assert PaymentService.revenue_collected(search='bob') == Decimal('7500')
    with pytest.raises(ValidationError):
        PaymentService.revenue_collected(status='refunded')


def test_update_total_fee_rederives_status(demo_data):
    enrollment = AdmissionService.update_total_fee('e1', 20000)
    assert enrollment.payment_status == 'partial'

    with pytest.raises(ValidationError):
        AdmissionService.update_total_fee('e1', 1000)
    enrollment.refresh_from_db()
    assert enrollment.total_fee == Decimal('20000')


def test_seeded_ledgers_are_consistent(demo_data):
    assert all(PaymentService.verify_ledger(enrollment) for enrollment in Enrollment.objects.all())
