from apps.admission.services import AdmissionService
from apps.core.decorators import json_view


def enrollment_data(enrollment):
    return {
        'id': enrollment.pk,
        'student_name': enrollment.student_name,
        'class_level': enrollment.class_level,
        'batch': enrollment.batch,
        'mode': enrollment.mode,
        'status': enrollment.status,
        'register_number': enrollment.register_number,
        'roll_number': enrollment.roll_number,
        'installment_plan': enrollment.installment_plan,
        'submitted_date': enrollment.submitted_date,
        'total_fee': enrollment.total_fee,
        'paid_amount': enrollment.paid_amount,
        'payment_status': enrollment.payment_status,
    }


@json_view(['POST'])
def submit_enrollment(request):
    return enrollment_data(AdmissionService.submit_enrollment(request.data))


@json_view(['POST'])
def offline_enrollment(request):
    return enrollment_data(AdmissionService.confirm_offline_enrollment(request.data))


@json_view(['POST'])
def update_status(request, enrollment_id):
    enrollment = AdmissionService.update_enrollment_status(enrollment_id, request.data.get('status'))
    return enrollment_data(enrollment)
