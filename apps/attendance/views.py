from apps.attendance.services import AttendanceService
from apps.core.decorators import json_view


def record_data(record):
    return {
        'id': record.pk,
        'student_id': record.student_id,
        'class_level': record.class_level,
        'date': record.date,
        'status': record.status,
    }


@json_view(['POST'])
def mark_attendance(request):
    data = request.data
    record = AttendanceService.mark_attendance(
        data.get('student_id'), data.get('date'), data.get('status'), marked_by=data.get('marked_by', '')
    )
    return record_data(record)


@json_view(['POST'])
def mark_all_present(request):
    data = request.data
    marked = AttendanceService.mark_all_present(
        data.get('class_level'), data.get('batch'), data.get('date'), marked_by=data.get('marked_by', '')
    )
    return {'marked': marked}


@json_view(['POST'])
def save_class_attendance(request):
    data = request.data
    saved = AttendanceService.save_class_attendance(
        data.get('class_level'),
        data.get('batch'),
        data.get('date'),
        data.get('statuses') or {},
        marked_by=data.get('marked_by', ''),
    )
    return {'saved': saved}


@json_view(['POST'])
def scan_attendance(request):
    data = request.data
    student = AttendanceService.scan_attendance(data.get('token'), data.get('date'))
    return {
        'student_id': student.pk,
        'name': student.name,
        'register_number': student.register_number,
        'status': 'present',
    }


@json_view(['GET'])
def class_stats(request):
    params = request.GET
    return AttendanceService.class_daily_stats(params.get('class_level'), params.get('batch'), params.get('date'))


@json_view(['GET'])
def student_rate(request, student_id):
    return AttendanceService.student_attendance_rate(
        student_id, from_date=request.GET.get('from'), to_date=request.GET.get('to')
    )
