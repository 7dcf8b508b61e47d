import importlib
import json
import threading
from decimal import Decimal

import pytest
from django.core.management import call_command
from django.test import Client

from apps.admission.models import Enrollment
from apps.admission.services import AdmissionService
from apps.core.stats import dashboard_stats
from apps.examination.services import update_ranking_settings


def post(client, url, data):
    return client.post(url, data=json.dumps(data), content_type='application/json')


def test_dashboard(client, demo_data):
    response = client.get('/', {'date': '2026-01-29'})

    assert response.status_code == 200
    data = response.json()
    assert data['total_students'] == 5
    assert data['total_teachers'] == 1
    assert data['pending_enrollments'] == 2
    assert Decimal(data['revenue_collected']) == Decimal('34500')
    assert Decimal(data['total_fees']) == Decimal('94000')
    assert Decimal(data['outstanding_fees']) == Decimal('59500')
    assert data['ranking_enabled'] is True
    assert data['ledger_consistent'] is True
    assert data['attendance_date'] == '2026-01-29'


def test_dashboard_fee_totals_skip_rejected_enrollments(demo_data):
    AdmissionService.update_enrollment_status('e6', 'rejected')

    stats = dashboard_stats()

    assert stats['total_fees'] == Decimal('82000')
    assert stats['outstanding_fees'] == Decimal('47500')
    assert stats['inconsistent_enrollments'] == []


def test_ranking_settings_endpoint(client, demo_data):
    response = post(client, '/settings/ranking/', {'enabled': False, 'weightage': {'sub6': 2}})

    assert response.status_code == 200
    assert response.json() == {'enabled': False, 'weightage': {'sub6': 2}}

    response = post(client, '/settings/ranking/', {'weightage': {'sub6': -2}})
    assert response.status_code == 400
    assert response.json()['code'] == 'invalid'


def test_enrollment_flow(client, demo_data):
    response = post(client, '/admission/enroll/', {
        'student_name': 'Jack Frost',
        'phone': '+919844444444',
        'course': 'crs2',
    })
    assert response.status_code == 200
    enrollment_id = response.json()['id']
    assert response.json()['status'] == 'pending'

    response = post(client, f'/admission/{enrollment_id}/status/', {'status': 'confirmed'})
    assert response.status_code == 200
    assert len(response.json()['register_number']) == 9

    response = post(client, f'/admission/{enrollment_id}/status/', {'status': 'rejected'})
    assert response.status_code == 409
    assert response.json()['code'] == 'invalid_state_transition'


def test_offline_enrollment_endpoint(client, db):
    response = post(client, '/admission/offline/', {
        'student_name': 'Kira Nash',
        'phone': '+919855555555',
        'class_level': 9,
        'batch': 'Batch-B',
        'total_fee': 12000,
        'installment_plan': 'two_installments',
        'initial_payment': 6000,
    })

    assert response.status_code == 200
    data = response.json()
    assert data['status'] == 'confirmed'
    assert data['payment_status'] == 'partial'
    assert Decimal(data['paid_amount']) == Decimal('6000')


def test_payment_endpoints(client, demo_data):
    response = post(client, '/finance/payments/', {
        'enrollment_id': 'e2', 'amount': 7500, 'method': 'cash', 'payment_type': 'installment_2',
    })
    assert response.status_code == 200
    assert response.json()['payment_status'] == 'paid'

    response = post(client, '/finance/payments/', {'enrollment_id': 'e2', 'amount': 1, 'method': 'cash'})
    assert response.status_code == 400
    assert 'amount' in response.json()['error']

    response = client.get('/finance/enrollments/e2/summary/')
    assert response.status_code == 200
    assert len(response.json()['payments']) == 2

    assert client.get('/finance/enrollments/nope/summary/').status_code == 404
    assert client.get('/finance/parents/p1/fees/').json()['children'][0]['student_id'] == 's1'


def test_attendance_endpoints(client, demo_data):
    response = post(client, '/attendance/mark/', {'student_id': 's1', 'date': '2026-02-01', 'status': 'absent'})
    assert response.status_code == 200
    assert response.json()['status'] == 'absent'

    response = post(client, '/attendance/mark-all/', {'class_level': 10, 'batch': 'Batch-A', 'date': '2026-02-02'})
    assert response.json() == {'marked': 3}

    response = post(client, '/attendance/scan/', {'token': 'e2', 'date': '2026-02-01'})
    assert response.json()['student_id'] == 's2'

    response = client.get('/attendance/stats/', {'class_level': 10, 'batch': 'Batch-A', 'date': '2026-02-01'})
    assert response.json() == {'total': 3, 'present': 1, 'absent': 1, 'not_marked': 1, 'percentage': 33}

    response = client.get('/attendance/students/s1/rate/', {'from': '2026-02-01'})
    assert response.json() == {'present_days': 1, 'total_days': 2, 'percentage': 50}

    assert post(client, '/attendance/scan/', {'token': 'ghost'}).status_code == 404
    assert client.get('/attendance/stats/', {'class_level': 'ten', 'date': '2026-02-01'}).status_code == 400


def test_report_visibility_follows_role(client, demo_data):
    update_ranking_settings(enabled=False)

    student = client.get('/examination/students/s1/report/', {'role': 'student'}).json()
    admin = client.get('/examination/students/s1/report/', {'role': 'admin'}).json()

    assert 'rank' not in student
    assert admin['rank'] == 1

    assert client.get('/examination/ranking/', {'class_level': 10, 'role': 'parent'}).status_code == 403
    ranking = client.get('/examination/ranking/', {'class_level': 10, 'role': 'teacher'}).json()['ranking']
    assert [entry['student_id'] for entry in ranking] == ['s1', 's2', 's5']


def test_public_result_endpoint(client, demo_data):
    response = client.get('/examination/result/', {'register_number': '260105104'})

    assert response.status_code == 200
    assert response.json()['student_name'] == 'Diana Prince'
    assert response.json()['published'] is True
    assert client.get('/examination/result/', {'register_number': '1'}).status_code == 404


@pytest.mark.parametrize('body', ['not json', '[1, 2]'])
def test_malformed_body(client, db, body):
    response = client.post('/finance/payments/', data=body, content_type='application/json')
    assert response.status_code == 400


def test_wrong_method(client, db):
    assert client.get('/finance/payments/').status_code == 405
    assert client.post('/attendance/stats/').status_code == 405


def test_seed_command(transactional_db, capsys):
    call_command('seed_demo_data', '--report')

    out = capsys.readouterr().out
    assert 'Created 5 students' in out
    assert 'Class 10 - Mid-term' in out
    assert Enrollment.objects.filter(status='pending').count() == 2


def test_startup_seed_is_visible_to_request_threads(transactional_db):
    importlib.reload(importlib.import_module('config.wsgi'))
    responses = []

    def request():
        responses.append(Client().get('/attendance/students/s1/rate/'))

    worker = threading.Thread(target=request)
    worker.start()
    worker.join()

    assert responses[0].status_code == 200
    assert responses[0].json()['total_days'] == 30
    assert Client().get('/').json()['total_students'] == 5
