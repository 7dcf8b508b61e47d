# core/seed.py
"""
Demo data the dashboard starts from.

Nothing is persisted between runs. ``bootstrap`` creates the tables and
loads the data every time the WSGI application starts (``config/wsgi.py``);
the ``seed_demo_data`` command and the test fixtures use the same loader.
"""
import datetime
import logging
import random
from decimal import Decimal

from django.core.management import call_command
from django.db import transaction

from apps.academics.models import Course, Note, Subject
from apps.admission.models import Enrollment
from apps.attendance.models import Attendance
from apps.core.models import SystemSettings
from apps.examination.models import Mark
from apps.finance.models import Payment
from apps.finance.services import PaymentService
from apps.students.models import Parent, Student
from apps.teachers.models import Teacher

logger = logging.getLogger(__name__)

DEFAULT_BATCH = 'Batch-A'
ATTENDANCE_END = datetime.date(2026, 1, 29)
ATTENDANCE_DAYS = 30
PRESENT_RATE = 0.85

SUBJECTS = [
    # Class 9
    ('sub1', 'Mathematics', 9),
    ('sub2', 'Science', 9),
    ('sub3', 'English', 9),
    ('sub4', 'History', 9),
    ('sub5', 'Geography', 9),
    # Class 10
    ('sub6', 'Mathematics', 10),
    ('sub7', 'Science', 10),
    ('sub8', 'English', 10),
    ('sub9', 'History', 10),
    ('sub10', 'Geography', 10),
    # Class 11
    ('sub11', 'Mathematics', 11),
    ('sub12', 'Physics', 11),
    ('sub13', 'Chemistry', 11),
    ('sub14', 'English', 11),
    ('sub15', 'Computer Science', 11),
]

COURSES = [
    ('crs1', 'Class 9 Foundation', 9, 'Full academic year', Decimal('12000')),
    ('crs2', 'Class 10 CBSE', 10, 'Full academic year', Decimal('15000')),
    ('crs3', 'Class 11 JEE Main', 11, 'Two years', Decimal('25000')),
]

# id, name, email, phone, class, register number, roll number
STUDENTS = [
    ('s1', 'Alice Johnson', 'alice@student.com', '+919800000001', 10, '260105101', '1'),
    ('s2', 'Bob Smith', 'bob@student.com', '+919800000002', 10, '260105102', '2'),
    ('s3', 'Charlie Brown', 'charlie@student.com', '+919800000003', 9, '260105103', '1'),
    ('s4', 'Diana Prince', 'diana@student.com', '+919800000004', 11, '260105104', '1'),
    ('s5', 'Emma Watson', 'emma@student.com', '+919800000005', 10, '260105105', '3'),
]

PARENTS = [
    ('p1', 'John Johnson', 'john@parent.com', ['s1', 's5']),
    ('p2', 'Mary Smith', 'mary@parent.com', ['s2']),
    ('p3', 'Robert Brown', 'robert@parent.com', ['s3']),
    ('p4', 'Sarah Prince', 'sarah@parent.com', ['s4']),
]

# enrollment id, student id, course id, plan, payments (amount, method, type, date)
ENROLLMENTS = [
    ('e1', 's1', 'crs2', Enrollment.PLAN_FULL, [
        (Decimal('15000'), 'online', 'full_payment', '2026-01-05'),
    ]),
    ('e2', 's2', 'crs2', Enrollment.PLAN_TWO_INSTALLMENTS, [
        (Decimal('7500'), 'cash', 'installment_1', '2026-01-05'),
    ]),
    ('e3', 's3', 'crs1', Enrollment.PLAN_TWO_INSTALLMENTS, [
        (Decimal('6000'), 'transfer', 'installment_1', '2026-01-06'),
        (Decimal('6000'), 'transfer', 'installment_2', '2026-01-20'),
    ]),
    ('e4', 's4', 'crs3', Enrollment.PLAN_TWO_INSTALLMENTS, []),
]

PENDING_ENROLLMENTS = [
    ('e5', 'Frank Miller', '+919800000006', 'frank@example.com', 'crs2', '2026-01-27'),
    ('e6', 'Grace Lee', '+919800000007', 'grace@example.com', 'crs1', '2026-01-28'),
]

# student id, [(subject id, marks)], all Mid-term out of 100
MARKS = [
    ('s1', [('sub6', 85), ('sub7', 78), ('sub8', 92), ('sub9', 88), ('sub10', 75)]),
    ('s2', [('sub6', 72), ('sub7', 68), ('sub8', 80), ('sub9', 76), ('sub10', 82)]),
    ('s3', [('sub1', 90), ('sub2', 88), ('sub3', 85)]),
    ('s4', [('sub11', 95), ('sub12', 92), ('sub13', 89)]),
    ('s5', [('sub6', 88), ('sub7', 91), ('sub8', 87)]),
]

NOTES = [
    ('not1', 'Quadratic Equations Notes', 'https://example.com/notes/quadratics.pdf', 10, 'all', 'sub6', '2026-01-20'),
    ('not2', 'Chemical Reactions Summary', 'https://example.com/notes/reactions.pdf', 10, DEFAULT_BATCH, 'sub7', '2026-01-22'),
    ('not3', 'Organic Chemistry Basics', 'https://example.com/notes/organic.pdf', 11, 'all', 'sub13', '2026-01-24'),
]


def _students():
    for student_id, name, email, phone, class_level, register_number, roll_number in STUDENTS:
        Student.objects.create(
            id=student_id,
            name=name,
            email=email,
            phone=phone,
            class_level=class_level,
            batch=DEFAULT_BATCH,
            register_number=register_number,
            roll_number=roll_number,
        )


def _enrollments():
    courses = {course.pk: course for course in Course.objects.all()}

    for enrollment_id, student_id, course_id, plan, payments in ENROLLMENTS:
        student = Student.objects.get(pk=student_id)
        course = courses[course_id]
        enrollment = Enrollment.objects.create(
            id=enrollment_id,
            student_name=student.name,
            phone=student.phone,
            email=student.email,
            class_level=student.class_level,
            batch=student.batch,
            course=course,
            mode=Enrollment.OFFLINE,
            register_number=student.register_number,
            roll_number=student.roll_number,
            installment_plan=plan,
            status=Enrollment.CONFIRMED,
            submitted_date=datetime.date(2026, 1, 5),
            total_fee=course.fee,
        )
        student.enrollment = enrollment
        student.save(update_fields=['enrollment', 'updated_at'])

        for amount, method, payment_type, payment_date in payments:
            PaymentService.record_payment(
                enrollment.pk, amount, method, payment_type=payment_type, payment_date=payment_date
            )

    for enrollment_id, name, phone, email, course_id, submitted in PENDING_ENROLLMENTS:
        course = courses[course_id]
        Enrollment.objects.create(
            id=enrollment_id,
            student_name=name,
            phone=phone,
            email=email,
            class_level=course.class_level,
            batch=course.batch,
            course=course,
            submitted_date=datetime.date.fromisoformat(submitted),
            total_fee=course.fee,
        )


def _marks():
    students = {student.pk: student for student in Student.objects.all()}
    subjects = {subject.pk: subject for subject in Subject.objects.all()}
    counter = 0

    for student_id, rows in MARKS:
        student = students[student_id]
        for offset, (subject_id, marks) in enumerate(rows):
            counter += 1
            Mark.objects.create(
                id=f'm{counter}',
                student=student,
                subject=subjects[subject_id],
                class_level=student.class_level,
                marks=Decimal(marks),
                max_marks=Decimal('100'),
                exam_type='Mid-term',
                date=datetime.date(2026, 1, 15) + datetime.timedelta(days=offset),
            )


def _attendance(rng):
    records = []
    for student in Student.objects.order_by('pk'):
        for days_back in range(ATTENDANCE_DAYS):
            day = ATTENDANCE_END - datetime.timedelta(days=days_back)
            records.append(Attendance(
                id=f'att-{student.pk}-{day.isoformat()}',
                student=student,
                class_level=student.class_level,
                date=day,
                status=Attendance.PRESENT if rng.random() > 1 - PRESENT_RATE else Attendance.ABSENT,
            ))
    Attendance.objects.bulk_create(records)
    return len(records)


@transaction.atomic
def load_demo_data(seed=2026):
    """
    Fill an empty database with the demo school. Returns counts per model.
    Does nothing when students already exist.
    """
    if Student.objects.exists():
        logger.info("Demo data already present, skipping")
        return {}

    SystemSettings.get_instance()

    Subject.objects.bulk_create([
        Subject(id=subject_id, name=name, class_level=class_level)
        for subject_id, name, class_level in SUBJECTS
    ])
    Course.objects.bulk_create([
        Course(id=course_id, name=name, class_level=class_level, batch=DEFAULT_BATCH, duration=duration, fee=fee)
        for course_id, name, class_level, duration, fee in COURSES
    ])

    _students()

    for parent_id, name, email, children in PARENTS:
        parent = Parent.objects.create(id=parent_id, name=name, email=email)
        parent.children.set(children)

    teacher = Teacher.objects.create(
        id='t1',
        name='Dr. Jane Williams',
        email='teacher@school.com',
        assigned_classes=[9, 10, 11],
        assigned_batches=[DEFAULT_BATCH],
    )
    teacher.subjects.set(Subject.objects.all())

    _enrollments()
    _marks()
    attendance_count = _attendance(random.Random(seed))

    for note_id, title, url, class_level, batch, subject_id, uploaded in NOTES:
        Note.objects.create(
            id=note_id,
            title=title,
            url=url,
            class_level=class_level,
            batch=batch,
            subject_id=subject_id,
            uploaded_by=teacher.name,
            uploaded_date=datetime.date.fromisoformat(uploaded),
        )

    counts = {
        'subjects': Subject.objects.count(),
        'courses': Course.objects.count(),
        'students': Student.objects.count(),
        'parents': Parent.objects.count(),
        'teachers': Teacher.objects.count(),
        'enrollments': Enrollment.objects.count(),
        'payments': Payment.objects.count(),
        'marks': Mark.objects.count(),
        'attendance': attendance_count,
        'notes': Note.objects.count(),
    }
    logger.info(f"Loaded demo data: {counts}")
    return counts


def bootstrap():
    """Create the tables, then load the demo school if the database is empty."""
    call_command('migrate', run_syncdb=True, interactive=False, verbosity=0)
    return load_demo_data()
