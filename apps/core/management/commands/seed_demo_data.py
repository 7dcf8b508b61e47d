# apps/core/management/commands/seed_demo_data.py
from django.core.management.base import BaseCommand

from apps.attendance.services import AttendanceService
from apps.core.seed import ATTENDANCE_END, DEFAULT_BATCH, bootstrap
from apps.core.stats import dashboard_stats
from apps.examination.services import RankingEngine


class Command(BaseCommand):
    help = 'Create the tables and load the demo school data'

    def add_arguments(self, parser):
        parser.add_argument(
            '--report',
            action='store_true',
            help='Print class rankings and attendance after loading'
        )
        parser.add_argument(
            '--exam-type',
            type=str,
            default='Mid-term',
            help='Exam used for the ranking report'
        )

    def handle(self, *args, **options):
        counts = bootstrap()
        if not counts:
            self.stdout.write(self.style.WARNING('Demo data already loaded'))
        for name, count in counts.items():
            self.stdout.write(self.style.SUCCESS(f'Created {count} {name}'))

        if options['report']:
            self.report(options['exam_type'])

    def report(self, exam_type):
        stats = dashboard_stats(ATTENDANCE_END)
        self.stdout.write(
            f"\nStudents: {stats['total_students']}  Pending enrollments: {stats['pending_enrollments']}  "
            f"Revenue: {stats['revenue_collected']}  Outstanding: {stats['outstanding_fees']}"
        )
        if not stats['ledger_consistent']:
            self.stdout.write(self.style.ERROR(f"Ledger mismatch: {stats['inconsistent_enrollments']}"))

        for class_level in (9, 10, 11):
            ranking = RankingEngine.class_ranking(class_level, exam_type)
            self.stdout.write(self.style.MIGRATE_HEADING(f'\nClass {class_level} - {exam_type}'))
            for entry in ranking:
                self.stdout.write(
                    f"  {entry['rank']:>2}. {entry['student_name']:<20} {entry['register_number']}  "
                    f"{entry['weighted_total']:>8}  {entry['percentage']}%"
                )

            day = AttendanceService.class_daily_stats(class_level, DEFAULT_BATCH, ATTENDANCE_END)
            self.stdout.write(
                f"  Attendance {ATTENDANCE_END}: {day['present']}/{day['total']} present ({day['percentage']}%)"
            )
