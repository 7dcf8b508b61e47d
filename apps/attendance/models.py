from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.academics.models import class_level_validators
from apps.core.models import PrefixedId, TimeStampedModel


class Attendance(TimeStampedModel):
    PRESENT = 'present'
    ABSENT = 'absent'
    STATUS_CHOICES = (
        (PRESENT, 'Present'),
        (ABSENT, 'Absent'),
    )

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('att'), editable=False)
    student = models.ForeignKey('students.Student', on_delete=models.CASCADE, related_name='attendance_records')
    # Copied from the student on every write
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators)
    date = models.DateField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PRESENT)
    marked_by = models.CharField(max_length=150, blank=True)

    class Meta:
        db_table = 'attendance_attendance'
        unique_together = ['student', 'date']
        ordering = ['-date']
        verbose_name = _("Attendance")
        verbose_name_plural = _("Attendance")
        indexes = [
            models.Index(fields=['class_level', 'date']),
        ]

    def __str__(self):
        return f"{self.student} - {self.date} - {self.get_status_display()}"
