from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.academics.models import Subject
from apps.core.models import PrefixedId, TimeStampedModel
from apps.core.utils import today
from apps.examination.utils import get_grade


class Mark(TimeStampedModel):
    EXAM_TYPE_CHOICES = (
        ('Unit Test', 'Unit Test'),
        ('Mid-term', 'Mid-term'),
        ('Final', 'Final'),
    )

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('mrk'), editable=False)
    student = models.ForeignKey('students.Student', on_delete=models.CASCADE, related_name='marks')
    subject = models.ForeignKey(Subject, on_delete=models.PROTECT, related_name='marks')
    # Copied from the student on save
    class_level = models.PositiveSmallIntegerField(editable=False)
    marks = models.DecimalField(max_digits=6, decimal_places=2, validators=[MinValueValidator(0)])
    max_marks = models.DecimalField(
        max_digits=6, decimal_places=2, default=Decimal('100'), validators=[MinValueValidator(Decimal('0.01'))]
    )
    exam_type = models.CharField(max_length=50, default='Mid-term')
    date = models.DateField(default=today)
    remarks = models.TextField(blank=True)

    class Meta:
        db_table = 'examination_mark'
        ordering = ['student', 'subject', 'date']
        verbose_name = _("Mark")
        verbose_name_plural = _("Marks")
        indexes = [
            models.Index(fields=['class_level', 'exam_type']),
        ]

    def __str__(self):
        return f"{self.student} - {self.subject} ({self.exam_type}): {self.marks}/{self.max_marks}"

    def clean(self):
        errors = {}

        if self.marks is not None and self.max_marks is not None and self.marks > self.max_marks:
            errors['marks'] = f"Marks ({self.marks}) cannot exceed maximum marks ({self.max_marks})."

        if self.student_id and self.subject_id and self.subject.class_level != self.student.class_level:
            errors['subject'] = f"{self.subject} is not taught in class {self.student.class_level}."

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        self.class_level = self.student.class_level
        super().save(*args, **kwargs)

    @property
    def percentage(self):
        return self.marks / self.max_marks * 100

    @property
    def grade(self):
        return get_grade(self.percentage)
