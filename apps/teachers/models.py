from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.academics.models import Subject
from apps.core.models import PrefixedId, TimeStampedModel
from apps.students.models import Student


class Teacher(TimeStampedModel):
    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('tch'), editable=False)
    name = models.CharField(max_length=150, verbose_name=_("Full Name"))
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=17, blank=True)
    assigned_classes = models.JSONField(default=list, blank=True, help_text=_("Class levels, e.g. [9, 10]"))
    assigned_batches = models.JSONField(default=list, blank=True, help_text=_("Batch names, e.g. ['Batch-A']"))
    subjects = models.ManyToManyField(Subject, related_name='teachers', blank=True)

    class Meta:
        db_table = 'teachers_teacher'
        ordering = ['name']
        verbose_name = _("Teacher")
        verbose_name_plural = _("Teachers")

    def __str__(self):
        return self.name

    def get_students(self):
        qs = Student.objects.filter(class_level__in=self.assigned_classes or [])
        if self.assigned_batches:
            qs = qs.filter(batch__in=self.assigned_batches)
        return qs
