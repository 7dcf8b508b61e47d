from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _
from django.core.validators import MinValueValidator, MaxValueValidator

from apps.core.models import PrefixedId, TimeStampedModel

CLASS_LEVEL_MIN = 6
CLASS_LEVEL_MAX = 12

class_level_validators = [MinValueValidator(CLASS_LEVEL_MIN), MaxValueValidator(CLASS_LEVEL_MAX)]


class Subject(TimeStampedModel):
    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('sub'), editable=False)
    name = models.CharField(max_length=100)
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators)

    class Meta:
        db_table = 'academics_subject'
        unique_together = ['name', 'class_level']
        ordering = ['class_level', 'name']

    def __str__(self):
        return f"{self.name} (Class {self.class_level})"


class Course(TimeStampedModel):
    CLASSROOM = 'classroom'
    ONLINE = 'online'
    COURSE_TYPE_CHOICES = [
        (CLASSROOM, 'Classroom'),
        (ONLINE, 'Online'),
    ]

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('crs'), editable=False)
    name = models.CharField(max_length=150, help_text="e.g. Class 10 CBSE, JEE Main")
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators)
    batch = models.CharField(max_length=50)
    description = models.TextField(blank=True)
    duration = models.CharField(max_length=50, blank=True)
    fee = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    course_type = models.CharField(max_length=10, choices=COURSE_TYPE_CHOICES, default=CLASSROOM)
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = 'academics_course'
        ordering = ['class_level', 'name']

    def __str__(self):
        return f"{self.name} - {self.batch}"


class NoteQuerySet(models.QuerySet):

    def visible_to(self, student):
        """Notes for the student's class, shared with all batches or theirs."""
        return self.filter(class_level=student.class_level).filter(
            Q(batch=Note.ALL_BATCHES) | Q(batch=student.batch)
        )


class Note(TimeStampedModel):
    ALL_BATCHES = 'all'

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId('not'), editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    url = models.URLField(max_length=500)
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators)
    batch = models.CharField(max_length=50, default=ALL_BATCHES, help_text="'all' or a specific batch")
    subject = models.ForeignKey(Subject, on_delete=models.SET_NULL, null=True, blank=True, related_name='notes')
    uploaded_by = models.CharField(max_length=150, help_text="Teacher or admin name")
    uploaded_date = models.DateField()

    objects = NoteQuerySet.as_manager()

    class Meta:
        db_table = 'academics_note'
        ordering = ['-uploaded_date', 'title']

    def __str__(self):
        return self.title
