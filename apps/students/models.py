from django.db import models
from django.core.validators import RegexValidator
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.academics.models import class_level_validators
from apps.core.models import PrefixedId, TimeStampedModel

# Phone regex for validation
phone_regex = RegexValidator(
    regex=r"^\+?1?\d{9,15}$",
    message=_("Phone number must be entered in the format: '+999999999'. Up to 15 digits allowed."),
)


# -------------------- Student Core --------------------
class Student(TimeStampedModel):
    NORMAL = "normal"
    SLOW_LEARNER = "slow_learner"
    CATEGORY_CHOICES = (
        (NORMAL, _("Normal")),
        (SLOW_LEARNER, _("Slow Learner")),
    )

    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId("stu"), editable=False)
    name = models.CharField(max_length=150, verbose_name=_("Full Name"))
    email = models.EmailField(blank=True, verbose_name=_("Email Address"))
    phone = models.CharField(max_length=17, blank=True, validators=[phone_regex], verbose_name=_("Mobile Number"))
    class_level = models.PositiveSmallIntegerField(validators=class_level_validators, verbose_name=_("Class"))
    batch = models.CharField(max_length=50, verbose_name=_("Batch"))
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES, default=NORMAL)
    register_number = models.CharField(max_length=50, unique=True, verbose_name=_("Register Number"))
    roll_number = models.CharField(max_length=20, null=True, blank=True, verbose_name=_("Roll Number"))
    enrollment = models.OneToOneField(
        "admission.Enrollment",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="student",
        verbose_name=_("Enrollment"),
    )

    class Meta:
        db_table = "students_student"
        ordering = ["class_level", "batch", "register_number"]
        verbose_name = _("Student")
        verbose_name_plural = _("Students")
        unique_together = ["class_level", "batch", "roll_number"]
        indexes = [
            models.Index(fields=["register_number"]),
            models.Index(fields=["class_level", "batch"]),
        ]

    def __str__(self):
        return f"{self.register_number} - {self.name}"

    def save(self, *args, **kwargs):
        """Register numbers are permanent once assigned."""
        if not self._state.adding:
            stored = Student.objects.filter(pk=self.pk).values_list("register_number", flat=True).first()
            if stored and stored != self.register_number:
                raise ValidationError({"register_number": _("Register number cannot be changed once assigned.")})
        super().save(*args, **kwargs)


# -------------------- Parent --------------------
class Parent(TimeStampedModel):
    id = models.CharField(primary_key=True, max_length=40, default=PrefixedId("par"), editable=False)
    name = models.CharField(max_length=150, verbose_name=_("Full Name"))
    email = models.EmailField(blank=True, verbose_name=_("Email Address"))
    phone = models.CharField(max_length=17, blank=True, validators=[phone_regex], verbose_name=_("Mobile Number"))
    children = models.ManyToManyField(Student, related_name="parents", blank=True, verbose_name=_("Children"))

    class Meta:
        db_table = "students_parent"
        ordering = ["name"]
        verbose_name = _("Parent")
        verbose_name_plural = _("Parents")

    def __str__(self):
        return self.name
