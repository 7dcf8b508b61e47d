# admission/apps.py

from django.apps import AppConfig


class AdmissionConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.admission"
    verbose_name = "Admissions"
