# core/models.py
import logging
import uuid
from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.deconstruct import deconstructible
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger(__name__)


@deconstructible
class PrefixedId:
    """
    Default for opaque string primary keys, e.g. ``stu_3f9a0c1d2e4b``.

    Each entity kind gets its own prefix so ids from different collections
    never collide and are recognisable in logs.
    """

    def __init__(self, prefix):
        self.prefix = prefix

    def __call__(self):
        return f"{self.prefix}_{uuid.uuid4().hex[:12]}"

    def __eq__(self, other):
        return isinstance(other, PrefixedId) and other.prefix == self.prefix


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


@dataclass(frozen=True)
class RankingConfig:
    """Snapshot of the ranking settings handed to the ranking engine."""

    enabled: bool = True
    weightage: dict = field(default_factory=dict)

    def weight_for(self, subject_id):
        """Multiplier for a subject; subjects absent from the map weigh 1."""
        return Decimal(str(self.weightage.get(subject_id, 1)))


class SystemSettings(TimeStampedModel):
    """Process-wide dashboard settings. Always stored with pk=1."""

    ranking_enabled = models.BooleanField(
        _("Ranking Enabled"),
        default=True,
        help_text=_("Show rank and position to students and parents"),
    )
    ranking_weightage = models.JSONField(
        _("Ranking Weightage"),
        default=dict,
        blank=True,
        help_text=_("Subject id -> multiplier applied to raw marks"),
    )

    class Meta:
        db_table = 'core_system_settings'
        verbose_name = _("System Settings")
        verbose_name_plural = _("System Settings")

    def __str__(self):
        state = "on" if self.ranking_enabled else "off"
        return f"System Settings (ranking {state})"

    @classmethod
    def get_instance(cls):
        """Get or create the singleton instance."""
        instance, created = cls.objects.get_or_create(
            pk=1,
            defaults={
                'ranking_enabled': settings.RANKING_ENABLED_DEFAULT,
                'ranking_weightage': {},
            }
        )
        if created:
            logger.info("Created SystemSettings singleton")
        return instance

    def save(self, *args, **kwargs):
        """Ensure only one instance exists (singleton pattern)"""
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion of the singleton instance"""
        logger.warning("Attempted to delete SystemSettings singleton - operation blocked")
        raise ValidationError(_("System settings cannot be deleted."))

    def as_ranking_config(self):
        return RankingConfig(
            enabled=self.ranking_enabled,
            weightage=dict(self.ranking_weightage or {}),
        )
