"""Venue registry."""
from django.db import models

from core.models import TimeStampedModel


class Venue(TimeStampedModel):
    """A physical bar/restaurant whose operational data is recomputed weekly."""

    name = models.CharField("name", max_length=255)
    code = models.CharField("code", max_length=50, unique=True)
    city = models.CharField("city", max_length=120, blank=True, default="")
    timezone = models.CharField("timezone", max_length=64, default="America/Sao_Paulo")
    is_active = models.BooleanField("active", default=True, db_index=True)
    performance_overrides = models.JSONField(
        "performance rule overrides",
        default=dict,
        blank=True,
        help_text=(
            "Per-venue overrides of the weekly performance rules, keyed by "
            "section (revenue, labor, costs, delays, stockout, retention, mix, timing)."
        ),
    )

    class Meta:
        ordering = ["name"]
        verbose_name = "venue"
        verbose_name_plural = "venues"

    def __str__(self):
        return f"{self.name} ({self.code})"
