# store/models/setting.py

from django.db import models


class Setting(models.Model):
    """
    Runtime key/value configuration (e.g. tax_rate).
    Values are stored as text; typed access lives in store.services.settings.
    """

    key = models.CharField(max_length=100, unique=True)
    value = models.TextField(blank=True)
    description = models.CharField(max_length=255, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"
