# store/models/daily_counter.py

from django.db import models


class DailyCounter(models.Model):
    """
    Per-prefix, per-day sequence used for human-readable document numbers
    (BNPLPAY-YYYYMMDD-NNNN, PO-YYYYMMDD-NNNN, RET-YYYYMMDD-NNNN).
    Incremented under a row lock, see store.services.numbering.
    """

    prefix = models.CharField(max_length=20)
    day = models.DateField()
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["prefix", "day"], name="uniq_daily_counter_prefix_day"),
        ]

    def __str__(self):
        return f"{self.prefix} {self.day:%Y%m%d} -> {self.last_value}"
