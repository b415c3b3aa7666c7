# store/models/sequence_counter.py

from django.db import models


class SequenceCounter(models.Model):
    """
    Undated, ever-increasing sequence per prefix (RCP-%06d receipt numbers).
    Incremented under a row lock, see store.services.numbering.
    """

    prefix = models.CharField(max_length=20, unique=True)
    last_value = models.PositiveBigIntegerField(default=0)

    def __str__(self):
        return f"{self.prefix} -> {self.last_value}"
