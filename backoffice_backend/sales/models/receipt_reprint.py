# sales/models/receipt_reprint.py

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class ReceiptReprint(models.Model):
    """
    Append-only audit row for every duplicate receipt printed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    sale = models.ForeignKey(
        "sales.Sale",
        on_delete=models.PROTECT,
        related_name="reprints",
    )
    receipt_number = models.CharField(max_length=20, db_index=True)
    authorization_code = models.CharField(max_length=64, unique=True)

    reason = models.CharField(max_length=255, default="Customer request")
    reprinted_by = models.CharField(max_length=255)
    reprinted_by_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="receipt_reprints",
    )
    user_ip = models.GenericIPAddressField(null=True, blank=True)
    user_agent = models.TextField(blank=True, default="")

    reprint_count = models.PositiveIntegerField()

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["created_at"], name="sales_recei_created_27c9d4_idx"),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("Receipt reprint records are immutable")
        self.full_clean()
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("Receipt reprint records cannot be deleted")

    def __str__(self):
        return f"{self.receipt_number} #{self.reprint_count} ({self.authorization_code})"
