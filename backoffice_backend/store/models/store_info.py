# store/models/store_info.py

from django.db import models


class StoreInfo(models.Model):
    """
    Store identity printed on receipts and confirmations.

    Singleton: the service layer always reads/writes pk=1.
    """

    SINGLETON_PK = 1

    id = models.PositiveSmallIntegerField(primary_key=True, default=SINGLETON_PK, editable=False)

    name = models.CharField(max_length=255, default="My Store")
    address = models.TextField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    tax_number = models.CharField(max_length=100, blank=True)
    receipt_footer = models.CharField(max_length=255, blank=True, default="Thank you for shopping with us!")

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Store info"
        verbose_name_plural = "Store info"

    def save(self, *args, **kwargs):
        self.id = self.SINGLETON_PK
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name
