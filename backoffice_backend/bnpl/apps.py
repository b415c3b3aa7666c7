from django.apps import AppConfig


class BnplConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "bnpl"
    verbose_name = "Buy Now Pay Later"
