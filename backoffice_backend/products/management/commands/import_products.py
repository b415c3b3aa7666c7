# products/management/commands/import_products.py

from __future__ import annotations

import csv
from pathlib import Path

from django.core.management.base import BaseCommand, CommandError

from products.services.product_import import import_products


class Command(BaseCommand):
    help = "Import products from a CSV file that uses the product import template columns."

    def add_arguments(self, parser):
        parser.add_argument("path", type=str, help="Path to the CSV file")

    def handle(self, *args, **options):
        path = Path(options["path"])
        if not path.exists():
            raise CommandError(f"File not found: {path}")

        with path.open(newline="", encoding="utf-8-sig") as fh:
            rows = list(csv.DictReader(fh))

        result = import_products(rows)

        for err in result.errors:
            self.stdout.write(self.style.WARNING(f"Row {err['row']}: {err['error']}"))

        self.stdout.write(
            self.style.SUCCESS(f"Imported {len(result.created)} products ({len(result.errors)} rejected).")
        )
