from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date

from bnpl.services.transactions import mark_overdue_transactions


class Command(BaseCommand):
    help = "Mark pending / partially paid BNPL transactions past their due date as overdue."

    def add_arguments(self, parser):
        parser.add_argument("--date", help="Treat this day (YYYY-MM-DD) as today")

    def handle(self, *args, **options):
        today = None
        if options.get("date"):
            today = parse_date(options["date"])
            if today is None:
                raise CommandError("--date must be YYYY-MM-DD")

        count = mark_overdue_transactions(today=today)
        self.stdout.write(self.style.SUCCESS(f"Marked {count} BNPL transaction(s) overdue"))
