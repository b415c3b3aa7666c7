# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import ROLE_ADMIN, ROLE_CASHIER, ROLE_INVENTORY, ROLE_MANAGER


@dataclass(frozen=True)
class SeedUserSpec:
    role: str
    email: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec(ROLE_ADMIN, "admin@example.com", "System", "Admin"),
    SeedUserSpec(ROLE_MANAGER, "manager@example.com", "Store", "Manager"),
    SeedUserSpec(ROLE_CASHIER, "cashier@example.com", "Front", "Desk"),
    SeedUserSpec(ROLE_INVENTORY, "inventory@example.com", "Stock", "Room"),
]


class Command(BaseCommand):
    help = "Seed one staff user per role (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()
        created_count = 0
        updated_count = 0

        for spec in SEED_USERS:
            is_admin = spec.role == ROLE_ADMIN
            user, created = User.objects.get_or_create(
                email=spec.email,
                defaults={
                    "role": spec.role,
                    "first_name": spec.first_name,
                    "last_name": spec.last_name,
                    "is_staff": True,
                    "is_superuser": is_admin,
                },
            )

            if created or force_password:
                user.set_password(password)

            user.role = spec.role
            user.is_staff = True
            user.is_superuser = is_admin
            user.is_active = True
            user.save()

            if created:
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f"Created {spec.role}: {spec.email}"))
            else:
                updated_count += 1
                self.stdout.write(f"Updated {spec.role}: {spec.email}")

        self.stdout.write(
            self.style.SUCCESS(f"Done. created={created_count} updated={updated_count}")
        )
