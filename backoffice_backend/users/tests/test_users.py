from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from permissions.roles import (
    CAP_POS_REFUND,
    CAP_POS_SELL,
    CAP_SETTINGS_MANAGE,
    user_has_capability,
)

User = get_user_model()


class UserModelTests(TestCase):
    """
    GUARANTEES:
    - Email is required and normalized
    - New staff default to the cashier role
    - Capabilities follow the role, superusers get everything
    """

    def test_create_user_defaults(self):
        user = User.objects.create_user(email="Ali@EXAMPLE.com", password="pass")

        self.assertEqual(user.email, "Ali@example.com")
        self.assertEqual(user.role, "cashier")
        self.assertTrue(user.check_password("pass"))
        self.assertFalse(user.is_staff)

    def test_email_is_required(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(email="  ", password="pass")

    def test_display_name(self):
        user = User.objects.create_user(email="bilal@example.com", password="pass")
        self.assertEqual(user.display_name, "bilal@example.com")

        user.first_name = "Bilal"
        user.last_name = "Khan"
        self.assertEqual(user.display_name, "Bilal Khan")

    def test_superuser_is_admin(self):
        admin = User.objects.create_superuser(email="root@example.com", password="pass")

        self.assertEqual(admin.role, "admin")
        self.assertTrue(admin.is_staff)
        self.assertTrue(user_has_capability(admin, CAP_SETTINGS_MANAGE))

    def test_role_capabilities(self):
        cashier = User.objects.create_user(email="c@example.com", password="pass", role="cashier")
        manager = User.objects.create_user(email="m@example.com", password="pass", role="manager")

        self.assertTrue(user_has_capability(cashier, CAP_POS_SELL))
        self.assertFalse(user_has_capability(cashier, CAP_POS_REFUND))
        self.assertTrue(user_has_capability(manager, CAP_POS_REFUND))
        self.assertFalse(user_has_capability(manager, CAP_SETTINGS_MANAGE))


class UsersApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")

    def test_me_returns_profile_and_capabilities(self):
        self.client.force_authenticate(self.cashier)

        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.data["email"], "cashier@example.com")
        self.assertEqual(res.data["role"], "cashier")
        self.assertIn(CAP_POS_SELL, res.data["capabilities"])
        self.assertNotIn(CAP_POS_REFUND, res.data["capabilities"])

    def test_me_requires_authentication(self):
        res = self.client.get("/api/auth/me/")
        self.assertEqual(res.status_code, 401)

    def test_admin_creates_staff(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(
            "/api/auth/staff/",
            {"email": "stock@example.com", "password": "Str0ng-Passw0rd!", "role": "inventory"},
            format="json",
        )
        self.assertEqual(res.status_code, 201)

        user = User.objects.get(email="stock@example.com")
        self.assertEqual(user.role, "inventory")
        self.assertTrue(user.is_staff)

    def test_cashier_cannot_manage_staff(self):
        self.client.force_authenticate(self.cashier)

        res = self.client.get("/api/auth/staff/")
        self.assertEqual(res.status_code, 403)

    def test_jwt_login(self):
        res = self.client.post(
            "/api/auth/jwt/create/",
            {"email": "cashier@example.com", "password": "pass"},
            format="json",
        )
        self.assertEqual(res.status_code, 200)
        self.assertIn("access", res.data)
        self.assertIn("refresh", res.data)


class SeedUsersCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_users", stdout=StringIO())
        call_command("seed_users", stdout=StringIO())

        self.assertEqual(User.objects.count(), 4)
        self.assertEqual(
            sorted(User.objects.values_list("role", flat=True)),
            ["admin", "cashier", "inventory", "manager"],
        )
