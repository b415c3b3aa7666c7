from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from store.models import SequenceCounter, StoreInfo
from store.services.numbering import format_daily_number, next_daily_number, next_sequence_value
from store.services.periods import PeriodError, parse_day, parse_period
from store.services.settings import SettingError, get_store_info, get_tax_rate, set_setting

User = get_user_model()


class TaxRateTests(TestCase):
    """
    GUARANTEES:
    - The tax_rate setting overrides DEFAULT_TAX_RATE
    - Rates outside 0..100 are refused
    """

    @override_settings(DEFAULT_TAX_RATE="17.00")
    def test_default_comes_from_settings(self):
        self.assertEqual(get_tax_rate(), Decimal("17.00"))

    @override_settings(DEFAULT_TAX_RATE="17.00")
    def test_setting_row_overrides_default(self):
        set_setting(key="tax_rate", value="5")
        self.assertEqual(get_tax_rate(), Decimal("5.00"))

    def test_invalid_rates_rejected(self):
        with self.assertRaises(SettingError):
            set_setting(key="tax_rate", value="abc")
        with self.assertRaises(SettingError):
            set_setting(key="tax_rate", value="150")

    def test_store_info_is_singleton(self):
        first = get_store_info()
        second = get_store_info()

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(StoreInfo.objects.count(), 1)


class DailyNumberTests(TestCase):
    def test_counter_restarts_per_day_and_prefix(self):
        day = date(2026, 3, 14)

        self.assertEqual(next_daily_number(prefix="RCP", day=day), 1)
        self.assertEqual(next_daily_number(prefix="RCP", day=day), 2)
        self.assertEqual(next_daily_number(prefix="RET", day=day), 1)
        self.assertEqual(next_daily_number(prefix="RCP", day=date(2026, 3, 15)), 1)

    def test_format(self):
        self.assertEqual(format_daily_number(prefix="RET", day=date(2026, 3, 14)), "RET-20260314-0001")


class SequenceNumberTests(TestCase):
    def test_sequence_increments_without_day(self):
        self.assertEqual(next_sequence_value(prefix="RCP"), 1)
        self.assertEqual(next_sequence_value(prefix="RCP"), 2)
        self.assertEqual(SequenceCounter.objects.get(prefix="RCP").last_value, 2)

    def test_seed_applies_only_when_counter_is_created(self):
        self.assertEqual(next_sequence_value(prefix="RCP", start_after=lambda: 41), 42)
        self.assertEqual(next_sequence_value(prefix="RCP", start_after=lambda: 1000), 43)


class PeriodParsingTests(SimpleTestCase):
    def test_blank_is_none(self):
        self.assertIsNone(parse_day(""))

    def test_bad_format(self):
        with self.assertRaisesMessage(PeriodError, "Invalid start_date format (YYYY-MM-DD)"):
            parse_period("14-03-2026", None)

    def test_reversed_range(self):
        with self.assertRaises(PeriodError):
            parse_period("2026-03-15", "2026-03-14")


class StoreApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.cashier = User.objects.create_user(email="cashier@example.com", password="pass", role="cashier")
        self.admin = User.objects.create_user(email="admin@example.com", password="pass", role="admin")

    def test_cashier_reads_info_but_cannot_change_settings(self):
        self.client.force_authenticate(self.cashier)

        self.assertEqual(self.client.get("/api/store/info/").status_code, 200)
        response = self.client.put("/api/store/settings/tax_rate/", {"value": "10"}, format="json")
        self.assertEqual(response.status_code, 403)

    def test_admin_updates_tax_rate(self):
        self.client.force_authenticate(self.admin)

        response = self.client.put("/api/store/settings/tax_rate/", {"value": "10"}, format="json")
        self.assertEqual(response.status_code, 200)

        info = self.client.get("/api/store/info/")
        self.assertEqual(info.data["tax_rate"], "10.00")

    def test_admin_invalid_tax_rate(self):
        self.client.force_authenticate(self.admin)

        response = self.client.put("/api/store/settings/tax_rate/", {"value": "-1"}, format="json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.data["detail"], "tax_rate must be between 0 and 100")
