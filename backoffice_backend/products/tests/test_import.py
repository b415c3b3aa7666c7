import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, TestCase

from products.models import Category, Product, StockMovement
from products.services.product_import import import_products, validate_import_row


class ImportRowValidationTests(SimpleTestCase):
    def row(self, **overrides):
        base = {"name": "Tea 250g", "category_code": "BEV", "sale_price": "350"}
        base.update(overrides)
        return base

    def test_valid_row(self):
        self.assertIsNone(validate_import_row(self.row()))

    def test_name_required(self):
        self.assertEqual(validate_import_row(self.row(name="  ")), "Product name is required")

    def test_category_required(self):
        self.assertEqual(
            validate_import_row(self.row(category_code="")),
            "Either category name or code is required",
        )

    def test_sale_price_must_be_numeric(self):
        self.assertEqual(validate_import_row(self.row(sale_price="abc")), "Sale price must be a number")

    def test_barcode_rules(self):
        self.assertEqual(validate_import_row(self.row(barcode="12ab5678")), "Barcode must contain only numbers")
        self.assertEqual(validate_import_row(self.row(barcode="1234567")), "Barcode must be between 8 and 13 digits")

    def test_expiry_format(self):
        self.assertEqual(
            validate_import_row(self.row(expiry_date="01/02/2027")),
            "Expiry date must be in YYYY-MM-DD format",
        )


class ProductImportTests(TestCase):
    def setUp(self):
        Category.objects.create(name="Beverages", code="BEV")

    def test_valid_rows_created_and_invalid_rows_reported(self):
        result = import_products(
            [
                {"name": "Tea 250g", "category_code": "bev", "sale_price": "350", "stock_quantity": "12", "cost_price": "280"},
                {"name": "", "category_code": "BEV", "sale_price": "10"},
                {"name": "Soap", "category_name": "Toiletries", "sale_price": "90"},
            ]
        )

        self.assertEqual(len(result.created), 1)
        self.assertEqual([e["row"] for e in result.errors], [2, 3])
        self.assertEqual(result.errors[1]["error"], "Category not found")

        tea = Product.objects.get(name="Tea 250g")
        self.assertEqual(tea.stock_quantity, 12)
        self.assertTrue(StockMovement.objects.filter(product=tea, quantity=12).exists())


class ImportProductsCommandTests(TestCase):
    def setUp(self):
        Category.objects.create(name="Beverages", code="BEV")

    def test_imports_csv_and_reports_rejected_rows(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "products.csv"
            path.write_text(
                "name,category_code,sale_price,barcode\n"
                "Green Tea,BEV,420,12345678\n"
                "Bad Row,BEV,abc,\n",
                encoding="utf-8",
            )

            out = StringIO()
            call_command("import_products", str(path), stdout=out)

        self.assertTrue(Product.objects.filter(name="Green Tea", barcode="12345678").exists())
        self.assertIn("Row 2: Sale price must be a number", out.getvalue())
        self.assertIn("Imported 1 products (1 rejected).", out.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command("import_products", "/nonexistent/products.csv", stdout=StringIO())
