"""Admin saves fill the stored VAT split the same way the importer does."""

from decimal import Decimal
from unittest import mock

from django.contrib.admin.sites import AdminSite
from django.test import RequestFactory, TestCase

from compliance.admin import LoyaltyCardAdmin, ProductSaleAdmin
from compliance.models import Customer, LoyaltyCard, Product, ProductSale, Service, Spa, Staff


class StoredVATAdminTests(TestCase):

    def setUp(self):
        spa = Spa.objects.create(name="Marina Spa")
        self.customer = Customer.objects.create(name="Layla")
        self.staff = Staff.objects.create(spa=spa, name="Therapist")
        self.service = Service.objects.create(spa=spa, name="Facial", duration=45, price=Decimal("210.00"))
        self.product = Product.objects.create(name="Body Oil", selling_price=Decimal("105.00"))
        self.request = RequestFactory().post("/admin/")

    def test_product_sale_vat_filled_on_create(self):
        sale = ProductSale(
            customer=self.customer, product=self.product, sold_by=self.staff,
            unit_price=Decimal("105.00"), total_price=Decimal("105.00"), tax_code="SR",
        )
        ProductSaleAdmin(ProductSale, AdminSite()).save_model(self.request, sale, None, False)
        sale.refresh_from_db()
        self.assertEqual(sale.net_amount, Decimal("100.00"))
        self.assertEqual(sale.vat_amount, Decimal("5.00"))

    def test_zero_rated_loyalty_card(self):
        card = LoyaltyCard(
            customer=self.customer, service=self.service, card_type="5 Facials",
            purchase_price=Decimal("400.00"), tax_code="ZR",
        )
        LoyaltyCardAdmin(LoyaltyCard, AdminSite()).save_model(self.request, card, None, False)
        card.refresh_from_db()
        self.assertEqual(card.net_amount, Decimal("400.00"))
        self.assertEqual(card.vat_amount, Decimal("0.00"))

    def _stored_sale(self, total, net, vat):
        return ProductSale.objects.create(
            customer=self.customer, product=self.product, sold_by=self.staff,
            unit_price=total, total_price=total, net_amount=net, vat_amount=vat,
        )

    def _edit(self, sale, changed):
        form = mock.Mock(changed_data=changed)
        ProductSaleAdmin(ProductSale, AdminSite()).save_model(self.request, sale, form, True)
        sale.refresh_from_db()

    def test_split_kept_when_price_untouched(self):
        # Stored split deliberately differs from a fresh calculation
        sale = self._stored_sale(Decimal("50.00"), Decimal("47.00"), Decimal("3.00"))
        sale.notes = "edited"
        self._edit(sale, ["notes"])
        self.assertEqual(sale.vat_amount, Decimal("3.00"))

    def test_split_recomputed_when_price_edited(self):
        sale = self._stored_sale(Decimal("105.00"), Decimal("100.00"), Decimal("5.00"))
        sale.total_price = Decimal("210.00")
        self._edit(sale, ["total_price"])
        self.assertEqual(sale.net_amount, Decimal("200.00"))
        self.assertEqual(sale.vat_amount, Decimal("10.00"))

    def test_split_recomputed_when_tax_code_edited(self):
        sale = self._stored_sale(Decimal("105.00"), Decimal("100.00"), Decimal("5.00"))
        sale.tax_code = "ZR"
        self._edit(sale, ["tax_code"])
        self.assertEqual(sale.net_amount, Decimal("105.00"))
        self.assertEqual(sale.vat_amount, Decimal("0.00"))
