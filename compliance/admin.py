from django.contrib import admin

from .models import Booking, Customer, Invoice, LoyaltyCard, Product, ProductSale, Service, Spa, Staff, Transaction
from .services.vat_calculator import calculate_vat


class StoredVATAdminMixin:
    """
    Fill net_amount / vat_amount from the gross price, as the importer does.
    Recomputed on create and whenever the price or tax code is edited.
    """

    gross_field = None

    def _split_is_stale(self, obj, form, change) -> bool:
        if not change or form is None:
            return True
        if obj.net_amount is None or obj.vat_amount is None:
            return True
        return bool({self.gross_field, "tax_code"} & set(form.changed_data))

    def save_model(self, request, obj, form, change):
        if self._split_is_stale(obj, form, change):
            vat = calculate_vat(getattr(obj, self.gross_field), obj.tax_code or "SR")
            obj.net_amount = vat.net_amount
            obj.vat_amount = vat.vat_amount
        super().save_model(request, obj, form, change)


@admin.register(Spa)
class SpaAdmin(admin.ModelAdmin):
    list_display = ("name", "trn", "currency", "created_at")
    search_fields = ("name", "trn")


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "phone", "created_at")
    search_fields = ("name", "email", "phone")


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ("name", "spa", "specialty", "active")
    list_filter = ("active", "spa")
    search_fields = ("name", "email")


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ("name", "spa", "duration", "price", "active")
    list_filter = ("active", "spa")
    search_fields = ("name",)


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "sku", "selling_price", "tax_code", "active")
    list_filter = ("active", "tax_code")
    search_fields = ("name", "sku")


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ("id", "spa", "customer", "staff", "booking_date", "status", "total_amount")
    list_filter = ("status", "spa")
    date_hierarchy = "booking_date"


@admin.register(ProductSale)
class ProductSaleAdmin(StoredVATAdminMixin, admin.ModelAdmin):
    gross_field = "total_price"
    list_display = ("id", "product", "customer", "sold_by", "total_price", "net_amount", "vat_amount", "tax_code", "sale_date")
    list_filter = ("tax_code",)
    readonly_fields = ("net_amount", "vat_amount")
    date_hierarchy = "sale_date"


@admin.register(LoyaltyCard)
class LoyaltyCardAdmin(StoredVATAdminMixin, admin.ModelAdmin):
    gross_field = "purchase_price"
    list_display = ("id", "card_type", "customer", "service", "purchase_price", "net_amount", "vat_amount", "tax_code", "purchase_date")
    list_filter = ("tax_code",)
    readonly_fields = ("net_amount", "vat_amount")
    date_hierarchy = "purchase_date"


class TransactionInline(admin.TabularInline):
    model = Transaction
    extra = 0
    fields = ("transaction_type", "amount", "payment_method", "transaction_date", "reference")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ("invoice_number", "customer", "booking", "issue_date", "total_amount", "paid_amount", "status")
    list_filter = ("status",)
    search_fields = ("invoice_number",)
    inlines = [TransactionInline]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("id", "invoice", "transaction_type", "amount", "payment_method", "transaction_date")
    list_filter = ("transaction_type", "payment_method")
