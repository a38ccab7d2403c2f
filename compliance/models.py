from decimal import Decimal

from django.db import models
from django.utils import timezone

TAX_CODE_CHOICES = (
    ("SR", "Standard Rate (5%)"),
    ("ZR", "Zero-Rated (0%)"),
    ("ES", "Exempt"),
    ("OP", "Out of Scope"),
)


class Spa(models.Model):
    """Tenant. Every revenue stream resolves to exactly one spa through its join path."""

    name = models.CharField(max_length=255)
    trn = models.CharField("Tax registration number", max_length=15, blank=True)
    contact_email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    currency = models.CharField(max_length=3, default="AED")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Spa"
        verbose_name_plural = "Spas"

    def __str__(self):
        return self.name


class Customer(models.Model):
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=50, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Customer"
        verbose_name_plural = "Customers"

    def __str__(self):
        return self.name


class Staff(models.Model):
    """Staff member. Product sales reach their spa through the seller."""

    spa = models.ForeignKey(Spa, on_delete=models.PROTECT, related_name="staff", null=True, blank=True)
    name = models.CharField(max_length=255)
    specialty = models.CharField(max_length=255, blank=True)
    email = models.EmailField(blank=True)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Staff member"
        verbose_name_plural = "Staff"

    def __str__(self):
        return self.name


class Service(models.Model):
    """Bookable treatment. Loyalty cards reach their spa through the service they cover."""

    spa = models.ForeignKey(Spa, on_delete=models.PROTECT, related_name="services", null=True, blank=True)
    name = models.CharField(max_length=255)
    duration = models.PositiveIntegerField(help_text="Minutes")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Service"
        verbose_name_plural = "Services"

    def __str__(self):
        return self.name


class Product(models.Model):
    name = models.CharField(max_length=255)
    sku = models.CharField(max_length=64, unique=True, null=True, blank=True)
    selling_price = models.DecimalField(max_digits=10, decimal_places=2)
    tax_code = models.CharField(max_length=2, choices=TAX_CODE_CHOICES, default="SR")
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Product"
        verbose_name_plural = "Products"

    def __str__(self):
        return self.name


class Booking(models.Model):
    """Service booking. VAT is not stored; total_amount is VAT-inclusive and standard-rated."""

    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("confirmed", "Confirmed"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
        ("no-show", "No-show"),
    )

    spa = models.ForeignKey(Spa, on_delete=models.PROTECT, related_name="bookings")
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="bookings")
    staff = models.ForeignKey(Staff, on_delete=models.SET_NULL, related_name="bookings", null=True, blank=True)
    booking_date = models.DateTimeField(db_index=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    total_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Booking"
        verbose_name_plural = "Bookings"

    def __str__(self):
        return f"Booking #{self.pk} ({self.status})"


class ProductSale(models.Model):
    """Retail sale. net_amount / vat_amount / tax_code are computed when the row is created."""

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="product_sales")
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name="sales")
    sold_by = models.ForeignKey(Staff, on_delete=models.PROTECT, related_name="product_sales")
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2)
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    vat_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    tax_code = models.CharField(max_length=2, choices=TAX_CODE_CHOICES, default="SR")
    sale_date = models.DateTimeField(default=timezone.now, db_index=True)
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name = "Product Sale"
        verbose_name_plural = "Product Sales"

    def __str__(self):
        return f"PS-{self.pk}"


class LoyaltyCard(models.Model):
    """Prepaid session package. VAT columns are computed at purchase time."""

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="loyalty_cards")
    service = models.ForeignKey(Service, on_delete=models.PROTECT, related_name="loyalty_cards")
    card_type = models.CharField(max_length=100)
    purchase_price = models.DecimalField(max_digits=10, decimal_places=2)
    net_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    vat_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    tax_code = models.CharField(max_length=2, choices=TAX_CODE_CHOICES, default="SR")
    sessions_included = models.PositiveIntegerField(default=10)
    sessions_remaining = models.PositiveIntegerField(default=10)
    purchase_date = models.DateTimeField(default=timezone.now, db_index=True)
    expiry_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name = "Loyalty Card"
        verbose_name_plural = "Loyalty Cards"

    def __str__(self):
        return f"LC-{self.pk} ({self.card_type})"


class Invoice(models.Model):
    """Customer invoice. Tenant is resolved through the linked booking."""

    STATUS_CHOICES = (
        ("pending", "Pending"),
        ("paid", "Paid"),
        ("overdue", "Overdue"),
        ("cancelled", "Cancelled"),
    )

    invoice_number = models.CharField(max_length=50, unique=True)
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, related_name="invoices")
    booking = models.ForeignKey(Booking, on_delete=models.SET_NULL, related_name="invoices", null=True, blank=True)
    issue_date = models.DateTimeField(default=timezone.now, db_index=True)
    due_date = models.DateTimeField(null=True, blank=True)
    subtotal = models.DecimalField(max_digits=10, decimal_places=2)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="pending")
    payment_method = models.CharField(max_length=20, blank=True)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Invoice"
        verbose_name_plural = "Invoices"

    def __str__(self):
        return self.invoice_number


class Transaction(models.Model):
    """Payment / refund against an invoice. Has no customer of its own."""

    TRANSACTION_TYPES = (
        ("payment", "Payment"),
        ("refund", "Refund"),
        ("expense", "Expense"),
    )

    invoice = models.ForeignKey(Invoice, on_delete=models.PROTECT, related_name="transactions", null=True, blank=True)
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPES, default="payment")
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    payment_method = models.CharField(max_length=20, blank=True)
    transaction_date = models.DateTimeField(default=timezone.now, db_index=True)
    reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)

    class Meta:
        verbose_name = "Transaction"
        verbose_name_plural = "Transactions"

    def __str__(self):
        return f"TXN-{self.pk} ({self.transaction_type})"
