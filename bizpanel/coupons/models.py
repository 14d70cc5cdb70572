from decimal import Decimal, ROUND_HALF_UP

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Coupon(models.Model):
    """Discount coupons of a fast-food business"""
    DISCOUNT_TYPE_CHOICES = [
        ('fixed', 'Fixed Amount'),
        ('percentage', 'Percentage'),
        ('free_delivery', 'Free Delivery'),
        ('bogo', 'Buy One Get One'),
    ]

    APPLICABLE_TO_CHOICES = [
        ('all', 'All Products'),
        ('categories', 'Selected Categories'),
        ('products', 'Selected Products'),
    ]

    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='coupons')
    code = models.CharField(max_length=50)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    emoji = models.CharField(max_length=20, default='🎉', blank=True)
    discount_type = models.CharField(max_length=20, choices=DISCOUNT_TYPE_CHOICES, default='fixed')
    discount_value = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    max_discount_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    min_order_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    max_usage_count = models.PositiveIntegerField(default=0, help_text="0 = unlimited")
    usage_per_user = models.PositiveIntegerField(default=1, help_text="0 = unlimited")
    current_usage_count = models.PositiveIntegerField(default=0)
    valid_from = models.DateTimeField(null=True, blank=True)
    valid_until = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    is_public = models.BooleanField(default=False)
    is_first_order_only = models.BooleanField(default=False)
    applicable_to = models.CharField(max_length=20, choices=APPLICABLE_TO_CHOICES, default='all')
    applicable_category_ids = models.JSONField(default=list, blank=True)
    applicable_product_ids = models.JSONField(default=list, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.code

    def save(self, *args, **kwargs):
        self.code = (self.code or '').strip().upper()
        super().save(*args, **kwargs)

    def check_usable(self, subtotal, category_ids=None, product_ids=None, now=None):
        """Return an error message when the coupon cannot apply to this order, else None"""
        now = now or timezone.now()
        if not self.is_active:
            return 'This coupon is no longer valid.'
        if self.valid_from and self.valid_from > now:
            return 'This coupon is not active yet.'
        if self.valid_until and self.valid_until < now:
            return 'This coupon has expired.'
        if self.max_usage_count and self.current_usage_count >= self.max_usage_count:
            return 'This coupon has reached its usage limit.'
        if subtotal < self.min_order_amount:
            return f'Minimum order amount: {self.min_order_amount}'

        if self.applicable_to == 'products' and self.applicable_product_ids:
            wanted = {str(pk) for pk in self.applicable_product_ids}
            if not wanted.intersection(str(pk) for pk in (product_ids or [])):
                return 'This coupon does not apply to the products in your cart.'
        if self.applicable_to == 'categories' and self.applicable_category_ids:
            wanted = {str(pk) for pk in self.applicable_category_ids}
            if not wanted.intersection(str(pk) for pk in (category_ids or [])):
                return 'This coupon does not apply to the categories in your cart.'
        return None

    def calculate_discount(self, subtotal):
        """Discount for an order subtotal, never more than the subtotal"""
        discount = Decimal('0.00')
        if self.discount_type == 'fixed':
            discount = self.discount_value
        elif self.discount_type == 'percentage':
            discount = (subtotal * self.discount_value / Decimal('100')).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)
            if self.max_discount_amount and discount > self.max_discount_amount:
                discount = self.max_discount_amount
        # free_delivery and bogo are settled at checkout
        return min(discount, subtotal)

    class Meta:
        db_table = 'ff_coupons'
        ordering = ['sort_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['business', 'code'], name='unique_coupon_code_per_business'),
        ]
