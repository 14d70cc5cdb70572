from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Menu categories of a fast-food business"""
    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='categories')
    name = models.CharField(max_length=200)
    icon = models.CharField(max_length=20, default='🍔', blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'ff_categories'
        verbose_name_plural = 'categories'
        ordering = ['sort_order', 'id']
        indexes = [
            models.Index(fields=['business', 'sort_order'], name='ff_categories_biz_order_idx'),
        ]


class Product(models.Model):
    """Menu products"""
    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='products')
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    image_url = models.URLField(max_length=500, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'ff_products'
        ordering = ['sort_order', 'id']
        indexes = [
            models.Index(fields=['business', 'sort_order'], name='ff_products_biz_order_idx'),
            models.Index(fields=['category'], name='ff_products_category_idx'),
        ]
