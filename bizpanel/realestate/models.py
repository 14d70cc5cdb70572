from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class Listing(models.Model):
    """Real-estate listings (sale or rent)"""
    LISTING_TYPE_CHOICES = [
        ('sale', 'For Sale'),
        ('rent', 'For Rent'),
    ]

    PROPERTY_TYPE_CHOICES = [
        ('apartment', 'Apartment'),
        ('villa', 'Villa'),
        ('land', 'Land'),
        ('office', 'Office'),
        ('shop', 'Shop'),
        ('other', 'Other'),
    ]

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('sold', 'Sold'),
        ('rented', 'Rented'),
        ('passive', 'Passive'),
    ]

    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='listings')
    consultant_id = models.CharField(max_length=100, blank=True)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    listing_type = models.CharField(max_length=10, choices=LISTING_TYPE_CHOICES, default='sale')
    property_type = models.CharField(max_length=20, choices=PROPERTY_TYPE_CHOICES, default='apartment')
    price = models.DecimalField(max_digits=14, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    currency = models.CharField(max_length=3, default='TRY')
    area_sqm = models.PositiveIntegerField(null=True, blank=True)
    room_count = models.CharField(max_length=20, blank=True, help_text="e.g. 3+1")
    city = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)
    images = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active')
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.title

    class Meta:
        db_table = 'em_listings'
        ordering = ['sort_order', 'id']
        indexes = [
            models.Index(fields=['business', 'sort_order'], name='em_listings_biz_order_idx'),
            models.Index(fields=['business', 'status'], name='em_listings_biz_status_idx'),
        ]
