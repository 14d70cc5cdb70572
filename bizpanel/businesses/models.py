import re

from django.core.validators import RegexValidator
from django.db import models

SLUG_PATTERN = re.compile(r'^[a-z0-9-]{3,50}$')

RESERVED_SLUGS = {
    'admin', 'api', 'auth', 'panel', 'login', 'register', 'media', 'static', 'www',
}


class Business(models.Model):
    """A tenant: every panel collection is scoped to one business"""
    BUSINESS_TYPE_CHOICES = [
        ('fastfood', 'Fast Food'),
        ('restaurant', 'Restaurant'),
        ('coffee', 'Coffee Shop'),
        ('hotel', 'Hotel'),
        ('emlak', 'Real Estate'),
        ('ecommerce', 'E-commerce'),
        ('beauty', 'Beauty Salon'),
        ('clinic', 'Clinic'),
        ('vehicle_rental', 'Vehicle Rental'),
    ]

    name = models.CharField(max_length=200)
    slug = models.CharField(
        max_length=50,
        unique=True,
        validators=[RegexValidator(SLUG_PATTERN, 'Slug must be 3-50 characters of a-z, 0-9 and "-".')],
    )
    business_type = models.CharField(max_length=20, choices=BUSINESS_TYPE_CHOICES, default='fastfood')
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        self.slug = (self.slug or '').strip().lower()
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'businesses'
        verbose_name_plural = 'businesses'


def check_slug(slug):
    """
    Return (available, normalized_slug, reason).

    reason is None when the slug is free, otherwise one of
    'invalid', 'reserved' or 'taken'.
    """
    normalized = (slug or '').strip().lower()
    if not SLUG_PATTERN.match(normalized) or normalized.startswith('-') or normalized.endswith('-'):
        return False, normalized, 'invalid'
    if normalized in RESERVED_SLUGS:
        return False, normalized, 'reserved'
    if Business.objects.filter(slug=normalized).exists():
        return False, normalized, 'taken'
    return True, normalized, None
