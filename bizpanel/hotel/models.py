from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models


class RoomType(models.Model):
    """Room categories offered by a hotel (e.g. Standard, Suite)"""
    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='room_types')
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'), validators=[MinValueValidator(Decimal('0.00'))])
    currency = models.CharField(max_length=3, default='TRY')
    capacity = models.PositiveIntegerField(default=2, validators=[MinValueValidator(1)])
    bed_type = models.CharField(max_length=100, blank=True)
    size_sqm = models.PositiveIntegerField(null=True, blank=True)
    amenities = models.JSONField(default=list, blank=True)
    photos = models.JSONField(default=list, blank=True)
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'hotel_room_types'
        ordering = ['sort_order', 'id']


class Room(models.Model):
    """Physical rooms"""
    STATUS_CHOICES = [
        ('available', 'Available'),
        ('occupied', 'Occupied'),
        ('cleaning', 'Cleaning'),
        ('maintenance', 'Maintenance'),
    ]

    business = models.ForeignKey('businesses.Business', on_delete=models.CASCADE, related_name='rooms')
    room_type = models.ForeignKey(RoomType, on_delete=models.PROTECT, related_name='rooms')
    room_number = models.CharField(max_length=20)
    floor = models.IntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='available')
    sort_order = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Room {self.room_number}"

    class Meta:
        db_table = 'hotel_rooms'
        ordering = ['sort_order', 'id']
        constraints = [
            models.UniqueConstraint(fields=['business', 'room_number'], name='unique_room_number_per_business'),
        ]
