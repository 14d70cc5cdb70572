import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('businesses', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Coupon',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=50)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('emoji', models.CharField(blank=True, default='🎉', max_length=20)),
                ('discount_type', models.CharField(choices=[('fixed', 'Fixed Amount'), ('percentage', 'Percentage'), ('free_delivery', 'Free Delivery'), ('bogo', 'Buy One Get One')], default='fixed', max_length=20)),
                ('discount_value', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('max_discount_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('min_order_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('max_usage_count', models.PositiveIntegerField(default=0, help_text='0 = unlimited')),
                ('usage_per_user', models.PositiveIntegerField(default=1, help_text='0 = unlimited')),
                ('current_usage_count', models.PositiveIntegerField(default=0)),
                ('valid_from', models.DateTimeField(blank=True, null=True)),
                ('valid_until', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('is_public', models.BooleanField(default=False)),
                ('is_first_order_only', models.BooleanField(default=False)),
                ('applicable_to', models.CharField(choices=[('all', 'All Products'), ('categories', 'Selected Categories'), ('products', 'Selected Products')], default='all', max_length=20)),
                ('applicable_category_ids', models.JSONField(blank=True, default=list)),
                ('applicable_product_ids', models.JSONField(blank=True, default=list)),
                ('sort_order', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('business', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='coupons', to='businesses.business')),
            ],
            options={
                'db_table': 'ff_coupons',
                'ordering': ['sort_order', 'id'],
                'constraints': [models.UniqueConstraint(fields=('business', 'code'), name='unique_coupon_code_per_business')],
            },
        ),
    ]
