import django.core.validators
import re
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Business',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('slug', models.CharField(max_length=50, unique=True, validators=[django.core.validators.RegexValidator(re.compile('^[a-z0-9-]{3,50}$'), 'Slug must be 3-50 characters of a-z, 0-9 and "-".')])),
                ('business_type', models.CharField(choices=[('fastfood', 'Fast Food'), ('restaurant', 'Restaurant'), ('coffee', 'Coffee Shop'), ('hotel', 'Hotel'), ('emlak', 'Real Estate'), ('ecommerce', 'E-commerce'), ('beauty', 'Beauty Salon'), ('clinic', 'Clinic'), ('vehicle_rental', 'Vehicle Rental')], default='fastfood', max_length=20)),
                ('phone', models.CharField(blank=True, max_length=20)),
                ('email', models.EmailField(blank=True, max_length=254)),
                ('address', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name_plural': 'businesses',
                'db_table': 'businesses',
            },
        ),
    ]
