"""
Management command to add starter menu categories to a business
"""
from django.core.management.base import BaseCommand, CommandError

from bizpanel.businesses.models import Business
from bizpanel.catalog.models import Category
from bizpanel.core.ordering import next_sort_order


DEFAULT_CATEGORIES = [
    ('Burgers', '🍔'),
    ('Pizza', '🍕'),
    ('Wraps', '🌯'),
    ('Sides', '🍟'),
    ('Salads', '🥗'),
    ('Desserts', '🍰'),
    ('Drinks', '🥤'),
]


class Command(BaseCommand):
    help = "Adds starter menu categories to a business, appended after its existing ones"

    def add_arguments(self, parser):
        parser.add_argument('slug', help='Slug of the business')
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete the business categories before adding the defaults',
        )

    def handle(self, *args, **options):
        try:
            business = Business.objects.get(slug=options['slug'].lower())
        except Business.DoesNotExist:
            raise CommandError(f"Business '{options['slug']}' does not exist")

        self.stdout.write(self.style.SUCCESS("=" * 80))
        self.stdout.write(self.style.SUCCESS(f"ADDING MENU CATEGORIES TO {business.name}"))
        self.stdout.write(self.style.SUCCESS("=" * 80))

        if options['clear']:
            self.stdout.write(self.style.WARNING("Clearing existing categories..."))
            Category.objects.filter(business=business).delete()

        created_count = 0
        skipped_count = 0
        for name, icon in DEFAULT_CATEGORIES:
            if Category.objects.filter(business=business, name__iexact=name).exists():
                skipped_count += 1
                self.stdout.write(self.style.WARNING(f"  ⊘ Skipped (already exists): {name}"))
                continue
            Category.objects.create(
                business=business,
                name=name,
                icon=icon,
                sort_order=next_sort_order(Category.objects.filter(business=business)),
            )
            created_count += 1
            self.stdout.write(self.style.SUCCESS(f"  ✓ Created: {icon} {name}"))

        self.stdout.write(f"Categories Created: {created_count}")
        self.stdout.write(f"Categories Skipped (already exist): {skipped_count}")
        self.stdout.write(f"Total Categories for {business.slug}: {Category.objects.filter(business=business).count()}")
