"""
Rewrite sort_order of every ordered collection to dense 0..n-1 positions,
keeping the current (sort_order, id) order. Gaps and duplicates left by
failed per-item reorders are removed.
"""
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from bizpanel.businesses.models import Business
from bizpanel.catalog.models import Category, Product
from bizpanel.core.cache_signals import suspend_cache_signals
from bizpanel.core.cache_utils import invalidate_business_cache
from bizpanel.coupons.models import Coupon
from bizpanel.hotel.models import RoomType, Room
from bizpanel.realestate.models import Listing

ORDERED_MODELS = [Category, Product, Coupon, RoomType, Room, Listing]


class Command(BaseCommand):
    help = "Renumber sort_order densely for every ordered collection"

    def add_arguments(self, parser):
        parser.add_argument('--business', help='Only this business slug')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without writing',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        businesses = Business.objects.all().order_by('id')
        if options.get('business'):
            businesses = businesses.filter(slug=options['business'].lower())
            if not businesses.exists():
                raise CommandError(f"Business '{options['business']}' does not exist")

        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE - No changes will be made"))

        total_changed = 0
        for business in businesses:
            business_changed = 0
            with transaction.atomic(), suspend_cache_signals():
                for model in ORDERED_MODELS:
                    changed = []
                    for position, obj in enumerate(model.objects.filter(business=business).order_by('sort_order', 'id')):
                        if obj.sort_order != position:
                            obj.sort_order = position
                            changed.append(obj)
                    if changed:
                        self.stdout.write(f"  {business.slug}: {model.__name__} {len(changed)} rows renumbered")
                        if not dry_run:
                            model.objects.bulk_update(changed, ['sort_order'])
                    business_changed += len(changed)
            if business_changed and not dry_run:
                invalidate_business_cache(business.id)
            total_changed += business_changed

        verb = 'would be' if dry_run else 'were'
        self.stdout.write(self.style.SUCCESS(f"{total_changed} rows {verb} renumbered"))
