"""
Django management command to check the cache configuration.

Usage:
    python manage.py check_cache
"""
from django.conf import settings
from django.core.cache import cache
from django.core.management.base import BaseCommand

from bizpanel.core.cache_utils import get_cached, set_cached, invalidate_business_cache


class Command(BaseCommand):
    help = 'Check cache configuration and the menu cache invalidation path'

    def handle(self, *args, **options):
        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("Cache Configuration Check"))
        self.stdout.write("=" * 60)

        self.stdout.write(f"\n1. Cache Backend: {settings.CACHES['default']['BACKEND']}")
        self.stdout.write(f"2. Cache Location: {settings.CACHES['default'].get('LOCATION', 'N/A')}")

        self.stdout.write("\n3. Basic operations:")
        cache.set('check_cache_key', 'value', 60)
        if cache.get('check_cache_key') == 'value':
            self.stdout.write(self.style.SUCCESS("✅ SET/GET: Success"))
        else:
            self.stdout.write(self.style.ERROR("❌ SET/GET: Failed"))
        cache.delete('check_cache_key')

        self.stdout.write("\n4. Menu cache invalidation:")
        check_business_id = 'check'
        _, key = get_cached(check_business_id, 'categories')
        set_cached(key, [{'id': 1}], 60)
        invalidate_business_cache(check_business_id)
        cached, _ = get_cached(check_business_id, 'categories')
        if cached is None:
            self.stdout.write(self.style.SUCCESS("✅ Invalidation: Success"))
        else:
            self.stdout.write(self.style.ERROR("❌ Invalidation: stale entry still served"))
        cache.delete(key)

        self.stdout.write("\n" + "=" * 60)
