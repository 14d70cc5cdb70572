#!/usr/bin/env python
"""
Test runner script
Usage: python run_tests.py [app labels...]
"""
import os
import sys

import django
from django.conf import settings
from django.test.utils import get_runner

DEFAULT_LABELS = [
    'bizpanel.core',
    'bizpanel.businesses',
    'bizpanel.catalog',
    'bizpanel.coupons',
    'bizpanel.hotel',
    'bizpanel.realestate',
    'bizpanel.client',
]

if __name__ == "__main__":
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'bizpanel.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests(sys.argv[1:] or DEFAULT_LABELS)
    sys.exit(bool(failures))
