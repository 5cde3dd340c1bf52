#!/usr/bin/env python

"""
    Configurations for Circulation

    :copyright: (c) 2015 by AUTHORS
    :license: see LICENSE for more details
"""

import os


# Determine environment
TESTING = os.getenv("TESTING", "false").lower() == "true"

DEBUG = bool(int(os.environ.get('CIRCULATION_DEBUG', 0)))
LOG_LEVEL = os.environ.get('CIRCULATION_LOG_LEVEL', 'info')

# Lending policy
LOAN_PERIOD_DAYS = int(os.environ.get('CIRCULATION_LOAN_PERIOD_DAYS', 14))
RESERVATION_EXPIRY_DAYS = int(os.environ.get('CIRCULATION_RESERVATION_EXPIRY_DAYS', 30))

# Fine policy
FINE_DAILY_RATE = float(os.environ.get('CIRCULATION_FINE_DAILY_RATE', 1.0))
FINE_MAX = float(os.environ.get('CIRCULATION_FINE_MAX', 50.0))
FINE_GRACE_PERIOD_DAYS = int(os.environ.get('CIRCULATION_FINE_GRACE_PERIOD_DAYS', 0))
FINE_PAYMENT_DAYS = int(os.environ.get('CIRCULATION_FINE_PAYMENT_DAYS', 30))

DB_CONFIG = {
    'user': os.environ.get('DB_USER', 'postgres'),
    'password': os.environ.get('DB_PASSWORD'),
    'host': os.environ.get('DB_HOST'),
    'port': int(os.environ.get('DB_PORT', '5432')),
    'dbname': os.environ.get('DB_NAME', 'circulation'),
}

# Database configuration
if TESTING:
    DB_URI = "sqlite:///:memory:"
elif DB_CONFIG['host']:
    DB_URI = 'postgresql+psycopg2://{user}:{password}@{host}:{port}/{dbname}'.format(**DB_CONFIG)
else:
    DB_URI = os.environ.get('DB_URI', 'sqlite:///circulation.db')

__all__ = [
    'TESTING', 'DEBUG', 'LOG_LEVEL',
    'LOAN_PERIOD_DAYS', 'RESERVATION_EXPIRY_DAYS',
    'FINE_DAILY_RATE', 'FINE_MAX', 'FINE_GRACE_PERIOD_DAYS', 'FINE_PAYMENT_DAYS',
    'DB_CONFIG', 'DB_URI',
]
