from .settings import *  # noqa: F401,F403

DEBUG = True
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'test.db',
    }
}

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
TIME_ZONE = 'UTC'

STRIPE_SECRET_KEY = ''
STRIPE_WEBHOOK_SECRET = 'whsec_test_secret'
STRIPE_USE_STUB = True
STRIPE_WEBHOOK_RETRY_ON_STORE_FAILURE = False
FRONTEND_URL = 'https://app.test'
APP_BASE_URL = 'https://app.test'
BOOKINGS_BCC_EMAIL = ''
