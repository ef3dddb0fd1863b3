"""
Settings for the test suite: in-memory SQLite, no scheduler, fast hashing.
"""
from .settings import *  # noqa: F401,F403

DEBUG = False
SECRET_KEY = 'test-secret-key'
SIMPLE_JWT = {**SIMPLE_JWT, 'SIGNING_KEY': SECRET_KEY}  # noqa: F405

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']
EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

ENABLE_BACKGROUND_SCHEDULER = False
REFRESH_COOKIE_SECURE = False

SMS_GATEWAY_URL = 'https://sms.example.test/send'
SMS_API_KEY = 'test-key'
SMS_SENDER_ID = 'SMARTRENT'

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'smartrent-tests',
    }
}
