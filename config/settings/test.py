"""Test settings: in-memory database, eager Celery, offline identity provider."""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}

IDENTITY_SECRET_KEY = ''
IDENTITY_WEBHOOK_SECRET = ''
IDENTITY_JWKS_URL = 'https://identity.test/.well-known/jwks.json'
IDENTITY_ISSUER = 'https://identity.test'
IDENTITY_SIGN_IN_URL = 'https://identity.test/sign-in'

SUPER_ADMIN_ACCESS_CODE = 'super123'
AUTO_ADMIN_EMAIL_DOMAINS = {}
ROLE_REPAIR_ENABLED = True
ROLE_REPAIR_DEFAULT_AGENCY = 'AG00000001'
