"""Development settings for MemberHub project.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts, using the
console email backend and enabling the role repair utilities. Do not use
these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Use console email backend during development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Role repair pages are a development aid
ROLE_REPAIR_ENABLED = get_bool_env('ROLE_REPAIR_ENABLED', True)  # noqa: F405

STORAGES = {
    'default': {'BACKEND': 'django.core.files.storage.FileSystemStorage'},
    'staticfiles': {'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage'},
}
