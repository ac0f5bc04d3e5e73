"""Test settings for the Hosteud project.

Used by pytest (see ``[tool.pytest.ini_options]`` in pyproject.toml).
In-memory SQLite, local-memory cache, eager Celery and fast hashing.
"""

from .base import *  # noqa: F401,F403

DEBUG = False

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'hosteud-tests',
    }
}

PASSWORD_HASHERS = ['django.contrib.auth.hashers.MD5PasswordHasher']

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

LOGGING['root']['level'] = 'ERROR'  # noqa: F405
# let pytest's caplog handler on the root logger see app records
for _name in ('apps', 'shared'):
    LOGGING['loggers'][_name].update({'handlers': [], 'propagate': True})  # noqa: F405
