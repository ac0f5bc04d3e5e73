"""Development settings for the Hosteud project.

This module extends the base settings with development specific
configuration, such as enabling debug, allowing all hosts and verbose
logging of the pricing apps. Do not use these settings in production!
"""

from .base import *  # noqa: F401,F403

# Enable debug mode for development
DEBUG = True

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# Cache hits and misses of the commission resolver are logged at DEBUG
LOGGING['loggers']['apps']['level'] = 'DEBUG'  # noqa: F405
