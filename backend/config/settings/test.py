"""
Test settings for BOM Studio.
"""

import tempfile

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['*']

# =============================================================================
# DATABASE - Test (in-memory)
# =============================================================================
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# =============================================================================
# FILES - Test (throwaway media root)
# =============================================================================
MEDIA_ROOT = tempfile.mkdtemp(prefix='bom-studio-media-')
BOM_EXPORT_DIR = os.path.join(MEDIA_ROOT, 'exports', 'bom')

# =============================================================================
# REST FRAMEWORK - Test (no throttling, JSON only)
# =============================================================================
REST_FRAMEWORK['DEFAULT_THROTTLE_CLASSES'] = []
REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] = {}
REST_FRAMEWORK['DEFAULT_RENDERER_CLASSES'] = ['rest_framework.renderers.JSONRenderer']
REST_FRAMEWORK['TEST_REQUEST_DEFAULT_FORMAT'] = 'json'

# =============================================================================
# CELERY - Test (run tasks inline)
# =============================================================================
CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

# =============================================================================
# LOGGING - Test (console only)
# =============================================================================
LOGGING['loggers']['bom_studio']['handlers'] = ['console']
LOGGING['loggers']['django']['handlers'] = ['console']
