"""
Celery configuration for BOM Studio.
"""

import os

from celery import Celery

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('bom_studio')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# BOM tasks live outside of the installed apps
app.autodiscover_tasks(['application.tasks'], related_name='bom_tasks')

# Configure task routes
app.conf.task_routes = {
    'application.tasks.bom_tasks.export_bom_to_excel': {'queue': 'reports'},
    'application.tasks.bom_tasks.import_bom_from_excel': {'queue': 'reports'},
}
