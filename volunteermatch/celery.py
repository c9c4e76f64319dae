"""
Celery configuration for VolunteerMatch project.

This module configures Celery for async task processing with:
- Auto-discovery of tasks from all registered Django apps
- Task routing to dedicated queues
- Periodic maintenance via Celery Beat
"""

import os

from celery import Celery
from celery.schedules import crontab
from kombu import Exchange, Queue

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'volunteermatch.settings')

app = Celery('volunteermatch')

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Load task modules from all registered Django apps.
app.autodiscover_tasks()


# ==================== QUEUE CONFIGURATION ====================

default_exchange = Exchange('default', type='direct')
emails_exchange = Exchange('emails', type='direct')
notifications_exchange = Exchange('notifications', type='direct')

app.conf.task_queues = (
    Queue('default', default_exchange, routing_key='default'),
    Queue('emails', emails_exchange, routing_key='emails'),
    Queue('notifications', notifications_exchange, routing_key='notifications'),
)

app.conf.task_default_queue = 'default'
app.conf.task_default_exchange = 'default'
app.conf.task_default_routing_key = 'default'


# ==================== TASK ROUTING ====================

app.conf.task_routes = {
    'accounts.tasks.send_*': {'queue': 'emails', 'routing_key': 'emails'},
    'notifications.tasks.*': {'queue': 'notifications', 'routing_key': 'notifications'},
}


# ==================== BEAT SCHEDULE ====================

app.conf.beat_schedule = {
    'cleanup-old-notifications': {
        'task': 'notifications.tasks.cleanup_old_notifications',
        'schedule': crontab(hour=3, minute=30),
    },
}
