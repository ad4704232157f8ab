import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('gb_travel')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

app.conf.beat_schedule = {
    'process-email-queue-every-2-minutes': {
        'task': 'notifications.tasks.process_email_queue',
        'schedule': 120.0,
        'kwargs': {'limit': 50},
    },
}
