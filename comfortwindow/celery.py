"""Celery configuration for Comfort Window.

Start the worker (after Redis is installed):
    celery -A comfortwindow worker -l info
"""
import os
from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'comfortwindow.settings')

app = Celery('comfortwindow')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
