# config/celery.py

import os
from celery import Celery
import logging

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("wholesale_portal")

# Read CELERY_* keys from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()


@app.task(bind=True)
def debug_task(self):
    logger = logging.getLogger(__name__)
    logger.debug("Request: %r", self.request)
