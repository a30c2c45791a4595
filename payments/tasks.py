"""
Celery tasks for the payments app.

Webhook deliveries are stored by the view and processed here, outside the
request/response cycle.
"""
from __future__ import annotations

import logging

from celery import shared_task

from .models import WebhookLog
from .services import process_webhook_log

logger = logging.getLogger(__name__)


@shared_task
def process_payment_webhook(log_id: int) -> bool:
    log = WebhookLog.objects.filter(pk=log_id).first()
    if log is None:
        logger.warning("Webhook log %s disappeared before processing", log_id)
        return False
    if log.processed:
        logger.info("Webhook log %s already processed", log_id)
        return False
    return process_webhook_log(log)
