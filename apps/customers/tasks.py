import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def build_welcome_email(business_name: str, email: str, temp_password: str):
    subject = f"Welcome to {settings.PORTAL_NAME}"
    body = (
        f"Hi {business_name},\n\n"
        f"An account has been created for you on {settings.PORTAL_NAME}.\n\n"
        f"Login: {settings.PORTAL_URL}\n"
        f"Email: {email}\n"
        f"Temporary password: {temp_password}\n\n"
        "Please login and change your password.\n"
    )
    return subject, body


@shared_task(bind=True, ignore_result=True)
def send_welcome_email_task(self, email: str, business_name: str, temp_password: str) -> bool:
    """
    Best effort. A failed send is logged, never raised; the customer
    account already exists at this point.
    """
    subject, body = build_welcome_email(business_name, email, temp_password)
    try:
        send_mail(subject, body, settings.DEFAULT_FROM_EMAIL, [email], fail_silently=False)
    except Exception:
        logger.exception("Welcome email to %s failed", email)
        return False

    logger.info("Welcome email sent to %s", email)
    return True
