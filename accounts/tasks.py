"""
Celery Tasks for Accounts App

This module contains async tasks for account management:
- Password reset emails
"""

import logging

from celery import shared_task
from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


# ==================== PASSWORD RESET ====================

@shared_task(
    bind=True,
    name='accounts.tasks.send_password_reset_email',
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(OSError,),
    retry_backoff=True,
)
def send_password_reset_email(self, user_id: str, reset_link: str):
    """
    Send the password reset link to the user.

    Returns:
        dict: Delivery summary.
    """
    User = get_user_model()
    try:
        user = User.objects.get(pk=user_id)
    except User.DoesNotExist:
        logger.warning(f"Password reset email skipped, user {user_id} no longer exists")
        return {'status': 'skipped', 'user_id': user_id}

    greeting = f"Hi {user.name}," if user.name else "Hi,"
    body = (
        f"{greeting}\n\n"
        "We received a request to reset your VolunteerMatch password.\n"
        f"Use the link below to choose a new one:\n\n{reset_link}\n\n"
        "If you did not request this, you can ignore this email."
    )

    send_mail(
        subject="Reset your VolunteerMatch password",
        message=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
        fail_silently=False,
    )
    logger.info(f"Password reset email sent to user {user_id}")
    return {'status': 'sent', 'user_id': user_id}
