"""
Outbound notifications: email through Django's mail backend, SMS through an
HTTP gateway configured with SMS_GATEWAY_URL / SMS_API_KEY / SMS_SENDER_ID.
"""
import logging
import requests
from django.conf import settings
from django.core.mail import EmailMessage

from core.exceptions import NotificationError, ValidationError

logger = logging.getLogger(__name__)

SMS_TIMEOUT = 15


def send_email(to_email, subject, body, attachments=None):
    """
    Send a plain-text email.

    attachments: iterable of (filename, content_bytes, mimetype)
    """
    if not to_email:
        raise ValidationError(message="Recipient email is required", code="EMAIL_REQUIRED")

    message = EmailMessage(
        subject=subject,
        body=body,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to_email],
    )
    for filename, content, mimetype in attachments or []:
        message.attach(filename, content, mimetype)

    try:
        message.send(fail_silently=False)
    except OSError as e:
        logger.error(f"Email to {to_email} failed: {e}")
        raise NotificationError(message=f"Failed to send email: {e}")
    logger.info(f"Email sent to {to_email} | {subject}")


def send_sms(to_phone, body):
    """
    Send an SMS through the configured gateway.

    Returns the gateway's JSON payload. Raises NotificationError when the
    gateway is not configured, unreachable, or rejects the message.
    """
    gateway_url = getattr(settings, 'SMS_GATEWAY_URL', '')
    if not gateway_url:
        raise NotificationError(message="SMS gateway is not configured", code="SMS_NOT_CONFIGURED")

    headers = {'Accept': 'application/json'}
    api_key = getattr(settings, 'SMS_API_KEY', '')
    if api_key:
        headers['Authorization'] = f'Bearer {api_key}'

    payload = {
        'to': to_phone,
        'message': body,
        'from': getattr(settings, 'SMS_SENDER_ID', ''),
    }

    try:
        response = requests.post(gateway_url, json=payload, headers=headers, timeout=SMS_TIMEOUT)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"SMS to {to_phone} failed: {e}")
        raise NotificationError(message=f"Failed to send SMS: {e}")

    try:
        data = response.json()
    except ValueError:
        data = {}
    logger.info(f"SMS sent to {to_phone}")
    return data
