"""
Unified Notification Service
Fans workflow events out to email, SMS and WhatsApp. Delivery problems are
logged and reported in the result, they never fail the request that caused them.
"""

import logging
from typing import Optional

from ..email_service import send_password_reset_email, send_welcome_credentials_email
from .sms_service import send_password_reset_sms, send_sms, send_welcome_sms
from .whatsapp_service import send_transaction_alert

logger = logging.getLogger(__name__)


async def deliver_credentials(
    name: str,
    phone: str,
    email: Optional[str],
    password: str,
    reset: bool = False,
) -> dict:
    """
    Send login details to a staff member.

    Email is used when the account has an address, SMS otherwise (or when the
    email could not be sent).

    Returns:
        Dict with channel, sent and error keys
    """
    notification_type = "password_reset" if reset else "welcome_credentials"
    result = {"channel": None, "sent": False, "error": None}

    if email:
        email_func = send_password_reset_email if reset else send_welcome_credentials_email
        try:
            logger.info(f"📧 Sending {notification_type} email to {email}")
            await email_func(to=email, user_name=name, phone=phone, password=password)
            result.update(channel="email", sent=True)
            return result
        except Exception as e:
            result["error"] = str(e)
            logger.error(f"❌ Failed to send {notification_type} email to {email}: {e}")

    sms_func = send_password_reset_sms if reset else send_welcome_sms
    try:
        success, error = await sms_func(phone=phone, name=name, password=password)
        result.update(channel="sms", sent=success, error=error)
        if not success:
            logger.warning(f"⚠️ {notification_type} SMS not sent to {name}: {error}")
    except Exception as e:
        result.update(channel="sms", error=str(e))
        logger.error(f"❌ Failed to send {notification_type} SMS to {name}: {e}")

    return result


async def send_sale_alert(
    customer_name: str, phone: str, amount: float, total_spent: float, visit_count: int
) -> bool:
    """WhatsApp receipt after a sale, run as a background task"""
    try:
        return await send_transaction_alert(phone, customer_name, amount, total_spent, visit_count)
    except Exception as e:
        logger.error(f"❌ Failed to send sale alert to {customer_name}: {e}")
        return False


def personalize(message: str, full_name: str) -> str:
    """Replace {name} with the customer's first name"""
    first_name = (full_name or "").strip().split(" ")[0] or "Customer"
    return message.replace("{name}", first_name)


async def send_discount_campaign(recipients: list[tuple[str, str]], message: str) -> dict:
    """
    Send a discount announcement by SMS

    Args:
        recipients: (full_name, phone) pairs
        message: Text, {name} is replaced by each recipient's first name

    Returns:
        Dict with sent and failed counts
    """
    stats = {"sent": 0, "failed": 0}
    for full_name, phone in recipients:
        try:
            success, error = await send_sms(phone, personalize(message, full_name))
        except Exception as e:
            success, error = False, str(e)
        if success:
            stats["sent"] += 1
        else:
            stats["failed"] += 1
            logger.warning(f"⚠️ Discount SMS to {full_name} failed: {error}")

    logger.info(f"📣 Discount campaign finished: {stats['sent']} sent, {stats['failed']} failed")
    return stats
