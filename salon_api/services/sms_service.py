"""
SMS Service (Africa's Talking)
Sends staff credentials, password resets and discount campaigns
"""

import logging
from typing import Optional

import httpx

from ..config import SALON_NAME, SMS_API_KEY, SMS_API_URL, SMS_DEV_MODE, SMS_SENDER_ID, SMS_USERNAME
from ..security_utils import mask_phone
from ..shared.validators import to_international_phone

logger = logging.getLogger(__name__)


async def send_sms(to_phone: str, message_body: str) -> tuple[bool, Optional[str]]:
    """
    Send an SMS via Africa's Talking

    Args:
        to_phone: Recipient phone number (local 07... or international)
        message_body: SMS message content

    Returns:
        Tuple of (success: bool, error_message: Optional[str])
    """
    if not to_phone:
        return False, "No phone number provided"

    recipient = to_international_phone(to_phone)

    if SMS_DEV_MODE or not SMS_API_KEY:
        # Development: log instead of sending
        logger.info(f"📱 [SMS dev mode] to {mask_phone(recipient)}: {message_body}")
        return True, None

    payload = {"username": SMS_USERNAME, "to": recipient, "message": message_body}
    if SMS_SENDER_ID:
        payload["from"] = SMS_SENDER_ID

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                SMS_API_URL,
                data=payload,
                headers={"apiKey": SMS_API_KEY, "Accept": "application/json"},
            )

        if response.status_code in (200, 201):
            recipients = response.json().get("SMSMessageData", {}).get("Recipients", [])
            if recipients and recipients[0].get("status") == "Success":
                logger.info(f"✅ SMS sent to {mask_phone(recipient)}")
                return True, None
            status = recipients[0].get("status") if recipients else "No recipients accepted"
            logger.error(f"❌ SMS rejected for {mask_phone(recipient)}: {status}")
            return False, status

        error_msg = f"HTTP {response.status_code}: {response.text[:200]}"
        logger.error(f"❌ Failed to send SMS: {error_msg}")
        return False, error_msg

    except httpx.HTTPError as e:
        logger.error(f"❌ Error sending SMS: {str(e)}")
        return False, str(e)


async def send_welcome_sms(phone: str, name: str, password: str) -> tuple[bool, Optional[str]]:
    """Login details for a newly created staff account"""
    message = (
        f"Welcome to {SALON_NAME}, {name}! Your account has been created. "
        f"Login with phone: {phone} and password: {password}. "
        "Please change your password after first login."
    )
    return await send_sms(phone, message)


async def send_password_reset_sms(phone: str, name: str, password: str) -> tuple[bool, Optional[str]]:
    message = (
        f"Hello {name}, your {SALON_NAME} password has been reset. "
        f"New password: {password}. Please change it after logging in."
    )
    return await send_sms(phone, message)
