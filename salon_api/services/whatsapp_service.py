"""
WhatsApp Business messaging (Meta Cloud API)
"""

import logging

import httpx

from ..config import (
    CURRENCY,
    SALON_NAME,
    WHATSAPP_ACCESS_TOKEN,
    WHATSAPP_API_URL,
    WHATSAPP_PHONE_NUMBER_ID,
)
from ..security_utils import mask_phone
from ..shared.validators import to_international_phone

logger = logging.getLogger(__name__)


def format_money(amount: float) -> str:
    return f"{amount:,.0f}"


async def send_whatsapp_message(to_phone: str, text: str) -> bool:
    """Send a plain text WhatsApp message. Returns False when not configured or on failure."""
    if not WHATSAPP_PHONE_NUMBER_ID or not WHATSAPP_ACCESS_TOKEN:
        logger.debug("WhatsApp not configured, skipping message")
        return False

    recipient = to_international_phone(to_phone).lstrip("+")
    url = f"{WHATSAPP_API_URL}/{WHATSAPP_PHONE_NUMBER_ID}/messages"
    payload = {
        "messaging_product": "whatsapp",
        "to": recipient,
        "type": "text",
        "text": {"body": text},
    }

    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            response = await client.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {WHATSAPP_ACCESS_TOKEN}"},
            )
        if response.status_code in (200, 201):
            logger.info(f"✅ WhatsApp message sent to {mask_phone(recipient)}")
            return True

        logger.error(
            f"❌ WhatsApp API error {response.status_code} for {mask_phone(recipient)}: {response.text[:200]}"
        )
        return False
    except httpx.HTTPError as e:
        logger.error(f"❌ Error sending WhatsApp message: {str(e)}")
        return False


def transaction_alert_text(name: str, amount: float, total_spent: float, visit_count: int) -> str:
    return (
        f"Hello {name}, thank you for visiting {SALON_NAME}! "
        f"You spent {format_money(amount)} {CURRENCY} today. "
        f"Total Spent: {format_money(total_spent)} {CURRENCY}. Visits: {visit_count}. See you soon!"
    )


def birthday_discount_text(name: str, percent: int = 20) -> str:
    return (
        f"Happy Birthday {name}! 🎉 Enjoy {percent}% off your next visit to {SALON_NAME} "
        "this month. We look forward to pampering you!"
    )


async def send_transaction_alert(
    phone: str, name: str, amount: float, total_spent: float, visit_count: int
) -> bool:
    return await send_whatsapp_message(
        phone, transaction_alert_text(name, amount, total_spent, visit_count)
    )


async def send_birthday_discount(phone: str, name: str, percent: int = 20) -> bool:
    return await send_whatsapp_message(phone, birthday_discount_text(name, percent))
