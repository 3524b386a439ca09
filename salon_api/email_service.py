"""
Email Service using SMTP (Gmail app password or any relay) with Resend as the alternative transport
Emails are written in MJML and compiled to HTML before sending
"""

import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Union

import resend
from mjml import mjml_to_html

from .config import (
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SALON_NAME,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USERNAME,
)
from .email_templates import password_reset_template, welcome_credentials_template

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    """Neither SMTP credentials nor a Resend API key are set"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # mjml_to_html returns a dict-like result with 'html' and 'errors'
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


def send_via_smtp(to: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email through the configured SMTP server"""
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(to)
    msg.attach(MIMEText(html_content, "html"))

    context = ssl.create_default_context()
    if SMTP_PORT == 465:
        server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
        server.starttls(context=context)

    try:
        server.login(SMTP_USERNAME, SMTP_PASSWORD)
        server.sendmail(SMTP_USERNAME, to, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent via {SMTP_HOST}")
    return {"transport": "smtp", "success": True}


async def send_email(to: Union[str, list[str]], subject: str, mjml_content: str) -> dict:
    """
    Send an email using SMTP (if configured) or Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)

    Returns:
        Send response dict

    Raises:
        EmailNotConfiguredError: No transport configured
    """
    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    if SMTP_USERNAME and SMTP_PASSWORD:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return send_via_smtp(recipients, subject, html_content, EMAIL_FROM_ADDRESS)
        except (smtplib.SMTPException, OSError) as e:
            if not RESEND_API_KEY:
                logger.error(f"❌ SMTP send failed and Resend is not configured: {e}")
                raise
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - SMTP credentials and RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    logger.info(f"📧 Sending email via Resend to: {recipients}")
    response = resend.Emails.send(
        {
            "from": EMAIL_FROM_ADDRESS,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


# ============================================
# Staff account emails
# ============================================


async def send_welcome_credentials_email(to: str, user_name: str, phone: str, password: str) -> dict:
    """Send login details to a newly created staff member"""
    return await send_email(
        to=to,
        subject=f"Welcome to {SALON_NAME} - Your Login Details",
        mjml_content=welcome_credentials_template(user_name, phone, password),
    )


async def send_password_reset_email(to: str, user_name: str, phone: str, password: str) -> dict:
    return await send_email(
        to=to,
        subject=f"Your {SALON_NAME} password has been reset",
        mjml_content=password_reset_template(user_name, phone, password),
    )
