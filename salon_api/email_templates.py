"""
MJML Email Templates
Staff account emails rendered with MJML for consistent display across mail clients
"""

from html import escape
from typing import Optional

from .config import FRONTEND_URL, SALON_NAME

# Salon colours - warm plum/gold scheme
THEME = {
    "primary": "#7c3aed",
    "primary_dark": "#5b21b6",
    "accent": "#d97706",
    "background": "#faf7f5",
    "card_bg": "#ffffff",
    "text_primary": "#1c1917",
    "text_secondary": "#44403c",
    "text_muted": "#78716c",
    "border": "#e7e5e4",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="#ffffff" padding="0 40px 40px 40px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="16px 36px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary']}" padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="22px" font-weight="700" color="#ffffff" padding="0">
              {SALON_NAME}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="40px 40px 24px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section padding="24px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}" padding="0">
              You're receiving this because you have a staff account at {SALON_NAME}.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _credentials_box(phone: str, password: str) -> str:
    return f"""
    <mj-text padding="16px 0 0 0" font-size="14px" color="{THEME['text_muted']}">
      Phone number
    </mj-text>
    <mj-text padding="0" font-size="18px" font-weight="600" color="{THEME['text_primary']}">
      {escape(phone)}
    </mj-text>
    <mj-text padding="12px 0 0 0" font-size="14px" color="{THEME['text_muted']}">
      Temporary password
    </mj-text>
    <mj-text padding="0 0 16px 0" font-size="18px" font-weight="600" font-family="monospace" color="{THEME['accent']}">
      {escape(password)}
    </mj-text>
    """


def welcome_credentials_template(user_name: str, phone: str, password: str) -> str:
    """Welcome email with the login details of a new staff account"""
    content = f"""
    <mj-text>
      Hi {escape(user_name)},
    </mj-text>

    <mj-text>
      An account has been created for you on the {SALON_NAME} management system.
      Use the details below to sign in.
    </mj-text>

    {_credentials_box(phone, password)}

    <mj-text color="{THEME['text_muted']}">
      Please change your password after your first login.
    </mj-text>
    """

    return get_base_template(
        title=f"Welcome to {SALON_NAME}!",
        preview_text="Your staff account is ready",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/login",
        cta_label="Sign In",
    )


def password_reset_template(user_name: str, phone: str, password: str) -> str:
    """New password issued by an administrator"""
    content = f"""
    <mj-text>
      Hi {escape(user_name)},
    </mj-text>

    <mj-text>
      Your password has been reset by an administrator. Sign in with the new password below.
    </mj-text>

    {_credentials_box(phone, password)}

    <mj-text color="{THEME['text_muted']}">
      If you did not expect this, contact your manager.
    </mj-text>
    """

    return get_base_template(
        title="Your password has been reset",
        preview_text=f"New {SALON_NAME} password",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/login",
        cta_label="Sign In",
    )
