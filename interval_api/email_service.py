"""
Email Service using Resend
Booking emails are MJML templates compiled to HTML before sending
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from . import config
from .email_templates import booking_confirmation_template
from .utils.formatting import format_long_date, format_short_time, format_sol_amount

logger = logging.getLogger(__name__)


class EmailNotConfigured(Exception):
    pass


class RecipientNotAllowed(Exception):
    pass


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns an object with 'html' and 'errors'
        errors = getattr(result, "errors", None) or (
            result.get("errors") if isinstance(result, dict) else None
        )
        if errors:
            logger.warning(f"MJML compilation warnings: {errors}")
        if isinstance(result, dict):
            return result.get("html", "")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


def get_test_allow_list(raw: Optional[str] = None) -> list[str]:
    value = config.RESEND_TEST_EMAIL if raw is None else raw
    return [addr.strip().lower() for addr in (value or "").split(",") if addr.strip()]


def is_recipient_allowed(to: str, allow_list: Optional[list[str]] = None) -> bool:
    """With an allow-list configured, only listed addresses may receive mail"""
    allowed = get_test_allow_list() if allow_list is None else allow_list
    if not allowed:
        return True
    return to.strip().lower() in allowed


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    recipients = [to] if isinstance(to, str) else to

    if not config.RESEND_API_KEY:
        logger.warning("RESEND_API_KEY not set; skipping email")
        raise EmailNotConfigured("Email service not configured")

    blocked = [r for r in recipients if not is_recipient_allowed(r)]
    if blocked:
        logger.warning(
            f"Resend: skipping email to {blocked} (only {get_test_allow_list()} allowed until domain is verified)"
        )
        raise RecipientNotAllowed("Sending only to test email until domain verified")

    html_content = compile_mjml_to_html(mjml_content)

    resend.api_key = config.RESEND_API_KEY
    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or config.EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def send_booking_confirmation_email(
    to: str,
    creator_name: str,
    start_time: datetime,
    end_time: datetime,
    booking_url: str,
    meet_link: Optional[str],
    amount_sol: Union[Decimal, float],
) -> dict:
    """Send the payer their private booking link"""
    date_label = format_long_date(start_time)
    time_label = f"{format_short_time(start_time)} – {format_short_time(end_time)}"

    mjml_content = booking_confirmation_template(
        creator_name=creator_name,
        date_label=date_label,
        time_label=time_label,
        amount_label=format_sol_amount(amount_sol),
        booking_url=booking_url,
        meet_link=meet_link,
    )

    return await send_email(
        to=to,
        subject=f"Booking confirmed with {creator_name} – {date_label}",
        mjml_content=mjml_content,
    )
