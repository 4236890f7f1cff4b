"""
MJML Email Templates
Booking emails are written in MJML and compiled to HTML at send time
"""

from html import escape
from typing import Optional

# Slate color scheme matching the booking pages
THEME = {
    "primary": "#111827",
    "primary_dark": "#1f2937",
    "background": "#f3f4f6",
    "card_bg": "#ffffff",
    "text_primary": "#111827",
    "text_secondary": "#374151",
    "text_muted": "#6b7280",
    "text_faint": "#9ca3af",
    "link": "#2563eb",
    "border": "#e5e7eb",
}


def get_base_template(
    title: str,
    preview_text: str,
    subtitle: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="{THEME['card_bg']}" padding="0 24px 8px 24px">
          <mj-column>
            <mj-button
              href="{escape(cta_url, quote=True)}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              font-size="14px"
              border-radius="8px"
              padding="8px 0"
              inner-padding="14px 20px"
              width="100%">
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
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif" />
          <mj-text font-size="15px" line-height="1.5" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="{THEME['primary_dark']}" padding="24px" border-radius="12px 12px 0 0">
          <mj-column>
            <mj-text align="center" font-size="20px" font-weight="700" color="#ffffff" padding="0">
              {title}
            </mj-text>
            <mj-text align="center" font-size="14px" color="#e5e7eb" padding="8px 0 0 0">
              {subtitle}
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="{THEME['card_bg']}" padding="24px 24px 0 24px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <mj-section background-color="{THEME['card_bg']}" padding="0 24px 24px 24px" border-radius="0 0 12px 12px">
          <mj-column>
            <mj-text font-size="12px" color="{THEME['text_faint']}" padding="12px 0 0 0">
              This link is only for you. Do not share it.
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def booking_confirmation_template(
    creator_name: str,
    date_label: str,
    time_label: str,
    amount_label: str,
    booking_url: str,
    meet_link: Optional[str] = None,
) -> str:
    """Booking confirmation sent to the payer after a reservation"""
    creator = escape(creator_name)

    meet_section = ""
    if meet_link:
        safe_link = escape(meet_link, quote=True)
        meet_section = f"""
        <mj-text font-size="13px" color="{THEME['text_muted']}" padding="12px 0 0 0">
          Or join the meeting directly: <a href="{safe_link}" style="color: {THEME['link']};">{escape(meet_link)}</a>
        </mj-text>
        """

    row_style = f"padding: 8px 0; font-size: 14px; color: {THEME['text_muted']};"
    value_style = f"padding: 8px 0; font-size: 14px; color: {THEME['text_primary']}; text-align: right;"

    content = f"""
    <mj-text padding="0 0 16px 0">
      Thanks for booking. We're glad you're connecting with {creator}. Enjoy your call.
    </mj-text>

    <mj-table padding="0 0 20px 0">
      <tr><td style="{row_style}">Date</td><td style="{value_style}">{escape(date_label)}</td></tr>
      <tr><td style="{row_style}">Time</td><td style="{value_style}">{escape(time_label)}</td></tr>
      <tr><td style="{row_style}">Amount</td><td style="{value_style}">{escape(amount_label)} SOL</td></tr>
    </mj-table>

    {meet_section}
    """

    return get_base_template(
        title="Booking confirmed",
        preview_text=f"You're booked with {creator}",
        subtitle=f"You're booked with {creator}",
        content_sections=content,
        cta_url=booking_url,
        cta_label="View booking &amp; meeting link",
    )
