"""Resend API client for transactional email.

Fire-and-forget: failures are logged and reported as False, never raised,
so a mail outage cannot fail a funding request.
"""

import logging
from decimal import Decimal
from uuid import UUID

import httpx

from src.config import settings

logger = logging.getLogger(__name__)

RESEND_API_URL = "https://api.resend.com/emails"
BRAND = "White Coat Capital"


def _layout(heading: str, body_html: str) -> str:
    return f"""<!DOCTYPE html>
<html>
  <body style="font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; background-color: #f5f5f5;">
    <div style="max-width: 600px; margin: 0 auto; padding: 40px 20px;">
      <div style="background: white; border-radius: 12px; padding: 40px;">
        <h1 style="color: #166534; text-align: center;">{BRAND}</h1>
        <h2 style="color: #1a1a1a;">{heading}</h2>
        {body_html}
        <hr style="border: none; border-top: 1px solid #eee; margin: 32px 0;">
        <p style="color: #999; font-size: 12px; text-align: center;">{BRAND} - Investing in Healthcare Professionals</p>
      </div>
    </div>
  </body>
</html>"""


class ResendClient:
    def __init__(self, api_key: str | None = None, from_email: str | None = None):
        self.api_key = api_key or settings.resend_api_key
        self.from_email = from_email or settings.resend_from_email

    async def _send(self, to: str, subject: str, html: str) -> bool:
        if not self.api_key:
            logger.debug("Resend API key not configured, skipping email to %s", to)
            return False

        payload = {
            "from": f"{BRAND} <{self.from_email}>",
            "to": [to],
            "subject": subject,
            "html": html,
        }
        try:
            async with httpx.AsyncClient(timeout=15.0) as client:
                resp = await client.post(
                    RESEND_API_URL,
                    json=payload,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
                resp.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Failed to send '%s' email: %s", subject, e)
            return False
        return True

    async def send_application_submitted(self, to: str, name: str, application_id: UUID) -> bool:
        greeting = f"Hi {name}," if name else "Hi,"
        body = (
            f"<p>{greeting}</p>"
            "<p>We received your funding application and generated three proposals for you to review.</p>"
            f"<p style=\"color: #999; font-size: 14px;\">Application ID: {application_id}</p>"
        )
        return await self._send(
            to, f"Application received - {BRAND}", _layout("Your application is in", body)
        )

    async def send_investment_confirmation(
        self, to: str, name: str, deal_name: str, amount: Decimal
    ) -> bool:
        greeting = f"Hi {name}," if name else "Hi,"
        body = (
            f"<p>{greeting}</p>"
            f"<p>Your investment of <strong>${amount:,.2f}</strong> in <strong>{deal_name}</strong> is confirmed.</p>"
        )
        return await self._send(
            to, f"Investment confirmed - {BRAND}", _layout("Investment confirmed", body)
        )
