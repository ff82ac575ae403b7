import html
import logging
from typing import Any, Dict, List

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from dayflow.core.config import settings

logger = logging.getLogger(__name__)


class EmailService:
    """
    Outbound e-mail through the Resend HTTP API.
    Callers always get a result dict; delivery problems never raise.
    """

    @staticmethod
    @retry(
        stop=stop_after_attempt(settings.email.retry_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(requests.exceptions.RequestException),
        reraise=True
    )
    def _post(payload: Dict[str, Any]) -> Dict[str, Any]:
        response = requests.post(
            settings.email.api_url,
            headers={
                "Authorization": f"Bearer {settings.email.resend_api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
            timeout=settings.email.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    @classmethod
    def send(cls, to: List[str], subject: str, html: str) -> Dict[str, Any]:
        if not settings.email.resend_api_key:
            logger.warning("RESEND_API_KEY is not set. Skipping email sending.")
            return {"success": False, "error": "Missing API Key"}

        payload = {
            "from": settings.email.from_email,
            "to": to,
            "subject": subject,
            "html": html,
        }
        try:
            data = cls._post(payload)
        except requests.exceptions.RequestException as e:
            logger.error(f"Email delivery failed after retries: {e}", exc_info=True)
            return {"success": False, "error": str(e)}

        logger.info(f"Email sent to {', '.join(to)}", extra={"email_id": data.get("id")})
        return {"success": True, "data": data}

    @classmethod
    def send_employee_credentials(
        cls,
        email: str,
        name: str,
        login_id: str,
        temp_password: str,
        company_name: str
    ) -> Dict[str, Any]:
        subject = f"Welcome to {company_name} - Your Login Credentials"
        company_name = html.escape(company_name)
        name = html.escape(name)
        temp_password = html.escape(temp_password)
        body = f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px;">
  <h2>Welcome to {company_name}!</h2>
  <p>Hello {name},</p>
  <p>Your employee account has been created.</p>
  <p><strong>Login ID:</strong> <code>{login_id}</code></p>
  <p><strong>Temporary Password:</strong> <code>{temp_password}</code></p>
  <p>Please log in at <a href="{settings.app_url}/auth/login">Employee Portal</a> and change your password immediately.</p>
  <p style="color: #888; font-size: 12px;">This is an automated message from Dayflow HRMS. Please do not reply.</p>
</div>
"""
        return cls.send([email], subject, body)
