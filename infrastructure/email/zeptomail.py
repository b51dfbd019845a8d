"""ZeptoMail implementation of EmailProvider.

Sends the verification code through the ZeptoMail HTTP API using the shared
HttpClient. The HTML body is rendered from templates/emails/verification.html;
a plain-text alternative is always attached.
"""

import os
from datetime import datetime, timezone
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from config import EmailSettings, VerificationSettings
from infrastructure.http_client import HttpClient
from shared.logging import get_logger

log = get_logger(__name__)

_ZEPTO_API_URL = "https://api.zeptomail.in/v1.1/email"
_DEFAULT_TEMPLATE_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(__file__))),
    "templates",
    "emails",
)


class ZeptoMailProvider:
    def __init__(
        self,
        settings: EmailSettings,
        http_client: HttpClient,
        verification: Optional[VerificationSettings] = None,
        app_name: str = "CWT",
        app_url: str = "https://cwt.app",
        template_dir: str = _DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self._settings = settings
        self._http = http_client
        self._verification = verification or VerificationSettings()
        self._app_name = app_name
        self._app_url = app_url
        self._jinja = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    async def _send(
        self,
        to_email: str,
        to_name: Optional[str],
        subject: str,
        html_body: str,
        text_body: str,
    ) -> bool:
        if not self._settings.zepto_api_token:
            log.error("zepto_mail_send_failed", reason="token_not_configured")
            return False

        payload = {
            "from": {
                "address": self._settings.zepto_from_email,
                "name": self._settings.zepto_from_name,
            },
            "to": [
                {
                    "email_address": {
                        "address": to_email,
                        "name": to_name or to_email,
                    }
                }
            ],
            "subject": subject,
            "htmlbody": html_body,
            "textbody": text_body,
        }

        auth = self._settings.zepto_api_token
        if not auth.startswith("Zoho-enczapikey "):
            auth = f"Zoho-enczapikey {auth}"

        headers = {"Authorization": auth, "Content-Type": "application/json"}

        try:
            response = await self._http.post(
                _ZEPTO_API_URL, json=payload, headers=headers
            )
        except Exception as e:
            log.error(
                "email_send_error",
                to_email=to_email,
                subject=subject,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        if response.status_code in (200, 201, 202):
            log.info("email_sent_success", to_email=to_email, subject=subject)
            return True
        log.error(
            "email_sent_failed",
            to_email=to_email,
            subject=subject,
            status_code=response.status_code,
            response=response.text[:200],
        )
        return False

    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        expiry_minutes = self._verification.code_ttl_seconds // 60
        cooldown_hours = self._verification.cooldown_seconds // 3600
        max_attempts = self._verification.max_attempts
        year = datetime.now(timezone.utc).year

        subject = f"{self._app_name} - Email Verification Code"
        template = self._jinja.get_template("verification.html")
        html_body = template.render(
            otp_code=otp_code,
            user_name=user_name,
            email=email,
            app_name=self._app_name,
            app_url=self._app_url,
            expiry_minutes=expiry_minutes,
            max_attempts=max_attempts,
            cooldown_hours=cooldown_hours,
            year=year,
        )
        text_body = (
            f"Verify Your Email - {self._app_name}\n\n"
            f"Hello{f' {user_name}' if user_name else ''},\n\n"
            f"Your verification code is: {otp_code}\n\n"
            f"This code expires in {expiry_minutes} minutes. "
            f"After {max_attempts} failed attempts verification is blocked "
            f"for {cooldown_hours} hours.\n\n"
            f"If you did not request this code, ignore this email.\n\n"
            f"© {year} {self._app_name}. All rights reserved."
        )
        return await self._send(email, user_name, subject, html_body, text_body)
