# petition_site/notifications/mailer.py

import logging
import requests

from petition_site.errors import NotificationError

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class ResendMailer:
    def __init__(self, api_key, sender, timeout=10):
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    def send(self, to, subject, html):
        """Send one message; raise NotificationError on any delivery failure."""
        if not self.api_key:
            raise NotificationError("Resend API key is not configured")
        try:
            response = requests.post(
                RESEND_URL,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                json={"from": self.sender, "to": [to], "subject": subject, "html": html},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise NotificationError(f"Resend request failed: {e}") from e
        if not response.ok:
            raise NotificationError(f"Resend returned HTTP {response.status_code}")
        logger.info("Email '%s' accepted by Resend", subject)
        return True
