"""Slack incoming-webhook integration for userapi."""

import os
import logging
from typing import Optional
import requests
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SEC = 10


class SlackClient:
    """Client that posts plain-text messages to a Slack incoming webhook."""

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        """Initialize Slack client.

        Args:
            webhook_url: Incoming webhook URL. If None, reads from SLACK_WEBHOOK_URL env var.
            timeout: Request timeout in seconds. If None, reads from SLACK_TIMEOUT_SEC env var.

        Note:
            A missing webhook URL does not fail construction; `send` reports False
            instead, so the API can run without notifications configured.
        """
        self.webhook_url = webhook_url or os.getenv("SLACK_WEBHOOK_URL")
        self.timeout = timeout if timeout is not None else float(
            os.getenv("SLACK_TIMEOUT_SEC", str(DEFAULT_TIMEOUT_SEC))
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def send(self, message: str) -> bool:
        """Post a message to the webhook.

        Args:
            message: Plain text to send as the `text` field

        Returns:
            True only if the webhook answered with a 2xx status
        """
        if not self.is_configured:
            logger.warning("SLACK_WEBHOOK_URL is not configured; notification not sent")
            return False

        try:
            response = requests.post(
                self.webhook_url,
                json={"text": message},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"Slack webhook request failed: {type(e).__name__}: {str(e)}")
            return False

        if not 200 <= response.status_code < 300:
            logger.warning(f"Slack webhook returned {response.status_code}: {response.text[:200]}")
            return False
        return True
