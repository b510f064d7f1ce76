import requests
import logging
from typing import Optional

from config import HookConfig
from models.slack_payload import SlackPayload

logger = logging.getLogger(__name__)

WEBHOOK_URL_TEMPLATE = "https://{org_name}.slack.com/services/hooks/incoming-webhook?token={token}"


class SlackNotifier:
    def __init__(self, config: HookConfig, debug: bool = False, out=None):
        self.config = config
        self.debug = debug or config.debug
        self.out = out
        self.webhook_url = WEBHOOK_URL_TEMPLATE.format(org_name=config.org_name, token=config.token)

    def build_payload(self, message: str, channel: Optional[str] = None) -> SlackPayload:
        """
        Wrap a message in the payload Slack expects, adding the optional identity settings.
        """
        channel = (channel or self.config.channel).lstrip("#")
        payload = SlackPayload(text=message, channel=f"#{channel}")
        if self.config.username:
            payload.username = self.config.username
        if self.config.icon_url:
            payload.icon_url = self.config.icon_url
        elif self.config.icon_emoji:
            payload.icon_emoji = self.config.icon_emoji
        return payload

    def send(self, payload: SlackPayload) -> None:
        """
        POST the payload to the incoming webhook, or print the request in debug mode.
        Delivery is best effort: failures are logged, never raised.
        """
        body = payload.to_json()
        if self.debug:
            print(f"POST {self.webhook_url}", file=self.out)
            print(f"payload={body}", file=self.out)
            return

        try:
            response = requests.post(self.webhook_url, data={"payload": body}, timeout=self.config.timeout)
            if response.status_code != 200:
                logger.error(f"Failed to send Slack message. Code: {response.status_code}, Resp: {response.text}")
            else:
                logger.debug("Slack message sent successfully.")
        except requests.RequestException as e:
            logger.error(f"Exception while sending Slack message: {e}")

    def notify(self, message: str, channel: Optional[str] = None) -> SlackPayload:
        payload = self.build_payload(message, channel)
        self.send(payload)
        return payload
