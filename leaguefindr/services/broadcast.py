"""Best-effort publisher for the Supabase realtime broadcast endpoint."""
import requests
from flask import current_app

USER_TOPIC = 'notifications:user:{user_id}'
ADMIN_TOPIC = 'notifications:admins'
EVENT_NAME = 'notification'


def user_topic(user_id):
    return USER_TOPIC.format(user_id=user_id)


class BroadcastBus:
    def __init__(self, url, api_key, timeout=5):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, config):
        return cls(
            url=config.get('SUPABASE_BROADCAST_URL', ''),
            api_key=config.get('SUPABASE_API_KEY', ''),
            timeout=config.get('UPSTREAM_TIMEOUT_SECONDS', 5),
        )

    @property
    def enabled(self):
        return bool(self.url and self.api_key)

    def publish(self, topic, payload):
        """Send one message. Returns False on any failure instead of raising."""
        if not self.enabled:
            current_app.logger.warning(
                'SUPABASE_BROADCAST_URL or SUPABASE_API_KEY not configured, skipping broadcast'
            )
            return False
        body = {'messages': [{'topic': topic, 'event': EVENT_NAME, 'payload': payload}]}
        try:
            response = requests.post(
                self.url,
                json=body,
                headers={'apikey': self.api_key, 'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            current_app.logger.error(f'broadcast to {topic} failed: {exc}')
            return False
        if response.status_code < 200 or response.status_code >= 300:
            current_app.logger.error(
                f'broadcast to {topic} returned {response.status_code}: {response.text}'
            )
            return False
        current_app.logger.info(f'broadcast {payload.get("type")} to {topic}')
        return True


def get_bus():
    return current_app.extensions['broadcast_bus']
