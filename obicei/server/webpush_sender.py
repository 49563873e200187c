"""Web Push delivery through pywebpush."""

import asyncio
import logging

from pywebpush import WebPushException, webpush

from obicei.db.models import PushSubscriptionRecord
from obicei.server.vapid import VapidKeys
from obicei.utils.constants import PUSH_URGENCY

logger = logging.getLogger(__name__)


class PushSender:
    """Sends one encrypted push message and reports the push service status."""

    def __init__(self, vapid: VapidKeys, ttl: int = 3600):
        self.vapid = vapid
        self.ttl = ttl

    def _send_blocking(self, subscription: PushSubscriptionRecord, payload: str) -> int:
        try:
            response = webpush(
                subscription_info=subscription.to_subscription_info(),
                data=payload,
                vapid_private_key=self.vapid.private_key,
                # pywebpush adds aud/exp to the claims dict, so pass a fresh one
                vapid_claims={"sub": self.vapid.subject},
                ttl=self.ttl,
                headers={"Urgency": PUSH_URGENCY},
            )
        except WebPushException as e:
            if e.response is not None:
                return e.response.status_code
            raise
        return response.status_code

    async def send(self, subscription: PushSubscriptionRecord, payload: str) -> int:
        """Send ``payload`` to ``subscription``.

        Returns:
            HTTP status from the push service

        Raises:
            WebPushException or requests errors when no response was received
        """
        return await asyncio.to_thread(self._send_blocking, subscription, payload)
