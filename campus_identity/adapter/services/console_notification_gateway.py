"""
Console notification adapter.

Logs outgoing notifications instead of delivering them, for development
and tests. Only the masked recipient and the context keys are logged;
with show_links the full context, live links included, goes to DEBUG.
"""

import logging
from typing import Any, Dict

from campus_identity.app.services.data_protection import mask_email
from campus_identity.app.services.notification_gateway import NotificationGateway

logger = logging.getLogger(__name__)


class ConsoleNotificationGateway(NotificationGateway):
    def __init__(self, show_links: bool = False):
        self.show_links = show_links

    async def send(self, to: str, template_id: str, context: Dict[str, Any]) -> bool:
        logger.info(
            "[NOTIFICATION] template=%s to=%s keys=%s",
            template_id,
            mask_email(to),
            sorted(context),
        )
        if self.show_links:
            logger.debug("[NOTIFICATION] template=%s context=%s", template_id, context)
        return True
