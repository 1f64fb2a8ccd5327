import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict

from campus_identity.app.services.data_protection import mask_email

logger = logging.getLogger(__name__)


class NotificationGateway(ABC):
    """Outbound notification port - delivery is fallible and side-effect only"""

    @abstractmethod
    async def send(self, to: str, template_id: str, context: Dict[str, Any]) -> bool:
        """Deliver a templated message, returns False when delivery failed"""
        pass


async def deliver(
    gateway: NotificationGateway,
    to: str,
    template_id: str,
    context: Dict[str, Any],
    timeout: float,
) -> bool:
    """
    Send through the gateway with a timeout, reporting failure as False.

    Delivery problems are recovered by the caller (cleanup, retry later), so
    they are logged here and never propagated.
    """
    try:
        return bool(await asyncio.wait_for(gateway.send(to, template_id, context), timeout))
    except asyncio.TimeoutError:
        logger.warning("Notification %s to %s timed out", template_id, mask_email(to))
        return False
    except Exception:
        logger.exception("Notification %s to %s failed", template_id, mask_email(to))
        return False
