"""Recipient resolution for escalation notifications."""

from typing import List, Optional, Sequence

from issue_escalation.config import settings
from issue_escalation.escalation.errors import StoreReadError
from issue_escalation.escalation.interfaces import OrganizationStore
from issue_escalation.utils.logging import get_logger

logger = get_logger(__name__)


class RecipientResolver:
    """Resolves who receives an escalation notice.

    Level recipients win; otherwise the organization's group address is
    used, and as a last resort the configured fallback address. The result
    is never empty and its order is the order recipients are tried in.
    """

    def __init__(
        self,
        organization_store: OrganizationStore,
        fallback_address: Optional[str] = None
    ):
        self.organization_store = organization_store
        self.fallback_address = fallback_address or settings.ESCALATION_FALLBACK_EMAIL

    async def resolve(
        self,
        level_recipients: Sequence[str],
        organization_id: str
    ) -> List[str]:
        """Return the ordered list of candidate recipients."""
        if level_recipients:
            return list(level_recipients)

        group_address = await self._get_group_address(organization_id)
        if group_address:
            logger.debug("Using organization group address", organization_id=organization_id)
            return [group_address]

        logger.info(
            "No level or organization recipients, using fallback address",
            organization_id=organization_id,
            fallback=self.fallback_address
        )
        return [self.fallback_address]

    async def _get_group_address(self, organization_id: str) -> Optional[str]:
        try:
            address = await self.organization_store.get_group_address(organization_id)
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError("get_group_address", str(e)) from e

        if address and address.strip():
            return address.strip()
        return None
