"""Session scoped registry of pending action tokens.

Every rendered form that leads to another submission carries a ``wf_token``
hidden field. The token id points to a server side record of the action and
the fields the form offered, so a submission can only execute what the server
actually rendered.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Iterable
from typing import TYPE_CHECKING

from litestar_workflow_forms.core.models import FieldDescriptor, PendingActionToken
from litestar_workflow_forms.core.types import ReservedParam

if TYPE_CHECKING:
    from litestar_workflow_forms.core.models import WorkflowSnapshot
    from litestar_workflow_forms.core.protocols import SessionStore

__all__ = ["TOKEN_BYTES", "TokenRegistry"]

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
"""Entropy of a token id in bytes."""

_KEY_PREFIX = "wf_token:"


class TokenRegistry:
    """Register, fetch and purge pending action tokens.

    Attributes:
        store: Session store the records live in.
    """

    __slots__ = ("store",)

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    @staticmethod
    def _key(token_id: str) -> str:
        return f"{_KEY_PREFIX}{token_id}"

    async def register(
        self,
        snapshot: WorkflowSnapshot,
        action: str | None,
        fields: Iterable[FieldDescriptor],
        handler: str | None = None,
    ) -> FieldDescriptor:
        """Record a pending action and return the hidden field referencing it.

        Args:
            snapshot: The snapshot the form was rendered from.
            action: The action the form executes.
            fields: The exact fields offered to the client.
            handler: Optional custom handler processing the submission.

        Returns:
            The ``wf_token`` hidden field to append to the form.
        """
        token = PendingActionToken(
            id=secrets.token_urlsafe(TOKEN_BYTES),
            workflow_id=snapshot.id,
            workflow_type=snapshot.type,
            last_update=snapshot.last_update,
            action=action,
            fields=tuple(fields),
            handler=handler,
        )
        await self.store.set(self._key(token.id), token.to_dict())
        logger.debug("Registered token for workflow %s action %s", snapshot.id, action)
        return FieldDescriptor.hidden(str(ReservedParam.TOKEN), token.id)

    async def fetch(self, token_id: str, purge: bool = False) -> PendingActionToken | None:
        """Return the record stored under a token id.

        Args:
            token_id: The submitted token id.
            purge: Delete the record as part of the read.

        Returns:
            The pending action, or ``None`` if the id is unknown or already used.
        """
        if not token_id:
            return None
        key = self._key(token_id)
        data = await self.store.pop(key) if purge else await self.store.get(key)
        if data is None:
            logger.debug("Token lookup missed (purge=%s)", purge)
            return None
        return PendingActionToken.from_dict(data)

    async def purge(self, token_id: str) -> None:
        """Delete a record, no-op if it does not exist."""
        await self.store.delete(self._key(token_id))
