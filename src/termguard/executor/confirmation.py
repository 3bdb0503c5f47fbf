"""Confirmation broker — yes/no decisions requested from a human."""

from __future__ import annotations

import asyncio
import logging
from typing import NamedTuple

from termguard.events import Emitter
from termguard.models.execution import ConfirmationRequest
from termguard.models.policy import SafetyAssessment

logger = logging.getLogger(__name__)


class DecisionSlot:
    """Holds at most one decision; the first resolution wins."""

    def __init__(self) -> None:
        self._future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

    @property
    def pending(self) -> bool:
        return not self._future.done()

    def resolve(self, confirmed: bool) -> bool:
        if self._future.done():
            return False
        self._future.set_result(confirmed)
        return True

    async def wait(self) -> bool:
        # Shielded so a cancelled waiter does not cancel the decision itself.
        return await asyncio.shield(self._future)


class _Pending(NamedTuple):
    request: ConfirmationRequest
    slot: DecisionSlot


class ConfirmationBroker:
    def __init__(self) -> None:
        self._pending: dict[str, _Pending] = {}
        self.on_confirmation_required: Emitter[ConfirmationRequest] = Emitter(
            "confirmation_required"
        )

    def open(
        self, execution_id: str, command: str, assessment: SafetyAssessment
    ) -> DecisionSlot:
        """Register a pending decision and notify subscribers."""
        slot = DecisionSlot()
        request = ConfirmationRequest(id=execution_id, command=command, assessment=assessment)
        self._pending[execution_id] = _Pending(request, slot)
        self.on_confirmation_required.fire(request)
        return slot

    def respond(self, execution_id: str, confirmed: bool) -> bool:
        entry = self._pending.pop(execution_id, None)
        if entry is None:
            return False
        logger.debug(
            "Confirmation %s for %s", "granted" if confirmed else "denied", entry.request.command
        )
        return entry.slot.resolve(confirmed)

    def discard(self, execution_id: str) -> None:
        self._pending.pop(execution_id, None)

    def get(self, execution_id: str) -> ConfirmationRequest | None:
        entry = self._pending.get(execution_id)
        return entry.request if entry else None

    def pending_ids(self) -> list[str]:
        return list(self._pending)

    def deny_all(self) -> None:
        for execution_id in self.pending_ids():
            self.respond(execution_id, False)

    def dispose(self) -> None:
        self.deny_all()
        self.on_confirmation_required.dispose()
