"""Tracking for outstanding interpretation requests.

Every request to the interpretation collaborator is issued as a
RequestTicket for a purpose (evaluation, weighing, suggestions,
explanation). At most one ticket per purpose is pending. A ticket is
bound to the context it was issued in; once that context changes the
ticket is superseded and any response it later receives is dropped.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable

import structlog

from src.decision.errors import RequestInFlightError

logger = structlog.get_logger()


class RequestPurpose(str, Enum):
    """What an interpretation request is for."""

    EVALUATION = "evaluation"
    WEIGHING = "weighing"
    OPTION_SUGGESTIONS = "option_suggestions"
    CRITERIA_SUGGESTIONS = "criteria_suggestions"
    EXPLANATION = "explanation"


class RequestState(str, Enum):
    """Lifecycle of a request ticket."""

    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"
    DISCARDED = "discarded"


@dataclass
class RequestTicket:
    """One outstanding or finished interpretation request."""

    purpose: RequestPurpose
    context: Hashable
    state: RequestState = RequestState.PENDING
    error: str | None = None
    result: Any = field(default=None, repr=False)

    @property
    def is_pending(self) -> bool:
        return self.state == RequestState.PENDING


class RequestTracker:
    """Issues and settles request tickets, one live ticket per purpose."""

    def __init__(self) -> None:
        self._live: dict[RequestPurpose, RequestTicket] = {}

    def issue(self, purpose: RequestPurpose, context: Hashable) -> RequestTicket:
        """Open a new ticket for a purpose.

        Args:
            purpose: What the request is for
            context: Snapshot of the state the response must still match

        Returns:
            The new pending ticket

        Raises:
            RequestInFlightError: If a ticket for this purpose is pending
        """
        current = self._live.get(purpose)
        if current is not None and current.is_pending:
            raise RequestInFlightError(
                f"A {purpose.value} request is already in progress"
            )
        ticket = RequestTicket(purpose=purpose, context=context)
        self._live[purpose] = ticket
        return ticket

    def is_current(self, ticket: RequestTicket) -> bool:
        """Whether the ticket is still the live one for its purpose."""
        return self._live.get(ticket.purpose) is ticket

    def resolve(self, ticket: RequestTicket, result: Any = None) -> bool:
        """Mark a ticket resolved.

        Returns:
            False if the ticket was superseded and its result must be dropped
        """
        if not self.is_current(ticket) or not ticket.is_pending:
            self._discard(ticket)
            return False
        ticket.state = RequestState.RESOLVED
        ticket.result = result
        return True

    def fail(self, ticket: RequestTicket, error: str) -> bool:
        """Mark a ticket failed.

        Returns:
            False if the ticket was superseded and the failure is moot
        """
        if not self.is_current(ticket) or not ticket.is_pending:
            self._discard(ticket)
            return False
        ticket.state = RequestState.FAILED
        ticket.error = error
        return True

    def cancel(self, *purposes: RequestPurpose) -> None:
        """Supersede live tickets so late responses are dropped.

        With no arguments every purpose is cancelled.
        """
        targets = purposes or tuple(self._live)
        for purpose in targets:
            ticket = self._live.pop(purpose, None)
            if ticket is not None and ticket.is_pending:
                ticket.state = RequestState.DISCARDED
                logger.info("request cancelled", purpose=purpose.value)

    def state(self, purpose: RequestPurpose) -> RequestState | None:
        """State of the live ticket for a purpose, if any."""
        ticket = self._live.get(purpose)
        return ticket.state if ticket is not None else None

    def is_pending(self, purpose: RequestPurpose) -> bool:
        ticket = self._live.get(purpose)
        return ticket is not None and ticket.is_pending

    def _discard(self, ticket: RequestTicket) -> None:
        if ticket.is_pending:
            ticket.state = RequestState.DISCARDED
        logger.info(
            "stale response discarded",
            purpose=ticket.purpose.value,
            context=str(ticket.context),
        )
