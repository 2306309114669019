"""
Confirmation gate — the approval step every mutating edit passes through
before anything is written.

Interactive implementations (console and Textual) live in
``patch_engine.diff_display``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfirmationRequest:
    operation: str      # e.g. "Write", "Edit file", "Replace lines 3-5"
    path: str
    preview_diff: str


@dataclass(frozen=True)
class ConfirmationResponse:
    confirmed: bool
    feedback: Optional[str] = None
    remember: bool = False  # approve the rest of the session as well


class ConfirmationGate(Protocol):
    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        ...


class AutoApprove:
    """Approve everything. Used for ``--auto`` runs and in tests."""

    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        logger.debug("[PatchEngine] auto-approved %s %s",
                     request.operation, request.path)
        return ConfirmationResponse(confirmed=True)


class RejectAll:
    """Deny everything, optionally with a fixed feedback message."""

    def __init__(self, feedback: str | None = None) -> None:
        self.feedback = feedback

    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        return ConfirmationResponse(confirmed=False, feedback=self.feedback)


class SessionGate:
    """Wrap another gate and stop asking once the session is approved.

    The session is approved when the inner gate answers with
    ``remember=True`` or when ``approve_session`` is called directly.
    """

    def __init__(self, inner: ConfirmationGate) -> None:
        self._inner = inner
        self._session_approved = False

    @property
    def session_approved(self) -> bool:
        return self._session_approved

    def approve_session(self) -> None:
        self._session_approved = True

    def reset(self) -> None:
        self._session_approved = False

    def request_confirmation(
        self, request: ConfirmationRequest,
    ) -> ConfirmationResponse:
        if self._session_approved:
            return ConfirmationResponse(confirmed=True)

        response = self._inner.request_confirmation(request)
        if response.confirmed and response.remember:
            logger.info("[PatchEngine] File operations approved for this session")
            self._session_approved = True
        return response
