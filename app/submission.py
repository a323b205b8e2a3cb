"""Submission flow: validate → look up → generate.

One submission is in flight at a time. The flow walks
``idle → fetching → generating → success`` and falls back to ``idle`` on any
error, leaving a user-facing message on the returned result.
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Optional, Protocol

from app.certificate_generator import certificate_filename
from app.code_validator import INVALID_CODE_MESSAGE, is_valid_code
from app.errors import LookupFailedError, ParticipantNotFoundError
from app.models import Participant

logger = logging.getLogger(__name__)

NOT_ELIGIBLE_MESSAGE = "You are not eligible for a certificate yet. Please complete the marathon."
GENERIC_FAILURE_MESSAGE = "Failed to process your request. Please try again."
SUCCESS_MESSAGE = "Certificate generated and downloaded successfully!"


class SubmissionStatus(str, enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    GENERATING = "generating"
    SUCCESS = "success"


class SubmissionError(str, enum.Enum):
    VALIDATION = "validation"
    LOOKUP = "lookup"
    ELIGIBILITY = "eligibility"
    GENERATION = "generation"


class ParticipantLookup(Protocol):
    def get_participant(self, code: str) -> Participant: ...


class DocumentGenerator(Protocol):
    def generate(self, participant_name: str) -> Optional[bytes]: ...


@dataclass
class SubmissionResult:
    status: SubmissionStatus
    message: str
    error: Optional[SubmissionError] = None
    participant: Optional[Participant] = None
    document: Optional[bytes] = None
    filename: Optional[str] = None
    # set when the lookup failed with "not found" rather than a service error
    not_found: bool = False

    @property
    def ok(self) -> bool:
        return self.status is SubmissionStatus.SUCCESS


class SubmissionFlow:
    """Drives one certificate request at a time."""

    def __init__(self, lookup: ParticipantLookup, generator: DocumentGenerator):
        self.lookup = lookup
        self.generator = generator
        self.status = SubmissionStatus.IDLE
        self._participant: Optional[Participant] = None
        self._in_flight = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.status in (SubmissionStatus.FETCHING, SubmissionStatus.GENERATING)

    def _fail(self, error: SubmissionError, message: str, **extra) -> SubmissionResult:
        self.status = SubmissionStatus.IDLE
        return SubmissionResult(status=self.status, message=message, error=error, **extra)

    def _participant_for(self, code: str) -> Participant:
        cached = self._participant
        if cached is not None and cached.unique_code == code:
            return cached

        participant = self.lookup.get_participant(code)
        # Ineligible records are re-checked upstream on the next submission
        self._participant = participant if participant.is_crossed else None
        return participant

    def submit(self, code: str) -> Optional[SubmissionResult]:
        """Run the flow for ``code``; returns None if a submission is already running."""
        # Requests arrive on worker threads; the busy check and the claim must be one step.
        if self.busy or not self._in_flight.acquire(blocking=False):
            logger.info("Ignoring submission for %s while %s", code, self.status.value)
            return None
        try:
            return self._run(code)
        finally:
            self._in_flight.release()

    def _run(self, code: str) -> SubmissionResult:
        if not is_valid_code(code):
            return self._fail(SubmissionError.VALIDATION, INVALID_CODE_MESSAGE)

        self.status = SubmissionStatus.FETCHING
        try:
            participant = self._participant_for(code)
        except LookupFailedError as e:
            logger.info("Lookup failed for %s: %s", code, e)
            return self._fail(
                SubmissionError.LOOKUP,
                str(e),
                not_found=isinstance(e, ParticipantNotFoundError),
            )
        except Exception:
            logger.exception("Unexpected lookup failure for %s", code)
            return self._fail(SubmissionError.LOOKUP, GENERIC_FAILURE_MESSAGE)

        if not participant.is_crossed:
            return self._fail(SubmissionError.ELIGIBILITY, NOT_ELIGIBLE_MESSAGE, participant=participant)

        name = participant.name.strip()
        self.status = SubmissionStatus.GENERATING
        try:
            document = self.generator.generate(name)
        except Exception:
            logger.exception("Certificate generator raised for %s", code)
            document = None

        if not document:
            return self._fail(SubmissionError.GENERATION, GENERIC_FAILURE_MESSAGE, participant=participant)

        self.status = SubmissionStatus.SUCCESS
        return SubmissionResult(
            status=self.status,
            message=SUCCESS_MESSAGE,
            participant=participant,
            document=document,
            filename=certificate_filename(name),
        )
