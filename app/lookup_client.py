"""
Lookup Client Module
Fetches participant records from the marathon website's API
"""

import logging
from typing import Any, Optional
from urllib.parse import quote

import requests
from pydantic import ValidationError

from app.errors import LookupServiceError, ParticipantNotFoundError
from app.models import Participant

logger = logging.getLogger(__name__)


class LookupClient:
    """Thin typed client for the participant lookup endpoint"""

    def __init__(
        self,
        base_url: str,
        user_path: str = "/api/user/{code}",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the lookup client

        Args:
            base_url: API origin, e.g. https://marathon-16-website.vercel.app
            user_path: Path template containing a ``{code}`` placeholder
            timeout: Per-request timeout in seconds
            session: Optional requests session (shared connection pool)
        """
        self.base_url = (base_url or "").rstrip("/")
        self.user_path = user_path if user_path.startswith("/") else f"/{user_path}"
        self.timeout = timeout
        self.session = session or requests.Session()

    def participant_url(self, code: str) -> str:
        return self.base_url + self.user_path.format(code=quote(code, safe=""))

    def get_participant(self, code: str) -> Participant:
        """
        Look up a participant by their unique code

        Args:
            code: A code that already passed checksum validation

        Returns:
            The participant record

        Raises:
            ParticipantNotFoundError: The API has no record for this code
            LookupServiceError: Network failure or unusable response
        """
        url = self.participant_url(code)
        try:
            resp = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.warning("Lookup request for %s failed: %s", code, e)
            raise LookupServiceError("Could not reach the participant service. Please try again.") from e

        if resp.status_code == 404:
            raise ParticipantNotFoundError(code)
        if not resp.ok:
            logger.warning("Lookup for %s returned HTTP %s", code, resp.status_code)
            raise LookupServiceError(f"Participant service error (HTTP {resp.status_code}).")

        try:
            payload: Any = resp.json() if resp.content else None
        except ValueError as e:
            raise LookupServiceError("Participant service returned an unreadable response.") from e

        if not payload:
            raise ParticipantNotFoundError(code)

        try:
            return Participant.model_validate(payload)
        except ValidationError as e:
            logger.warning("Lookup for %s returned an unexpected body: %s", code, e)
            raise LookupServiceError("Participant service returned an unexpected response.") from e
