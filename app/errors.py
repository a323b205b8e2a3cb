"""Exceptions raised at the participant lookup seam."""


class CertificateServiceError(Exception):
    """Base class for errors surfaced to the submission flow."""


class LookupFailedError(CertificateServiceError):
    """The participant record could not be obtained."""


class ParticipantNotFoundError(LookupFailedError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("User not found or code is incorrect.")


class LookupServiceError(LookupFailedError):
    """Network failure, unexpected status or malformed body from the lookup API."""
