import io
import pathlib
import sys
from typing import Dict, List, Optional

import pytest
from PIL import Image

PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from app.certificate_generator import BackgroundCache, CertificateGenerator
from app.errors import ParticipantNotFoundError
from app.models import Participant
from app.submission import SubmissionFlow


def make_png(size=(842, 595), color=(230, 240, 255, 255)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


class FakeLookup:
    """In-memory stand-in for the lookup API."""

    def __init__(self, records: Optional[Dict[str, Participant]] = None, error: Optional[Exception] = None):
        self.records = records or {}
        self.error = error
        self.calls: List[str] = []

    def get_participant(self, code: str) -> Participant:
        self.calls.append(code)
        if self.error is not None:
            raise self.error
        if code not in self.records:
            raise ParticipantNotFoundError(code)
        return self.records[code]


class CountingFetch:
    def __init__(self, payload: Optional[bytes] = None, error: Optional[Exception] = None):
        self.payload = payload
        self.error = error
        self.calls = 0

    def __call__(self, url: str) -> bytes:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def fetch(png_bytes) -> CountingFetch:
    return CountingFetch(payload=png_bytes)


@pytest.fixture
def background(fetch) -> BackgroundCache:
    return BackgroundCache("https://assets.test/background.png", fetch=fetch)


@pytest.fixture
def generator(background) -> CertificateGenerator:
    return CertificateGenerator(background)


@pytest.fixture
def participants() -> Dict[str, Participant]:
    return {
        "12345P": Participant(unique_code="12345P", name="Jane Doe", isCrossed=True),
        "00000A": Participant(unique_code="00000A", name="Sam Runner", isCrossed=False),
    }


@pytest.fixture
def lookup(participants) -> FakeLookup:
    return FakeLookup(participants)


@pytest.fixture
def flow(lookup, generator) -> SubmissionFlow:
    return SubmissionFlow(lookup, generator)


@pytest.fixture
def client(flow):
    from fastapi.testclient import TestClient

    from app.main import app, get_flow

    app.dependency_overrides[get_flow] = lambda: flow
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
