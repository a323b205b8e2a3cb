"""
FastAPI Marathon Certificate Service
Serves the code form and the certificate download endpoint
"""

from pathlib import Path
from typing import Any, Dict
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response
from fastapi.staticfiles import StaticFiles

from app.certificate_generator import BackgroundCache, CertificateGenerator
from app.code_validator import is_valid_code, normalize_code
from app.config import get_settings
from app.logging_config import setup_logging
from app.lookup_client import LookupClient
from app.submission import SubmissionError, SubmissionFlow, SubmissionResult

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

# Initialize FastAPI app
app = FastAPI(
    title="Marathon Certificate Service",
    description="Validate a participant code and download the finisher certificate",
    version="1.0.0",
)

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = PROJECT_ROOT / "templates"

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Initialize collaborators
background_cache = BackgroundCache(settings.CERT_BACKGROUND_URL, timeout=settings.HTTP_TIMEOUT_SECONDS)
cert_generator = CertificateGenerator(background_cache, font_path=settings.CERT_FONT_PATH)
lookup_client = LookupClient(
    settings.LOOKUP_API_BASE_URL,
    user_path=settings.LOOKUP_USER_PATH,
    timeout=settings.HTTP_TIMEOUT_SECONDS,
)
submission_flow = SubmissionFlow(lookup_client, cert_generator)


def get_flow() -> SubmissionFlow:
    return submission_flow


if TEMPLATES_DIR.exists():
    app.mount("/static", StaticFiles(directory=str(TEMPLATES_DIR)), name="static")


@app.on_event("startup")
def prefetch_background() -> None:
    # Failures are logged inside; the first request retries the fetch.
    background_cache.prefetch()


def _content_disposition(filename: str) -> str:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii").replace('"', "")
    if ascii_name == filename:
        return f'attachment; filename="{filename}"'
    return f"attachment; filename=\"{ascii_name}\"; filename*=UTF-8''{quote(filename)}"


_ERROR_STATUS = {
    SubmissionError.VALIDATION: 400,
    SubmissionError.ELIGIBILITY: 403,
    SubmissionError.GENERATION: 500,
}


def _error_status(result: SubmissionResult) -> int:
    if result.error is SubmissionError.LOOKUP:
        return 404 if result.not_found else 502
    return _ERROR_STATUS.get(result.error, 500)


@app.get("/", response_class=HTMLResponse)
async def home():
    """
    Serve the code entry form

    Returns:
        HTML page with the certificate form
    """
    html_path = TEMPLATES_DIR / "index.html"

    if not html_path.exists():
        raise HTTPException(status_code=500, detail="Template file not found")

    with open(html_path, "r", encoding="utf-8") as file:
        html_content = file.read()

    return HTMLResponse(content=html_content)


@app.get("/health")
async def health_check(flow: SubmissionFlow = Depends(get_flow)) -> Dict[str, Any]:
    """
    Health check endpoint for monitoring

    Returns:
        Status message and configuration snapshot
    """
    return {
        "status": "running",
        "submission_status": flow.status.value,
        "lookup_api": settings.LOOKUP_API_BASE_URL,
        "background": {
            "url": background_cache.url,
            "cached": background_cache.cached,
        },
    }


@app.get("/validate")
async def validate_code(code: str) -> Dict[str, Any]:
    """
    Check a code's shape and checksum without touching the network

    Args:
        code: The participant code as typed

    Returns:
        The normalized code and its validity
    """
    normalized = normalize_code(code)
    return {"code": normalized, "valid": is_valid_code(normalized)}


@app.get("/certificate")
def get_certificate(
    code: str = Query(..., description="6-character participant code, e.g. 12345P"),
    flow: SubmissionFlow = Depends(get_flow),
):
    """
    Validate the code, look up the participant and return the certificate PDF

    Args:
        code: The participant code

    Returns:
        PDF file as download

    Raises:
        HTTPException: 400 invalid code, 403 not eligible, 404 unknown code,
            409 another request in flight, 502 lookup service failure,
            500 generation failure
    """
    result = flow.submit(normalize_code(code))

    if result is None:
        raise HTTPException(status_code=409, detail="A certificate request is already in progress.")

    if not result.ok:
        raise HTTPException(status_code=_error_status(result), detail=result.message)

    return Response(
        content=result.document,
        media_type="application/pdf",
        headers={"Content-Disposition": _content_disposition(result.filename)},
    )


# Run with: uvicorn app.main:app --reload
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
