# src/cask_notes/api/v1/endpoints/content.py
"""Content sanitization endpoint used by the editor preview."""

from fastapi import APIRouter

from cask_notes.schemas.content import SanitizeRequest, SanitizeResponse
from cask_notes.services.sanitizer import sanitize_content

router = APIRouter(prefix="/content", tags=["content"])


@router.post("/sanitize", response_model=SanitizeResponse)
def sanitize(payload: SanitizeRequest) -> SanitizeResponse:
    """Return ``payload.html`` as it would be stored."""
    return SanitizeResponse(html=sanitize_content(payload.html))
