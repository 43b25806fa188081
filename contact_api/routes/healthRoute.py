from fastapi import APIRouter

from contact_api.schemas.contactSchema import ContactOk

router = APIRouter()


@router.get("/health", response_model=ContactOk)
async def health_check():
    """Liveness probe. No side effects, independent of SMTP and rate limits."""
    return ContactOk()
