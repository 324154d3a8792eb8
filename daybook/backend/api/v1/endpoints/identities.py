"""
Identities API Endpoint.

The configured display names a note can be written under.
"""

from fastapi import APIRouter

from daybook.backend.core.dependencies import Identities
from daybook.backend.schemas.base import ApiResponse

router = APIRouter()


@router.get(
    "",
    response_model=ApiResponse[list[str]],
    summary="List identities",
    description="Author names configured in application.yaml.",
)
async def list_identities(identities: Identities) -> ApiResponse[list[str]]:
    return ApiResponse(data=identities)
