"""
API Version 1 Router.

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from daybook.backend.api.v1.endpoints import identities, notes

router = APIRouter()

# Notes endpoints
router.include_router(notes.router, prefix="/notes", tags=["notes"])

# Identity picker
router.include_router(identities.router, prefix="/identities", tags=["identities"])
