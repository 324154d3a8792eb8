"""
FastAPI Dependencies.

Shared dependencies for request handling.
"""

import uuid
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from daybook.backend.core.database import get_db_session

# Type alias for database session dependency
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_request_id(x_request_id: str | None = Header(None)) -> str:
    """Extract or generate request ID from headers."""
    return x_request_id or str(uuid.uuid4())


RequestId = Annotated[str, Depends(get_request_id)]


def get_identities() -> list[str]:
    """Configured author identities from application.yaml."""
    from daybook.backend.core.config import get_app_config

    return list(get_app_config().application.identities)


Identities = Annotated[list[str], Depends(get_identities)]
