"""
ClientHub Backend - Request Dependencies (Auth Gate)
=====================================================

What:  `require_admin`, the FastAPI dependency guarding every protected route.
How:   Reads `Authorization: Bearer <token>`, verifies it with TokenService,
       then checks the token was issued after the administrator's last logout.
Who:   Declared by protected routes: `admin: TokenIdentity = Depends(require_admin)`.

Outcomes:
    no Authorization header / not a Bearer header   → 401 MissingTokenError
    bad signature, malformed, expired                → 403 InvalidTokenError
    issued before supermasters.logged_out_at         → 403 InvalidTokenError
    otherwise                                        → TokenIdentity, also on request.state.admin
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from clienthub.database import get_db_session
from clienthub.exceptions import InvalidTokenError, MissingTokenError
from clienthub.services.auth_service import auth_service
from clienthub.services.security import TokenIdentity, token_service

logger = logging.getLogger(__name__)

# auto_error=False: a missing header must surface as our MissingTokenError (401)
_bearer = HTTPBearer(auto_error=False)


async def require_admin(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    db: AsyncSession = Depends(get_db_session),
) -> TokenIdentity:
    if credentials is None or not credentials.credentials:
        raise MissingTokenError()

    identity = token_service.verify(credentials.credentials)

    admin = await auth_service.find_admin(db, identity.username)
    if admin is not None and admin.logged_out_at is not None:
        if identity.issued_before(admin.logged_out_at):
            logger.info("Rejected token for %s issued before last logout", identity.username)
            raise InvalidTokenError(reason="revoked")

    request.state.admin = identity
    return identity
