"""Request dependencies: repository access and session authentication."""

import time

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from obicei.db.repository import Repository

bearer_scheme = HTTPBearer(auto_error=False)


def get_repo(request: Request) -> Repository:
    return request.app.state.repo


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    repo: Repository = Depends(get_repo),
) -> int:
    """Resolve the bearer session token to a user id, or 401."""
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    user_id = await repo.get_session_user_id(credentials.credentials, int(time.time()))
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
    return user_id
