import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from campaign_player.auth.session import AuthSession, SessionStore
from campaign_player.deps import get_session_store
from campaign_player.enums import UserRoleEnum

bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth.deps")


def get_auth_session(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    store: SessionStore = Depends(get_session_store),
) -> AuthSession:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    session = store.get(credentials.credentials)
    if session is None:
        logger.debug("Unknown bearer token")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Session expired or unknown")
    return session


def require_roles(*roles: UserRoleEnum):
    def dependency(session: AuthSession = Depends(get_auth_session)) -> AuthSession:
        if not session.has_role(*roles):
            logger.info(
                "Role check failed",
                extra={"user_id": session.user.id, "role": session.role.value},
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access Denied")
        return session

    return dependency


require_admin = require_roles(UserRoleEnum.admin)
