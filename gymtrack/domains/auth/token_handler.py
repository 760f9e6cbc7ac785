# gymtrack/domains/auth/token_handler.py

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from gymtrack.domains.auth.schemas import CurrentUser
from gymtrack.utils.fcm_service import init_firebase
import logging

logger = logging.getLogger(__name__)

security = HTTPBearer()

ADMIN_CLAIM = "admin"


def verify_token(credentials: HTTPAuthorizationCredentials = Depends(security)) -> CurrentUser:
    """
    Verify the Firebase ID token of the request and return the signed-in user
    """
    token = credentials.credentials

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        init_firebase()
        claims = auth.verify_id_token(token)
    except (ValueError, auth.InvalidIdTokenError, auth.ExpiredIdTokenError, auth.RevokedIdTokenError) as e:
        logger.warning(f"⚠️ Rejected ID token: {str(e)}")
        raise credentials_exception

    uid = claims.get("uid") or claims.get("sub")
    if not uid:
        raise credentials_exception

    return CurrentUser(
        uid=uid,
        email=claims.get("email"),
        is_admin=bool(claims.get(ADMIN_CLAIM, False)),
    )


def require_admin(user: CurrentUser = Depends(verify_token)) -> CurrentUser:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin privileges required."
        )
    return user
