from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from carsense_api.config import Settings
from carsense_api.database import get_db
from carsense_api.models.user import User
from carsense_api.policy import require_caller
from carsense_api.services.ml_client import MLServiceClient
from carsense_api.utils.security import verify_access_token
from carsense_api.utils.exceptions import UnauthorizedException, MLServiceUnavailableException

# Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# ─── Session resolution ───────────────────────────────────────────────────────
def get_optional_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> User | None:
    """
    Resolve the caller from the session token.
    Returns None when no token is sent; the authorization policy decides what
    an anonymous caller may do. A token that is present but invalid, expired,
    or names an unknown user is rejected with 401.
    """
    if not credentials:
        return None

    payload = verify_access_token(settings, credentials.credentials)
    user_id: str | None = payload.get("sub")

    if user_id is None:
        raise UnauthorizedException("Invalid token payload")

    user = db.query(User).filter(User.id == str(user_id)).first()
    if not user:
        raise UnauthorizedException("Unknown user")

    return user


# ─── ML service ───────────────────────────────────────────────────────────────
def get_ml_client(request: Request, caller: User | None = Depends(get_optional_user)) -> MLServiceClient:
    """The configured ML client. Anonymous callers are turned away before its availability is checked."""
    require_caller(caller)
    client: MLServiceClient | None = request.app.state.ml_client
    if client is None:
        raise MLServiceUnavailableException()
    return client
