from collections.abc import Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from app.core.security import decode_token
from app.db.session import SessionLocal
from app.models.user import User, UserRole

security = HTTPBearer()

# Only these roles may create, move or remove timetable entries.
SCHEDULE_EDITOR_ROLES = frozenset({UserRole.admin})


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _credentials_error() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def _user_id_from_token(token: str) -> str:
    try:
        payload = decode_token(token)
    except JWTError as exc:
        raise _credentials_error() from exc
    user_id = payload.get("sub")
    if not isinstance(user_id, str) or not user_id:
        raise _credentials_error()
    return user_id


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the bearer token issued by the identity provider to an active user."""
    user = db.get(User, _user_id_from_token(credentials.credentials))
    if user is None:
        raise _credentials_error()
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return user


def require_roles(*roles: UserRole) -> Callable[[User], User]:
    allowed_roles = frozenset(roles)

    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return current_user

    return role_checker


def can_edit_schedule(user: User) -> bool:
    """The authorization decision handed to the timetable service."""
    return user.is_active and user.role in SCHEDULE_EDITOR_ROLES
