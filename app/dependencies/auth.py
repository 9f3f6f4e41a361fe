from collections.abc import Callable, Mapping
from enum import Enum
from typing import Annotated

from fastapi import Depends, HTTPException, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.core.config import get_settings


class Role(str, Enum):
    """Supported roles."""

    ADMIN = "admin"
    BOOKER = "booker"
    ATTENDEE = "attendee"


class User:
    """Authenticated account; ``uid`` scopes every event and history query."""

    def __init__(self, uid: str, roles: tuple[Role, ...]):
        self.uid = uid
        self.roles = roles

    def has_role(self, role: Role) -> bool:
        return role in self.roles


ANONYMOUS = User(uid="", roles=())

bearer_scheme = HTTPBearer(auto_error=False)


def parse_token_entry(entry: str) -> User:
    """Build a user from a ``"uid:role,role"`` token entry."""

    uid, _, role_text = entry.partition(":")
    uid = uid.strip()
    if not uid:
        raise ValueError(f"Token entry {entry!r} has no uid")
    try:
        roles = tuple(Role(item.strip()) for item in role_text.split(",") if item.strip())
    except ValueError as exc:
        raise ValueError(f"Token entry {entry!r} names an unknown role") from exc
    return User(uid=uid, roles=roles)


def resolve_user_from_token(token: str | None, tokens: Mapping[str, str] | None = None) -> User:
    """Map a bearer token to a user using the configured token table."""

    if not token:
        return ANONYMOUS

    table = get_settings().auth_tokens if tokens is None else tokens
    entry = table.get(token)
    if entry is None:
        raise HTTPException(status_code=401, detail="Invalid authentication credentials")
    return parse_token_entry(entry)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)]
) -> User:
    return resolve_user_from_token(None if credentials is None else credentials.credentials)


def role_required(role: Role) -> Callable[[User], User]:
    """Dependency factory ensuring the current user has the requested role."""

    async def dependency(user: Annotated[User, Depends(get_current_user)]) -> User:
        if not user.has_role(role):
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return user

    return dependency


CurrentUser = Annotated[User, Depends(get_current_user)]
