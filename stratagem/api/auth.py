"""
Auth Gate - Bearer token resolution and identity dependencies.

The ``Authorization: Bearer <token>`` header is parsed exactly once per
request by ``install_identity_middleware`` and the result is attached to
``request.state.identity``. Handlers never look at the header themselves;
they declare one of the dependencies below:

    acting_user_id     the caller, or the configured default identity
    optional_user_id   the caller, or None
    require_user_id    the caller, or 401 UNAUTHORIZED
    require_bearer     router-level gate: 401 unless the token is known

Tokens are a static map from ``Settings.token_bindings``. Unknown tokens
resolve to the anonymous identity; they never borrow the default user.
"""

from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, FastAPI, Request

from ..config import Settings
from .deps import get_settings
from .errors import APIError
from .schemas import ErrorCode

AUTH_REALM = "Abstract Strategy Games API"
WWW_AUTHENTICATE = {"WWW-Authenticate": f'Bearer realm="{AUTH_REALM}"'}


@dataclass(frozen=True)
class Identity:
    """Who is calling. ``user_id`` is None for anonymous callers."""
    user_id: Optional[str] = None
    token_valid: bool = False

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Identity()


def parse_bearer(header: Optional[str]) -> Optional[str]:
    """Extract the token from an Authorization header value."""
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        return None
    return token


def resolve_identity(authorization: Optional[str], bindings: dict[str, str]) -> Identity:
    token = parse_bearer(authorization)
    if token is None:
        return ANONYMOUS
    user_id = bindings.get(token)
    if user_id is None:
        return ANONYMOUS
    return Identity(user_id=user_id, token_valid=True)


def install_identity_middleware(app: FastAPI, settings: Settings) -> None:
    bindings = settings.token_bindings

    @app.middleware("http")
    async def attach_identity(request: Request, call_next):
        request.state.identity = resolve_identity(request.headers.get("authorization"), bindings)
        return await call_next(request)


# =============================================================================
# Dependencies
# =============================================================================

def get_identity(request: Request) -> Identity:
    return getattr(request.state, "identity", ANONYMOUS)


def acting_user_id(
    identity: Annotated[Identity, Depends(get_identity)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """The caller, falling back to the configured default identity."""
    return identity.user_id or settings.default_user_id


def optional_user_id(identity: Annotated[Identity, Depends(get_identity)]) -> Optional[str]:
    return identity.user_id


def require_user_id(identity: Annotated[Identity, Depends(get_identity)]) -> str:
    if identity.user_id is None:
        raise APIError(401, ErrorCode.UNAUTHORIZED.value, "Authentication required", headers=WWW_AUTHENTICATE)
    return identity.user_id


def require_bearer(identity: Annotated[Identity, Depends(get_identity)]) -> Identity:
    """Gate for protected route groups. Runs before the route handler."""
    if not identity.token_valid:
        raise APIError(
            401,
            ErrorCode.UNAUTHORIZED.value,
            "Valid bearer token required",
            headers=WWW_AUTHENTICATE,
        )
    return identity


ActingUser = Annotated[str, Depends(acting_user_id)]
OptionalUser = Annotated[Optional[str], Depends(optional_user_id)]
RequiredUser = Annotated[str, Depends(require_user_id)]
