# app/auth/dependencies.py
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.tokens import AuthContext
from app.core.exceptions import AuthDecodeError, Forbidden

# auto_error off so a missing header maps to our 401 body
bearer = HTTPBearer(auto_error=False)


def get_auth_context(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> AuthContext:
    if credentials is None:
        raise AuthDecodeError(error="missing bearer token")
    return request.app.state.clients.auth_resolver.resolve(credentials.credentials)


def require_admin(ctx: AuthContext) -> None:
    if not ctx.is_admin:
        raise Forbidden()
