# app/auth/tokens.py
"""Bearer token decoding.

Tokens are issued by an external identity provider. By default the
signature is NOT checked: the service sits behind a gateway that has
already validated the token. Configure ``AUTH_JWT_SECRET`` to have the
service verify HMAC signatures itself.
"""
import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import jwt

from app.core.exceptions import AuthDecodeError


class Role(str, enum.Enum):
    ADMIN = "ADMIN"
    USER = "USER"


@dataclass(frozen=True)
class AuthContext:
    subject: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


class TokenVerifier(ABC):
    @abstractmethod
    def verify(self, token: str) -> dict[str, Any]:
        """Return the token claims, raising AuthDecodeError if unusable."""


class UnverifiedTokenDecoder(TokenVerifier):
    def verify(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, options={"verify_signature": False})
        except jwt.PyJWTError as exc:
            raise AuthDecodeError(error=str(exc)) from exc


class HmacTokenVerifier(TokenVerifier):
    def __init__(self, secret: str, algorithms: list[str]):
        self.secret = secret
        self.algorithms = algorithms

    def verify(self, token: str) -> dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=self.algorithms)
        except jwt.PyJWTError as exc:
            raise AuthDecodeError(error=str(exc)) from exc


class AuthContextResolver:
    def __init__(self, verifier: TokenVerifier, groups_claim: str = "cognito:groups", admin_group: str = "ADMIN"):
        self.verifier = verifier
        self.groups_claim = groups_claim
        self.admin_group = admin_group

    def resolve(self, token: str | None) -> AuthContext:
        if not token:
            raise AuthDecodeError(error="missing bearer token")

        claims = self.verifier.verify(token)
        subject = claims.get("sub")
        if not subject or not isinstance(subject, str):
            raise AuthDecodeError(error="token has no subject")

        groups = claims.get(self.groups_claim) or []
        if isinstance(groups, str):
            groups = [groups]
        elif not isinstance(groups, (list, tuple)):
            raise AuthDecodeError(error="groups claim is not a list")
        role = Role.ADMIN if self.admin_group in groups else Role.USER
        return AuthContext(subject=subject, role=role)
