"""
Authentication utilities for the CMS admin backend.

Tokens are issued by an external identity service; this module only verifies
bearer JWTs and turns them into an explicit ``Principal`` that route handlers
receive through FastAPI dependencies.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any, Dict, List, Optional

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from cms_admin.config import get_settings
from cms_admin.structlog_config import get_logger

logger = get_logger(__name__)

# Token issuance lives outside this service, tokenUrl only documents it
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/v1/auth/token")


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    subject: Optional[str]
    role: Optional[str]
    claims: Dict[str, Any] = field(default_factory=dict)

    def has_role(self, role_name: str) -> bool:
        return self.role is not None and self.role == role_name.upper()

    def has_any_role(self, role_names: List[str]) -> bool:
        return any(self.has_role(role_name) for role_name in role_names)


def create_access_token(
    data: dict, expires_delta: timedelta = timedelta(days=7)
) -> str:
    """
    Create a JWT access token with the provided data and expiration.

    Args:
        data: The data to encode in the token
        expires_delta: How long the token should be valid

    Returns:
        JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(UTC) + expires_delta
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> Dict:
    """
    Decode and validate a JWT token.

    Raises:
        HTTPException: If the token is invalid or expired
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def resolve_role(payload: Dict[str, Any]) -> Optional[str]:
    """
    Role carried by a token payload.

    Looks at ``role``, then ``user.role``, then ``claims.role``. Returned
    upper-cased; None when the token carries no role.
    """
    candidates = [payload.get("role")]
    for container in ("user", "claims"):
        nested = payload.get(container)
        if isinstance(nested, dict):
            candidates.append(nested.get("role"))

    for role in candidates:
        if role:
            return str(role).upper()
    return None


def principal_from_payload(payload: Dict[str, Any]) -> Principal:
    subject = payload.get("sub") or payload.get("user_id")
    return Principal(
        subject=str(subject) if subject is not None else None,
        role=resolve_role(payload),
        claims=payload,
    )


async def get_current_principal(token: str = Depends(oauth2_scheme)) -> Principal:
    """FastAPI dependency resolving the bearer token into a Principal."""
    return principal_from_payload(decode_token(token))


def require_roles(
    required_roles: Optional[List[str]] = None, require_all: bool = False
):
    """
    Factory for creating dependencies that require specific roles.

    Args:
        required_roles: Role names required for access; None means the
            configured admin roles
        require_all: If True, principal must hold every role; a principal
            carries a single role, so this only passes for one-element lists

    Returns:
        FastAPI dependency function
    """

    async def authorized_principal(
        principal: Principal = Depends(get_current_principal),
    ) -> Principal:
        roles = required_roles
        if roles is None:
            roles = get_settings().get_admin_roles()

        if require_all:
            allowed = all(principal.has_role(role) for role in roles)
        else:
            allowed = principal.has_any_role(roles)

        if not allowed:
            logger.info(
                "Principal lacks required role",
                operation="authorize",
                subject=principal.subject,
                role=principal.role,
                required_roles=roles,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return authorized_principal


get_current_admin = require_roles()
