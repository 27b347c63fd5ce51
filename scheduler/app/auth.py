# scheduler/app/auth.py
"""
Caller identity and roles, derived from the bearer token.

Passed explicitly into the API client and the booking controller
instead of living in a process-wide cache.
The token is NOT verified here: the backend does that on every request.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from jose import JWTError, jwt

logger = logging.getLogger(__name__)

ANONYMOUS_OWNER = "anonymous"

ROLE_CUSTOMER = "CUSTOMER"
ROLE_ADMIN = "ADMIN"


def normalize_role(role) -> str:
    return re.sub(r"^ROLE_", "", str(role).strip(), flags=re.IGNORECASE).upper()


def _unique(roles: list) -> list[str]:
    result: list[str] = []
    for role in roles:
        name = normalize_role(role)
        if name and name not in result:
            result.append(name)
    return result


def decode_claims(token: str | None) -> dict:
    """Unverified claims of a JWT. Empty dict if the token is not a JWT."""
    if not token:
        return {}
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError as e:
        logger.debug(f"Token claims not readable: {e}")
        return {}
    return claims if isinstance(claims, dict) else {}


def parse_roles(claims: dict) -> list[str]:
    """
    Extract roles from token claims.

    Supported claims (first match wins):
      roles: ["CUSTOMER"]
      authorities: ["ROLE_ADMIN"] or [{"authority": "ROLE_ADMIN"}]
      scope / scopes: "customer admin" or "customer,admin"
    """
    roles = claims.get("roles")
    if isinstance(roles, list):
        return _unique(roles)

    authorities = claims.get("authorities")
    if isinstance(authorities, list):
        if authorities and isinstance(authorities[0], str):
            return _unique(authorities)
        names = []
        for item in authorities:
            if isinstance(item, dict):
                name = item.get("authority") or item.get("role")
                if name:
                    names.append(name)
        return _unique(names)

    for claim in ("scope", "scopes"):
        value = claims.get(claim)
        if isinstance(value, str):
            return _unique([s for s in re.split(r"[ ,]+", value) if s])

    return []


@dataclass
class AuthContext:
    """Authentication state of the current viewer."""
    token: Optional[str] = None
    cached_roles: list[str] = field(default_factory=list)

    def __post_init__(self):
        self.cached_roles = _unique(self.cached_roles or [])

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def claims(self) -> dict:
        return decode_claims(self.token)

    @property
    def roles(self) -> list[str]:
        """Roles from the token, falling back to cached roles."""
        from_token = parse_roles(self.claims)
        return from_token or list(self.cached_roles)

    def has_role(self, role: str) -> bool:
        return normalize_role(role) in self.roles

    @property
    def is_customer(self) -> bool:
        return self.has_role(ROLE_CUSTOMER)

    @property
    def is_admin(self) -> bool:
        return self.has_role(ROLE_ADMIN)

    @property
    def can_book(self) -> bool:
        return self.is_customer or self.is_admin

    @property
    def owner_id(self) -> str:
        """Hold owner: token subject, or the anonymous sentinel."""
        subject = self.claims.get("sub")
        if subject:
            return str(subject)
        return ANONYMOUS_OWNER

    def save_roles(self, roles) -> None:
        """Cache roles returned by login (in memory only)."""
        if not roles:
            self.cached_roles = []
            return
        self.cached_roles = _unique(roles if isinstance(roles, list) else [roles])

    def logout(self) -> None:
        self.token = None
        self.cached_roles = []

    def headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}
