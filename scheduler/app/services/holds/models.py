# scheduler/app/services/holds/models.py
"""
Hold values as stored under resourceHolds_{resource_id}.

Two shapes exist in storage:
  legacy: 1735689600000                       → LegacyHold (no owner)
  owned:  {"expiresAt": 1735689600000, "owner": "alice"} → OwnedHold

Legacy values are normalized to OwnedHold(owner=None) on read,
so the rest of the code only deals with one shape.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class LegacyHold:
    expires_at: int  # epoch ms

    def normalize(self) -> "OwnedHold":
        return OwnedHold(expires_at=self.expires_at, owner=None)


@dataclass(frozen=True)
class OwnedHold:
    expires_at: int  # epoch ms
    owner: Optional[str]

    def normalize(self) -> "OwnedHold":
        return self

    def is_active(self, now_ms: int) -> bool:
        return self.expires_at > now_ms

    def is_owned_by(self, owner: str | None) -> bool:
        return self.owner is not None and self.owner == owner


StoredHold = Union[LegacyHold, OwnedHold]


def decode_hold(raw) -> StoredHold | None:
    """
    Parse one stored value. None for shapes that are not a hold.

    Callers normalize the result before use.
    """
    if isinstance(raw, bool):
        return None

    if isinstance(raw, (int, float)):
        return LegacyHold(expires_at=int(raw))

    if isinstance(raw, dict):
        expires_at = raw.get("expiresAt")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            return None
        owner = raw.get("owner")
        return OwnedHold(
            expires_at=int(expires_at),
            owner=str(owner) if owner is not None else None,
        )

    return None


def encode_hold(hold: OwnedHold) -> dict:
    return {"expiresAt": hold.expires_at, "owner": hold.owner}
