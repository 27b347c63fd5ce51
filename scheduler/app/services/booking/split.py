# scheduler/app/services/booking/split.py
"""
Split the booking total among participants.

Rules:
- enabling seeds one participant (the caller) paying the whole total
- adding / removing a participant recomputes an equal split,
  cents that do not divide evenly go to the first participant
- the first participant pays at least the equal share
- amounts add up to the total, every e-mail is valid and unique
"""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, ROUND_DOWN

from ...errors import ApiTransportError
from ...schemas.bookings import ParticipantPayload
from .summary import CENT, to_money

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(email: str | None) -> bool:
    return bool(email) and EMAIL_RE.match(email.strip()) is not None


@dataclass
class Participant:
    email: str
    amount: Decimal


class ParticipantSplit:
    """Per-participant shares of one booking."""

    def __init__(self, total=Decimal("0"), owner_email: str = ""):
        self.total = to_money(total)
        self.owner_email = owner_email or ""
        self.enabled = False
        self.participants: list[Participant] = []

    # ── Lifecycle ────────────────────────────────────────────────────────

    def enable(self) -> None:
        self.enabled = True
        self.participants = [Participant(email=self.owner_email, amount=self.total)]

    def disable(self) -> None:
        self.enabled = False
        self.participants = []

    def toggle(self) -> None:
        if self.enabled:
            self.disable()
        else:
            self.enable()

    def retotal(self, total) -> None:
        """Total changed (selection changed): split again equally."""
        self.total = to_money(total)
        if self.enabled:
            self._recompute()

    # ── Participants ─────────────────────────────────────────────────────

    def add_participant(self, email: str = "") -> None:
        if not self.enabled:
            self.enable()
        self.participants.append(Participant(email=email.strip(), amount=Decimal("0.00")))
        self._recompute()

    def remove_participant(self, index: int) -> None:
        """Drop a participant. The first one (the caller) always stays."""
        if index <= 0 or index >= len(self.participants):
            return
        del self.participants[index]
        self._recompute()

    def set_email(self, index: int, email: str) -> None:
        if 0 <= index < len(self.participants):
            self.participants[index].email = (email or "").strip()

    def set_amount(self, index: int, amount) -> None:
        if 0 <= index < len(self.participants):
            self.participants[index].amount = to_money(amount)

    def equal_share(self) -> Decimal:
        count = len(self.participants) or 1
        return (self.total / count).quantize(CENT, rounding=ROUND_DOWN)

    def _recompute(self) -> None:
        if not self.participants:
            return
        share = self.equal_share()
        remainder = self.total - share * len(self.participants)
        for participant in self.participants:
            participant.amount = share
        self.participants[0].amount = share + remainder

    # ── Validation ───────────────────────────────────────────────────────

    def errors(self) -> list[str]:
        if not self.enabled:
            return []

        errors: list[str] = []
        seen: set[str] = set()
        for i, participant in enumerate(self.participants, start=1):
            if not is_valid_email(participant.email):
                errors.append(f"Participant #{i} email '{participant.email}' looks invalid")
            else:
                normalized = participant.email.lower()
                if normalized in seen:
                    errors.append(f"Participant #{i} email is already in the list")
                seen.add(normalized)
            if participant.amount <= 0:
                errors.append(f"Participant #{i} amount must be greater than 0")

        if self.participants:
            share = self.equal_share()
            if self.participants[0].amount < share:
                errors.append(f"First participant must pay at least {share:.2f}")

        paid = sum((p.amount for p in self.participants), Decimal("0.00"))
        if paid != self.total:
            errors.append(f"Amounts must add up to {self.total:.2f} (currently {paid:.2f})")

        return errors

    @property
    def is_valid(self) -> bool:
        return not self.errors()

    def payload(self) -> list[ParticipantPayload] | None:
        if not self.enabled:
            return None
        return [ParticipantPayload(email=p.email, amount=p.amount) for p in self.participants]


class SavedEmails:
    """E-mails the caller booked with before (GET/POST /users/saved-emails)."""

    def __init__(self, api):
        self.api = api
        self.emails: list[str] = []

    def __contains__(self, email: str) -> bool:
        target = (email or "").strip().lower()
        return any(e.lower() == target for e in self.emails)

    async def load(self) -> list[str]:
        try:
            resp = await self.api.get_saved_emails()
        except ApiTransportError as e:
            logger.warning(f"[BOOKING] saved e-mails unavailable: {e.message}")
            return self.emails

        data = resp.get("data") if resp.get("statusCode") == 200 else None
        if isinstance(data, list):
            self.emails = []
            for item in data:
                email = item.get("email") if isinstance(item, dict) else item
                if isinstance(email, str) and email not in self:
                    self.emails.append(email)
        return self.emails

    async def remember(self, email: str) -> bool:
        """
        Save a new valid e-mail. Known or invalid e-mails are not sent.

        Returns:
            True if the backend was asked to save it.
        """
        email = (email or "").strip()
        if not is_valid_email(email) or email in self:
            return False

        self.emails.append(email)
        try:
            resp = await self.api.add_saved_email(email)
        except ApiTransportError as e:
            logger.warning(f"[BOOKING] could not save e-mail: {e.message}")
            return True

        if resp.get("statusCode") != 200:
            logger.warning(f"[BOOKING] saving e-mail rejected: {resp.get('message')}")
        return True
