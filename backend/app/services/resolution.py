"""
Pure scan-resolution logic, independent of storage.

RESOLVING A CODE WITHOUT AN EVENT ID
====================================

Participant codes are only unique within one event. When the scanned QR
carries just `participantCode`, we gather every participant with that exact
code across all events and branch on how many belong to an active event:

  0 matches at all        -> ParticipantNotFound
  0 in an active event    -> NoActiveEventForParticipant
  >1 in active events     -> AmbiguousParticipantCode (scanner must use the
                             qualified `eventId:participantCode` form)
  exactly 1               -> resolved

Cross-event collisions are expected, not a data error, so ambiguity is a
normal rejected scan rather than a fault.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from app.core.exceptions import (
    AmbiguousParticipantCode,
    InvalidScanPayload,
    NoActiveEventForParticipant,
    ParticipantNotFound,
)


@dataclass(frozen=True)
class Candidate:
    """A participant row matching a scanned code."""

    participant_id: int
    event_id: int
    full_name: str


@dataclass(frozen=True)
class ResolvedPair:
    event_id: int
    participant_id: int
    participant_name: str


def parse_scan_payload(payload: str) -> tuple[Optional[str], str]:
    """
    Split a raw QR payload into (event_id, participant_code).

    `eventId:participantCode` -> ("eventId", "participantCode")
    `participantCode`         -> (None, "participantCode")
    """
    text = payload.strip()
    event_part: Optional[str] = None
    code = text
    if ":" in text:
        event_part, code = text.split(":", 1)
        event_part = event_part.strip() or None
        code = code.strip()
    if not code:
        raise InvalidScanPayload(payload)
    return event_part, code


def resolve_candidates(
    code: str,
    matches: Iterable[Candidate],
    active_event_ids: Iterable[int],
) -> ResolvedPair:
    matches = list(matches)
    if not matches:
        raise ParticipantNotFound(code)

    active = set(active_event_ids)
    active_matches = [m for m in matches if m.event_id in active]

    if not active_matches:
        raise NoActiveEventForParticipant(code)
    if len(active_matches) > 1:
        raise AmbiguousParticipantCode(code, sorted(m.event_id for m in active_matches))

    chosen = active_matches[0]
    return ResolvedPair(
        event_id=chosen.event_id,
        participant_id=chosen.participant_id,
        participant_name=chosen.full_name,
    )
