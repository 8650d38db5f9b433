"""
Unit tests for scan payload parsing and candidate resolution.
No database involved.
"""

import pytest

from app.core.exceptions import (
    AmbiguousParticipantCode,
    InvalidScanPayload,
    NoActiveEventForParticipant,
    ParticipantNotFound,
)
from app.services.resolution import Candidate, ResolvedPair, parse_scan_payload, resolve_candidates


def test_parse_qualified_payload():
    assert parse_scan_payload("12:A100") == ("12", "A100")


def test_parse_bare_payload():
    assert parse_scan_payload("  A100 \n") == (None, "A100")


def test_parse_splits_on_first_colon_only():
    """Anything after the first colon belongs to the participant code."""
    assert parse_scan_payload("7:VIP:01") == ("7", "VIP:01")


def test_parse_empty_event_part_is_ignored():
    assert parse_scan_payload(":A100") == (None, "A100")


@pytest.mark.parametrize("payload", ["", "   ", "12:", "12:   "])
def test_parse_rejects_missing_code(payload):
    with pytest.raises(InvalidScanPayload):
        parse_scan_payload(payload)


def test_resolve_single_active_candidate():
    matches = [Candidate(participant_id=5, event_id=1, full_name="Budi")]
    assert resolve_candidates("A100", matches, {1}) == ResolvedPair(
        event_id=1, participant_id=5, participant_name="Budi"
    )


def test_resolve_ignores_candidates_in_inactive_events():
    matches = [
        Candidate(participant_id=5, event_id=1, full_name="Budi (2025)"),
        Candidate(participant_id=9, event_id=2, full_name="Budi (2026)"),
    ]
    pair = resolve_candidates("A100", matches, {2})
    assert pair.event_id == 2
    assert pair.participant_id == 9


def test_resolve_no_matches():
    with pytest.raises(ParticipantNotFound):
        resolve_candidates("NOPE", [], {1, 2})


def test_resolve_no_active_event():
    matches = [Candidate(participant_id=5, event_id=1, full_name="Budi")]
    with pytest.raises(NoActiveEventForParticipant):
        resolve_candidates("A100", matches, set())


def test_resolve_ambiguous_across_active_events():
    matches = [
        Candidate(participant_id=5, event_id=2, full_name="Ani"),
        Candidate(participant_id=9, event_id=1, full_name="Andi"),
    ]
    with pytest.raises(AmbiguousParticipantCode) as exc_info:
        resolve_candidates("X1", matches, {1, 2})

    assert exc_info.value.event_ids == [1, 2]
    assert "eventId:participantCode" in exc_info.value.message
    assert exc_info.value.error_code == "AmbiguousParticipantCode"
