"""
Domain exceptions for the attendance service.

Every failure a caller can see derives from AttendanceError and carries a
stable error code (the exception class name) plus the HTTP status the API
layer should use. Services raise these; app.api.errors renders them as
{"ok": false, "code": ..., "message": ...}.
"""

from typing import Optional

from fastapi import status


class AttendanceError(Exception):
    """Base class for caller-visible failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


# Not found

class EventNotFound(AttendanceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, event_id):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class ParticipantNotFound(AttendanceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, participant_code: str, event_id=None):
        if event_id is not None:
            message = f"Participant '{participant_code}' not found in event {event_id}"
        else:
            message = f"Participant '{participant_code}' not found"
        super().__init__(message)
        self.participant_code = participant_code
        self.event_id = event_id


class NoActiveEventForParticipant(AttendanceError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, participant_code: str):
        super().__init__(f"No active event found for participant '{participant_code}'")
        self.participant_code = participant_code


# Preconditions

class EventInactive(AttendanceError):
    def __init__(self, event_id):
        super().__init__(f"Event {event_id} is not active")
        self.event_id = event_id


class AmbiguousParticipantCode(AttendanceError):
    def __init__(self, participant_code: str, event_ids: list):
        super().__init__(
            f"Participant code '{participant_code}' exists in {len(event_ids)} active events. "
            "Use a QR code in the eventId:participantCode format."
        )
        self.participant_code = participant_code
        self.event_ids = event_ids


class InvalidScanPayload(AttendanceError):
    def __init__(self, payload: str):
        super().__init__(f"Scanned code '{payload}' does not contain a participant code")
        self.payload = payload


class InvalidSeatNumber(AttendanceError):
    def __init__(self, table_number, seat_number):
        super().__init__(
            f"Table and seat numbers must be positive integers "
            f"(got table={table_number}, seat={seat_number})"
        )


# Conflicts

class DuplicateParticipantCode(AttendanceError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, participant_code: str, event_id):
        super().__init__(f"Participant code '{participant_code}' already exists in event {event_id}")


class AssignmentConflict(AttendanceError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, event_id, table_number: int, seat_number: int):
        super().__init__(
            f"Seat {table_number}/{seat_number} in event {event_id} was modified concurrently. "
            "Please try again."
        )


# Storage

class InternalFailure(AttendanceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal storage failure"):
        super().__init__(message)
