"""Mapping from calendar events to booking appointments."""
from typing import List

from processor.models import Appointment, Event

EXTERNAL_ID_PREFIX = 'external-'
SERVICE_TYPE = 'Cita Externa'
DEFAULT_LOCATION_NAME = 'Cita Booked.net'
APPOINTMENT_STATUS = 'confirmed'
SOURCE = 'ical'


def to_appointment(event: Event) -> Appointment:
    """
    Convert an event into an external, read-only appointment.

    The id is ``external-<UID>``. Events without a UID all map to the bare
    ``external-`` id, so consumers keying on id will see them collide.

    Args:
        event: Normalized Event

    Returns:
        Appointment with date as YYYY-MM-DD and time as HH:MM (24h)
    """
    start = event.start_date
    return Appointment(
        id=f"{EXTERNAL_ID_PREFIX}{event.id or ''}",
        client_name=event.title,
        service_type=SERVICE_TYPE,
        description=event.description or '',
        date=f"{start.year:04d}-{start.month:02d}-{start.day:02d}",
        time=f"{start.hour:02d}:{start.minute:02d}",
        piojologist_id=None,
        piojologist_name=event.location or DEFAULT_LOCATION_NAME,
        status=APPOINTMENT_STATUS,
        is_external=True,
        source=SOURCE
    )


def convert_events_to_appointments(events: List[Event]) -> List[Appointment]:
    """Convert events to appointments, one for one and in the same order."""
    return [to_appointment(event) for event in events]
