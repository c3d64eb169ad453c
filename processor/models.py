"""Data models for calendar feed processing."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class Event:
    """Normalized event parsed from a VEVENT block."""
    id: Optional[str]
    title: str
    description: Optional[str]
    start_date: datetime
    end_date: Optional[datetime]
    location: Optional[str]
    status: str = 'CONFIRMED'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'startDate': self.start_date.isoformat(),
            'endDate': self.end_date.isoformat() if self.end_date else None,
            'location': self.location,
            'status': self.status
        }


@dataclass
class Appointment:
    """Appointment record handed to the booking UI."""
    id: str
    client_name: str
    service_type: str
    description: str
    date: str
    time: str
    piojologist_id: Optional[str]
    piojologist_name: str
    status: str
    is_external: bool
    source: str

    def to_dict(self) -> Dict[str, Any]:
        """Render the record with the booking UI's camelCase keys."""
        return {
            'id': self.id,
            'clientName': self.client_name,
            'serviceType': self.service_type,
            'description': self.description,
            'date': self.date,
            'time': self.time,
            'piojologistId': self.piojologist_id,
            'piojologistName': self.piojologist_name,
            'status': self.status,
            'isExternal': self.is_external,
            'source': self.source
        }


@dataclass
class NormalizeResult:
    """Result of normalizing the VEVENT blocks of one feed."""
    events: List[Event]
    blocks_found: int
    blocks_skipped: int


@dataclass
class FeedReport:
    """Result of one fetch-and-convert run."""
    appointments: List[Appointment] = field(default_factory=list)
    events: List[Event] = field(default_factory=list)
    blocks_found: int = 0
    blocks_skipped: int = 0
    fetch_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'appointments': [a.to_dict() for a in self.appointments],
            'statistics': {
                'blocks_found': self.blocks_found,
                'events_parsed': len(self.events),
                'blocks_skipped': self.blocks_skipped
            },
            'fetch_error': self.fetch_error
        }
