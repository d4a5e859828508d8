"""Datenmodell für einen geplanten Kurs (eine Unterrichtseinheit, Pydantic v2)."""

from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from config.schema import MAX_DAY, MAX_PERIOD, MIN_DAY, MIN_PERIOD
from models.timeslot import TimeSlot


def new_id() -> str:
    return str(uuid4())


class Course(BaseModel):
    """Eine geplante Einheit: Fach, Lehrkraft, Klasse und Raum an Tag/Stunde.

    Konfliktlogik arbeitet ausschließlich auf den IDs. Die Namensfelder
    (name, teacher, class_name, room) sind Kopien für die Anzeige und
    dürfen sich wiederholen, ohne dass daraus ein Konflikt entsteht.
    """

    id: str = Field(default_factory=new_id)
    subject_id: str = ""
    teacher_id: str = ""
    class_id: str = ""
    room_id: str = ""
    # None nur für unvollständige Formular-Entwürfe
    day: Optional[int] = Field(None, ge=MIN_DAY, le=MAX_DAY)
    period: Optional[int] = Field(None, ge=MIN_PERIOD, le=MAX_PERIOD)
    duration: int = Field(1, ge=1)
    week: Optional[int] = Field(None, ge=1)  # A/B-Wochen, von der Konfliktprüfung ignoriert

    # Anzeige-Felder
    name: Optional[str] = None
    teacher: Optional[str] = None
    class_name: Optional[str] = None
    room: Optional[str] = None

    @property
    def is_placed(self) -> bool:
        """True wenn Tag und Stunde gesetzt sind."""
        return self.day is not None and self.period is not None

    @property
    def slot(self) -> Optional[TimeSlot]:
        """Anfangs-Slot oder None für unplatzierte Kurse."""
        if not self.is_placed:
            return None
        return TimeSlot(self.day, self.period)

    @property
    def end_period(self) -> Optional[int]:
        """Erste Stunde NACH dem Kurs (halboffenes Intervall)."""
        if self.period is None:
            return None
        return self.period + self.duration

    def occupied_slots(self) -> list[TimeSlot]:
        """Alle Slots, die der Kurs belegt (Anfangsstunde bis Ende)."""
        if not self.is_placed:
            return []
        return [TimeSlot(self.day, p) for p in range(self.period, self.end_period)]

    def resource_keys(self) -> dict[str, str]:
        """Belegte Ressourcen nach Typ; leere IDs werden ausgelassen."""
        keys = {
            "teacher": self.teacher_id,
            "room": self.room_id,
            "class": self.class_id,
        }
        return {kind: ident for kind, ident in keys.items() if ident}

    def label(self) -> str:
        """Kurzbeschreibung für Meldungen."""
        who = self.class_name or self.class_id or "?"
        what = self.name or self.subject_id or "?"
        where = f" {self.slot}" if self.is_placed else ""
        return f"{what} ({who}){where}"
