"""Datenmodell für einen Zeitslot im Wochenraster."""

from dataclasses import dataclass

DAY_NAMES = ["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"]


@dataclass(frozen=True, order=True)
class TimeSlot:
    """Repräsentiert einen einzelnen Slot im Wochenraster.

    Kombination aus Wochentag und Unterrichtsstunde.
    Immutable (frozen=True) damit es als Dict-Key / Set-Element nutzbar ist.
    """

    # Wochentag nach ISO (1=Montag, ..., 7=Sonntag)
    day: int
    # Unterrichtsstunde (1-basiert, z.B. 1 = 1. Stunde)
    period: int

    @property
    def slot_id(self) -> str:
        """Eindeutiger String-Bezeichner (z.B. "1-3" für Mo 3. Stunde)."""
        return f"{self.day}-{self.period}"

    @property
    def day_name(self) -> str:
        """Abgekürzter Tagesname."""
        if 1 <= self.day <= len(DAY_NAMES):
            return DAY_NAMES[self.day - 1]
        return str(self.day)

    def __repr__(self) -> str:
        return f"TimeSlot({self.day_name}, Std.{self.period})"

    def __str__(self) -> str:
        return f"{self.day_name} {self.period}."
