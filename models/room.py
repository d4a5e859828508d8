"""Datenmodell für einen Raum (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field

from models.course import new_id


class Room(BaseModel):
    """Repräsentiert einen Raum (Klassenraum oder Fachraum)."""

    id: str = Field(default_factory=new_id)
    name: str                  # "Raum 101", "Physik-Labor"
    room_type: str = "klassenraum"
    capacity: int = Field(40, ge=0)
    building: Optional[str] = None
    floor: Optional[int] = None
    equipment: list[str] = []
    specialized: bool = False  # Fachraum: nur über Fach-Zuordnung belegbar
