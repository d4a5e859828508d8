"""Datenmodell für eine Schulklasse (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field

from models.course import new_id


class SchoolClass(BaseModel):
    """Repräsentiert eine einzelne Klasse (z.B. 10b).

    Die Zugehörigkeit zum Jahrgang läuft über grade_id; der Jahrgang
    enthält selbst keine Klassenliste.
    """

    id: str = Field(default_factory=new_id)
    name: str                     # "10b"
    grade: str                    # Anzeigename des Jahrgangs, z.B. "10"
    grade_id: str
    class_number: int = Field(ge=1)
    student_count: int = Field(40, ge=0)
    class_teacher: Optional[str] = None  # Klassenleitung
    description: Optional[str] = None
