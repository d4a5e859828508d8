"""Datenmodell für ein Unterrichtsfach (Pydantic v2)."""

from pydantic import BaseModel, Field

from models.course import new_id


class Subject(BaseModel):
    """Repräsentiert ein Unterrichtsfach."""

    id: str = Field(default_factory=new_id)
    name: str
    code: str
    color: str = "#E0E0E0"
    category: str = "sonstig"   # hauptfach/nebenfach/spezial
    default_duration: int = Field(1, ge=1)
    requires_lab: bool = False
