"""Datenmodell für einen Jahrgang (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, Field

from models.course import new_id


class Grade(BaseModel):
    """Ein Jahrgang mit Anzeige-Reihenfolge."""

    id: str = Field(default_factory=new_id)
    name: str           # "10", "11", ...
    order: int = Field(1, ge=1)
    description: Optional[str] = None
