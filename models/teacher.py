"""Datenmodell für eine Lehrkraft (Pydantic v2)."""

from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class Teacher(BaseModel):
    """Repräsentiert eine einzelne Lehrkraft."""

    id: str                        # Kürzel ("MÜL")
    name: str                      # "Müller, Hans"
    subjects: list[str] = []       # Unterrichtbare Fächer
    max_hours_per_week: int = 26
    email: Optional[str] = None
    phone: Optional[str] = None
    description: Optional[str] = None

    @field_validator("id")
    @classmethod
    def normalize_id(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode='after')
    def _check_hours(self):
        if self.max_hours_per_week <= 0:
            raise ValueError("max_hours_per_week muss > 0 sein.")
        return self

    def teaches(self, subject: str) -> bool:
        return subject in self.subjects
