"""Solver-Modul: Konfliktprüfung und zufällige Slot-Vergabe."""

from .conflicts import (
    ConflictInfo,
    ConflictValidator,
    ValidationResult,
    WarningInfo,
    courses_collide,
    periods_overlap,
)
from .assignment import (
    AssignmentReport,
    RoomSelector,
    SlotAssigner,
    SubjectDemand,
    assign_classes,
)

__all__ = [
    "ConflictInfo",
    "ConflictValidator",
    "ValidationResult",
    "WarningInfo",
    "courses_collide",
    "periods_overlap",
    "AssignmentReport",
    "RoomSelector",
    "SlotAssigner",
    "SubjectDemand",
    "assign_classes",
]
