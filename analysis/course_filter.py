"""Suche, Ansichten und Rasterdarstellung für Kurslisten."""

import logging
from enum import Enum
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from config.schema import GridConfig
from models.course import Course

logger = logging.getLogger(__name__)


class SearchFilters(BaseModel):
    """Suchkriterien; None bzw. leer = Kriterium ignorieren.

    keyword durchsucht Fach, Lehrkraft, Klasse und Raum (Anzeigename und
    ID, ohne Groß-/Kleinschreibung). subject/teacher/class_/room müssen
    exakt auf Anzeigename oder ID passen.
    """

    keyword: Optional[str] = None
    subject: Optional[str] = None
    teacher: Optional[str] = None
    class_: Optional[str] = Field(None, alias="class")
    room: Optional[str] = None
    day: Optional[int] = None
    period: Optional[int] = None

    model_config = {"populate_by_name": True}


class TimetableViewType(str, Enum):
    ALL = "all"
    OVERVIEW = "overview"
    CLASS = "class"
    TEACHER = "teacher"
    ROOM = "room"
    SUBJECT = "subject"


_FIELDS = {
    "subject": ("name", "subject_id"),
    "teacher": ("teacher", "teacher_id"),
    "class": ("class_name", "class_id"),
    "room": ("room", "room_id"),
}


def _matches(course: Course, kind: str, value: str) -> bool:
    display, ident = _FIELDS[kind]
    return value in (getattr(course, display), getattr(course, ident))


def _keyword_hit(course: Course, keyword: str) -> bool:
    needle = keyword.lower()
    for display, ident in _FIELDS.values():
        for value in (getattr(course, display), getattr(course, ident)):
            if value and needle in value.lower():
                return True
    return False


def filter_courses(courses: Sequence[Course], filters: SearchFilters) -> list[Course]:
    """Alle Kurse, die sämtliche gesetzten Kriterien erfüllen."""
    result = []
    for c in courses:
        if filters.keyword and not _keyword_hit(c, filters.keyword):
            continue
        if filters.subject and not _matches(c, "subject", filters.subject):
            continue
        if filters.teacher and not _matches(c, "teacher", filters.teacher):
            continue
        if filters.class_ and not _matches(c, "class", filters.class_):
            continue
        if filters.room and not _matches(c, "room", filters.room):
            continue
        if filters.day is not None and c.day != filters.day:
            continue
        if filters.period is not None and c.period != filters.period:
            continue
        result.append(c)
    logger.debug(f"Filter {filters.model_dump(exclude_none=True)}: {len(result)}/{len(courses)} Kurse")
    return result


def filter_by_view(
    courses: Sequence[Course], view: TimetableViewType, target_id: Optional[str] = None
) -> list[Course]:
    """Kurse einer Ansicht; ohne target_id bleiben alle Kurse sichtbar."""
    if view in (TimetableViewType.ALL, TimetableViewType.OVERVIEW) or not target_id:
        return list(courses)
    attr = {
        TimetableViewType.CLASS: "class_id",
        TimetableViewType.TEACHER: "teacher_id",
        TimetableViewType.ROOM: "room_id",
        TimetableViewType.SUBJECT: "subject_id",
    }[view]
    return [c for c in courses if getattr(c, attr) == target_id]


def unique_values(courses: Sequence[Course], field: str) -> list[str]:
    """Eindeutige, nicht-leere Werte eines Feldes in Reihenfolge des Auftretens."""
    seen: dict[str, None] = {}
    for c in courses:
        value = getattr(c, field)
        if value is None or value == "":
            continue
        seen.setdefault(str(value), None)
    return list(seen)


# ─── Raster ───────────────────────────────────────────────────────────────────

class TimetableCell(BaseModel):
    """Eine belegte Zelle; row_span = Dauer in Stunden."""

    course: Course
    row_span: int = 1


def build_timetable(
    courses: Sequence[Course], grid: Optional[GridConfig] = None
) -> list[list[Optional[TimetableCell]]]:
    """Stunden × Tage-Matrix; Zelle [p-1][d-1] hält den Kurs, der dort beginnt.

    Kurse außerhalb des Rasters fehlen; bei mehreren Kursen im selben Slot
    gewinnt der letzte.
    """
    grid = grid or GridConfig()
    table: list[list[Optional[TimetableCell]]] = [
        [None] * grid.days_per_week for _ in range(grid.periods_per_day)
    ]
    for c in courses:
        if not c.is_placed:
            continue
        if c.day <= grid.days_per_week and c.period <= grid.periods_per_day:
            table[c.period - 1][c.day - 1] = TimetableCell(course=c, row_span=c.duration)
    return table
