"""Project: Vollständiger Planungsstand eines Kursplans (Pydantic v2).

Alle Änderungen liefern ein NEUES Project zurück (model_copy). Zusammengehörige
Sammlungen – z.B. Jahrgänge und Klassen beim Löschen eines Jahrgangs – werden
dabei in einem einzigen Schritt ersetzt, damit nie ein Zwischenstand mit
verwaisten Klassen sichtbar wird.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional, Sequence

from pydantic import BaseModel, Field

from models.course import Course, new_id
from models.grade import Grade
from models.room import Room
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher

logger = logging.getLogger(__name__)


class ProjectError(Exception):
    """Basisklasse für fachliche Fehler bei Änderungen am Projekt."""


class CourseNotFoundError(ProjectError):
    """Kurs-ID existiert nicht im Projekt."""


class DuplicateCourseError(ProjectError):
    """Kurs-ID ist bereits vergeben."""


class GradeNotFoundError(ProjectError):
    """Jahrgangs-ID existiert nicht im Projekt."""


class DuplicateClassNumberError(ProjectError):
    """Klassennummer ist im Jahrgang doppelt vergeben."""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Project(BaseModel):
    """Planungsstand: Stammdaten, Jahrgänge/Klassen und geplante Kurse."""

    id: str = Field(default_factory=new_id)
    name: str
    grades: list[Grade] = []
    classes: list[SchoolClass] = []
    teachers: list[Teacher] = []
    subjects: list[Subject] = []
    rooms: list[Room] = []
    courses: list[Course] = []
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
    data_version: str = "1.0"

    # ─── Übersicht ───

    def summary(self) -> str:
        """Kurze Übersicht über das Projekt."""
        placed = sum(1 for c in self.courses if c.is_placed)
        lines = [
            f"Projekt: {self.name}",
            f"Jahrgänge: {len(self.grades)}",
            f"Klassen: {len(self.classes)}",
            f"Fächer: {len(self.subjects)}",
            f"Lehrkräfte: {len(self.teachers)}",
            f"Räume: {len(self.rooms)}",
            f"Kurse: {len(self.courses)} ({placed} platziert)",
        ]
        return "\n".join(lines)

    # ─── Nachschlagen ───

    def get_course(self, course_id: str) -> Course:
        for c in self.courses:
            if c.id == course_id:
                return c
        raise CourseNotFoundError(f"Kurs '{course_id}' existiert nicht.")

    def get_grade(self, grade_id: str) -> Grade:
        for g in self.grades:
            if g.id == grade_id:
                return g
        raise GradeNotFoundError(f"Jahrgang '{grade_id}' existiert nicht.")

    def sorted_grades(self) -> list[Grade]:
        return sorted(self.grades, key=lambda g: g.order)

    def classes_of(self, grade_id: str) -> list[SchoolClass]:
        """Alle Klassen eines Jahrgangs, sortiert nach Klassennummer."""
        return sorted(
            (c for c in self.classes if c.grade_id == grade_id),
            key=lambda c: c.class_number,
        )

    def next_class_number(self, grade_id: str) -> int:
        """Kleinste noch freie Klassennummer im Jahrgang."""
        used = {c.class_number for c in self.classes if c.grade_id == grade_id}
        n = 1
        while n in used:
            n += 1
        return n

    def courses_of_class(self, class_id: str) -> list[Course]:
        return [c for c in self.courses if c.class_id == class_id]

    # ─── Kurse ───

    def _with(self, **update) -> "Project":
        update["modified_at"] = _now()
        return self.model_copy(update=update)

    def add_course(self, course: Course) -> "Project":
        """Fügt einen Kurs hinzu; doppelte IDs sind nicht erlaubt."""
        if any(c.id == course.id for c in self.courses):
            raise DuplicateCourseError(f"Kurs '{course.id}' existiert bereits.")
        return self._with(courses=[*self.courses, course])

    def add_courses(self, courses: Sequence[Course]) -> "Project":
        """Fügt mehrere Kurse in einem Schritt hinzu."""
        known = {c.id for c in self.courses}
        for course in courses:
            if course.id in known:
                raise DuplicateCourseError(f"Kurs '{course.id}' existiert bereits.")
            known.add(course.id)
        return self._with(courses=[*self.courses, *courses])

    def update_course(self, course: Course) -> "Project":
        """Ersetzt den Kurs mit gleicher ID."""
        self.get_course(course.id)
        return self._with(
            courses=[course if c.id == course.id else c for c in self.courses]
        )

    def delete_course(self, course_id: str) -> "Project":
        self.get_course(course_id)
        return self._with(courses=[c for c in self.courses if c.id != course_id])

    # ─── Jahrgänge & Klassen ───

    def replace_grades_and_classes(
        self, grades: Sequence[Grade], classes: Sequence[SchoolClass]
    ) -> "Project":
        """Ersetzt Jahrgänge und Klassen gemeinsam in einer Änderung.

        Jede Klasse muss auf einen der neuen Jahrgänge verweisen.
        """
        grade_ids = {g.id for g in grades}
        for cls in classes:
            if cls.grade_id not in grade_ids:
                raise GradeNotFoundError(
                    f"Klasse {cls.name} verweist auf unbekannten Jahrgang '{cls.grade_id}'."
                )
        return self._with(grades=list(grades), classes=list(classes))

    def add_grade(self, name: str, description: Optional[str] = None) -> "Project":
        """Hängt einen Jahrgang am Ende der Reihenfolge an."""
        grade = Grade(name=name, order=len(self.grades) + 1, description=description)
        return self._with(grades=[*self.grades, grade])

    def rename_grade(self, grade_id: str, name: str) -> "Project":
        """Benennt einen Jahrgang um und übernimmt den Namen in seine Klassen."""
        grade = self.get_grade(grade_id)
        renamed = grade.model_copy(update={"name": name})
        grades = [renamed if g.id == grade_id else g for g in self.grades]
        classes = [
            c.model_copy(update={"grade": name}) if c.grade_id == grade_id else c
            for c in self.classes
        ]
        return self.replace_grades_and_classes(grades, classes)

    def delete_grade(self, grade_id: str) -> "Project":
        """Löscht einen Jahrgang samt allen Klassen, die auf ihn verweisen.

        Unbekannte IDs (z.B. doppelt ausgelöstes Löschen) ändern nichts.
        """
        if not any(g.id == grade_id for g in self.grades):
            logger.debug(f"Jahrgang {grade_id} bereits gelöscht – übersprungen")
            return self

        remaining = [g for g in self.sorted_grades() if g.id != grade_id]
        grades = [
            g.model_copy(update={"order": i}) for i, g in enumerate(remaining, 1)
        ]
        classes = [c for c in self.classes if c.grade_id != grade_id]
        logger.info(
            f"Jahrgang {grade_id} gelöscht, "
            f"{len(self.classes) - len(classes)} Klassen entfernt"
        )
        return self.replace_grades_and_classes(grades, classes)

    def move_grade(self, grade_id: str, direction: Literal["up", "down"]) -> "Project":
        """Verschiebt einen Jahrgang um eine Position und nummeriert neu."""
        ordered = self.sorted_grades()
        index = next(
            (i for i, g in enumerate(ordered) if g.id == grade_id), None
        )
        if index is None:
            raise GradeNotFoundError(f"Jahrgang '{grade_id}' existiert nicht.")

        target = index - 1 if direction == "up" else index + 1
        if target < 0 or target >= len(ordered):
            return self

        ordered[index], ordered[target] = ordered[target], ordered[index]
        grades = [g.model_copy(update={"order": i}) for i, g in enumerate(ordered, 1)]
        return self._with(grades=grades)

    def add_classes(self, grade_id: str, new_classes: Sequence[SchoolClass]) -> "Project":
        """Fügt mehrere Klassen zu einem Jahrgang hinzu.

        Klassennummern müssen innerhalb der neuen Klassen und gegenüber den
        bestehenden Klassen des Jahrgangs eindeutig sein.
        """
        grade = self.get_grade(grade_id)
        numbers = [c.class_number for c in new_classes]
        if len(numbers) != len(set(numbers)):
            raise DuplicateClassNumberError("Klassennummern dürfen sich nicht wiederholen.")
        existing = {c.class_number for c in self.classes_of(grade_id)}
        clashes = sorted(existing.intersection(numbers))
        if clashes:
            raise DuplicateClassNumberError(
                f"Klassennummern {clashes} existieren bereits in Jahrgang {grade.name}."
            )

        attached = [
            c.model_copy(update={"grade_id": grade.id, "grade": grade.name})
            for c in new_classes
        ]
        return self._with(classes=[*self.classes, *attached])

    def delete_class(self, class_id: str) -> "Project":
        if not any(c.id == class_id for c in self.classes):
            logger.debug(f"Klasse {class_id} bereits gelöscht – übersprungen")
            return self
        return self._with(classes=[c for c in self.classes if c.id != class_id])

    # ─── Persistenz ────────────────────────────────────────────────────────

    def save_json(self, path: Path) -> None:
        """Speichert das komplette Projekt als JSON-Datei."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        now = _now()
        updated = self.model_copy(update={
            "modified_at": now,
            "created_at": self.created_at or now,
        })
        with open(path, "w", encoding="utf-8") as f:
            f.write(updated.model_dump_json(indent=2))

    def save_versioned(self, base_path: Path) -> Path:
        """Speichert mit Zeitstempel im Dateinamen."""
        base_path = Path(base_path)
        ts = _now().strftime("%Y-%m-%dT%H-%M-%S")
        versioned = base_path.parent / f"{base_path.stem}_{ts}{base_path.suffix}"
        self.save_json(versioned)
        return versioned

    @classmethod
    def load_json(cls, path: Path) -> "Project":
        """Lädt ein Projekt aus einer JSON-Datei."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"JSON-Datei nicht gefunden: {path}")
        with open(path, "r", encoding="utf-8") as f:
            return cls.model_validate_json(f.read())
