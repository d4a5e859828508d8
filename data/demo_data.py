"""Demo-Daten-Generator für den Kursplaner.

Erzeugt Jahrgänge, Klassen, Stammdaten und einen zufälligen Wochenplan
pro Klasse über die Slot-Vergabe (solver.assignment).

Stundentafel der Demo (pro Klasse):
  - Hauptfächer (Deutsch, Mathematik, Englisch, Physik, Chemie): 3-4 Einheiten
  - Nebenfächer (Geschichte, Erdkunde, Politik, Biologie):        2 Einheiten
  - Spezialfächer (Sport, Musik, Kunst, Informatik):               1-2 Einheiten
  - Sport als Doppelstunde
Das sind höchstens 36 Einheiten – unter den 40 Slots des Rasters Mo-Fr × 1-8,
Engpässe am Ende der Vergabe sind trotzdem möglich.
"""

import random
import string
from typing import Optional

from config.schema import PlannerConfig
from config.defaults import (
    DEFAULT_ROOMS,
    DEMO_SUBJECT_TIERS,
    SUBJECT_METADATA,
    SUBJECT_ROOM_MAP,
)
from models.grade import Grade
from models.project import Project
from models.room import Room
from models.school_class import SchoolClass
from models.subject import Subject
from models.teacher import Teacher
from solver.assignment import RoomSelector, SubjectDemand, assign_classes

# ─── Namens-Listen ────────────────────────────────────────────────────────────

_FIRST_NAMES_M = [
    "Andreas", "Bernd", "Christian", "Dieter", "Franz", "Hans", "Jürgen",
    "Klaus", "Ludwig", "Markus", "Michael", "Norbert", "Peter", "Stefan",
    "Thomas", "Tobias", "Ulrich", "Werner", "Yusuf", "Martin", "Robert",
]

_FIRST_NAMES_F = [
    "Anna", "Birgit", "Christine", "Eva", "Gabi", "Iris", "Kathrin",
    "Karin", "Lena", "Maria", "Olga", "Renate", "Sandra", "Tanja",
    "Ulrike", "Vera", "Xenia", "Zoe", "Monika", "Sabine", "Heike",
]

_LAST_NAMES = [
    "Müller", "Schmidt", "Schneider", "Fischer", "Weber", "Meyer",
    "Wagner", "Becker", "Schulz", "Hoffmann", "Schäfer", "Koch",
    "Bauer", "Richter", "Klein", "Wolf", "Schröder", "Neumann",
    "Schwarz", "Zimmermann", "Braun", "Krüger", "Hofmann", "Hartmann",
    "Lange", "Schmitt", "Werner", "Schmitz", "Krause", "Meier",
    "Lehmann", "Schmid", "Schulze", "Maier", "Köhler", "Herrmann",
]


def _make_abbreviation(last_name: str, used: set[str], rng: random.Random) -> str:
    """Generiert ein eindeutiges 3-Zeichen-Kürzel aus dem Nachnamen."""
    base = (
        last_name.upper()
        .replace("Ä", "AE").replace("Ö", "OE").replace("Ü", "UE")
        .replace("ß", "SS")
    )
    candidates = [
        base[:3],
        base[:2] + base[-1],
        base[0] + base[2:4],
        base[:2] + str(len(used) % 10),
    ]
    for c in candidates:
        c = c[:3].ljust(3, "X")
        if c not in used:
            used.add(c)
            return c
    while True:
        c = "".join(rng.choices(string.ascii_uppercase, k=3))
        if c not in used:
            used.add(c)
            return c


def class_name(grade_name: str, class_number: int) -> str:
    """Klassenbezeichnung nach Schema Jahrgang + Buchstabe ("10" + 2 → "10b")."""
    if class_number <= len(string.ascii_lowercase):
        return f"{grade_name}{string.ascii_lowercase[class_number - 1]}"
    return f"{grade_name}-{class_number}"


class DemoDataGenerator:
    """Generiert ein vollständiges Demo-Projekt auf Basis der PlannerConfig."""

    def __init__(self, config: PlannerConfig, seed: Optional[int] = None) -> None:
        self.config = config
        self.seed = seed if seed is not None else config.demo.seed
        self.rng = random.Random(self.seed)
        self._used_abbreviations: set[str] = set()

    # ─── Stammdaten ───────────────────────────────────────────────────────────

    def _generate_subjects(self) -> list[Subject]:
        """Erzeugt alle Fächer aus den SUBJECT_METADATA."""
        return [
            Subject(
                id=meta["code"],
                name=name,
                code=meta["code"],
                color=meta["color"],
                category=meta["category"],
                default_duration=meta["duration"],
                requires_lab=meta["lab"],
            )
            for name, meta in SUBJECT_METADATA.items()
        ]

    def _generate_rooms(self) -> list[Room]:
        """Erzeugt Klassen- und Fachräume aus DEFAULT_ROOMS."""
        rooms = []
        for i, (name, room_type, specialized) in enumerate(DEFAULT_ROOMS, 1):
            rooms.append(Room(
                id=f"R{i:02d}",
                name=name,
                room_type=room_type,
                specialized=specialized,
            ))
        return rooms

    def _make_teacher(self, subjects: list[str]) -> Teacher:
        """Erstellt eine Lehrkraft mit zufälligem Namen."""
        first_names = _FIRST_NAMES_F if self.rng.random() < 0.55 else _FIRST_NAMES_M
        first = self.rng.choice(first_names)
        last = self.rng.choice(_LAST_NAMES)
        abbr = _make_abbreviation(last, self._used_abbreviations, self.rng)
        return Teacher(
            id=abbr,
            name=f"{last}, {first}",
            subjects=subjects,
            max_hours_per_week=26,
        )

    def _generate_teachers(self) -> list[Teacher]:
        """teachers_per_subject Lehrkräfte pro Fach."""
        per_subject = self.config.demo.teachers_per_subject
        return [
            self._make_teacher([subject])
            for subject in SUBJECT_METADATA
            for _ in range(per_subject)
        ]

    # ─── Jahrgänge & Klassen ──────────────────────────────────────────────────

    def generate_grades_and_classes(self) -> tuple[list[Grade], list[SchoolClass]]:
        """Jahrgänge aus DemoConfig, Klassen mit zufälliger Schülerzahl."""
        demo = self.config.demo
        lo, hi = demo.student_count_range
        grades: list[Grade] = []
        classes: list[SchoolClass] = []

        for order, (grade_name, count) in enumerate(
            zip(demo.grade_names, demo.classes_per_grade), 1
        ):
            grade = Grade(
                name=grade_name,
                order=order,
                description=f"Jahrgang {grade_name}, {count} Klassen",
            )
            grades.append(grade)
            for number in range(1, count + 1):
                classes.append(SchoolClass(
                    name=class_name(grade_name, number),
                    grade=grade_name,
                    grade_id=grade.id,
                    class_number=number,
                    student_count=self.rng.randint(lo, hi),
                    class_teacher=f"{self.rng.choice(_LAST_NAMES)}",
                    description={1: "Bilingual", 2: "MINT"}.get(number),
                ))
        return grades, classes

    # ─── Bedarf ───────────────────────────────────────────────────────────────

    def build_demands(
        self, subjects: list[Subject], teachers: list[Teacher]
    ) -> list[SubjectDemand]:
        """Stundentafel einer Klasse; Einheitenzahl wird pro Klasse gezogen."""
        subject_map = {s.name: s for s in subjects}
        demands: list[SubjectDemand] = []
        for names, (lo, hi) in DEMO_SUBJECT_TIERS.values():
            for name in names:
                subject = subject_map[name]
                demands.append(SubjectDemand(
                    subject_name=name,
                    subject_id=subject.id,
                    teacher_pool=[t for t in teachers if t.teaches(name)],
                    sessions_per_week=self.rng.randint(lo, hi),
                    duration=subject.default_duration,
                ))
        return demands

    # ─── Vollständiges Projekt ────────────────────────────────────────────────

    def generate(self, project_name: Optional[str] = None, max_workers: int = 1) -> Project:
        """Erzeugt das vollständige Demo-Projekt inklusive Kursen."""
        subjects = self._generate_subjects()
        rooms = self._generate_rooms()
        teachers = self._generate_teachers()
        grades, classes = self.generate_grades_and_classes()

        jobs = [(cls, self.build_demands(subjects, teachers)) for cls in classes]
        reports = assign_classes(
            jobs,
            settings=self.config.assignment,
            room_selector=RoomSelector(rooms, SUBJECT_ROOM_MAP),
            seed=self.rng.getrandbits(64),
            max_workers=max_workers,
        )
        courses = [c for report in reports for c in report.courses]

        return Project(
            name=project_name or f"{self.config.school_name} (Demo)",
            grades=grades,
            classes=classes,
            teachers=teachers,
            subjects=subjects,
            rooms=rooms,
            courses=courses,
        )

    # ─── Ausgabe ──────────────────────────────────────────────────────────────

    def print_summary(self, project: Project) -> None:
        """Gibt eine Rich-Tabelle mit Übersicht der erzeugten Daten aus."""
        from rich.console import Console
        from rich.table import Table
        from rich import box

        console = Console()
        table = Table(title="Erzeugte Demo-Daten", box=box.ROUNDED)
        table.add_column("Kategorie", style="bold cyan")
        table.add_column("Anzahl", justify="right")
        table.add_column("Details")

        table.add_row("Jahrgänge", str(len(project.grades)),
                      ", ".join(g.name for g in project.sorted_grades()))
        table.add_row("Klassen", str(len(project.classes)), "")
        table.add_row("Fächer", str(len(project.subjects)), "")
        table.add_row("Lehrkräfte", str(len(project.teachers)), "")
        table.add_row("Räume", str(len(project.rooms)),
                      f"{sum(1 for r in project.rooms if r.specialized)} Fachräume")
        table.add_row("Kurse", str(len(project.courses)), "")

        console.print(table)
