"""Prüfung eines kompletten Kursplans auf Doppelbelegungen.

Die Slot-Vergabe prüft nur innerhalb einer Klasse, die Konfliktprüfung nur
einen Kandidaten. Dieser Audit betrachtet alle Kurse gemeinsam: keine
Lehrkraft, kein Raum und keine Klasse darf in zwei Kursen stecken, deren
Stunden sich am selben Tag überlappen.
"""

import logging
from collections import defaultdict
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from config.schema import GridConfig
from models.course import Course
from models.teacher import Teacher

logger = logging.getLogger(__name__)

_RESOURCE_LABELS = {"teacher": "Lehrkraft", "room": "Raum", "class": "Klasse"}


class AuditViolation(BaseModel):
    """Eine einzelne Verletzung im Kursplan."""

    severity: Literal["error", "warning"]
    constraint: str      # z.B. "teacher_double_booking"
    description: str
    entity: str          # Anzeigename oder ID der Ressource
    course_ids: list[str] = []


class AuditReport(BaseModel):
    """Ergebnis des Audits."""

    violations: list[AuditViolation]
    is_valid: bool       # True wenn keine Errors (Warnings ok)
    checked_courses: int = 0

    @property
    def errors(self) -> list[AuditViolation]:
        return [v for v in self.violations if v.severity == "error"]

    @property
    def warnings(self) -> list[AuditViolation]:
        return [v for v in self.violations if v.severity == "warning"]

    def print_rich(self) -> None:
        """Gibt den Report formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        status = (
            "[bold green]✓ KEINE DOPPELBELEGUNGEN[/bold green]"
            if self.is_valid
            else "[bold red]✗ DOPPELBELEGUNGEN GEFUNDEN[/bold red]"
        )
        lines = [
            status,
            f"Kurse: {self.checked_courses} | "
            f"Fehler: {len(self.errors)} | Warnungen: {len(self.warnings)}",
        ]
        console.print(Panel("\n".join(lines), title="Kursplan-Audit", border_style="cyan"))

        if not self.violations:
            return

        table = Table(box=box.ROUNDED, show_lines=True)
        table.add_column("Typ", width=8)
        table.add_column("Prüfung", width=24)
        table.add_column("Entität", width=16)
        table.add_column("Beschreibung")
        for v in self.violations:
            color = "red" if v.severity == "error" else "yellow"
            table.add_row(
                f"[{color}]{v.severity.upper()}[/{color}]",
                v.constraint,
                v.entity,
                v.description,
            )
        console.print(table)


class ScheduleAuditor:
    """Prüft eine Kursliste auf Ressourcen-Doppelbelegungen.

    Doppelbelegungen sind Fehler. Unplatzierte Kurse, Kurse außerhalb des
    Rasters (nur mit grid) und überschrittene Wochenstunden (nur mit
    teachers) sind Warnungen.
    """

    def __init__(
        self,
        grid: Optional[GridConfig] = None,
        teachers: Optional[Sequence[Teacher]] = None,
    ) -> None:
        self.grid = grid
        self.teachers = list(teachers or [])

    def audit(self, courses: Sequence[Course]) -> AuditReport:
        violations: list[AuditViolation] = []
        for kind in ("teacher", "room", "class"):
            violations.extend(self._check_double_booking(courses, kind))
        violations.extend(self._check_unplaced(courses))
        violations.extend(self._check_grid(courses))
        violations.extend(self._check_workload(courses))

        report = AuditReport(
            violations=violations,
            is_valid=not any(v.severity == "error" for v in violations),
            checked_courses=len(courses),
        )
        logger.info(
            f"Audit: {len(courses)} Kurse, {len(report.errors)} Fehler, "
            f"{len(report.warnings)} Warnungen"
        )
        return report

    # ── Einzelne Prüfungen ────────────────────────────────────────────────────

    def _check_double_booking(
        self, courses: Sequence[Course], kind: str
    ) -> list[AuditViolation]:
        """Eine Ressource darf pro (Tag, Stunde) nur in einem Kurs stecken."""
        by_slot: dict[tuple, list[Course]] = defaultdict(list)
        for c in courses:
            ident = c.resource_keys().get(kind)
            if ident is None:
                continue
            for slot in c.occupied_slots():
                by_slot[(ident, slot)].append(c)

        # Mehrstündige Überlappungen treffen mehrere Slots; pro Gruppe nur eine Meldung
        reported: set[tuple] = set()
        violations: list[AuditViolation] = []
        for (ident, slot), hits in sorted(by_slot.items(), key=lambda kv: (kv[0][0], kv[0][1])):
            if len(hits) < 2:
                continue
            group = (ident, frozenset(c.id for c in hits))
            if group in reported:
                continue
            reported.add(group)
            violations.append(AuditViolation(
                severity="error",
                constraint=f"{kind}_double_booking",
                entity=_display_name(hits[0], kind),
                description=(
                    f"{_RESOURCE_LABELS[kind]} {slot}: gleichzeitig in "
                    f"{', '.join(c.label() for c in hits)}"
                ),
                course_ids=[c.id for c in hits],
            ))
        return violations

    def _check_unplaced(self, courses: Sequence[Course]) -> list[AuditViolation]:
        return [
            AuditViolation(
                severity="warning",
                constraint="unplaced",
                entity=c.class_name or c.class_id,
                description=f"{c.label()} hat keinen Tag/keine Stunde",
                course_ids=[c.id],
            )
            for c in courses if not c.is_placed
        ]

    def _check_grid(self, courses: Sequence[Course]) -> list[AuditViolation]:
        """Kurse außerhalb der regulären Tage/Stunden."""
        if self.grid is None:
            return []
        violations = []
        for c in courses:
            if not c.is_placed:
                continue
            if c.day > self.grid.days_per_week or c.end_period - 1 > self.grid.periods_per_day:
                violations.append(AuditViolation(
                    severity="warning",
                    constraint="outside_grid",
                    entity=c.class_name or c.class_id,
                    description=(
                        f"{c.label()} liegt außerhalb des Rasters "
                        f"({self.grid.days_per_week} Tage × {self.grid.periods_per_day} Stunden)"
                    ),
                    course_ids=[c.id],
                ))
        return violations

    def _check_workload(self, courses: Sequence[Course]) -> list[AuditViolation]:
        if not self.teachers:
            return []
        hours: dict[str, int] = defaultdict(int)
        for c in courses:
            if c.is_placed and c.teacher_id:
                hours[c.teacher_id.upper()] += c.duration
        violations = []
        for t in self.teachers:
            if hours[t.id] > t.max_hours_per_week:
                violations.append(AuditViolation(
                    severity="warning",
                    constraint="teacher_workload",
                    entity=t.name,
                    description=f"{hours[t.id]} Stunden/Woche (Maximum {t.max_hours_per_week})",
                ))
        return violations


def _display_name(course: Course, kind: str) -> str:
    if kind == "teacher":
        return course.teacher or course.teacher_id
    if kind == "room":
        return course.room or course.room_id
    return course.class_name or course.class_id
