"""Konfliktprüfung für einzelne Kurs-Platzierungen.

Prüft einen Kandidaten gegen eine Menge bestehender Kurse. Konflikte sind
harte Verletzungen und blockieren das Speichern, Hinweise (Warnings) nicht.
Beides wird als Daten zurückgegeben, nie als Exception.

Voreinstellung (ValidationSettings()):
  - gleicher Tag UND gleiche Anfangsstunde zählt als Konflikt,
  - verglichen wird mit ALLEN Kursen, unabhängig von Lehrkraft/Raum/Klasse,
  - alle Treffer landen in einem einzigen ConflictInfo vom Typ "time".

overlap_mode="interval" vergleicht stattdessen [Stunde, Stunde + Dauer)
am selben Tag; resource_scoped=True filtert vorher auf Kurse mit
gemeinsamer Lehrkraft, gemeinsamem Raum oder gemeinsamer Klasse und
meldet die Konflikte getrennt nach Ressource.
"""

import logging
from collections import defaultdict
from typing import Literal, Optional, Sequence

from pydantic import BaseModel

from config.schema import GridConfig, ValidationSettings
from models.course import Course
from models.teacher import Teacher

logger = logging.getLogger(__name__)

TIME_CONFLICT_MESSAGE = "Zeitkonflikt"

_RESOURCE_MESSAGES = {
    "teacher": "Lehrkraft ist zu dieser Zeit bereits eingeplant",
    "room": "Raum ist zu dieser Zeit bereits belegt",
    "class": "Klasse hat zu dieser Zeit bereits Unterricht",
}

ConflictType = Literal["time", "teacher", "room", "class"]


class ConflictInfo(BaseModel):
    """Ein harter Konflikt mit allen beteiligten Kursen."""

    type: ConflictType
    message: str
    courses: list[Course]


class WarningInfo(BaseModel):
    """Ein weicher Hinweis, der das Speichern nicht blockiert."""

    type: Literal["workload", "preference", "constraint"]
    message: str


class ValidationResult(BaseModel):
    """Ergebnis einer Konfliktprüfung."""

    is_valid: bool = True
    conflicts: list[ConflictInfo] = []
    warnings: list[WarningInfo] = []

    def print_rich(self) -> None:
        """Gibt das Ergebnis formatiert über Rich aus."""
        from rich.console import Console
        from rich.panel import Panel

        console = Console()
        if self.is_valid:
            status = "[bold green]✓ KEINE KONFLIKTE[/bold green]"
        else:
            status = "[bold red]✗ KONFLIKT[/bold red]"

        lines = [status]
        for conflict in self.conflicts:
            lines.append(f"\n[red bold]{conflict.message}:[/red bold]")
            for c in conflict.courses:
                lines.append(f"  [red]• {c.label()}[/red]")
        if self.warnings:
            lines.append("\n[yellow bold]Hinweise:[/yellow bold]")
            for w in self.warnings:
                lines.append(f"  [yellow]• {w.message}[/yellow]")

        console.print(Panel("\n".join(lines), title="Konfliktprüfung", border_style="cyan"))


# ─── Vergleichsfunktionen ─────────────────────────────────────────────────────

def periods_overlap(start_a: int, duration_a: int, start_b: int, duration_b: int) -> bool:
    """Überlappen sich [start_a, start_a+duration_a) und [start_b, start_b+duration_b)?"""
    return start_a < start_b + duration_b and start_b < start_a + duration_a


def courses_collide(
    a: Course, b: Course, mode: Literal["exact", "interval"] = "exact"
) -> bool:
    """True wenn beide Kurse am selben Tag zeitlich zusammenfallen."""
    if not a.is_placed or not b.is_placed or a.day != b.day:
        return False
    if mode == "interval":
        return periods_overlap(a.period, a.duration, b.period, b.duration)
    return a.period == b.period


def shared_resources(a: Course, b: Course) -> list[str]:
    """Ressourcentypen ("teacher", "room", "class"), die beide Kurse belegen."""
    b_keys = b.resource_keys()
    return [kind for kind, ident in a.resource_keys().items() if b_keys.get(kind) == ident]


# ─── Validator ────────────────────────────────────────────────────────────────

class ConflictValidator:
    """Prüft einen Kandidaten gegen bestehende Kurse.

    grid und teachers sind optional: ohne sie bleibt die Hinweisliste leer.
    Mit Lehrkräften wird die Wochenlast gegen max_hours_per_week geprüft,
    mit Raster werden Platzierungen außerhalb der regulären Tage/Stunden
    gemeldet.
    """

    def __init__(
        self,
        settings: Optional[ValidationSettings] = None,
        grid: Optional[GridConfig] = None,
        teachers: Optional[Sequence[Teacher]] = None,
    ) -> None:
        self.settings = settings or ValidationSettings()
        self.grid = grid
        self.teachers = {t.id: t for t in teachers or []}

    def validate(self, candidate: Course, existing: Sequence[Course]) -> ValidationResult:
        """Prüft candidate gegen existing; keine Seiteneffekte."""
        if not candidate.is_placed:
            return ValidationResult()

        others = [e for e in existing if e.id != candidate.id]
        mode = self.settings.overlap_mode

        if self.settings.resource_scoped:
            conflicts = self._resource_conflicts(candidate, others, mode)
        else:
            conflicts = self._time_conflicts(candidate, others, mode)

        warnings = self._workload_warnings(candidate, others)
        warnings.extend(self._grid_warnings(candidate))

        if conflicts:
            logger.debug(
                f"{candidate.label()}: {sum(len(c.courses) for c in conflicts)} "
                f"kollidierende Kurse"
            )
        return ValidationResult(
            is_valid=len(conflicts) == 0,
            conflicts=conflicts,
            warnings=warnings,
        )

    # ── Harte Konflikte ───────────────────────────────────────────────────────

    def _time_conflicts(
        self, candidate: Course, others: list[Course], mode: str
    ) -> list[ConflictInfo]:
        """Alle Kurse im selben Zeitfenster, egal welche Ressource."""
        hits = [e for e in others if courses_collide(candidate, e, mode)]
        if not hits:
            return []
        return [ConflictInfo(type="time", message=TIME_CONFLICT_MESSAGE, courses=hits)]

    def _resource_conflicts(
        self, candidate: Course, others: list[Course], mode: str
    ) -> list[ConflictInfo]:
        """Nur Kurse mit gemeinsamer Ressource, gruppiert nach Ressourcentyp."""
        by_kind: dict[str, list[Course]] = defaultdict(list)
        for e in others:
            kinds = shared_resources(candidate, e)
            if not kinds or not courses_collide(candidate, e, mode):
                continue
            for kind in kinds:
                by_kind[kind].append(e)

        return [
            ConflictInfo(type=kind, message=_RESOURCE_MESSAGES[kind], courses=by_kind[kind])
            for kind in ("teacher", "room", "class")
            if by_kind.get(kind)
        ]

    # ── Hinweise ──────────────────────────────────────────────────────────────

    def _workload_warnings(
        self, candidate: Course, others: list[Course]
    ) -> list[WarningInfo]:
        teacher = self.teachers.get(candidate.teacher_id.upper()) if candidate.teacher_id else None
        if teacher is None:
            return []
        hours = candidate.duration + sum(
            e.duration for e in others
            if e.is_placed and e.teacher_id.upper() == teacher.id
        )
        if hours <= teacher.max_hours_per_week:
            return []
        return [WarningInfo(
            type="workload",
            message=(
                f"Lehrkraft {teacher.name}: {hours} Stunden/Woche "
                f"(Maximum {teacher.max_hours_per_week})"
            ),
        )]

    def _grid_warnings(self, candidate: Course) -> list[WarningInfo]:
        if self.grid is None:
            return []
        warnings = []
        if candidate.day > self.grid.days_per_week:
            warnings.append(WarningInfo(
                type="preference",
                message=f"{self.grid.day_name(candidate.day)} liegt außerhalb der Unterrichtstage",
            ))
        last = candidate.end_period - 1
        if last > self.grid.periods_per_day:
            warnings.append(WarningInfo(
                type="preference",
                message=(
                    f"Stunde {last} liegt nach der letzten regulären Stunde "
                    f"({self.grid.periods_per_day})"
                ),
            ))
        return warnings


def validate(
    candidate: Course,
    existing: Sequence[Course],
    settings: Optional[ValidationSettings] = None,
) -> ValidationResult:
    """Kurzform für ConflictValidator(settings).validate(...)."""
    return ConflictValidator(settings).validate(candidate, existing)
