"""Kennzahlen zu einem Kursplan.

Zählt Kurse pro Raum, Lehrkraft, Klasse und Fach. Die Raumauslastung
bezieht sich auf die Slots pro Woche des konfigurierten Rasters.
"""

from collections import Counter
from typing import Optional, Sequence

from pydantic import BaseModel

from config.schema import GridConfig
from models.course import Course


class Statistics(BaseModel):
    """Aggregierte Kennzahlen eines Kursplans."""

    total_courses: int
    room_usage: dict[str, int]           # Raum-ID → belegte Stunden
    room_utilization: dict[str, float]   # Raum → Prozent der Wochenslots
    teacher_workload: dict[str, int]     # Lehrkraft-ID → Stunden/Woche
    teacher_share: dict[str, float]      # Lehrkraft → Prozent aller Stunden
    teacher_count: int
    class_schedule: dict[str, int]       # Klassen-ID → Stunden/Woche
    class_count: int
    subject_distribution: dict[str, int] # Fach-ID → Anzahl Kurse
    slots_per_week: int
    # ID → Anzeigename
    room_labels: dict[str, str] = {}
    teacher_labels: dict[str, str] = {}
    class_labels: dict[str, str] = {}
    subject_labels: dict[str, str] = {}

    def print_rich(self, top: Optional[int] = None) -> None:
        """Gibt die Kennzahlen über Rich aus (top = nur die N größten Zeilen)."""
        from rich.console import Console
        from rich.panel import Panel
        from rich.table import Table
        from rich import box

        console = Console()
        console.print(Panel(
            f"Kurse: [bold]{self.total_courses}[/bold] | "
            f"Lehrkräfte: [bold]{self.teacher_count}[/bold] | "
            f"Klassen: [bold]{self.class_count}[/bold] | "
            f"Räume: [bold]{len(self.room_usage)}[/bold]",
            title="Statistik – Übersicht",
            border_style="cyan",
        ))

        r_table = Table(title="Raumauslastung", box=box.ROUNDED)
        r_table.add_column("Raum", width=18)
        r_table.add_column("Stunden", justify="right", width=8)
        r_table.add_column("Auslastung", justify="right", width=10)
        for room, usage in _ranked(self.room_usage, top):
            util = self.room_utilization[room]
            color = "red" if util > 80 else "yellow" if util > 50 else "green"
            r_table.add_row(
                self.room_labels.get(room, room), str(usage), f"[{color}]{util:.1f}%[/{color}]"
            )
        console.print(r_table)

        t_table = Table(title="Lehrkräfte", box=box.ROUNDED)
        t_table.add_column("Lehrkraft", width=24)
        t_table.add_column("Stunden", justify="right", width=8)
        t_table.add_column("Anteil", justify="right", width=8)
        for teacher, hours in _ranked(self.teacher_workload, top):
            color = "red" if hours > 20 else "yellow" if hours > 10 else "green"
            name = self.teacher_labels.get(teacher, teacher)
            label = name if name == teacher else f"{name} ({teacher})"
            t_table.add_row(
                label, f"[{color}]{hours}[/{color}]", f"{self.teacher_share[teacher]:.1f}%"
            )
        console.print(t_table)

        s_table = Table(title="Fächerverteilung", box=box.ROUNDED)
        s_table.add_column("Fach", width=18)
        s_table.add_column("Kurse", justify="right", width=8)
        for subject, count in _ranked(self.subject_distribution, top):
            s_table.add_row(self.subject_labels.get(subject, subject), str(count))
        console.print(s_table)


def _ranked(values: dict, top: Optional[int]) -> list[tuple]:
    ranked = sorted(values.items(), key=lambda kv: (-kv[1], kv[0]))
    return ranked[:top] if top else ranked


class StatisticsCollector:
    """Berechnet Statistics für eine Kursliste.

    Gezählt wird nach IDs; Anzeigenamen landen nur in den *_labels und
    werden erst bei der Ausgabe eingesetzt.
    """

    def __init__(self, grid: Optional[GridConfig] = None) -> None:
        self.grid = grid or GridConfig()

    def collect(self, courses: Sequence[Course]) -> Statistics:
        placed = [c for c in courses if c.is_placed]

        room_usage: Counter = Counter()
        teacher_workload: Counter = Counter()
        class_schedule: Counter = Counter()
        subject_distribution: Counter = Counter()
        labels: dict[str, dict[str, str]] = {
            "room": {}, "teacher": {}, "class": {}, "subject": {},
        }

        def key(kind: str, ident: str, name: Optional[str]) -> str:
            k = ident or name or ""
            if k and k not in labels[kind]:
                labels[kind][k] = name or k
            return k

        for c in placed:
            room = key("room", c.room_id, c.room)
            if room:
                room_usage[room] += c.duration
            teacher = key("teacher", c.teacher_id, c.teacher)
            if teacher:
                teacher_workload[teacher] += c.duration
            class_schedule[key("class", c.class_id, c.class_name)] += c.duration
        for c in courses:
            subject_distribution[key("subject", c.subject_id, c.name) or "?"] += 1

        slots = self.grid.slots_per_week
        total_hours = sum(teacher_workload.values())
        return Statistics(
            total_courses=len(courses),
            room_usage=dict(room_usage),
            room_utilization={
                room: round(usage / slots * 100, 1) for room, usage in room_usage.items()
            },
            teacher_workload=dict(teacher_workload),
            teacher_share={
                t: round(h / total_hours * 100, 1) if total_hours else 0.0
                for t, h in teacher_workload.items()
            },
            teacher_count=len(teacher_workload),
            class_schedule=dict(class_schedule),
            class_count=len(class_schedule),
            subject_distribution=dict(subject_distribution),
            slots_per_week=slots,
            room_labels=labels["room"],
            teacher_labels=labels["teacher"],
            class_labels=labels["class"],
            subject_labels=labels["subject"],
        )
