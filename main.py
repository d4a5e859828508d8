"""Kursplaner: Haupt-CLI.

Verwendung:
  python main.py init                         Default-Konfiguration anlegen
  python main.py config show                  Konfiguration anzeigen
  python main.py demo                         Demo-Projekt erzeugen und speichern
  python main.py check --klasse 10a ...       Kurs-Platzierung prüfen (--add speichert)
  python main.py audit                        Gesamten Kursplan auf Doppelbelegungen prüfen
  python main.py stats                        Statistik anzeigen
  python main.py timetable --klasse 10a       Wochenplan anzeigen
  python main.py export <datei.csv|.xlsx>     Kurse exportieren
  python main.py import <datei.csv|.xlsx>     Kurse importieren
  python main.py grade list|add|delete|move   Jahrgänge verwalten
  python main.py grade template|import        Klassen-Import per Excel/CSV
  python main.py course list|delete           Kurse anzeigen / löschen
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich import box

console = Console()

# Standard-Pfad für das gespeicherte Projekt
DEFAULT_PROJECT_JSON = Path("output/project.json")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )


def _fail(message: str) -> None:
    console.print(f"[red bold]Fehler:[/red bold] {escape(message)}")
    sys.exit(1)


def _load_config(ctx: click.Context):
    """Lädt die Konfiguration; ohne Datei gelten die Defaults."""
    from config.manager import ConfigManager
    try:
        return ConfigManager().load_or_default(ctx.obj.get("config_path"))
    except ValueError as e:
        _fail(str(e))


def _load_project_or_abort(path: Path):
    from pydantic import ValidationError

    from models.project import Project
    if not path.exists():
        console.print(
            f"[red]Kein Projekt gefunden: {path}[/red]\n"
            "Erzeugen Sie eines mit [bold]python main.py demo[/bold]."
        )
        sys.exit(1)
    try:
        return Project.load_json(path)
    except ValidationError as e:
        _fail(f"Projektdatei ungültig: {path}\n{e}")


def _save_project(project, path: Path) -> None:
    project.save_json(path)
    console.print(f"[green]✓[/green] Projekt gespeichert: {path}")


def _find_grade(project, key: str):
    """Jahrgang über ID oder Namen."""
    for g in project.grades:
        if key in (g.id, g.name):
            return g
    _fail(f"Jahrgang '{key}' nicht gefunden.")


def _find_by_name(items, key: Optional[str], what: str):
    if not key:
        return None
    lowered = key.lower()
    for item in items:
        if lowered in (item.id.lower(), item.name.lower()):
            return item
    _fail(f"{what} '{key}' nicht gefunden.")


project_option = click.option(
    "--project", "-p", "project_path", default=str(DEFAULT_PROJECT_JSON),
    type=click.Path(path_type=Path), show_default=True,
    help="Pfad zur Projekt-JSON.",
)


# ─── INIT / CONFIG ────────────────────────────────────────────────────────────

@click.command("init")
@click.option("--force", is_flag=True, default=False, help="Bestehende Konfiguration überschreiben.")
@click.pass_context
def cmd_init(ctx: click.Context, force: bool):
    """Legt die Default-Konfiguration als YAML an."""
    from config.defaults import default_planner_config
    from config.manager import ConfigManager

    mgr = ConfigManager()
    target = ctx.obj.get("config_path") or mgr.DEFAULT_CONFIG
    if target.exists() and not force:
        console.print(
            f"[yellow]Konfiguration existiert bereits: {target}[/yellow]\n"
            "Mit [bold]--force[/bold] überschreiben."
        )
        return
    path = mgr.save(default_planner_config(), target)
    console.print(f"[green]✓[/green] Konfiguration angelegt: {path}")


@click.group("config")
def cmd_config():
    """Konfiguration anzeigen."""


@cmd_config.command("show")
@click.pass_context
def config_show(ctx: click.Context):
    """Zeigt die aktuelle Konfiguration an."""
    config = _load_config(ctx)
    grid = config.grid

    console.print(Panel(
        f"[bold]{config.school_name}[/bold]  |  "
        f"{grid.days_per_week} Tage × {grid.periods_per_day} Stunden "
        f"({grid.slots_per_week} Slots)  |  Beginn {grid.start_time}",
        title="Kursplaner-Konfiguration",
        border_style="cyan",
    ))

    table = Table(title="Einstellungen", box=box.ROUNDED)
    table.add_column("Bereich", style="bold cyan")
    table.add_column("Einstellung")
    table.add_column("Wert")
    v, a = config.validation, config.assignment
    table.add_row("Konfliktprüfung", "Vergleich", v.overlap_mode)
    table.add_row("", "Nur gemeinsame Ressourcen", "ja" if v.resource_scoped else "nein")
    table.add_row("Slot-Vergabe", "Tage", f"{a.day_range[0]}-{a.day_range[1]}")
    table.add_row("", "Stunden", f"{a.period_range[0]}-{a.period_range[1]}")
    table.add_row("", "Versuche pro Einheit", str(a.max_attempts))
    table.add_row("", "Mehrstündige voll reservieren", "ja" if a.reserve_full_duration else "nein")
    d = config.demo
    table.add_row("Demo-Daten", "Jahrgänge",
                  ", ".join(f"{g} ({n})" for g, n in zip(d.grade_names, d.classes_per_grade)))
    table.add_row("", "Seed", str(d.seed))
    console.print(table)

    if grid.breaks:
        console.print(
            "[bold]Pausen:[/bold] "
            + ", ".join(f"{b.label} nach {b.after_period}. ({b.duration_minutes} min)" for b in grid.breaks)
        )


# ─── DEMO ─────────────────────────────────────────────────────────────────────

@click.command("demo")
@click.option("--seed", type=int, default=None, help="Zufalls-Seed (Default aus Konfiguration).")
@click.option("--workers", default=1, show_default=True, help="Parallele Klassen bei der Vergabe.")
@click.option("--audit/--no-audit", "run_audit", default=True, help="Audit nach der Erzeugung.")
@project_option
@click.pass_context
def cmd_demo(ctx: click.Context, seed: Optional[int], workers: int, run_audit: bool, project_path: Path):
    """Erzeugt ein Demo-Projekt mit zufällig verteilten Kursen."""
    from analysis.schedule_audit import ScheduleAuditor
    from data.demo_data import DemoDataGenerator

    config = _load_config(ctx)
    console.print("[bold]Demo-Daten werden generiert...[/bold]")
    gen = DemoDataGenerator(config, seed=seed)
    project = gen.generate(max_workers=workers)
    gen.print_summary(project)

    if run_audit:
        ScheduleAuditor(config.grid, project.teachers).audit(project.courses).print_rich()

    _save_project(project, project_path)


# ─── CHECK ────────────────────────────────────────────────────────────────────

@click.command("check")
@click.option("--klasse", "class_key", required=True, help="Klasse (Name oder ID).")
@click.option("--fach", "subject_key", required=True, help="Fach (Name, Kürzel oder ID).")
@click.option("--lehrkraft", "teacher_key", default=None, help="Lehrkraft (Kürzel oder Name).")
@click.option("--raum", "room_key", default=None, help="Raum (Name oder ID).")
@click.option("--tag", "day", required=True, help="Tag (1-7 oder Mo..So).")
@click.option("--stunde", "period", required=True, type=int, help="Anfangsstunde (1-10).")
@click.option("--dauer", "duration", default=1, show_default=True, type=int, help="Dauer in Stunden.")
@click.option("--add", is_flag=True, default=False, help="Kurs bei Konfliktfreiheit speichern.")
@project_option
@click.pass_context
def cmd_check(
    ctx: click.Context, class_key: str, subject_key: str, teacher_key: Optional[str],
    room_key: Optional[str], day: str, period: int, duration: int, add: bool, project_path: Path,
):
    """Prüft eine Kurs-Platzierung gegen alle bestehenden Kurse."""
    from pydantic import ValidationError

    from data.course_io import parse_day
    from models.course import Course
    from models.project import ProjectError
    from solver.conflicts import ConflictValidator

    config = _load_config(ctx)
    project = _load_project_or_abort(project_path)

    school_class = _find_by_name(project.classes, class_key, "Klasse")
    teacher = _find_by_name(project.teachers, teacher_key, "Lehrkraft")
    room = _find_by_name(project.rooms, room_key, "Raum")
    subject = next(
        (s for s in project.subjects
         if subject_key.lower() in (s.id.lower(), s.name.lower(), s.code.lower())),
        None,
    )
    if subject is None:
        _fail(f"Fach '{subject_key}' nicht gefunden.")
    if not day.strip():
        _fail("Tag darf nicht leer sein.")

    try:
        candidate = Course(
            subject_id=subject.id,
            teacher_id=teacher.id if teacher else "",
            class_id=school_class.id,
            room_id=room.id if room else "",
            day=parse_day(day),
            period=period,
            duration=duration,
            name=subject.name,
            teacher=teacher.name if teacher else None,
            class_name=school_class.name,
            room=room.name if room else None,
        )
    except (ValidationError, ValueError) as e:
        _fail(f"Ungültige Platzierung:\n{e}")

    validator = ConflictValidator(config.validation, config.grid, project.teachers)
    result = validator.validate(candidate, project.courses)
    result.print_rich()

    if not result.is_valid:
        sys.exit(1)
    if add:
        try:
            project = project.add_course(candidate)
        except ProjectError as e:
            _fail(str(e))
        _save_project(project, project_path)


# ─── AUDIT / STATS ────────────────────────────────────────────────────────────

@click.command("audit")
@project_option
@click.pass_context
def cmd_audit(ctx: click.Context, project_path: Path):
    """Prüft den gesamten Kursplan auf Doppelbelegungen."""
    from analysis.schedule_audit import ScheduleAuditor

    config = _load_config(ctx)
    project = _load_project_or_abort(project_path)
    report = ScheduleAuditor(config.grid, project.teachers).audit(project.courses)
    report.print_rich()
    sys.exit(0 if report.is_valid else 1)


@click.command("stats")
@click.option("--top", type=int, default=None, help="Nur die N größten Einträge je Tabelle.")
@project_option
@click.pass_context
def cmd_stats(ctx: click.Context, top: Optional[int], project_path: Path):
    """Zeigt Kennzahlen zu Räumen, Lehrkräften und Fächern."""
    from analysis.statistics import StatisticsCollector

    config = _load_config(ctx)
    project = _load_project_or_abort(project_path)
    StatisticsCollector(config.grid).collect(project.courses).print_rich(top=top)


# ─── TIMETABLE ────────────────────────────────────────────────────────────────

@click.command("timetable")
@click.option("--klasse", "class_key", default=None, help="Wochenplan einer Klasse.")
@click.option("--lehrkraft", "teacher_key", default=None, help="Wochenplan einer Lehrkraft.")
@click.option("--raum", "room_key", default=None, help="Belegung eines Raums.")
@project_option
@click.pass_context
def cmd_timetable(
    ctx: click.Context, class_key: Optional[str], teacher_key: Optional[str],
    room_key: Optional[str], project_path: Path,
):
    """Zeigt einen Wochenplan als Tabelle."""
    from analysis.course_filter import TimetableViewType, build_timetable, filter_by_view

    config = _load_config(ctx)
    project = _load_project_or_abort(project_path)

    if class_key:
        target = _find_by_name(project.classes, class_key, "Klasse")
        view, detail = TimetableViewType.CLASS, lambda c: f"{c.teacher_id} {c.room or ''}"
    elif teacher_key:
        target = _find_by_name(project.teachers, teacher_key, "Lehrkraft")
        view, detail = TimetableViewType.TEACHER, lambda c: f"{c.class_name} {c.room or ''}"
    elif room_key:
        target = _find_by_name(project.rooms, room_key, "Raum")
        view, detail = TimetableViewType.ROOM, lambda c: f"{c.class_name} {c.teacher_id}"
    else:
        _fail("Bitte --klasse, --lehrkraft oder --raum angeben.")

    grid = config.grid
    rows = build_timetable(filter_by_view(project.courses, view, target.id), grid)

    table = Table(title=f"Wochenplan {target.name}", box=box.ROUNDED, show_lines=True)
    table.add_column("Std.", justify="right", width=4)
    for d in range(1, grid.days_per_week + 1):
        table.add_column(grid.day_name(d), width=16)

    covered: set[tuple[int, int]] = set()
    for p, row in enumerate(rows):
        cells = []
        for d, cell in enumerate(row):
            if cell is not None:
                cells.append(f"[bold]{cell.course.name}[/bold]\n[dim]{detail(cell.course).strip()}[/dim]")
                covered.update((p + k, d) for k in range(1, cell.row_span))
            elif (p, d) in covered:
                cells.append("[dim]│[/dim]")
            else:
                cells.append("")
        table.add_row(str(p + 1), *cells)
    console.print(table)


# ─── EXPORT / IMPORT ──────────────────────────────────────────────────────────

@click.command("export")
@click.argument("datei", type=click.Path(path_type=Path))
@project_option
def cmd_export(datei: Path, project_path: Path):
    """Exportiert alle Kurse als CSV oder Excel (nach Dateiendung)."""
    from data.course_io import export_courses

    project = _load_project_or_abort(project_path)
    path = export_courses(project.courses, datei)
    console.print(f"[green]✓[/green] {len(project.courses)} Kurse exportiert: {path}")


@click.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@click.option("--replace", is_flag=True, default=False, help="Bestehende Kurse ersetzen (nur bei fehlerfreier Datei).")
@project_option
def cmd_import(datei: Path, replace: bool, project_path: Path):
    """Importiert Kurse aus CSV oder Excel in das Projekt."""
    from data.course_io import CourseImportError, import_courses
    from models.project import ProjectError

    project = _load_project_or_abort(project_path)
    console.print(f"[bold]Importiere:[/bold] {datei}")
    try:
        result = import_courses(datei, project)
    except CourseImportError as e:
        _fail(f"Import fehlgeschlagen:\n{e}")

    for w in result.warnings:
        console.print(f"  [yellow]• {w}[/yellow]")
    for err in result.errors:
        console.print(f"  [red]• {err}[/red]")

    if replace and result.errors:
        _fail(
            f"{len(result.errors)} fehlerhafte Zeilen: bestehende Kurse bleiben unverändert "
            "(--replace nur mit fehlerfreier Datei)."
        )

    if replace:
        project = project.model_copy(update={"courses": []})
    try:
        project = project.add_courses(result.courses)
    except ProjectError as e:
        _fail(str(e))

    console.print(
        f"[green]✓[/green] {len(result.courses)} Kurse importiert, "
        f"{len(result.errors)} Zeilen übersprungen"
    )
    _save_project(project, project_path)
    if result.errors:
        sys.exit(1)


# ─── GRADE ────────────────────────────────────────────────────────────────────

@click.group("grade")
def cmd_grade():
    """Jahrgänge und Klassen verwalten."""


@cmd_grade.command("list")
@project_option
def grade_list(project_path: Path):
    """Listet alle Jahrgänge mit ihren Klassen."""
    project = _load_project_or_abort(project_path)
    table = Table(title="Jahrgänge", box=box.ROUNDED)
    table.add_column("#", justify="right", width=3)
    table.add_column("Jahrgang", style="bold cyan")
    table.add_column("Klassen")
    table.add_column("Schüler", justify="right")
    table.add_column("ID", style="dim")
    for g in project.sorted_grades():
        classes = project.classes_of(g.id)
        table.add_row(
            str(g.order), g.name,
            ", ".join(c.name for c in classes),
            str(sum(c.student_count for c in classes)),
            g.id,
        )
    console.print(table)


@cmd_grade.command("add")
@click.argument("name")
@click.option("--klassen", "count", default=0, show_default=True, help="Anzahl neuer Klassen.")
@project_option
def grade_add(name: str, count: int, project_path: Path):
    """Legt einen Jahrgang an (optional mit N Klassen)."""
    from data.demo_data import class_name
    from models.school_class import SchoolClass

    project = _load_project_or_abort(project_path)
    project = project.add_grade(name)
    grade = project.grades[-1]
    if count:
        project = project.add_classes(grade.id, [
            SchoolClass(name=class_name(name, n), grade=name, grade_id=grade.id, class_number=n)
            for n in range(1, count + 1)
        ])
    console.print(f"[green]✓[/green] Jahrgang {name} angelegt ({count} Klassen)")
    _save_project(project, project_path)


@cmd_grade.command("delete")
@click.argument("grade")
@click.option("--yes", is_flag=True, default=False, help="Ohne Rückfrage löschen.")
@project_option
def grade_delete(grade: str, yes: bool, project_path: Path):
    """Löscht einen Jahrgang samt seiner Klassen."""
    project = _load_project_or_abort(project_path)
    target = _find_grade(project, grade)
    classes = project.classes_of(target.id)
    if not yes and not click.confirm(
        f"Jahrgang {target.name} mit {len(classes)} Klassen löschen?", default=False
    ):
        return
    project = project.delete_grade(target.id)
    console.print(f"[green]✓[/green] Jahrgang {target.name} gelöscht ({len(classes)} Klassen)")
    _save_project(project, project_path)


@cmd_grade.command("move")
@click.argument("grade")
@click.argument("direction", type=click.Choice(["up", "down"]))
@project_option
def grade_move(grade: str, direction: str, project_path: Path):
    """Verschiebt einen Jahrgang in der Reihenfolge."""
    project = _load_project_or_abort(project_path)
    target = _find_grade(project, grade)
    project = project.move_grade(target.id, direction)
    console.print(
        "[green]✓[/green] Reihenfolge: "
        + " → ".join(g.name for g in project.sorted_grades())
    )
    _save_project(project, project_path)


@cmd_grade.command("template")
@click.option("--output", "-o", default="output/klassen_vorlage.xlsx",
              type=click.Path(path_type=Path), help="Ausgabepfad für die Vorlage.")
def grade_template(output: Path):
    """Erzeugt eine Excel-Vorlage für den Klassen-Import."""
    from data.course_io import generate_class_template

    path = generate_class_template(output)
    console.print(f"[green]✓[/green] Vorlage gespeichert: {path}")


@cmd_grade.command("import")
@click.argument("datei", type=click.Path(exists=True, path_type=Path))
@project_option
def grade_import(datei: Path, project_path: Path):
    """Übernimmt Jahrgänge und Klassen aus CSV/Excel.

    Bereits vorhandene Jahrgänge (gleicher Name) werden ergänzt.
    """
    from data.course_io import CourseImportError, import_classes
    from models.project import ProjectError

    project = _load_project_or_abort(project_path)
    try:
        grades, classes = import_classes(datei)
    except CourseImportError as e:
        _fail(f"Import fehlgeschlagen:\n{e}")

    try:
        for grade in grades:
            existing = next((g for g in project.grades if g.name == grade.name), None)
            if existing is None:
                project = project.add_grade(grade.name, grade.description)
                existing = project.grades[-1]
            project = project.add_classes(
                existing.id, [c for c in classes if c.grade_id == grade.id]
            )
    except ProjectError as e:
        _fail(str(e))

    console.print(f"[green]✓[/green] {len(grades)} Jahrgänge, {len(classes)} Klassen übernommen")
    _save_project(project, project_path)


# ─── COURSE ───────────────────────────────────────────────────────────────────

@click.group("course")
def cmd_course():
    """Kurse anzeigen und löschen."""


@cmd_course.command("list")
@click.option("--suche", "keyword", default=None, help="Freitext (Fach, Lehrkraft, Klasse, Raum).")
@click.option("--klasse", "class_", default=None)
@click.option("--lehrkraft", "teacher", default=None)
@click.option("--raum", "room", default=None)
@click.option("--tag", "day", default=None, help="Tag (1-7 oder Mo..So).")
@project_option
def course_list(
    keyword: Optional[str], class_: Optional[str], teacher: Optional[str],
    room: Optional[str], day: Optional[str], project_path: Path,
):
    """Listet Kurse, optional gefiltert."""
    from analysis.course_filter import SearchFilters, filter_courses
    from data.course_io import parse_day

    project = _load_project_or_abort(project_path)
    try:
        day_number = parse_day(day) if day else None
    except ValueError as e:
        _fail(str(e))
    filters = SearchFilters(
        keyword=keyword, class_=class_, teacher=teacher, room=room, day=day_number,
    )
    courses = filter_courses(project.courses, filters)

    table = Table(title=f"Kurse ({len(courses)}/{len(project.courses)})", box=box.ROUNDED)
    for col in ("Klasse", "Fach", "Lehrkraft", "Raum", "Slot", "Dauer", "ID"):
        table.add_column(col, style="dim" if col == "ID" else None)
    for c in sorted(courses, key=lambda c: (c.class_name or "", c.day or 99, c.period or 99)):
        table.add_row(
            c.class_name or c.class_id, c.name or c.subject_id, c.teacher_id,
            c.room or c.room_id, str(c.slot) if c.is_placed else "-",
            str(c.duration), c.id,
        )
    console.print(table)


@cmd_course.command("delete")
@click.argument("course_id")
@project_option
def course_delete(course_id: str, project_path: Path):
    """Löscht einen Kurs über seine ID."""
    from models.project import ProjectError

    project = _load_project_or_abort(project_path)
    try:
        project = project.delete_course(course_id)
    except ProjectError as e:
        _fail(str(e))
    console.print(f"[green]✓[/green] Kurs {course_id} gelöscht")
    _save_project(project, project_path)


# ─── HAUPT-CLI ────────────────────────────────────────────────────────────────

@click.group()
@click.option("--config", "-c", "config_path", default=None,
              type=click.Path(path_type=Path), help="Pfad zur YAML-Konfiguration.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Debug-Ausgaben anzeigen.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """Kursplaner: Konfliktprüfung und Slot-Vergabe für Schul-Stundenpläne.

    Starten Sie mit: python main.py demo
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


def main():
    """Einstiegspunkt. Legt beim ersten Aufruf ohne Argumente die Konfiguration an."""
    from config.manager import ConfigManager
    mgr = ConfigManager()

    if len(sys.argv) == 1 and mgr.first_run_check():
        console.print(Panel(
            "[bold]Willkommen beim Kursplaner![/bold]\n\n"
            "Keine Konfiguration gefunden.\n"
            "Die Default-Konfiguration wird jetzt angelegt...",
            border_style="cyan",
        ))
        sys.argv.append("init")

    cli(obj={})


# Befehle registrieren
cli.add_command(cmd_init)
cli.add_command(cmd_config)
cli.add_command(cmd_demo)
cli.add_command(cmd_check)
cli.add_command(cmd_audit)
cli.add_command(cmd_stats)
cli.add_command(cmd_timetable)
cli.add_command(cmd_export)
cli.add_command(cmd_import)
cli.add_command(cmd_grade)
cli.add_command(cmd_course)


if __name__ == "__main__":
    main()
