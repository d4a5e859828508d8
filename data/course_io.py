"""Tabellen-Import und -Export für Kurse und Klassen (CSV / Excel).

Kurs-Tabelle:   ID, Fach, Lehrkraft, Klasse, Tag, Stunde, Dauer, Raum
Klassen-Tabelle: Jahrgang, Klassen-Nr, Klassenname, Schülerzahl,
                 Klassenleitung, Bemerkung

Namen werden beim Import über die Stammdaten des Projekts in IDs aufgelöst.
Zeilenfehler werden gesammelt statt den ganzen Import abzubrechen; nur
unlesbare oder leere Dateien lösen CourseImportError aus.
"""

import csv
import difflib
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ValidationError

from data.demo_data import class_name
from models.course import Course
from models.grade import Grade
from models.project import Project
from models.school_class import SchoolClass
from models.timeslot import DAY_NAMES

logger = logging.getLogger(__name__)

COURSE_COLUMNS = ["ID", "Fach", "Lehrkraft", "Klasse", "Tag", "Stunde", "Dauer", "Raum"]
CLASS_COLUMNS = ["Jahrgang", "Klassen-Nr", "Klassenname", "Schülerzahl", "Klassenleitung", "Bemerkung"]


class CourseImportError(Exception):
    """Fehler beim Import einer Kurs- oder Klassentabelle."""


class CourseImportResult(BaseModel):
    """Ergebnis eines Kurs-Imports."""

    courses: list[Course] = []
    errors: list[str] = []
    warnings: list[str] = []

    @property
    def ok(self) -> bool:
        return not self.errors


# ─── Tages-Mapping ────────────────────────────────────────────────────────────

_DAY_MAP = {name.lower(): i for i, name in enumerate(DAY_NAMES, 1)}
_DAY_MAP.update({
    "montag": 1, "dienstag": 2, "mittwoch": 3, "donnerstag": 4,
    "freitag": 5, "samstag": 6, "sonntag": 7,
})


def parse_day(raw: str) -> Optional[int]:
    """'Mo' / 'Montag' / '1' → 1; leer → None."""
    token = raw.strip().lower()
    if not token:
        return None
    if token in _DAY_MAP:
        return _DAY_MAP[token]
    return _to_int(token)


def _to_int(raw: str) -> int:
    """Zahl aus Zellwert; Excel liefert ganze Zahlen manchmal als '3.0'."""
    raw = raw.strip()
    try:
        return int(raw)
    except ValueError:
        value = float(raw)
        if not value.is_integer():
            raise ValueError(f"'{raw}' ist keine ganze Zahl")
        return int(value)


# ─── Lesen ────────────────────────────────────────────────────────────────────

def _read_rows(path: Path) -> list[dict[str, str]]:
    """CSV- oder Excel-Datei → Liste von Dicts (erste Zeile = Header)."""
    path = Path(path)
    if not path.exists():
        raise CourseImportError(f"Datei nicht gefunden: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        try:
            with open(path, encoding="utf-8-sig", newline="") as f:
                reader = csv.DictReader(f)
                rows = [
                    {k.strip(): (v.strip() if v else "") for k, v in row.items() if k}
                    for row in reader
                ]
        except UnicodeDecodeError as e:
            raise CourseImportError(
                f"{path} ist nicht UTF-8-kodiert (Excel: 'CSV UTF-8' speichern): {e}"
            ) from e
        except csv.Error as e:
            raise CourseImportError(f"Fehler beim Lesen der CSV-Datei {path}: {e}") from e
    elif suffix in (".xlsx", ".xlsm"):
        import openpyxl
        try:
            wb = openpyxl.load_workbook(str(path), read_only=True, data_only=True)
        except Exception as e:
            raise CourseImportError(f"Fehler beim Öffnen der Excel-Datei: {e}") from e
        ws = wb.worksheets[0]
        raw_rows = list(ws.iter_rows(values_only=True))
        wb.close()
        if not raw_rows:
            rows = []
        else:
            headers = [
                str(h).strip() if h is not None else f"col_{i}"
                for i, h in enumerate(raw_rows[0])
            ]
            rows = []
            for row in raw_rows[1:]:
                if all(v is None or v == "" for v in row):
                    continue
                rows.append({
                    headers[i]: (str(v).strip() if v is not None else "")
                    for i, v in enumerate(row)
                    if i < len(headers)
                })
    else:
        raise CourseImportError(
            f"Unbekanntes Dateiformat: {path}. Erwartet: .csv oder .xlsx."
        )

    if not rows:
        raise CourseImportError(f"Datei enthält keine Datenzeilen: {path}")
    return rows


def _check_columns(rows: list[dict[str, str]], required: list[str], path: Path) -> None:
    missing = [c for c in required if c not in rows[0]]
    if missing:
        raise CourseImportError(
            f"{path}: fehlende Spalten {', '.join(missing)}"
        )


# ─── Kurse: Export ────────────────────────────────────────────────────────────

def _course_row(course: Course) -> list:
    day = DAY_NAMES[course.day - 1] if course.day else ""
    return [
        course.id,
        course.name or course.subject_id,
        course.teacher or course.teacher_id,
        course.class_name or course.class_id,
        day,
        course.period if course.period is not None else "",
        course.duration,
        course.room or course.room_id,
    ]


def _sorted_for_export(courses: list[Course]) -> list[Course]:
    return sorted(
        courses,
        key=lambda c: (c.class_name or c.class_id, c.day or 99, c.period or 99),
    )


def export_courses_csv(courses: list[Course], path: Path) -> Path:
    """Schreibt die Kurse als CSV (UTF-8 mit BOM, damit Excel Umlaute erkennt)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8-sig", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(COURSE_COLUMNS)
        for course in _sorted_for_export(courses):
            writer.writerow(_course_row(course))
    logger.info(f"{len(courses)} Kurse als CSV exportiert: {path}")
    return path


def export_courses_xlsx(courses: list[Course], path: Path) -> Path:
    """Schreibt die Kurse in ein Excel-Blatt 'Kurse' mit formatiertem Header."""
    from openpyxl import Workbook
    from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
    from openpyxl.utils import get_column_letter

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    alt_fill = PatternFill("solid", fgColor="D6E4F0")
    thin = Side(style="thin", color="BBBBBB")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)

    wb = Workbook()
    ws = wb.active
    ws.title = "Kurse"

    for col, title in enumerate(COURSE_COLUMNS, 1):
        cell = ws.cell(row=1, column=col, value=title)
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = Alignment(horizontal="center", vertical="center")
        cell.border = border

    for row, course in enumerate(_sorted_for_export(courses), 2):
        for col, value in enumerate(_course_row(course), 1):
            cell = ws.cell(row=row, column=col, value=value)
            cell.border = border
            if row % 2 == 1:
                cell.fill = alt_fill

    widths = [38, 14, 20, 10, 6, 8, 7, 16]
    for col, width in enumerate(widths, 1):
        ws.column_dimensions[get_column_letter(col)].width = width
    ws.freeze_panes = "A2"

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
    logger.info(f"{len(courses)} Kurse als Excel exportiert: {path}")
    return path


def export_courses(courses: list[Course], path: Path) -> Path:
    """Export anhand der Dateiendung (.csv oder .xlsx)."""
    if Path(path).suffix.lower() == ".csv":
        return export_courses_csv(courses, path)
    return export_courses_xlsx(courses, path)


# ─── Kurse: Import ────────────────────────────────────────────────────────────

class _Catalog:
    """Namens-Auflösung gegen die Stammdaten eines Projekts."""

    def __init__(self, project: Project) -> None:
        self.subjects = {}
        for s in project.subjects:
            self.subjects[s.name.lower()] = s
            self.subjects[s.code.lower()] = s
        self.subject_names = [s.name for s in project.subjects]
        self.teachers = {}
        for t in project.teachers:
            self.teachers[t.id.lower()] = t
            self.teachers[t.name.lower()] = t
        self.classes = {c.name.lower(): c for c in project.classes}
        self.classes.update({c.id.lower(): c for c in project.classes})
        self.rooms = {}
        for r in project.rooms:
            self.rooms[r.name.lower()] = r
            self.rooms[r.id.lower()] = r


def import_courses(path: Path, project: Project) -> CourseImportResult:
    """Liest Kurse aus CSV/Excel und löst Namen über die Projekt-Stammdaten auf.

    - Unbekannte Klasse → Zeilenfehler (Kurs wird übersprungen).
    - Unbekanntes Fach → Fuzzy-Match mit Warnung, sonst Rohwert als Anzeige.
    - Unbekannte Lehrkraft / unbekannter Raum → Warnung, Rohwert wird ID.
    - Bereichsfehler (Tag, Stunde, Dauer) meldet das Course-Modell.
    """
    path = Path(path)
    rows = _read_rows(path)
    _check_columns(rows, ["Fach", "Klasse", "Tag", "Stunde"], path)

    catalog = _Catalog(project)
    result = CourseImportResult()

    for line, row in enumerate(rows, 2):
        row_id = f"Zeile {line}"

        class_raw = row.get("Klasse", "")
        school_class = catalog.classes.get(class_raw.lower())
        if school_class is None:
            result.errors.append(f"{row_id}: Unbekannte Klasse '{class_raw}'")
            continue

        subject_raw = row.get("Fach", "")
        subject = catalog.subjects.get(subject_raw.lower())
        if subject is None and subject_raw:
            match = difflib.get_close_matches(subject_raw, catalog.subject_names, n=1, cutoff=0.6)
            if match:
                subject = catalog.subjects[match[0].lower()]
                result.warnings.append(
                    f"{row_id}: Fach '{subject_raw}' unbekannt → als '{subject.name}' importiert"
                )
            else:
                result.warnings.append(f"{row_id}: Fach '{subject_raw}' nicht in den Stammdaten")

        teacher_raw = row.get("Lehrkraft", "")
        teacher = catalog.teachers.get(teacher_raw.lower())
        if teacher is None and teacher_raw:
            result.warnings.append(f"{row_id}: Lehrkraft '{teacher_raw}' nicht in den Stammdaten")

        room_raw = row.get("Raum", "")
        room = catalog.rooms.get(room_raw.lower())
        if room is None and room_raw:
            result.warnings.append(f"{row_id}: Raum '{room_raw}' nicht in den Stammdaten")

        try:
            fields = dict(
                subject_id=subject.id if subject else "",
                teacher_id=teacher.id if teacher else teacher_raw,
                class_id=school_class.id,
                room_id=room.id if room else room_raw,
                day=parse_day(row.get("Tag", "")),
                period=_to_int(row["Stunde"]) if row.get("Stunde") else None,
                duration=_to_int(row["Dauer"]) if row.get("Dauer") else 1,
                name=subject.name if subject else (subject_raw or None),
                teacher=teacher.name if teacher else (teacher_raw or None),
                class_name=school_class.name,
                room=room.name if room else (room_raw or None),
            )
            if row.get("ID"):
                fields["id"] = row["ID"]
            course = Course(**fields)
        except ValidationError as e:
            for err in e.errors():
                loc = ".".join(str(p) for p in err["loc"])
                result.errors.append(f"{row_id}: {loc}: {err['msg']}")
            continue
        except ValueError as e:
            result.errors.append(f"{row_id}: {e}")
            continue

        result.courses.append(course)

    logger.info(
        f"Kurs-Import {path.name}: {len(result.courses)} Kurse, "
        f"{len(result.errors)} Fehler, {len(result.warnings)} Warnungen"
    )
    return result


# ─── Klassen ─────────────────────────────────────────────────────────────────

def import_classes(path: Path) -> tuple[list[Grade], list[SchoolClass]]:
    """Liest Jahrgänge und Klassen aus einer Klassen-Tabelle.

    Jahrgänge entstehen in der Reihenfolge ihres ersten Auftretens. Fehlt der
    Klassenname, wird er aus Jahrgang und Klassennummer gebildet ("10" + 2
    → "10b"). Fehlerhafte Zeilen brechen den Import mit einer Sammelmeldung ab.
    """
    path = Path(path)
    rows = _read_rows(path)
    _check_columns(rows, ["Jahrgang", "Klassen-Nr"], path)

    grades: dict[str, Grade] = {}
    classes: list[SchoolClass] = []
    seen: set[tuple[str, int]] = set()
    errors: list[str] = []

    for line, row in enumerate(rows, 2):
        row_id = f"Zeile {line}"
        grade_name = row.get("Jahrgang", "")
        if not grade_name:
            errors.append(f"{row_id}: Jahrgang fehlt")
            continue
        try:
            number = _to_int(row.get("Klassen-Nr", ""))
            students = _to_int(row["Schülerzahl"]) if row.get("Schülerzahl") else 40
        except ValueError as e:
            errors.append(f"{row_id}: {e}")
            continue
        if (grade_name, number) in seen:
            errors.append(f"{row_id}: Klasse {number} in Jahrgang {grade_name} doppelt")
            continue
        seen.add((grade_name, number))

        grade = grades.get(grade_name)
        if grade is None:
            grade = Grade(name=grade_name, order=len(grades) + 1)
            grades[grade_name] = grade

        try:
            classes.append(SchoolClass(
                name=row.get("Klassenname") or class_name(grade_name, number),
                grade=grade.name,
                grade_id=grade.id,
                class_number=number,
                student_count=students,
                class_teacher=row.get("Klassenleitung") or None,
                description=row.get("Bemerkung") or None,
            ))
        except ValidationError as e:
            for err in e.errors():
                errors.append(f"{row_id}: {err['loc'][0]}: {err['msg']}")

    if errors:
        raise CourseImportError(
            f"{len(errors)} fehlerhafte Zeilen in {path}:\n" + "\n".join(errors)
        )
    logger.info(f"Klassen-Import {path.name}: {len(grades)} Jahrgänge, {len(classes)} Klassen")
    return list(grades.values()), classes


def generate_class_template(path: Path) -> Path:
    """Erzeugt eine Excel-Vorlage für den Klassen-Import mit Beispielzeilen."""
    from openpyxl import Workbook
    from openpyxl.styles import Alignment, Font, PatternFill
    from openpyxl.utils import get_column_letter

    wb = Workbook()
    ws = wb.active
    ws.title = "Klassen"

    hdr_font = Font(bold=True, color="FFFFFF", size=11)
    hdr_fill = PatternFill("solid", fgColor="2E6DA4")
    ex_font = Font(italic=True, color="888888")

    for col, title in enumerate(CLASS_COLUMNS, 1):
        cell = ws.cell(row=1, column=col, value=title)
        cell.font = hdr_font
        cell.fill = hdr_fill
        cell.alignment = Alignment(horizontal="center")
        ws.column_dimensions[get_column_letter(col)].width = 16

    examples = [
        ["10", 1, "10a", 42, "Müller", "Bilingual"],
        ["10", 2, "10b", 38, "Schmidt", None],
    ]
    for row, values in enumerate(examples, 2):
        for col, value in enumerate(values, 1):
            ws.cell(row=row, column=col, value=value).font = ex_font

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    wb.save(str(path))
    return path
