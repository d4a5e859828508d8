"""Tests für Kurs- und Klassen-Import/Export (CSV und Excel)."""

import csv
from pathlib import Path

import pytest

from data.course_io import (
    COURSE_COLUMNS,
    CourseImportError,
    export_courses,
    export_courses_csv,
    export_courses_xlsx,
    generate_class_template,
    import_classes,
    import_courses,
    parse_day,
)
from models import Course, Grade, Project, Room, SchoolClass, Subject, Teacher


# ─── Hilfsfunktionen ──────────────────────────────────────────────────────────

@pytest.fixture
def project() -> Project:
    grade = Grade(id="g10", name="10")
    return Project(
        name="IO-Test",
        grades=[grade],
        classes=[
            SchoolClass(id="c10a", name="10a", grade="10", grade_id="g10", class_number=1),
            SchoolClass(id="c10b", name="10b", grade="10", grade_id="g10", class_number=2),
        ],
        subjects=[
            Subject(id="M", name="Mathematik", code="M"),
            Subject(id="D", name="Deutsch", code="D"),
        ],
        teachers=[Teacher(id="MUE", name="Müller, Anna", subjects=["Mathematik"])],
        rooms=[Room(id="R1", name="Raum 101")],
        courses=[
            Course(id="k1", subject_id="M", teacher_id="MUE", class_id="c10a", room_id="R1",
                   day=1, period=3, duration=2, name="Mathematik", teacher="Müller, Anna",
                   class_name="10a", room="Raum 101"),
            Course(id="k2", subject_id="D", class_id="c10b", day=5, period=1,
                   name="Deutsch", class_name="10b"),
        ],
    )


def write_csv(path: Path, header: list[str], rows: list[list]) -> Path:
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


class TestParseDay:
    @pytest.mark.parametrize("raw,expected", [
        ("Mo", 1), ("di", 2), ("Mittwoch", 3), ("7", 7), ("5.0", 5), ("", None),
    ])
    def test_parse(self, raw, expected):
        assert parse_day(raw) == expected

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_day("Feiertag")


# ─── Export ───────────────────────────────────────────────────────────────────

class TestExport:
    def test_csv_columns_and_rows(self, project, tmp_path):
        path = export_courses_csv(project.courses, tmp_path / "kurse.csv")
        with open(path, encoding="utf-8-sig", newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0] == COURSE_COLUMNS
        assert rows[1] == ["k1", "Mathematik", "Müller, Anna", "10a", "Mo", "3", "2", "Raum 101"]
        assert rows[2][4] == "Fr"

    def test_xlsx_header(self, project, tmp_path):
        import openpyxl
        path = export_courses_xlsx(project.courses, tmp_path / "kurse.xlsx")
        ws = openpyxl.load_workbook(str(path)).active
        assert ws.title == "Kurse"
        assert [c.value for c in ws[1]] == COURSE_COLUMNS
        assert ws.max_row == 3

    def test_export_dispatch_by_suffix(self, project, tmp_path):
        assert export_courses(project.courses, tmp_path / "a.csv").suffix == ".csv"
        assert export_courses(project.courses, tmp_path / "a.xlsx").suffix == ".xlsx"


# ─── Kurs-Import ──────────────────────────────────────────────────────────────

class TestCourseImport:
    def test_xlsx_roundtrip_resolves_ids(self, project, tmp_path):
        path = export_courses_xlsx(project.courses, tmp_path / "kurse.xlsx")
        result = import_courses(path, project)
        assert result.ok
        assert result.warnings == []
        by_id = {c.id: c for c in result.courses}
        k1 = by_id["k1"]
        assert (k1.subject_id, k1.teacher_id, k1.class_id, k1.room_id) == ("M", "MUE", "c10a", "R1")
        assert (k1.day, k1.period, k1.duration) == (1, 3, 2)

    def test_csv_row_errors_collected(self, project, tmp_path):
        path = write_csv(tmp_path / "kurse.csv", COURSE_COLUMNS, [
            ["", "Mathematik", "MUE", "10a", "Dienstag", "2", "1", "Raum 101"],
            ["", "Mathematik", "MUE", "9z", "Mo", "1", "1", ""],
            ["", "Deutsch", "", "10b", "Mo", "11", "1", ""],
            ["", "Deutsch", "", "10b", "Mo", "zwei", "1", ""],
        ])
        result = import_courses(path, project)
        assert len(result.courses) == 1
        assert result.courses[0].day == 2
        assert len(result.errors) == 3
        assert "Zeile 3" in result.errors[0]
        assert "Unbekannte Klasse" in result.errors[0]
        assert not result.ok

    def test_fuzzy_subject_with_warning(self, project, tmp_path):
        path = write_csv(tmp_path / "kurse.csv", ["Fach", "Klasse", "Tag", "Stunde"], [
            ["Mathemtik", "10a", "Mo", "1"],
        ])
        result = import_courses(path, project)
        assert result.courses[0].subject_id == "M"
        assert result.courses[0].name == "Mathematik"
        assert any("Mathemtik" in w for w in result.warnings)

    def test_unknown_teacher_kept_as_id(self, project, tmp_path):
        path = write_csv(tmp_path / "kurse.csv", COURSE_COLUMNS, [
            ["", "Deutsch", "XYZ", "10b", "Di", "4", "", "Aula"],
        ])
        result = import_courses(path, project)
        course = result.courses[0]
        assert course.teacher_id == "XYZ"
        assert course.room_id == "Aula"
        assert course.duration == 1
        assert len(result.warnings) == 2

    def test_missing_columns_raises(self, project, tmp_path):
        path = write_csv(tmp_path / "kurse.csv", ["Fach", "Klasse"], [["Deutsch", "10a"]])
        with pytest.raises(CourseImportError):
            import_courses(path, project)

    def test_empty_file_raises(self, project, tmp_path):
        path = write_csv(tmp_path / "leer.csv", COURSE_COLUMNS, [])
        with pytest.raises(CourseImportError):
            import_courses(path, project)

    def test_unknown_format_raises(self, project, tmp_path):
        path = tmp_path / "kurse.txt"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(CourseImportError):
            import_courses(path, project)

    def test_non_utf8_csv_raises(self, project, tmp_path):
        """Excel-Standard-CSV (cp1252) wird mit verständlicher Meldung abgewiesen."""
        path = tmp_path / "kurse.csv"
        path.write_bytes("Fach,Klasse,Tag,Stunde\nDeutsch,10ä,Mo,1\n".encode("cp1252"))
        with pytest.raises(CourseImportError, match="UTF-8"):
            import_courses(path, project)

    def test_missing_file_raises(self, project, tmp_path):
        with pytest.raises(CourseImportError):
            import_courses(tmp_path / "fehlt.csv", project)


# ─── Klassen-Import ───────────────────────────────────────────────────────────

class TestClassImport:
    def test_grouped_in_first_seen_order(self, tmp_path):
        path = write_csv(tmp_path / "klassen.csv",
                         ["Jahrgang", "Klassen-Nr", "Klassenname", "Schülerzahl", "Klassenleitung", "Bemerkung"], [
            ["11", "1", "", "30", "Weber", ""],
            ["10", "1", "10a", "42", "", "Bilingual"],
            ["11", "2", "11-Profil", "", "", ""],
        ])
        grades, classes = import_classes(path)
        assert [g.name for g in grades] == ["11", "10"]
        assert [g.order for g in grades] == [1, 2]
        assert [c.name for c in classes] == ["11a", "10a", "11-Profil"]
        assert classes[0].grade_id == grades[0].id
        assert classes[0].class_teacher == "Weber"
        assert classes[1].description == "Bilingual"
        assert classes[2].student_count == 40

    def test_duplicate_number_raises(self, tmp_path):
        path = write_csv(tmp_path / "klassen.csv", ["Jahrgang", "Klassen-Nr"], [
            ["10", "1"], ["10", "1"],
        ])
        with pytest.raises(CourseImportError):
            import_classes(path)

    def test_non_utf8_csv_raises(self, tmp_path):
        path = tmp_path / "klassen.csv"
        path.write_bytes("Jahrgang,Klassen-Nr,Klassenleitung\n10,1,Jäger\n".encode("cp1252"))
        with pytest.raises(CourseImportError):
            import_classes(path)

    def test_template_is_importable(self, tmp_path):
        path = generate_class_template(tmp_path / "vorlage.xlsx")
        grades, classes = import_classes(path)
        assert [g.name for g in grades] == ["10"]
        assert [c.name for c in classes] == ["10a", "10b"]
