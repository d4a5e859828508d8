"""Tests für die Konfliktprüfung einzelner Kurs-Platzierungen."""

import itertools

import pytest

from config.schema import GridConfig, ValidationSettings
from models.course import Course
from models.teacher import Teacher
from solver.conflicts import (
    TIME_CONFLICT_MESSAGE,
    ConflictValidator,
    courses_collide,
    periods_overlap,
    validate,
)


def course(cid: str, day=1, period=1, duration=1, teacher="", room="", klass="") -> Course:
    return Course(id=cid, day=day, period=period, duration=duration,
                  teacher_id=teacher, room_id=room, class_id=klass, name=cid)


INTERVAL = ValidationSettings(overlap_mode="interval")
SCOPED = ValidationSettings(resource_scoped=True)


# ─── Voreinstellung: exakter Vergleich über alle Kurse ────────────────────────

class TestDefaultBehaviour:
    def test_exact_match_detected(self):
        """Gleicher Tag und gleiche Stunde → genau ein Zeitkonflikt."""
        a, b = course("a", 1, 3), course("b", 1, 3)
        result = validate(a, [b])
        assert not result.is_valid
        assert len(result.conflicts) == 1
        conflict = result.conflicts[0]
        assert conflict.type == "time"
        assert conflict.message == TIME_CONFLICT_MESSAGE
        assert [c.id for c in conflict.courses] == ["b"]

    def test_no_self_conflict(self):
        """Ein Kurs kollidiert nie mit sich selbst."""
        a = course("a", 2, 5)
        result = validate(a, [a])
        assert result.is_valid
        assert result.conflicts == []

    def test_edited_copy_is_not_a_conflict(self):
        """Bearbeiteter Kurs (gleiche ID) wird gegen seine alte Fassung nicht geprüft."""
        old = course("a", 2, 5)
        edited = old.model_copy(update={"room_id": "R9"})
        assert validate(edited, [old]).is_valid

    def test_adjacent_period_no_conflict(self):
        """Stunde 3 vs. 4 ist bei exaktem Vergleich kein Konflikt – auch mit Dauer 2."""
        a = course("a", 1, 3, duration=2)
        b = course("b", 1, 4)
        assert validate(a, [b]).is_valid

    def test_different_day_no_conflict(self):
        assert validate(course("a", 1, 3), [course("b", 2, 3)]).is_valid

    def test_unrelated_resources_still_conflict(self):
        """Voreinstellung vergleicht mit allen Kursen, egal welche Ressource."""
        a = course("a", 1, 1, teacher="T1", room="R1", klass="K1")
        b = course("b", 1, 1, teacher="T2", room="R2", klass="K2")
        assert not validate(a, [b]).is_valid

    def test_all_hits_in_one_conflict(self):
        a = course("a", 4, 2)
        others = [course("b", 4, 2), course("c", 4, 2), course("d", 4, 3)]
        result = validate(a, others)
        assert len(result.conflicts) == 1
        assert [c.id for c in result.conflicts[0].courses] == ["b", "c"]

    @pytest.mark.parametrize("day,period", [(None, 3), (2, None), (None, None)])
    def test_incomplete_candidate_is_neutral(self, day, period):
        """Fehlender Tag oder fehlende Stunde → nichts zu prüfen."""
        candidate = Course(id="x", day=day, period=period)
        result = validate(candidate, [course("b", 2, 3)])
        assert result.is_valid
        assert result.conflicts == []
        assert result.warnings == []

    def test_symmetry(self):
        """validate(A,[B]) meldet genau dann einen Konflikt, wenn validate(B,[A]) es tut."""
        pool = [
            course("a", 1, 1), course("b", 1, 1, duration=3), course("c", 1, 2),
            course("d", 2, 1), course("e", 1, 3, duration=2),
        ]
        for settings in (ValidationSettings(), INTERVAL):
            for x, y in itertools.permutations(pool, 2):
                forward = validate(x, [y], settings).is_valid
                backward = validate(y, [x], settings).is_valid
                assert forward == backward, (x.id, y.id, settings)

    def test_existing_not_modified(self):
        existing = [course("b", 1, 1)]
        snapshot = [c.model_copy() for c in existing]
        validate(course("a", 1, 1), existing)
        assert existing == snapshot


# ─── Intervall-Vergleich ──────────────────────────────────────────────────────

class TestIntervalOverlap:
    def test_periods_overlap_half_open(self):
        assert periods_overlap(3, 2, 4, 1)
        assert not periods_overlap(3, 1, 4, 1)
        assert not periods_overlap(1, 2, 3, 2)
        assert periods_overlap(1, 5, 2, 1)

    def test_double_period_overlaps_next(self):
        """Doppelstunde ab 3 überlappt Kurs in Stunde 4."""
        a = course("a", 1, 3, duration=2)
        b = course("b", 1, 4)
        result = validate(a, [b], INTERVAL)
        assert not result.is_valid
        assert result.conflicts[0].type == "time"

    def test_back_to_back_no_conflict(self):
        a = course("a", 1, 3, duration=2)
        b = course("b", 1, 5)
        assert validate(a, [b], INTERVAL).is_valid

    def test_courses_collide_requires_same_day(self):
        a = course("a", 1, 3, duration=3)
        b = course("b", 2, 4)
        assert not courses_collide(a, b, "interval")


# ─── Ressourcen-bezogene Prüfung ──────────────────────────────────────────────

class TestResourceScoped:
    def test_no_shared_resource_no_conflict(self):
        a = course("a", 1, 1, teacher="T1", room="R1", klass="K1")
        b = course("b", 1, 1, teacher="T2", room="R2", klass="K2")
        assert validate(a, [b], SCOPED).is_valid

    def test_classified_by_resource(self):
        a = course("a", 1, 1, teacher="T1", room="R1", klass="K1")
        same_teacher = course("b", 1, 1, teacher="T1", room="R2", klass="K2")
        same_room = course("c", 1, 1, teacher="T3", room="R1", klass="K3")
        result = validate(a, [same_room, same_teacher], SCOPED)
        assert not result.is_valid
        assert [c.type for c in result.conflicts] == ["teacher", "room"]
        assert [c.id for c in result.conflicts[0].courses] == ["b"]
        assert [c.id for c in result.conflicts[1].courses] == ["c"]

    def test_course_sharing_two_resources_listed_twice(self):
        a = course("a", 1, 1, teacher="T1", klass="K1")
        b = course("b", 1, 1, teacher="T1", klass="K1")
        result = validate(a, [b], SCOPED)
        assert [c.type for c in result.conflicts] == ["teacher", "class"]

    def test_empty_ids_are_not_shared(self):
        """Leere Raum-IDs zählen nicht als gemeinsamer Raum."""
        a = course("a", 1, 1, teacher="T1")
        b = course("b", 1, 1, teacher="T2")
        assert validate(a, [b], SCOPED).is_valid

    def test_scoped_with_interval(self):
        settings = ValidationSettings(overlap_mode="interval", resource_scoped=True)
        a = course("a", 3, 2, duration=2, room="R1")
        b = course("b", 3, 3, room="R1")
        result = validate(a, [b], settings)
        assert [c.type for c in result.conflicts] == ["room"]


# ─── Hinweise ─────────────────────────────────────────────────────────────────

class TestWarnings:
    def test_no_warnings_without_catalogue(self):
        a = course("a", 6, 10, teacher="T1")
        assert validate(a, []).warnings == []

    def test_workload_warning(self):
        teacher = Teacher(id="T1", name="Müller, Anna", max_hours_per_week=2)
        existing = [course("b", 1, 1, teacher="T1"), course("c", 2, 1, teacher="T1")]
        validator = ConflictValidator(teachers=[teacher])
        result = validator.validate(course("a", 3, 1, teacher="T1"), existing)
        assert result.is_valid
        assert [w.type for w in result.warnings] == ["workload"]
        assert "3 Stunden" in result.warnings[0].message

    def test_workload_within_limit(self):
        teacher = Teacher(id="T1", name="Müller, Anna", max_hours_per_week=26)
        validator = ConflictValidator(teachers=[teacher])
        assert validator.validate(course("a", teacher="T1"), []).warnings == []

    def test_grid_warnings(self):
        validator = ConflictValidator(grid=GridConfig())
        result = validator.validate(course("a", 6, 8, duration=2), [])
        assert result.is_valid
        assert len(result.warnings) == 2
        assert all(w.type == "preference" for w in result.warnings)

    def test_inside_grid_no_warning(self):
        validator = ConflictValidator(grid=GridConfig())
        assert validator.validate(course("a", 5, 7, duration=2), []).warnings == []

    def test_print_rich_runs(self):
        result = validate(course("a", 1, 1), [course("b", 1, 1)])
        result.print_rich()
