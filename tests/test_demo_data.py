"""Tests für den Demo-Datengenerator."""

import pytest

from config.defaults import SUBJECT_METADATA, SUBJECT_ROOM_MAP, default_planner_config
from config.schema import DemoConfig, PlannerConfig
from data.demo_data import DemoDataGenerator, _make_abbreviation, class_name


@pytest.fixture(scope="module")
def demo_project():
    return DemoDataGenerator(default_planner_config(), seed=42).generate()


def _signature(project):
    return [
        (c.class_name, c.name, c.day, c.period, c.teacher_id, c.room)
        for c in project.courses
    ]


class TestHelpers:
    def test_class_name(self):
        assert class_name("10", 1) == "10a"
        assert class_name("12", 4) == "12d"
        assert class_name("5", 27) == "5-27"

    def test_abbreviation_unique(self):
        import random
        used: set[str] = set()
        rng = random.Random(0)
        abbrs = [_make_abbreviation("Müller", used, rng) for _ in range(6)]
        assert len(set(abbrs)) == 6
        assert abbrs[0] == "MUE"
        assert all(len(a) == 3 for a in abbrs)


class TestDemoStructure:
    def test_grades_and_classes(self, demo_project):
        """Drei Jahrgänge mit 6/5/4 Klassen."""
        grades = demo_project.sorted_grades()
        assert [g.name for g in grades] == ["10", "11", "12"]
        assert [len(demo_project.classes_of(g.id)) for g in grades] == [6, 5, 4]
        assert demo_project.classes_of(grades[0].id)[0].name == "10a"

    def test_student_counts_in_range(self, demo_project):
        assert all(35 <= c.student_count <= 49 for c in demo_project.classes)

    def test_class_descriptions(self, demo_project):
        by_number = {c.class_number: c.description for c in demo_project.classes}
        assert by_number[1] == "Bilingual"
        assert by_number[2] == "MINT"
        assert by_number[3] is None

    def test_catalogues(self, demo_project):
        assert len(demo_project.subjects) == len(SUBJECT_METADATA)
        assert len(demo_project.teachers) == 2 * len(SUBJECT_METADATA)
        assert len({t.id for t in demo_project.teachers}) == len(demo_project.teachers)
        assert any(r.specialized for r in demo_project.rooms)

    def test_every_class_has_courses(self, demo_project):
        for cls in demo_project.classes:
            courses = demo_project.courses_of_class(cls.id)
            assert 25 <= len(courses) <= 36

    def test_slots_exclusive_per_class(self, demo_project):
        for cls in demo_project.classes:
            slots = [c.slot for c in demo_project.courses_of_class(cls.id)]
            assert len(set(slots)) == len(slots)

    def test_courses_inside_default_grid(self, demo_project):
        assert all(1 <= c.day <= 5 and 1 <= c.period <= 8 for c in demo_project.courses)

    def test_teacher_teaches_subject(self, demo_project):
        teachers = {t.id: t for t in demo_project.teachers}
        for c in demo_project.courses:
            assert teachers[c.teacher_id].teaches(c.name)

    def test_sport_is_double_in_sporthalle(self, demo_project):
        sport = [c for c in demo_project.courses if c.name == "Sport"]
        assert sport
        assert all(c.duration == 2 for c in sport)
        assert all(c.room == "Sporthalle" for c in sport)

    def test_lab_subjects_use_mapped_rooms(self, demo_project):
        for c in demo_project.courses:
            if c.name in SUBJECT_ROOM_MAP:
                assert c.room in SUBJECT_ROOM_MAP[c.name]

    def test_other_subjects_use_classrooms(self, demo_project):
        rooms = {r.name: r for r in demo_project.rooms}
        for c in demo_project.courses:
            if c.name not in SUBJECT_ROOM_MAP:
                assert not rooms[c.room].specialized


class TestDemoReproducibility:
    def test_same_seed_same_plan(self, demo_project):
        again = DemoDataGenerator(default_planner_config(), seed=42).generate()
        assert _signature(again) == _signature(demo_project)

    def test_workers_do_not_change_plan(self, demo_project):
        parallel = DemoDataGenerator(default_planner_config(), seed=42).generate(max_workers=4)
        assert _signature(parallel) == _signature(demo_project)

    def test_seed_from_config(self):
        config = PlannerConfig(demo=DemoConfig(grade_names=["5"], classes_per_grade=[2], seed=7))
        a = DemoDataGenerator(config).generate()
        b = DemoDataGenerator(config).generate()
        assert _signature(a) == _signature(b)
        assert len(a.classes) == 2

    def test_print_summary_runs(self, demo_project):
        DemoDataGenerator(default_planner_config()).print_summary(demo_project)
