"""Zufällige Slot-Vergabe für den Wochenplan einer Klasse.

Für jede geforderte Einheit wird so lange ein (Tag, Stunde)-Paar gezogen,
bis eines frei ist oder max_attempts Versuche aufgebraucht sind. Einheiten
ohne freien Slot werden still verworfen; wer wissen will, wie viele fehlen,
nutzt assign_with_report().

Die Menge belegter Slots gilt nur für EINE Klasse und EINEN Aufruf. Zwei
Klassen können daher denselben Slot – auch mit derselben Lehrkraft oder
demselben Raum – erhalten. Lehrkraft- und Raumkonflikte über Klassen hinweg
werden hier bewusst nicht geprüft (siehe analysis.schedule_audit).
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

from pydantic import BaseModel, Field

from config.schema import AssignmentSettings
from models.course import Course
from models.room import Room
from models.school_class import SchoolClass
from models.teacher import Teacher
from models.timeslot import TimeSlot

logger = logging.getLogger(__name__)


class SubjectDemand(BaseModel):
    """Bedarf: ein Fach mit N Einheiten pro Woche für eine Klasse."""

    subject_name: str
    subject_id: str = ""
    teacher_pool: list[Teacher] = []
    sessions_per_week: int = Field(ge=0)
    duration: int = Field(1, ge=1)
    # Explizite Raum-Namen/IDs; None = Zuordnung über den RoomSelector
    room_pool: Optional[list[str]] = None


class AssignmentReport(BaseModel):
    """Ergebnis der Vergabe für eine Klasse."""

    class_id: str
    courses: list[Course]
    requested: int
    placed: int

    @property
    def unplaced(self) -> int:
        """Anzahl verworfener Einheiten."""
        return self.requested - self.placed

    @property
    def is_complete(self) -> bool:
        return self.unplaced == 0


class RoomSelector:
    """Wählt einen Raum passend zum Fach.

    Fächer mit Eintrag in subject_room_map ziehen gleichverteilt aus ihren
    bevorzugten Räumen. Alle anderen ziehen aus den normalen Klassenräumen
    (Room.specialized == False).
    """

    def __init__(
        self, rooms: Sequence[Room], subject_room_map: Optional[dict[str, list[str]]] = None
    ) -> None:
        self.rooms = list(rooms)
        self.subject_room_map = subject_room_map or {}
        self._general = [r for r in self.rooms if not r.specialized]

    def _lookup(self, keys: Sequence[str]) -> list[Room]:
        wanted = set(keys)
        return [r for r in self.rooms if r.name in wanted or r.id in wanted]

    def candidates(self, subject_name: str, room_pool: Optional[Sequence[str]] = None) -> list[Room]:
        """Raum-Kandidaten für ein Fach (ggf. mit explizitem Pool)."""
        if room_pool:
            pool = self._lookup(room_pool)
            if pool:
                return pool
        preferred = self.subject_room_map.get(subject_name)
        if preferred:
            pool = self._lookup(preferred)
            if pool:
                return pool
        return self._general

    def select(
        self, subject_name: str, rng: random.Random,
        room_pool: Optional[Sequence[str]] = None,
    ) -> Optional[Room]:
        pool = self.candidates(subject_name, room_pool)
        if not pool:
            return None
        return rng.choice(pool)


class SlotAssigner:
    """Vergibt freie (Tag, Stunde)-Slots für die Fächer einer Klasse.

    rng muss randint() und choice() anbieten (z.B. random.Random(seed));
    ohne Angabe wird ein ungeseedeter Generator verwendet.
    """

    def __init__(
        self,
        settings: Optional[AssignmentSettings] = None,
        room_selector: Optional[RoomSelector] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.settings = settings or AssignmentSettings()
        self.room_selector = room_selector or RoomSelector([])
        self.rng = rng if rng is not None else random.Random()

    def assign(
        self, school_class: SchoolClass, demands: Sequence[SubjectDemand]
    ) -> list[Course]:
        """Erzeugt die Kurse einer Klasse; verworfene Einheiten fehlen einfach."""
        return self.assign_with_report(school_class, demands).courses

    def assign_with_report(
        self, school_class: SchoolClass, demands: Sequence[SubjectDemand]
    ) -> AssignmentReport:
        """Wie assign(), zählt aber geforderte und platzierte Einheiten."""
        used_slots: set[TimeSlot] = set()
        courses: list[Course] = []
        requested = 0

        for demand in demands:
            # Eine Lehrkraft pro Fach und Klasse
            teacher = self.rng.choice(demand.teacher_pool) if demand.teacher_pool else None

            for _ in range(demand.sessions_per_week):
                requested += 1
                slot = self._claim_slot(used_slots, demand.duration)
                if slot is None:
                    logger.debug(
                        f"{school_class.name}: kein freier Slot für {demand.subject_name} "
                        f"nach {self.settings.max_attempts} Versuchen – Einheit verworfen"
                    )
                    continue

                room = self.room_selector.select(demand.subject_name, self.rng, demand.room_pool)
                courses.append(Course(
                    subject_id=demand.subject_id,
                    teacher_id=teacher.id if teacher else "",
                    class_id=school_class.id,
                    room_id=room.id if room else "",
                    day=slot.day,
                    period=slot.period,
                    duration=demand.duration,
                    name=demand.subject_name,
                    teacher=teacher.name if teacher else None,
                    class_name=school_class.name,
                    room=room.name if room else None,
                ))

        report = AssignmentReport(
            class_id=school_class.id,
            courses=courses,
            requested=requested,
            placed=len(courses),
        )
        if report.unplaced:
            logger.info(
                f"{school_class.name}: {report.placed}/{report.requested} Einheiten platziert "
                f"({report.unplaced} verworfen)"
            )
        else:
            logger.info(f"{school_class.name}: alle {report.placed} Einheiten platziert")
        return report

    # ── Slot-Suche ────────────────────────────────────────────────────────────

    def _footprint(self, day: int, period: int, duration: int) -> Optional[list[TimeSlot]]:
        """Slots, die eine Einheit ab (day, period) im Klassenraster belegt."""
        if not self.settings.reserve_full_duration:
            return [TimeSlot(day, period)]
        _, last_period = self.settings.period_range
        if period + duration - 1 > last_period:
            return None
        return [TimeSlot(day, p) for p in range(period, period + duration)]

    def _claim_slot(self, used_slots: set[TimeSlot], duration: int) -> Optional[TimeSlot]:
        """Zieht Slots bis einer frei ist; belegt ihn und gibt den Anfang zurück."""
        day_lo, day_hi = self.settings.day_range
        period_lo, period_hi = self.settings.period_range

        for _ in range(self.settings.max_attempts):
            day = self.rng.randint(day_lo, day_hi)
            period = self.rng.randint(period_lo, period_hi)
            footprint = self._footprint(day, period, duration)
            if footprint is None or not used_slots.isdisjoint(footprint):
                continue
            used_slots.update(footprint)
            return footprint[0]
        return None


def assign_classes(
    jobs: Sequence[tuple[SchoolClass, Sequence[SubjectDemand]]],
    settings: Optional[AssignmentSettings] = None,
    room_selector: Optional[RoomSelector] = None,
    seed: Optional[int] = None,
    max_workers: int = 1,
) -> list[AssignmentReport]:
    """Vergibt Slots für mehrere Klassen unabhängig voneinander.

    Jede Klasse bekommt einen eigenen Zufallsgenerator, dessen Seed vorab aus
    seed abgeleitet wird – das Ergebnis hängt daher nicht von max_workers ab.
    Die Berichte kommen in der Reihenfolge von jobs zurück.
    """
    settings = settings or AssignmentSettings()
    room_selector = room_selector or RoomSelector([])
    base = random.Random(seed)
    class_seeds = [base.getrandbits(64) for _ in jobs]

    def run(index: int) -> AssignmentReport:
        school_class, demands = jobs[index]
        assigner = SlotAssigner(settings, room_selector, random.Random(class_seeds[index]))
        return assigner.assign_with_report(school_class, demands)

    if max_workers > 1 and len(jobs) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            return list(pool.map(run, range(len(jobs))))
    return [run(i) for i in range(len(jobs))]
