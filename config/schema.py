from pydantic import BaseModel, Field, model_validator
from typing import Literal, Optional


# Wochentage nach ISO: 1=Montag .. 7=Sonntag
MIN_DAY = 1
MAX_DAY = 7
# Unterrichtsstunden pro Tag: 1. bis 10. Stunde
MIN_PERIOD = 1
MAX_PERIOD = 10


# ─── ZEITRASTER ───

class BreakTime(BaseModel):
    """Eine Pause zwischen zwei Unterrichtsstunden."""
    # Nach welcher Stunde die Pause folgt (z.B. 2 = nach 2. Stunde)
    after_period: int = Field(ge=MIN_PERIOD, le=MAX_PERIOD)
    # Dauer der Pause in Minuten
    duration_minutes: int = Field(ge=1)
    # Optionale Bezeichnung, z.B. "Große Pause"
    label: str = "Pause"


class GridConfig(BaseModel):
    """Wochenraster eines Stundenplans.

    Legt fest, wie viele Tage und Stunden ein regulärer Stundenplan hat.
    Kurse außerhalb dieses Rasters sind zulässig (Tag 1-7, Stunde 1-10),
    erzeugen aber einen Hinweis in der Konfliktprüfung.
    """
    # Unterrichtstage pro Woche (5 = Mo-Fr, 7 = inkl. Wochenende)
    days_per_week: int = Field(5, ge=MIN_DAY, le=MAX_DAY,
        description="Unterrichtstage pro Woche")
    # Unterrichtsstunden pro Tag
    periods_per_day: int = Field(8, ge=MIN_PERIOD, le=MAX_PERIOD,
        description="Unterrichtsstunden pro Tag")
    # Dauer einer Unterrichtsstunde in Minuten
    period_minutes: int = Field(45, ge=10, le=120,
        description="Dauer einer Stunde (Minuten)")
    # Beginn der 1. Stunde im Format "HH:MM"
    start_time: str = Field("08:00", pattern=r"^\d{2}:\d{2}$",
        description="Beginn der 1. Stunde")
    # Namen der Wochentage (Index 0 = Montag)
    day_names: list[str] = Field(
        default=["Mo", "Di", "Mi", "Do", "Fr", "Sa", "So"],
        description="Namen der Wochentage")
    # Pausen zwischen den Stunden
    breaks: list[BreakTime] = Field(default_factory=list,
        description="Pausen zwischen den Stunden")

    @model_validator(mode='after')
    def validate_breaks(self):
        """Pausen müssen innerhalb des Tagesrasters liegen."""
        if len(self.day_names) < self.days_per_week:
            raise ValueError(
                f"{len(self.day_names)} Tagesnamen für {self.days_per_week} Tage")
        for b in self.breaks:
            if b.after_period >= self.periods_per_day:
                raise ValueError(
                    f"Pause nach Stunde {b.after_period} liegt außerhalb "
                    f"des Rasters ({self.periods_per_day} Stunden)")
        return self

    @property
    def slots_per_week(self) -> int:
        """Anzahl regulärer (Tag, Stunde)-Slots pro Woche."""
        return self.days_per_week * self.periods_per_day

    def day_name(self, day: int) -> str:
        """Tagesname für einen ISO-Wochentag (1=Montag)."""
        if 1 <= day <= len(self.day_names):
            return self.day_names[day - 1]
        return str(day)


# ─── KONFLIKTPRÜFUNG ───

class ValidationSettings(BaseModel):
    """Einstellungen der Konfliktprüfung.

    Die Voreinstellung prüft wie die bisherige Oberfläche: gleicher Tag und
    gleiche Anfangsstunde, über ALLE vorhandenen Kurse hinweg.
    """
    # "exact" = nur gleiche Anfangsstunde, "interval" = Überlappung von
    # [Stunde, Stunde + Dauer) am selben Tag
    overlap_mode: Literal["exact", "interval"] = Field("exact",
        description="Vergleich der Stunden: exact oder interval")
    # True = nur Kurse mit gemeinsamer Lehrkraft, gemeinsamem Raum oder
    # gemeinsamer Klasse werden verglichen
    resource_scoped: bool = Field(False,
        description="Nur Kurse mit gemeinsamer Ressource prüfen")


# ─── SLOT-VERGABE ───

class AssignmentSettings(BaseModel):
    """Einstellungen der zufälligen Slot-Vergabe pro Klasse."""
    # Wertebereich für den gezogenen Tag (inklusive)
    day_range: tuple[int, int] = Field((1, 5),
        description="Tage für die Vergabe (von, bis)")
    # Wertebereich für die gezogene Stunde (inklusive)
    period_range: tuple[int, int] = Field((1, 8),
        description="Stunden für die Vergabe (von, bis)")
    # Versuche pro Einheit, bevor sie verworfen wird
    max_attempts: int = Field(50, ge=1, le=10_000,
        description="Zufallsversuche pro Einheit")
    # True = Doppelstunden belegen alle ihre Stunden im Klassenraster
    reserve_full_duration: bool = Field(False,
        description="Mehrstündige Einheiten vollständig reservieren")

    @model_validator(mode='after')
    def validate_ranges(self):
        """Bereiche müssen aufsteigend und innerhalb 1-7 / 1-10 liegen."""
        d_lo, d_hi = self.day_range
        p_lo, p_hi = self.period_range
        if not MIN_DAY <= d_lo <= d_hi <= MAX_DAY:
            raise ValueError(
                f"Ungültiger Tagesbereich {d_lo}-{d_hi} (erlaubt {MIN_DAY}-{MAX_DAY})")
        if not MIN_PERIOD <= p_lo <= p_hi <= MAX_PERIOD:
            raise ValueError(
                f"Ungültiger Stundenbereich {p_lo}-{p_hi} "
                f"(erlaubt {MIN_PERIOD}-{MAX_PERIOD})")
        return self

    @property
    def slot_count(self) -> int:
        """Größe des Vergabe-Rasters (Tage × Stunden)."""
        d_lo, d_hi = self.day_range
        p_lo, p_hi = self.period_range
        return (d_hi - d_lo + 1) * (p_hi - p_lo + 1)


# ─── DEMO-DATEN ───

class DemoConfig(BaseModel):
    """Parameter für den Demo-Datengenerator."""
    # Jahrgangsnamen in Anzeigereihenfolge
    grade_names: list[str] = Field(default=["10", "11", "12"],
        description="Jahrgänge")
    # Parallelklassen je Jahrgang (gleiche Länge wie grade_names)
    classes_per_grade: list[int] = Field(default=[6, 5, 4],
        description="Klassen pro Jahrgang")
    # Lehrkräfte pro Fach
    teachers_per_subject: int = Field(2, ge=1, le=10)
    # Schülerzahl pro Klasse (von, bis)
    student_count_range: tuple[int, int] = Field((35, 49))
    # Zufalls-Seed (None = nicht reproduzierbar)
    seed: Optional[int] = 42

    @model_validator(mode='after')
    def validate_grades(self):
        if len(self.grade_names) != len(self.classes_per_grade):
            raise ValueError(
                "grade_names und classes_per_grade müssen gleich lang sein")
        if any(n < 1 for n in self.classes_per_grade):
            raise ValueError("Jeder Jahrgang braucht mindestens eine Klasse")
        lo, hi = self.student_count_range
        if not 0 < lo <= hi:
            raise ValueError(f"Ungültiger Schülerzahl-Bereich {lo}-{hi}")
        return self


# ─── GESAMT-CONFIG ───

class PlannerConfig(BaseModel):
    """Gesamtkonfiguration des Kursplaners."""
    # Name der Schule
    school_name: str = Field("Muster-Gymnasium",
        description="Name der Schule")
    # Wochenraster
    grid: GridConfig = Field(default_factory=GridConfig)
    # Konfliktprüfung
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    # Slot-Vergabe
    assignment: AssignmentSettings = Field(default_factory=AssignmentSettings)
    # Demo-Daten
    demo: DemoConfig = Field(default_factory=DemoConfig)
