from config.schema import (
    AssignmentSettings,
    BreakTime,
    DemoConfig,
    GridConfig,
    PlannerConfig,
    ValidationSettings,
)


def default_grid() -> GridConfig:
    """Standard-Wochenraster: Mo-Fr, 8 Stunden à 45 Minuten.

    Stundenraster:
    1./2. Stunde  08:00 - 09:35
       ── Große Pause (20 min) ──
    3./4. Stunde  09:55 - 11:30
       ── Pause (15 min) ──
    5./6. Stunde  11:45 - 13:20
       ── Mittagspause (45 min) ──
    7./8. Stunde  14:05 - 15:40
    """
    return GridConfig(
        days_per_week=5,
        periods_per_day=8,
        period_minutes=45,
        start_time="08:00",
        breaks=[
            BreakTime(after_period=2, duration_minutes=20, label="Große Pause"),
            BreakTime(after_period=4, duration_minutes=15, label="Pause"),
            BreakTime(after_period=6, duration_minutes=45, label="Mittagspause"),
        ],
    )


def default_planner_config() -> PlannerConfig:
    """Komplette Default-Konfiguration."""
    return PlannerConfig(
        school_name="Muster-Gymnasium",
        grid=default_grid(),
        validation=ValidationSettings(),
        assignment=AssignmentSettings(),
        demo=DemoConfig(),
    )


# ─── FÄCHER ───
# Name → Metadaten. "duration" ist die Standard-Dauer einer Einheit in Stunden,
# "lab" markiert Fächer, die einen Fachraum brauchen.

SUBJECT_METADATA: dict[str, dict] = {
    "Deutsch":    {"code": "D",   "category": "hauptfach", "color": "#B3D4FF", "duration": 1, "lab": False},
    "Mathematik": {"code": "M",   "category": "hauptfach", "color": "#B3D4FF", "duration": 1, "lab": False},
    "Englisch":   {"code": "E",   "category": "hauptfach", "color": "#FFF2B3", "duration": 1, "lab": False},
    "Physik":     {"code": "PH",  "category": "hauptfach", "color": "#B3FFB3", "duration": 1, "lab": True},
    "Chemie":     {"code": "CH",  "category": "hauptfach", "color": "#B3FFB3", "duration": 1, "lab": True},
    "Geschichte": {"code": "GE",  "category": "nebenfach", "color": "#D4B3FF", "duration": 1, "lab": False},
    "Erdkunde":   {"code": "EK",  "category": "nebenfach", "color": "#D4B3FF", "duration": 1, "lab": False},
    "Politik":    {"code": "PO",  "category": "nebenfach", "color": "#D4B3FF", "duration": 1, "lab": False},
    "Biologie":   {"code": "BI",  "category": "nebenfach", "color": "#B3FFB3", "duration": 1, "lab": True},
    "Sport":      {"code": "SP",  "category": "spezial",   "color": "#FFD4B3", "duration": 2, "lab": False},
    "Musik":      {"code": "MU",  "category": "spezial",   "color": "#FFB3E6", "duration": 1, "lab": False},
    "Kunst":      {"code": "KU",  "category": "spezial",   "color": "#FFB3E6", "duration": 1, "lab": False},
    "Informatik": {"code": "IF",  "category": "spezial",   "color": "#E0E0E0", "duration": 1, "lab": True},
}

# Demo-Stundentafel: Kategorie → (Fächer, (min, max) Einheiten pro Woche)
DEMO_SUBJECT_TIERS: dict[str, tuple[list[str], tuple[int, int]]] = {
    "hauptfach": (["Deutsch", "Mathematik", "Englisch", "Physik", "Chemie"], (3, 4)),
    "nebenfach": (["Geschichte", "Erdkunde", "Politik", "Biologie"], (2, 2)),
    "spezial":   (["Sport", "Musik", "Kunst", "Informatik"], (1, 2)),
}


# ─── RÄUME ───
# (Name, Raumtyp, Fachraum?)

DEFAULT_ROOMS: list[tuple[str, str, bool]] = [
    *[(f"Raum {n}", "klassenraum", False)
      for n in (101, 102, 103, 104, 105,
                201, 202, 203, 204, 205,
                301, 302, 303, 304, 305)],
    ("Physik-Labor", "labor", True),
    ("Chemie-Labor", "labor", True),
    ("Bio-Labor", "labor", True),
    ("Computerraum", "computer", True),
    ("Musikraum", "musik", True),
    ("Kunstraum", "kunst", True),
    ("Sporthalle", "sport", True),
]

# Fach → bevorzugte Räume (nach Name). Fächer ohne Eintrag bekommen einen
# normalen Klassenraum.
SUBJECT_ROOM_MAP: dict[str, list[str]] = {
    "Physik":     ["Physik-Labor", "Raum 301", "Raum 302"],
    "Chemie":     ["Chemie-Labor", "Raum 303", "Raum 304"],
    "Biologie":   ["Bio-Labor", "Raum 305"],
    "Informatik": ["Computerraum"],
    "Musik":      ["Musikraum"],
    "Kunst":      ["Kunstraum"],
    "Sport":      ["Sporthalle"],
}
