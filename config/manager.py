"""Konfigurationsmanager: Laden, Speichern und Validieren der Planer-Konfiguration.

Nutzt ruamel.yaml für YAML-Serialisierung mit Kommentaren.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap

from config.defaults import default_planner_config
from config.schema import PlannerConfig

logger = logging.getLogger(__name__)
yaml = YAML()
yaml.default_flow_style = False
yaml.width = 120


# ─── YAML-KOMMENTAR-AUFBAU ───

_YAML_HEADER = f"""\
# ============================================
# Kursplaner: Konfiguration
# Version: 1.0
# Erstellt: {date.today().isoformat()}
# ============================================
"""

_SECTION_COMMENTS = {
    "grid": (
        "Wochenraster",
        "Tage pro Woche, Stunden pro Tag und Pausen.",
    ),
    "validation": (
        "Konfliktprüfung",
        "overlap_mode: exact = gleiche Anfangsstunde, interval = überlappende Stunden.\n"
        "resource_scoped: true = nur Kurse mit gemeinsamer Lehrkraft/Raum/Klasse vergleichen.",
    ),
    "assignment": (
        "Slot-Vergabe",
        "Zufällige Vergabe pro Klasse; Einheiten ohne freien Slot nach max_attempts werden verworfen.",
    ),
    "demo": (
        "Demo-Daten",
        None,
    ),
}


class ConfigManager:
    CONFIG_DIR = Path("config")
    DEFAULT_CONFIG = CONFIG_DIR / "planner_config.yaml"

    def first_run_check(self) -> bool:
        """Gibt True zurück wenn noch keine Config existiert (Erstaufruf)."""
        return not self.DEFAULT_CONFIG.exists()

    # ─── Laden ───

    def load(self, path: Optional[Path] = None) -> PlannerConfig:
        """Lade Config aus YAML. Validiert automatisch via Pydantic."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            raise FileNotFoundError(
                f"Konfigurationsdatei nicht gefunden: {target}\n"
                f"Führen Sie 'python main.py init' aus, um eine Konfiguration anzulegen."
            )
        with open(target, "r", encoding="utf-8") as f:
            raw = yaml.load(f)
        try:
            config = PlannerConfig.model_validate(dict(raw or {}))
        except Exception as e:
            raise ValueError(
                f"Konfigurationsdatei ungültig: {target}\n"
                f"Pydantic-Fehler: {e}"
            ) from e
        logger.debug(f"Konfiguration geladen: {target}")
        return config

    def load_or_default(self, path: Optional[Path] = None) -> PlannerConfig:
        """Wie load(), fällt aber ohne Datei auf die Default-Konfiguration zurück."""
        target = path or self.DEFAULT_CONFIG
        if not target.exists():
            logger.info(f"Keine Konfiguration unter {target} – verwende Defaults.")
            return default_planner_config()
        return self.load(target)

    # ─── Speichern ───

    def save(self, config: PlannerConfig, path: Optional[Path] = None) -> Path:
        """Speichere Config als YAML mit deutschen Kommentaren."""
        target = path or self.DEFAULT_CONFIG
        target.parent.mkdir(parents=True, exist_ok=True)

        data = self._build_commented_yaml(config)

        with open(target, "w", encoding="utf-8") as f:
            f.write(_YAML_HEADER + "\n")
            yaml.dump(data, f)

        logger.info(f"Konfiguration gespeichert: {target}")
        return target

    def _build_commented_yaml(self, config: PlannerConfig) -> CommentedMap:
        """Baut die YAML-Struktur mit Kommentaren auf."""
        # JSON-Umweg: Tupel werden zu Listen, die YAML ohne Tags schreiben kann
        raw = json.loads(config.model_dump_json())
        cm = CommentedMap(raw)

        for field, (label, comment) in _SECTION_COMMENTS.items():
            cm.yaml_set_comment_before_after_key(
                field,
                before=f"\n─── {label} ───" + (f"\n{comment}" if comment else ""),
            )
        return cm
