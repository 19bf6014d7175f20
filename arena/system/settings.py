from __future__ import annotations
import json, os
from dataclasses import dataclass, asdict, fields
from pathlib import Path
from typing import Any, Callable, List, Optional
from arena.core.logging import logger

SETTINGS_FILENAME = ".arena_settings.json"
LEVELS = {"DEBUG","INFO","WARN","ERROR"}

@dataclass
class SettingsData:
    log_level: str = "INFO"        # DEBUG / INFO / WARN / ERROR
    assets_dir: str = ""           # empty = bundled assets/
    strict_config: bool = False    # configuration defects abort load

    def normalize(self):
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LEVELS:
            self.log_level = "INFO"
        self.assets_dir = str(self.assets_dir or "")
        self.strict_config = bool(self.strict_config)

class Settings:
    def __init__(self, data: SettingsData, path: Path):
        self.data = data
        self.path = path
        self._listeners: List[Callable[[SettingsData], None]] = []

    @classmethod
    def _resolve_path(cls) -> Path:
        home = Path(os.path.expanduser("~"))
        if home.is_dir() and os.access(home, os.W_OK):
            return home / SETTINGS_FILENAME
        return Path.cwd() / SETTINGS_FILENAME

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Settings":
        path = path or cls._resolve_path()
        if path.exists():
            try:
                raw = json.loads(path.read_text(encoding="utf-8"))
                field_names = {f.name for f in fields(SettingsData)}
                data = SettingsData(**{k: v for k, v in raw.items() if k in field_names})
                data.normalize()
                logger.debug("SettingsLoaded", path=str(path))
                return cls(data, path)
            except (OSError, ValueError, TypeError, AttributeError) as e:
                logger.warn("SettingsParseFailedUsingDefaults", path=str(path), error=str(e))
        data = SettingsData()
        data.normalize()
        return cls(data, path)

    def save(self):
        try:
            self.path.write_text(json.dumps(asdict(self.data), indent=2))
            logger.debug("SettingsSaved", path=str(self.path))
        except OSError as e:
            logger.error("SettingsSaveFailed", error=str(e))

    def on_change(self, fn: Callable[[SettingsData], None]):
        self._listeners.append(fn)

    def _notify(self):
        for fn in self._listeners:
            fn(self.data)

    def update(self, **changes: Any):
        for key, value in changes.items():
            if not hasattr(self.data, key):
                raise AttributeError(f"Unknown setting '{key}'")
            setattr(self.data, key, value)
        self.data.normalize()
        self.save()
        self._notify()

    def apply_log_level(self):
        logger.set_level(self.data.log_level)

__all__ = ["Settings","SettingsData","SETTINGS_FILENAME"]
