"""Manages application configuration via an INI file."""

import configparser
import logging
from pathlib import Path
from typing import List, Optional

from jbfview.logging_setup import get_app_data_dir

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "jbfview.ini"

DEFAULT_CONFIG = {
    "core": {
        "catalog_name": "pspbrwse.jbf",  # File name the browser gives its catalogs
        "output": "index.html",  # Used when -o is not given; never overwritten
        "encoding": "cp1252",  # Code page of names stored in the catalog
        "use_mmap": "True",  # False reads the whole file instead of mapping it
        "watch_interval": "1.0",  # Seconds between checks for Ctrl+C in --watch
    },
    "html": {
        "title": "Browse",
        "skip_empty_thumbnails": "True",
        "thumbnail_box": "150",  # Pixel size of the square each thumbnail is centred in
        "image_dimensions": "True",  # Emit width/height read from each thumbnail
    },
}


class AppConfig:
    """Settings from ``jbfview.ini``, read on first access.

    Nothing touches the file system until a value is read or set, so the
    module-level instance is safe to import. The file is written when it is
    missing or lacks keys from :data:`DEFAULT_CONFIG`, and on :meth:`save`.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self._config_path = Path(config_path) if config_path is not None else None
        self.config = configparser.ConfigParser()
        self.loaded = False

    @property
    def config_path(self) -> Path:
        if self._config_path is None:
            self._config_path = get_app_data_dir() / CONFIG_FILE_NAME
        return self._config_path

    def _backfill(self) -> List[str]:
        added = []
        for section, keys in DEFAULT_CONFIG.items():
            if not self.config.has_section(section):
                self.config.add_section(section)
            for key, value in keys.items():
                if not self.config.has_option(section, key):
                    self.config.set(section, key, value)
                    added.append(f"{section}.{key}")
        return added

    def load(self):
        """Reads the INI file, creating it with defaults if it doesn't exist."""
        self.loaded = True
        exists = self.config_path.exists()
        if exists:
            log.info(f"Loading config from {self.config_path}")
            self.config.read(self.config_path, encoding="utf-8")
        added = self._backfill()
        if not exists:
            log.info(f"Creating default config at {self.config_path}")
            self.save()
        elif added:
            log.info(f"Adding missing config keys: {', '.join(added)}")
            self.save()

    def _ensure_loaded(self):
        if not self.loaded:
            self.load()

    def save(self):
        """Saves the current configuration to the INI file."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with self.config_path.open("w", encoding="utf-8") as f:
                self.config.write(f)
            log.info(f"Saved config to {self.config_path}")
        except OSError as e:
            log.error(f"Failed to save config to {self.config_path}: {e}")

    def get(self, section, key, fallback=None):
        self._ensure_loaded()
        return self.config.get(section, key, fallback=fallback)

    def getint(self, section, key, fallback=None):
        self._ensure_loaded()
        return self.config.getint(section, key, fallback=fallback)

    def getfloat(self, section, key, fallback=None):
        self._ensure_loaded()
        return self.config.getfloat(section, key, fallback=fallback)

    def getboolean(self, section, key, fallback=None):
        self._ensure_loaded()
        return self.config.getboolean(section, key, fallback=fallback)

    def set(self, section, key, value):
        self._ensure_loaded()
        if not self.config.has_section(section):
            self.config.add_section(section)
        self.config.set(section, key, str(value))


# Global config instance
config = AppConfig()
