"""Filesystem watcher that reports changes to a catalog file."""

import logging
import os
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

log = logging.getLogger(__name__)

class CatalogEventHandler(FileSystemEventHandler):
    """Calls back when an event touches the watched catalog file."""
    def __init__(self, catalog_path: Path, callback: Callable[[], None]):
        super().__init__()
        self.catalog_name = os.path.normcase(catalog_path.name)
        self.callback = callback

    def _matches(self, path) -> bool:
        if not path:
            return False
        if isinstance(path, bytes):
            path = os.fsdecode(path)
        return os.path.normcase(os.path.basename(path)) == self.catalog_name

    def on_any_event(self, event):
        if event.is_directory or event.event_type in ("opened", "closed_no_write"):
            return
        if not (self._matches(event.src_path) or self._matches(getattr(event, "dest_path", ""))):
            return
        log.info(f"Detected catalog change: {event}. Triggering refresh.")
        self.callback()

class Watcher:
    """Manages the filesystem observer for one catalog."""
    def __init__(self, catalog_path: Path, callback: Callable[[], None]):
        self.observer: Optional[Observer] = None
        self.catalog_path = catalog_path
        self.directory = catalog_path.parent
        self.event_handler = CatalogEventHandler(catalog_path, callback)

    def start(self):
        """Starts watching the catalog's directory."""
        if not self.directory.is_dir():
            log.warning(f"Cannot watch non-existent directory: {self.directory}")
            return

        if self.observer and self.observer.is_alive():
            return # Already running

        # Create a new observer instance every time, as it cannot be restarted
        self.observer = Observer()
        self.observer.schedule(self.event_handler, str(self.directory), recursive=False)
        self.observer.start()
        log.info(f"Started watching catalog: {self.catalog_path}")

    def stop(self):
        """Stops watching."""
        if self.observer and self.observer.is_alive():
            self.observer.stop()
            self.observer.join()
            log.info("Stopped watching catalog.")
        self.observer = None

    def is_alive(self) -> bool:
        """Checks if the watcher thread is alive."""
        return bool(self.observer and self.observer.is_alive())
