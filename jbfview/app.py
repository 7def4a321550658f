"""Command line entry point: turns a browser catalog into an HTML contact sheet."""

import argparse
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from jbfview.config import config
from jbfview.errors import JbfError
from jbfview.imaging.jpeg import verify_thumbnail
from jbfview.io.catalog import close_catalog, open_catalog
from jbfview.io.watcher import Watcher
from jbfview.logging_setup import setup_logging
from jbfview.models import Catalog, Entry
from jbfview.render import write_page

log = logging.getLogger(__name__)


def candidate_paths(infile: str, catalog_name: str) -> List[Path]:
    """Where to look for a catalog, in order.

    ``infile`` may name the catalog itself or the directory holding it; the
    current directory is always tried last.
    """
    candidates = []
    if infile:
        candidates.append(Path(infile))
        candidates.append(Path(infile) / catalog_name)
    candidates.append(Path(catalog_name))
    return candidates


def open_configured(path: Path) -> Catalog:
    return open_catalog(
        path,
        encoding=config.get("core", "encoding", fallback="cp1252"),
        use_mmap=config.getboolean("core", "use_mmap", fallback=True),
    )


def find_catalog(infile: str = "") -> Catalog:
    """Opens the first candidate catalog that decodes, or raises the last error."""
    catalog_name = config.get("core", "catalog_name", fallback="pspbrwse.jbf")

    last_error: Optional[JbfError] = None
    for path in candidate_paths(infile, catalog_name):
        try:
            return open_configured(path)
        except JbfError as e:
            log.info("No usable catalog at %s: %s", path, e)
            last_error = e
    raise last_error


def verified_entries(catalog: Catalog) -> List[Entry]:
    """Entries whose thumbnail decodes fully; entries without one are kept."""
    entries = []
    for entry in catalog:
        if entry.has_thumbnail and not verify_thumbnail(entry.thumbnail):
            log.warning("Dropping %r: thumbnail does not decode", entry.file_name)
            continue
        entries.append(entry)
    return entries


def build_page(catalog: Catalog, output: Path, include_empty: bool, verify: bool) -> int:
    entries = verified_entries(catalog) if verify else None
    return write_page(
        catalog,
        output,
        title=config.get("html", "title", fallback="Browse"),
        include_empty=include_empty,
        box_size=config.getint("html", "thumbnail_box", fallback=150),
        image_dimensions=config.getboolean("html", "image_dimensions", fallback=True),
        entries=entries,
    )


def watch(catalog_path: Path, output: Path, include_empty: bool, verify: bool):
    """Re-renders ``output`` whenever the catalog changes, until interrupted."""
    def refresh():
        try:
            catalog = open_configured(catalog_path)
        except JbfError as e:
            # The browser may still be writing the file
            log.warning(f"Catalog not readable yet, keeping previous page: {e}")
            return
        try:
            written = build_page(catalog, output, include_empty, verify)
            log.info(f"Refreshed {output} with {written} entries")
        except OSError as e:
            log.error(f"Failed to write {output}: {e}")
        finally:
            close_catalog(catalog)

    interval = config.getfloat("core", "watch_interval", fallback=1.0)
    watcher = Watcher(catalog_path, refresh)
    watcher.start()
    print(f"Watching {catalog_path} (Ctrl+C to stop)")
    try:
        while True:
            time.sleep(interval)
    except KeyboardInterrupt:
        log.info("Watch interrupted")
    finally:
        watcher.stop()


def main(
    infile: str = "",
    output: Optional[str] = None,
    include_empty: Optional[bool] = None,
    verify: bool = False,
    watch_catalog: bool = False,
    debug: bool = False,
) -> int:
    """jbfview entry point. Returns the process exit status."""
    setup_logging(debug)
    log.info("Starting jbfview")

    try:
        catalog = find_catalog(infile)
    except JbfError as e:
        log.error(f"Catalog not opened: {e}")
        print(f"error: jbf file not opened: {e}", file=sys.stderr)
        return 1

    if output is None:
        output_path = Path(config.get("core", "output", fallback="index.html"))
        if output_path.exists():
            log.error("Default output %s exists", output_path)
            print(f"error: {output_path} exists", file=sys.stderr)
            close_catalog(catalog)
            return 1
    else:
        output_path = Path(output)

    if include_empty is None:
        include_empty = not config.getboolean("html", "skip_empty_thumbnails", fallback=True)

    catalog_path = catalog.path
    try:
        written = build_page(catalog, output_path, include_empty, verify)
    except OSError as e:
        log.error(f"Failed to write {output_path}: {e}")
        print(f"error: can not open {output_path}", file=sys.stderr)
        return 1
    finally:
        close_catalog(catalog)

    print(f"Wrote {written} entries to {output_path}")
    if watch_catalog:
        watch(catalog_path, output_path, include_empty, verify)
    return 0


def cli():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Transforms Paint Shop Pro 7 jbf files to complete HTML pages with embedded thumbnails."
    )
    parser.add_argument(
        "input", nargs="?", default="",
        help="jbf file or directory where a jbf file is stored. "
             "If none is given, the current directory is searched for pspbrwse.jbf",
    )
    parser.add_argument("-o", "--output", default=None,
                        help="Direct output to this file (default: index.html, which must not exist)")
    parser.add_argument("-z", "--include-empty", action="store_true", default=None,
                        help="Include entries with 0-byte thumbnails (skipped by default)")
    parser.add_argument("--verify", action="store_true",
                        help="Fully decode every thumbnail and leave broken ones out")
    parser.add_argument("--watch", action="store_true",
                        help="Keep running and re-render the page when the catalog changes")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()
    sys.exit(main(
        infile=args.input,
        output=args.output,
        include_empty=args.include_empty,
        verify=args.verify,
        watch_catalog=args.watch,
        debug=args.debug,
    ))

if __name__ == "__main__":
    cli()
