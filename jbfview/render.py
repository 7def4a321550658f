"""Renders a decoded catalog as a standalone HTML page with inline thumbnails."""

import base64
import errno
import html
import logging
from pathlib import Path
from typing import Iterable, Optional, TextIO, Union

from jbfview.formatting import (
    bit_depth_label,
    file_size_label,
    file_type_label,
    format_filetime,
)
from jbfview.imaging.jpeg import thumbnail_size
from jbfview.models import Catalog, Entry

log = logging.getLogger(__name__)

PAGE_HEAD = """<!DOCTYPE html>
<!-- Created by jbfview -->
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{css}</style>
</head>
<body>

"""

PAGE_TAIL = """</body>
</html>
"""

CSS = """.object {{
  border: 2px solid transparent;
  margin: 3px;
  margin-top: 5px;
  padding: 2px;
  float: left;
}}
.object:hover {{
  border: 2px solid #A0A0A0;
}}
.object:focus-within {{
  outline: 1px dotted #212121;
}}
a {{
  color: black;
  text-decoration: none;
}}
a:focus {{
  outline: none;
}}
.container {{
  display: block;
  width: {box}px;
  height: {box}px;
}}
.thumbnail {{
  display: block;
  margin-left: auto;
  margin-right: auto;
  position: relative;
  top: 50%;
  transform: translateY(-50%);
}}
.filename {{
  display: block;
  font-size: 0.7em;
  text-align: center;
  max-width: {box}px;
  overflow: hidden;
  white-space: nowrap;
  text-overflow: ellipsis;
}}
"""


def entry_tooltip(entry: Entry) -> str:
    """Tooltip text shown for an entry, one detail per line."""
    return "\n".join([
        entry.file_name,
        f"{entry.width} x {entry.height} x {bit_depth_label(entry.bits_per_pixel)}, "
        f"{file_size_label(entry.file_size)}",
        file_type_label(entry.file_type_code),
        format_filetime(entry.file_time),
    ])


def render_entry(entry: Entry, image_dimensions: bool = True) -> str:
    name = html.escape(entry.file_name)
    data = base64.b64encode(entry.thumbnail or b"").decode("ascii")

    size_attrs = ""
    if image_dimensions and entry.thumbnail:
        size = thumbnail_size(entry.thumbnail)
        if size:
            size_attrs = f' width="{size[0]}" height="{size[1]}"'

    return (
        '<div class="object">\n'
        f'<a href="{name}"\n'
        f'title="{html.escape(entry_tooltip(entry))}">\n'
        '<span class="container">\n'
        f'<img class="thumbnail"{size_attrs} src="data:image/jpeg;base64,\n{data}" />\n'
        '</span>\n'
        f'<span class="filename">{name}</span>\n'
        '</a>\n'
        '</div>\n'
        '\n'
    )


def select_entries(entries: Iterable[Entry], include_empty: bool = False):
    """Yields the entries that belong on the page."""
    for entry in entries:
        if not entry.has_thumbnail and not include_empty:
            continue
        yield entry


def render_page(
    catalog: Catalog,
    out: TextIO,
    title: str = "Browse",
    include_empty: bool = False,
    box_size: int = 150,
    image_dimensions: bool = True,
    entries: Optional[Iterable[Entry]] = None,
) -> int:
    """
    Writes a complete HTML page for ``catalog`` to ``out``.

    ``entries`` overrides the catalog's own entries (e.g. after verification).
    Returns the number of entries written.
    """
    out.write(PAGE_HEAD.format(title=html.escape(title), css=CSS.format(box=box_size)))
    written = 0
    for entry in select_entries(catalog.entries if entries is None else entries, include_empty):
        out.write(render_entry(entry, image_dimensions))
        written += 1
    out.write(PAGE_TAIL)
    log.info("Rendered %d of %d entries from %r", written, len(catalog), catalog.directory_name)
    return written


def write_page(catalog: Catalog, path: Union[str, Path], **kwargs) -> int:
    """Renders the page to ``path`` atomically."""
    path = Path(path)
    if not path.name or path.is_dir():
        raise IsADirectoryError(errno.EISDIR, "output is a directory", str(path))
    temp_path = path.with_name(path.name + ".tmp")
    try:
        with temp_path.open("w", encoding="utf-8", newline="\n") as f:
            written = render_page(catalog, f, **kwargs)
        # Atomic rename
        temp_path.replace(path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    log.debug(f"Saved page to {path}")
    return written
