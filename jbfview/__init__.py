"""Reader for Paint Shop Pro 7 browser catalogs (pspbrwse.jbf)."""

from jbfview.errors import ArgumentError, CatalogMemoryError, CorruptError, JbfError
from jbfview.io.catalog import close_catalog, open_catalog
from jbfview.models import Catalog, Entry, FileType

__version__ = "1.0.0"

__all__ = [
    "ArgumentError",
    "Catalog",
    "CatalogMemoryError",
    "CorruptError",
    "Entry",
    "FileType",
    "JbfError",
    "close_catalog",
    "open_catalog",
]
