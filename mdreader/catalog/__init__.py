from mdreader.catalog.base import FileCatalog
from mdreader.catalog.local import LocalFileCatalog

__all__ = [
    "FileCatalog",
    "LocalFileCatalog",
]
