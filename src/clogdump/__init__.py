"""clogdump: rebuild the collection log from a game cache dump.

The collection log (tabs, pages and the items on each page) is not stored in
the cache as such; :mod:`clogdump.builder` reconstructs it from struct,
enum and item records and :mod:`clogdump.serializer` writes it as
``collection_log_info.json``. Use :mod:`clogdump.api` programmatically or the
``clogdump`` command line tool.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
