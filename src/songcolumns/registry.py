from .exceptions import UnsupportedSourceError
from .importers.base import SongImporter
from .importers.onsong import OnSongImporter
from .importers.textfile import TextFileImporter
from .importers.web import WebImporter

_IMPORTERS: list[type[SongImporter]] = [
    WebImporter,
    OnSongImporter,
    TextFileImporter,
]


def get_importer(source: str) -> SongImporter:
    """Return an instantiated importer for the given path or URL.

    Raises UnsupportedSourceError if no importer matches.
    """
    for cls in _IMPORTERS:
        if cls.can_handle(source):
            return cls()
    raise UnsupportedSourceError(source)
