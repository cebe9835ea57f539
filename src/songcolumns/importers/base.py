from abc import ABC, abstractmethod

from ..exceptions import ParseError
from ..models import ParsedSong
from ..parser import ChordProParser


class SongImporter(ABC):
    """Abstract base class for all song importers."""

    @classmethod
    @abstractmethod
    def can_handle(cls, source: str) -> bool:
        """Return True if this importer can read *source* (a path or URL)."""

    @abstractmethod
    def load(self, source: str) -> str:
        """Read *source* and return its raw content.

        Raises FetchError or ParseError if the content cannot be read.
        """

    @abstractmethod
    def convert(self, raw: str, source: str) -> str:
        """Turn raw content into ChordPro text.

        Raises ParseError if no song content can be found.
        """

    def to_chordpro(self, source: str) -> str:
        """Convenience method: load + convert."""
        return self.convert(self.load(source), source)

    def import_song(self, source: str) -> ParsedSong:
        """Load, convert and parse *source*."""
        song = ChordProParser().parse(self.to_chordpro(source))
        if not song.sections:
            raise ParseError(source, "No song content found")
        return song
