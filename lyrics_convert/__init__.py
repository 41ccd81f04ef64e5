from .api import detect, generate, parse, shift
from .errors import LyricsError, UnknownFormatError
from .model import LyricsDocument, LyricsFormat, LyricsMetadata, TimedLine, TimedWord

__version__ = "0.1.0"

__all__ = [
    "detect",
    "parse",
    "generate",
    "shift",
    "LyricsDocument",
    "LyricsFormat",
    "LyricsMetadata",
    "TimedLine",
    "TimedWord",
    "LyricsError",
    "UnknownFormatError",
]
