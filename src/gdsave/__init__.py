"""gdsave - Grim Dawn character save, archive and database codecs."""

__version__ = "0.1.0"

from .errors import GdSaveError, FormatError, SchemaError, DuplicateFieldError
from .formats.gdc import CharacterDocument, load_character, save_character
from .formats.arc import ArcArchive, read_arc
from .formats.arz import ArzDatabase
from .saves import find_save_dirs
from .tags import load_tags

__all__ = [
    'GdSaveError', 'FormatError', 'SchemaError', 'DuplicateFieldError',
    'CharacterDocument', 'load_character', 'save_character',
    'ArcArchive', 'read_arc', 'ArzDatabase',
    'find_save_dirs', 'load_tags',
]
