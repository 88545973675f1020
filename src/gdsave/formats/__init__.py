"""gdsave formats package - file format parsers."""
from .gdc import CharacterDocument, load_character, save_character
from .arc import ArcArchive, ArcEntry, read_arc
from .arz import ArzDatabase, ArzRecord

__all__ = [
    # Character saves
    'CharacterDocument', 'load_character', 'save_character',
    # ARC archives
    'ArcArchive', 'ArcEntry', 'read_arc',
    # ARZ database
    'ArzDatabase', 'ArzRecord',
]
