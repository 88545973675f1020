"""ARC resource archive package."""
from .arc import ArcArchive, ArcEntry, ArcHeader, ArcRecordHeader, ArcPartHeader, read_arc

__all__ = [
    'ArcArchive', 'ArcEntry', 'ArcHeader', 'ArcRecordHeader', 'ArcPartHeader', 'read_arc',
]
