"""
Display-text tag tables.

Grim Dawn keeps its UI and item text in ``tags_*.txt`` files inside the text
archives (``text_en.arc`` and friends). Each line is ``tagName=Display text``;
lines starting with ``#`` and blank lines are ignored.
"""

from typing import Optional, Union

from .formats.arc import ArcArchive

TAG_FILE_SUFFIX = '.txt'


def parse_tags(data: bytes) -> dict[str, str]:
    """Parse one tag file into ``tag -> text``."""
    tags = {}
    text = data.decode('utf-8-sig', errors='replace')
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith('#'):
            continue
        tag, sep, value = line.partition('=')
        if not sep:
            continue
        tags[tag.strip()] = value
    return tags


def load_tags(archive: Union[ArcArchive, dict]) -> dict[str, str]:
    """Merge every tag file of a text archive (or ``name -> bytes`` map)."""
    if isinstance(archive, ArcArchive):
        files = archive.read_all()
    else:
        files = archive

    tags = {}
    for name in sorted(files):
        if name.lower().endswith(TAG_FILE_SUFFIX):
            tags.update(parse_tags(files[name]))
    return tags


def display_name(tags: dict[str, str], tag: str, fallback: Optional[str] = None) -> str:
    """Resolve a tag, falling back to the tag itself."""
    return tags.get(tag, tag if fallback is None else fallback)
