"""gdsave command line - inspect and edit Grim Dawn saves and game files.

Usage:
    gdsave saves [--root <steam userdata>]
    gdsave inspect <player.gdc>
    gdsave fields <player.gdc>
    gdsave get <player.gdc> <field>
    gdsave set <player.gdc> <field> <value> [--output <path>] [--no-backup]
    gdsave arc-list <file.arc>
    gdsave arc-extract <file.arc> <output dir>
    gdsave arz-list <database.arz> [--record <name>]
    gdsave tags <text_en.arc> [<tag>]

Output formats (before the command):
    --format table    (default, human-readable)
    --format json     (machine-readable)
"""

import sys
import json
import shutil
import logging
import argparse
import dataclasses
from pathlib import Path
from typing import Any

from .errors import GdSaveError
from .formats.gdc import CharacterDocument, load_character, save_character
from .formats.arc import ArcArchive
from .formats.arz import ArzDatabase
from .saves import find_save_dirs
from .tags import load_tags

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"
TRUE_WORDS = ("1", "true", "yes", "on")
FALSE_WORDS = ("0", "false", "no", "off")


def to_jsonable(value: Any) -> Any:
    """Convert records, lists and byte strings into JSON-friendly values."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, bytes):
        return value.hex()
    return value


def describe(value: Any) -> str:
    """One-line rendering for table output."""
    if isinstance(value, list):
        return f"[{len(value)} entries]"
    if dataclasses.is_dataclass(value):
        return type(value).__name__
    if isinstance(value, bytes):
        return value.hex()
    return repr(value)


def parse_value(text: str, current: Any) -> Any:
    """Convert command line text to the type of the current field value."""
    if isinstance(current, bool):
        word = text.lower()
        if word in TRUE_WORDS:
            return True
        if word in FALSE_WORDS:
            return False
        raise ValueError(f"expected a boolean, got '{text}'")
    if isinstance(current, int):
        return int(text, 0)
    if isinstance(current, float):
        return float(text)
    if isinstance(current, str):
        return text
    raise ValueError(f"field holds a {type(current).__name__}; only scalar fields can be set")


def emit(args, data: Any, lines: list[str]):
    if args.format == "json":
        print(json.dumps(to_jsonable(data), indent=2))
    else:
        print("\n".join(lines))


def cmd_saves(args):
    """List character save directories."""
    dirs = find_save_dirs(args.root)
    emit(args, [str(d) for d in dirs], [str(d) for d in dirs] or ["No saves found."])


def cmd_inspect(args):
    """Show the header and block list of a character."""
    doc = load_character(args.file)
    lines = [f"Character: {args.file}", doc.summary(), "", "BLOCKS", "─" * 50]
    lines += [f"  {blk}" for blk in doc.blocks]
    data = {
        "header": doc.header,
        "data_version": doc.data_version,
        "blocks": [{"id": blk.BLOCK_ID, "type": type(blk).__name__, "version": blk.version}
                   for blk in doc.blocks],
    }
    emit(args, data, lines)


def cmd_fields(args):
    """List every field of the flat property map."""
    doc = load_character(args.file)
    width = max((len(name) for name in doc.fields), default=0)
    lines = [f"  {name:<{width}}  {describe(value)}" for name, value in doc.fields.items()]
    emit(args, doc.fields, lines)


def cmd_get(args):
    """Print one field."""
    doc = load_character(args.file)
    value = doc.get(args.field)
    if args.format == "json" or not isinstance(value, (bool, int, float, str)):
        print(json.dumps(to_jsonable(value), indent=2))
    else:
        print(value)


def cmd_set(args):
    """Set one scalar field and save."""
    path = Path(args.file)
    doc: CharacterDocument = load_character(path)
    value = parse_value(args.value, doc.get(args.field))
    logger.debug(f"Setting {args.field} = {value!r}")
    doc.set(args.field, value)

    output = Path(args.output) if args.output else path
    if output.exists() and not args.no_backup:
        backup_path = output.with_name(output.name + BACKUP_SUFFIX)
        shutil.copy2(output, backup_path)
        print(f"Backup saved to {backup_path}")

    save_character(doc, output)
    print(f"Saved to {output}")


def cmd_arc_list(args):
    """List the files in an archive."""
    arc = ArcArchive(args.file)
    lines = [arc.summary(), ""] + [f"  {e.size:>10,}  {e.filename}" for e in arc]
    emit(args, [{"name": e.filename, "size": e.size} for e in arc], lines)


def cmd_arc_extract(args):
    """Extract every file from an archive."""
    arc = ArcArchive(args.file)
    arc.extract_all(args.output_dir)
    print(f"Extracted {len(arc)} files to {args.output_dir}")


def cmd_arz_list(args):
    """List database records, or dump one record."""
    db = ArzDatabase(args.file)
    if args.record:
        fields = db.get_record(args.record)
        if fields is None:
            raise GdSaveError(f"no record named '{args.record}'")
        emit(args, fields, [f"  {k} = {v}" for k, v in fields.items()])
        return
    lines = [db.summary(), ""] + [f"  {r.record_type:<30} {r.name}" for r in db]
    emit(args, [{"name": r.name, "type": r.record_type} for r in db], lines)


def cmd_tags(args):
    """Show tag table entries."""
    tags = load_tags(ArcArchive(args.file))
    if args.tag:
        if args.tag not in tags:
            raise GdSaveError(f"no tag named '{args.tag}'")
        tags = {args.tag: tags[args.tag]}
    emit(args, tags, [f"{k}={v}" for k, v in tags.items()])


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="gdsave",
        description="Inspect and edit Grim Dawn character saves, "
                    "resource archives and game databases.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--format", choices=["table", "json"],
                        default="table", help="Output format (default: table)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    # saves
    p = sub.add_parser("saves", help="List character save directories")
    p.add_argument("--root", type=Path, default=None,
                   help="Steam userdata folder (default: from ProgramFiles(x86))")

    # inspect
    p = sub.add_parser("inspect", help="Show header and blocks")
    p.add_argument("file", help="Path to player.gdc")

    # fields
    p = sub.add_parser("fields", help="List all editable fields")
    p.add_argument("file", help="Path to player.gdc")

    # get
    p = sub.add_parser("get", help="Print one field")
    p.add_argument("file", help="Path to player.gdc")
    p.add_argument("field", help="Field name")

    # set
    p = sub.add_parser("set", help="Set one scalar field and save")
    p.add_argument("file", help="Path to player.gdc")
    p.add_argument("field", help="Field name")
    p.add_argument("value", help="New value")
    p.add_argument("--output", "-o", help="Write here instead of overwriting the input")
    p.add_argument("--no-backup", action="store_true", help="Do not keep a .bak copy")

    # arc-list
    p = sub.add_parser("arc-list", help="List files in an .arc archive")
    p.add_argument("file", help="Path to .arc")

    # arc-extract
    p = sub.add_parser("arc-extract", help="Extract an .arc archive")
    p.add_argument("file", help="Path to .arc")
    p.add_argument("output_dir", help="Destination directory")

    # arz-list
    p = sub.add_parser("arz-list", help="List records in an .arz database")
    p.add_argument("file", help="Path to .arz")
    p.add_argument("--record", help="Dump this record's fields")

    # tags
    p = sub.add_parser("tags", help="Show display text tags from a text archive")
    p.add_argument("file", help="Path to text_<lang>.arc")
    p.add_argument("tag", nargs="?", help="Single tag to look up")

    return parser


COMMANDS = {
    "saves": cmd_saves,
    "inspect": cmd_inspect,
    "fields": cmd_fields,
    "get": cmd_get,
    "set": cmd_set,
    "arc-list": cmd_arc_list,
    "arc-extract": cmd_arc_extract,
    "arz-list": cmd_arz_list,
    "tags": cmd_tags,
}


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        COMMANDS[args.command](args)
    except (GdSaveError, OSError, KeyError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
