"""Exception types raised by the gdsave codecs."""


class GdSaveError(Exception):
    """Base class for every error raised by gdsave."""


class FormatError(GdSaveError, ValueError):
    """The bytes on disk do not match the expected format.

    Raised for magic, version, block id, length, offset and checksum
    mismatches. Always fatal for the load/save in progress.
    """


class SchemaError(GdSaveError, TypeError):
    """A record field declares a type with no codec mapping."""


class DuplicateFieldError(GdSaveError, KeyError):
    """A flat field name is owned by more than one record (or by none)."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""
