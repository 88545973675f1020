"""
Record schemas for the structure codec.

A record type is a plain ``@dataclass``. Each field carries its on-disk type
in ``field.metadata``, declared with the helpers below::

    @dataclass
    class Faction:
        modified: bool = boolean()
        value: float = float32()

``dataclasses.fields()`` lists base class fields before derived class fields,
in declaration order. That order *is* the wire order, so shared fields go on
a base class and variant fields on its subclasses.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from ...errors import SchemaError
from . import primitives
from .primitives import ASCII, UTF16

SCHEMA_KEY = 'gdsave'


class FieldType:
    """Base class for on-disk field type descriptors."""


@dataclass(frozen=True)
class Primitive(FieldType):
    """Fixed-width scalar handled directly by the primitive codec."""
    name: str
    reader: Callable = field(repr=False)
    writer: Callable = field(repr=False)
    default: object = 0


@dataclass(frozen=True)
class String(FieldType):
    """UInt32 unit count followed by text in the given encoding."""
    encoding: str = ASCII


@dataclass(frozen=True)
class ByteArray(FieldType):
    """Byte run of a fixed length, no prefix."""
    length: int


@dataclass(frozen=True)
class Nested(FieldType):
    """Another record type, read through its custom codec if it has one."""
    record_type: type


@dataclass(frozen=True)
class Sequence(FieldType):
    """Homogeneous list. ``count=None`` means a UInt32 count precedes it."""
    element: FieldType
    count: Optional[int] = None

    @property
    def is_fixed(self) -> bool:
        return self.count is not None


BOOL = Primitive('bool', primitives.read_bool, primitives.write_bool, False)
BYTE = Primitive('byte', primitives.read_byte, primitives.write_byte)
UINT16 = Primitive('uint16', primitives.read_uint16, primitives.write_uint16)
UINT32 = Primitive('uint32', primitives.read_uint32, primitives.write_uint32)
UINT64 = Primitive('uint64', primitives.read_uint64, primitives.write_uint64)
INT32 = Primitive('int32', primitives.read_int32, primitives.write_int32)
FLOAT32 = Primitive('float32', primitives.read_float, primitives.write_float, 0.0)


@dataclass(frozen=True)
class FieldSpec:
    """One entry of a flattened record schema."""
    name: str
    field_type: FieldType


# ============================================================================
# Field declaration helpers
# ============================================================================

def as_field_type(value: Union[FieldType, type]) -> FieldType:
    """Accept a descriptor or a record class (shorthand for ``Nested``)."""
    if isinstance(value, FieldType):
        return value
    if isinstance(value, type) and dataclasses.is_dataclass(value):
        return Nested(value)
    raise SchemaError(f"cannot use {value!r} as a field type")


def default_value(field_type: FieldType):
    """Fresh default for a descriptor (lists and records are new objects)."""
    if isinstance(field_type, Primitive):
        return field_type.default
    if isinstance(field_type, String):
        return ""
    if isinstance(field_type, ByteArray):
        return bytes(field_type.length)
    if isinstance(field_type, Nested):
        return field_type.record_type()
    if isinstance(field_type, Sequence):
        if field_type.is_fixed:
            return [default_value(field_type.element) for _ in range(field_type.count)]
        return []
    raise SchemaError(f"no default for field type {field_type!r}")


def declare(field_type: FieldType, default=dataclasses.MISSING):
    """Dataclass field carrying an on-disk type."""
    metadata = {SCHEMA_KEY: field_type}
    if default is not dataclasses.MISSING:
        return field(default=default, metadata=metadata)
    if isinstance(field_type, (Primitive, String)):
        return field(default=default_value(field_type), metadata=metadata)
    return field(default_factory=lambda: default_value(field_type), metadata=metadata)


def boolean(default: bool = False):
    return declare(BOOL, default)


def byte(default: int = 0):
    return declare(BYTE, default)


def uint16(default: int = 0):
    return declare(UINT16, default)


def uint32(default: int = 0):
    return declare(UINT32, default)


def uint64(default: int = 0):
    return declare(UINT64, default)


def int32(default: int = 0):
    return declare(INT32, default)


def float32(default: float = 0.0):
    return declare(FLOAT32, default)


def string(default: str = "", encoding: str = ASCII):
    return declare(String(encoding), default)


def wstring(default: str = ""):
    """UTF-16 string."""
    return string(default, encoding=UTF16)


def byte_array(length: int):
    return declare(ByteArray(length))


def nested(record_type: type):
    return declare(Nested(record_type))


def sequence(element: Union[FieldType, type], count: Optional[int] = None):
    """List field; fixed-size when ``count`` is given, else count-prefixed."""
    return declare(Sequence(as_field_type(element), count))


# ============================================================================
# Schema lookup
# ============================================================================

_SCHEMAS: dict[type, tuple[FieldSpec, ...]] = {}


def schema_of(record_type: type) -> tuple[FieldSpec, ...]:
    """Ordered field descriptors of a record type, base class fields first."""
    cached = _SCHEMAS.get(record_type)
    if cached is not None:
        return cached

    if not dataclasses.is_dataclass(record_type):
        raise SchemaError(f"{record_type.__name__} is not a record (dataclass) type")

    specs = []
    for f in dataclasses.fields(record_type):
        field_type = f.metadata.get(SCHEMA_KEY)
        if not isinstance(field_type, FieldType):
            raise SchemaError(
                f"{record_type.__name__}.{f.name} has no on-disk type declaration"
            )
        specs.append(FieldSpec(f.name, field_type))

    result = tuple(specs)
    _SCHEMAS[record_type] = result
    return result


def field_names(record_type: type) -> list[str]:
    """Names of every dataclass field, declared on-disk or not."""
    return [f.name for f in dataclasses.fields(record_type)]


# ============================================================================
# Custom codec registry
# ============================================================================

# Maps a record type to a codec class with ``read(io, enc)`` and
# ``write(io, enc, record)`` static methods. Consulted before the generic
# field-driven path.
CUSTOM_CODECS: dict[type, type] = {}


def register_codec(record_type: type):
    """Decorator to register a custom codec for a record type."""
    def decorator(cls):
        CUSTOM_CODECS[record_type] = cls
        return cls
    return decorator


def get_codec(record_type: type) -> Optional[type]:
    """Custom codec for a record type, or None for the generic path."""
    return CUSTOM_CODECS.get(record_type)
