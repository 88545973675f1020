"""
Schema-driven structure codec.

Walks a record type's flattened field list and reads or writes each field in
order: primitives and strings through the primitive codec, fixed byte runs,
nested records (custom codec first, generic recursion otherwise) and
sequences (fixed count with no prefix, or a UInt32 count prefix).
"""

from typing import Optional

from ...errors import FormatError, SchemaError
from ...utils.binary import IoBuffer
from . import primitives
from .encrypter import Encrypter
from .schema import (
    FieldType, Primitive, String, ByteArray, Nested, Sequence,
    schema_of, get_codec,
)


def read_structure(record_type: type, io: IoBuffer, enc: Optional[Encrypter]):
    """Read one record, preferring a registered custom codec."""
    codec = get_codec(record_type)
    if codec is not None:
        return codec.read(io, enc)
    return read_fields(record_type, io, enc)


def write_structure(record, io: IoBuffer, enc: Optional[Encrypter]):
    """Write one record, preferring a registered custom codec."""
    codec = get_codec(type(record))
    if codec is not None:
        codec.write(io, enc, record)
        return
    write_fields(record, io, enc)


def read_fields(record_type: type, io: IoBuffer, enc: Optional[Encrypter]):
    """Generic path: read every declared field in wire order."""
    values = {}
    for spec in schema_of(record_type):
        values[spec.name] = read_value(spec.field_type, io, enc)
    return record_type(**values)


def write_fields(record, io: IoBuffer, enc: Optional[Encrypter]):
    """Generic path: write every declared field in wire order."""
    for spec in schema_of(type(record)):
        write_value(spec.field_type, getattr(record, spec.name), io, enc)


def read_value(field_type: FieldType, io: IoBuffer, enc: Optional[Encrypter]):
    if isinstance(field_type, Primitive):
        return field_type.reader(io, enc)
    if isinstance(field_type, String):
        return primitives.read_string(io, enc, field_type.encoding)
    if isinstance(field_type, ByteArray):
        return primitives.read_bytes(io, enc, field_type.length)
    if isinstance(field_type, Nested):
        return read_structure(field_type.record_type, io, enc)
    if isinstance(field_type, Sequence):
        if field_type.is_fixed:
            count = field_type.count
        else:
            count = primitives.read_uint32(io, enc)
        return [read_value(field_type.element, io, enc) for _ in range(count)]
    raise SchemaError(f"no codec for field type {field_type!r}")


def write_value(field_type: FieldType, value, io: IoBuffer, enc: Optional[Encrypter]):
    if isinstance(field_type, Primitive):
        field_type.writer(io, enc, value)
    elif isinstance(field_type, String):
        primitives.write_string(io, enc, value, field_type.encoding)
    elif isinstance(field_type, ByteArray):
        if len(value) != field_type.length:
            raise FormatError(
                f"byte array must be {field_type.length} bytes, got {len(value)}"
            )
        primitives.write_bytes(io, enc, bytes(value))
    elif isinstance(field_type, Nested):
        write_structure(value, io, enc)
    elif isinstance(field_type, Sequence):
        if field_type.is_fixed:
            if len(value) != field_type.count:
                raise FormatError(
                    f"fixed sequence must hold {field_type.count} elements, got {len(value)}"
                )
        else:
            primitives.write_uint32(io, enc, len(value))
        for element in value:
            write_value(field_type.element, element, io, enc)
    else:
        raise SchemaError(f"no codec for field type {field_type!r}")
