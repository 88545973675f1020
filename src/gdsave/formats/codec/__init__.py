"""Generic binary structure codec: cipher, primitives, schemas, block framing."""
from .encrypter import Encrypter, build_table
from .schema import (
    FieldType, Primitive, String, ByteArray, Nested, Sequence, FieldSpec,
    BOOL, BYTE, UINT16, UINT32, UINT64, INT32, FLOAT32,
    boolean, byte, uint16, uint32, uint64, int32, float32,
    string, wstring, byte_array, nested, sequence,
    schema_of, register_codec, get_codec, CUSTOM_CODECS,
)
from .structure import (
    read_structure, write_structure, read_fields, write_fields,
    read_value, write_value,
)
from .block import read_framed, write_framed, read_block, write_block

__all__ = [
    # Cipher
    'Encrypter', 'build_table',
    # Schema
    'FieldType', 'Primitive', 'String', 'ByteArray', 'Nested', 'Sequence', 'FieldSpec',
    'BOOL', 'BYTE', 'UINT16', 'UINT32', 'UINT64', 'INT32', 'FLOAT32',
    'boolean', 'byte', 'uint16', 'uint32', 'uint64', 'int32', 'float32',
    'string', 'wstring', 'byte_array', 'nested', 'sequence',
    'schema_of', 'register_codec', 'get_codec', 'CUSTOM_CODECS',
    # Structure codec
    'read_structure', 'write_structure', 'read_fields', 'write_fields',
    'read_value', 'write_value',
    # Block framing
    'read_framed', 'write_framed', 'read_block', 'write_block',
]
