"""
Primitive and structure codec tests.
"""

import struct
from dataclasses import dataclass

import pytest

from gdsave.errors import FormatError, SchemaError
from gdsave.utils.binary import IoBuffer
from gdsave.formats.codec import (
    Encrypter, UINT32, register_codec, read_structure, write_structure,
    schema_of, uint32, string, sequence, byte_array,
)
from gdsave.formats.codec import primitives
from gdsave.formats.codec.schema import CUSTOM_CODECS
from gdsave.formats.gdc import (
    InventoryItem, HotSlot, SkillSlot, ItemSlot, HOT_SLOT_SKILL, HOT_SLOT_ITEM,
)

SEED = 0x12345678


def encode(write, enc=None) -> bytes:
    io = IoBuffer.from_bytes()
    write(io, enc)
    return io.getvalue()


# ============================================================================
# Primitives
# ============================================================================

def test_uint32_word_discipline():
    enc = Encrypter(SEED)
    data = encode(lambda io, e: primitives.write_uint32(io, e, 0xCAFEBABE), enc)

    assert data == struct.pack('<I', 0xCAFEBABE ^ SEED)
    expected_state = SEED
    for b in data:
        expected_state ^= enc.table[b]
    assert enc.state == expected_state


def test_byte_run_consumes_plaintext():
    enc = Encrypter(SEED)
    data = encode(lambda io, e: primitives.write_bytes(io, e, b"\x01\x02"), enc)

    ref = Encrypter(SEED)
    first = 0x01 ^ (ref.state & 0xFF)
    ref.consume(0x01)
    second = 0x02 ^ (ref.state & 0xFF)
    ref.consume(0x02)
    assert data == bytes((first, second))
    assert enc.state == ref.state


def test_ciphered_values_read_back():
    def write(io, enc):
        primitives.write_uint32(io, enc, 7)
        primitives.write_float(io, enc, 1.5)
        primitives.write_bool(io, enc, True)
        primitives.write_byte(io, enc, 200)
        primitives.write_string(io, enc, "records/a.dbr")
        primitives.write_string(io, enc, "Ülrich", primitives.UTF16)

    writer = Encrypter(SEED)
    data = encode(write, writer)

    reader = Encrypter(SEED)
    io = IoBuffer.from_bytes(data)
    assert primitives.read_uint32(io, reader) == 7
    assert primitives.read_float(io, reader) == 1.5
    assert primitives.read_bool(io, reader) is True
    assert primitives.read_byte(io, reader) == 200
    assert primitives.read_string(io, reader) == "records/a.dbr"
    assert primitives.read_string(io, reader, primitives.UTF16) == "Ülrich"
    assert reader.state == writer.state
    assert not io.has_more


def test_raw_primitives_leave_state_alone():
    enc = Encrypter(SEED)

    def write(io, e):
        primitives.write_uint16(io, e, 0xBEEF)
        primitives.write_int32(io, e, -2)
        primitives.write_uint64(io, e, 1 << 40)

    data = encode(write, enc)
    assert data == struct.pack('<HiQ', 0xBEEF, -2, 1 << 40)
    assert enc.state == SEED


def test_bool_true_only_for_one():
    assert primitives.read_bool(IoBuffer.from_bytes(b"\x01"), None) is True
    assert primitives.read_bool(IoBuffer.from_bytes(b"\x02"), None) is False
    assert primitives.read_bool(IoBuffer.from_bytes(b"\x00"), None) is False


def test_empty_string_is_only_a_count():
    data = encode(lambda io, e: primitives.write_string(io, e, ""))
    assert data == b"\x00\x00\x00\x00"
    assert primitives.read_string(IoBuffer.from_bytes(data), None) == ""


def test_utf16_count_is_in_code_units():
    data = encode(lambda io, e: primitives.write_string(io, e, "abc", primitives.UTF16))
    assert data[:4] == struct.pack('<I', 3)
    assert len(data) == 4 + 6


def test_absurd_string_length_is_rejected():
    io = IoBuffer.from_bytes(struct.pack('<I', 0xFFFFFFFF) + b"abc")
    with pytest.raises(FormatError, match="declares"):
        primitives.read_string(io, None)


def test_short_read_is_format_error():
    with pytest.raises(FormatError):
        primitives.read_uint32(IoBuffer.from_bytes(b"\x01\x02"), None)


# ============================================================================
# Schemas and structures
# ============================================================================

@dataclass
class FixedTriple:
    values: list = sequence(UINT32, 3)


@dataclass
class DynamicList:
    values: list = sequence(UINT32)


@dataclass
class Undeclared:
    name: str = ""


@dataclass
class Mixed:
    label: str = string()
    uid: bytes = byte_array(4)
    count: int = uint32()


def test_fixed_sequence_has_no_prefix():
    data = encode(lambda io, e: write_structure(FixedTriple([1, 2, 3]), io, e))
    assert data == struct.pack('<3I', 1, 2, 3)


def test_dynamic_sequence_has_count_prefix():
    data = encode(lambda io, e: write_structure(DynamicList([1, 2, 3]), io, e))
    assert data == struct.pack('<4I', 3, 1, 2, 3)

    back = read_structure(DynamicList, IoBuffer.from_bytes(data), None)
    assert back.values == [1, 2, 3]


def test_fixed_sequence_length_checked_on_write():
    with pytest.raises(FormatError):
        encode(lambda io, e: write_structure(FixedTriple([1, 2]), io, e))


def test_byte_array_length_checked_on_write():
    with pytest.raises(FormatError):
        encode(lambda io, e: write_structure(Mixed(uid=b"\x00"), io, e))


def test_fixed_sequence_default_has_count_elements():
    assert FixedTriple().values == [0, 0, 0]
    assert DynamicList().values == []


def test_structure_round_trip_with_cipher():
    record = Mixed(label="x" * 20, uid=b"\x00\xff\x10\x20", count=99)
    data = encode(lambda io, e: write_structure(record, io, e), Encrypter(SEED))
    back = read_structure(Mixed, IoBuffer.from_bytes(data), Encrypter(SEED))
    assert back == record


def test_undeclared_field_is_schema_error():
    with pytest.raises(SchemaError):
        encode(lambda io, e: write_structure(Undeclared(), io, e))


def test_non_record_type_is_schema_error():
    with pytest.raises(SchemaError):
        schema_of(int)


def test_inherited_fields_come_first():
    names = [spec.name for spec in schema_of(InventoryItem)]
    assert names[0] == "base_name"
    assert names[-3:] == ["stack_count", "x", "y"]


def test_custom_codec_takes_precedence():
    @dataclass
    class Tagged:
        value: int = uint32()

    @register_codec(Tagged)
    class TaggedCodec:
        @staticmethod
        def read(io, enc):
            return Tagged(io.read_byte())

        @staticmethod
        def write(io, enc, record):
            io.write_byte(record.value)

    try:
        data = encode(lambda io, e: write_structure(Tagged(5), io, e))
        assert data == b"\x05"
        assert read_structure(Tagged, IoBuffer.from_bytes(data), None) == Tagged(5)
    finally:
        del CUSTOM_CODECS[Tagged]


# ============================================================================
# Hot slots
# ============================================================================

@pytest.mark.parametrize("slot", [
    HotSlot(HOT_SLOT_SKILL, SkillSlot("records/skills/a.dbr", True, "records/items/b.dbr", 3)),
    HotSlot(HOT_SLOT_ITEM, ItemSlot("records/items/potion.dbr", "up.tex", "down.tex", "Heal")),
    HotSlot(7, None),
])
def test_hot_slot_round_trip(slot):
    data = encode(lambda io, e: write_structure(slot, io, e), Encrypter(SEED))
    io = IoBuffer.from_bytes(data)
    assert read_structure(HotSlot, io, Encrypter(SEED)) == slot
    assert not io.has_more


def test_unknown_hot_slot_is_only_the_tag():
    data = encode(lambda io, e: write_structure(HotSlot(7, None), io, e))
    assert data == struct.pack('<I', 7)


def test_hot_slot_payload_must_match_tag():
    with pytest.raises(FormatError):
        encode(lambda io, e: write_structure(HotSlot(HOT_SLOT_ITEM, SkillSlot()), io, e))
    with pytest.raises(FormatError):
        encode(lambda io, e: write_structure(HotSlot(9, SkillSlot()), io, e))


@pytest.mark.parametrize("value", [-1, 2**32, 2**32 + 5])
def test_uint32_out_of_range_is_rejected(value):
    with pytest.raises(FormatError, match="out of range"):
        encode(lambda io, e: primitives.write_uint32(io, e, value), Encrypter(SEED))


@pytest.mark.parametrize("value", [-1, 256])
def test_byte_out_of_range_is_rejected(value):
    with pytest.raises(FormatError, match="out of range"):
        encode(lambda io, e: primitives.write_byte(io, e, value), Encrypter(SEED))


def test_range_limits_are_accepted():
    def write(io, enc):
        primitives.write_uint32(io, enc, 0xFFFFFFFF)
        primitives.write_byte(io, enc, 0xFF)

    data = encode(write, Encrypter(SEED))
    io = IoBuffer.from_bytes(data)
    reader = Encrypter(SEED)
    assert primitives.read_uint32(io, reader) == 0xFFFFFFFF
    assert primitives.read_byte(io, reader) == 0xFF
