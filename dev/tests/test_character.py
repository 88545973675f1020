"""
Character save tests: whole-file round trips, field editing and rejection of
damaged files.
"""

import struct
from dataclasses import dataclass

import pytest

from gdsave.errors import FormatError, DuplicateFieldError
from gdsave.formats.codec import uint32, string
from gdsave.formats.gdc import (
    CharacterDocument, Block, BLOCK_ORDER, SEED_MASK, GDC_MAGIC,
    build_field_map, apply_field_map,
    parse_character, serialize_character, load_character, save_character,
)

from gdc_fixtures import SEED, make_document, header_size


@pytest.fixture
def document():
    return make_document()


@pytest.fixture
def encoded(document):
    return serialize_character(document)


# ============================================================================
# Round trips
# ============================================================================

def test_reencode_is_byte_identical(encoded):
    assert serialize_character(parse_character(encoded)) == encoded


def test_default_document_round_trip():
    data = serialize_character(CharacterDocument.create(seed=1))
    doc = parse_character(data)
    assert serialize_character(doc) == data
    assert [blk.BLOCK_ID for blk in doc.blocks] == list(BLOCK_ORDER)


def test_values_survive(document, encoded):
    doc = parse_character(encoded)
    assert doc.seed == SEED
    assert doc.header == document.header
    assert doc.unknown == bytes(range(16))
    assert doc.blocks == document.blocks
    assert doc.get("player_name") == "Ülrich"
    assert doc.get("money") == 123456
    assert doc.block(14).hot_slots[2].payload is None


def test_file_starts_with_masked_seed(encoded):
    assert struct.unpack_from('<I', encoded, 0)[0] == SEED ^ SEED_MASK
    assert struct.unpack_from('<I', encoded, 4)[0] == GDC_MAGIC ^ SEED


def test_empty_inventory_round_trip(document):
    inv = document.block(3)
    inv.has_items = False
    inv.sacks = []
    document.refresh_fields()

    data = serialize_character(document)
    doc = parse_character(data)
    assert doc.block(3).has_items is False
    assert doc.block(3).sacks == []
    assert serialize_character(doc) == data


def test_save_and_load_file(tmp_path, document):
    path = tmp_path / "player.gdc"
    save_character(document, path)

    doc = load_character(path)
    assert doc.blocks == document.blocks
    assert path.read_bytes() == serialize_character(doc)


# ============================================================================
# Flat field map
# ============================================================================

def test_field_map_covers_header_and_blocks(document):
    fields = document.fields
    assert "version" not in fields
    for name in ("player_name", "hardcore", "money", "physique", "sacks",
                 "hot_slots", "trigger_tokens", "randomized_items_found"):
        assert name in fields


def character_info_layout(doc):
    """Offsets of the money field and of block 1's checksum."""
    block_start = header_size(doc)
    # id, length, version, four single-byte fields
    money_at = block_start + 4 + 4 + 4 + 4
    payload_size = 4 + 4 + 4 + 1 + 4 + 1 + 4 + 3 + 4 + len(doc.get("texture"))
    checksum_at = block_start + 4 + 4 + payload_size
    return money_at, checksum_at


def test_same_size_edit_keeps_prefix(encoded):
    doc = parse_character(encoded)
    money_at, checksum_at = character_info_layout(doc)
    doc.set("money", 999)
    edited = serialize_character(doc)

    assert len(edited) == len(encoded)
    assert edited[:money_at] == encoded[:money_at]
    assert edited[money_at:money_at + 4] != encoded[money_at:money_at + 4]
    assert edited[checksum_at:checksum_at + 4] != encoded[checksum_at:checksum_at + 4]

    back = parse_character(edited)
    assert back.get("money") == 999
    assert back.blocks[1:] == doc.blocks[1:]


def test_string_edit_changes_length(encoded):
    doc = parse_character(encoded)
    doc.set("texture", doc.get("texture") + "12345")
    edited = serialize_character(doc)

    assert len(edited) == len(encoded) + 5
    assert parse_character(edited).get("texture") == "creatures/pc/hero02.tex12345"


def test_header_edit(encoded):
    doc = parse_character(encoded)
    doc.set("player_name", "Bob")
    doc.set("player_level", 50)
    back = parse_character(serialize_character(doc))
    assert back.header.player_name == "Bob"
    assert back.header.player_level == 50


def test_direct_record_edit_survives_save(encoded):
    doc = parse_character(encoded)
    doc.block(1).money = 5
    back = parse_character(serialize_character(doc))
    assert back.get("money") == 5
    assert doc.get("money") == 5


def test_flat_edit_wins_over_record_edit(encoded):
    doc = parse_character(encoded)
    doc.block(1).money = 5
    doc.set("money", 7)
    assert parse_character(serialize_character(doc)).get("money") == 7


def test_out_of_range_edit_is_rejected(encoded):
    doc = parse_character(encoded)
    doc.set("money", 2**32 + 5)
    with pytest.raises(FormatError, match="out of range"):
        serialize_character(doc)

    doc.set("money", 0)
    doc.set("difficulty", 256)
    with pytest.raises(FormatError, match="out of range"):
        serialize_character(doc)


def test_opaque_field_must_be_16_bytes(tmp_path, document):
    path = tmp_path / "player.gdc"
    save_character(document, path)
    original = path.read_bytes()

    document.unknown = b"\x01\x02"
    with pytest.raises(FormatError, match="16 bytes"):
        save_character(document, path)
    assert path.read_bytes() == original


def test_unknown_field_name(document):
    with pytest.raises(KeyError):
        document.get("no_such_field")
    with pytest.raises(KeyError):
        document.set("no_such_field", 1)


@dataclass
class LeftBlock(Block):
    shared: int = uint32()


@dataclass
class RightBlock(Block):
    shared: str = string()


def test_duplicate_field_names_are_rejected():
    with pytest.raises(DuplicateFieldError, match="shared"):
        build_field_map([LeftBlock(), RightBlock()])


def test_version_is_not_a_flat_field():
    fields = build_field_map([LeftBlock(version=3)])
    assert fields == {"shared": 0}


def test_apply_unknown_field():
    with pytest.raises(DuplicateFieldError):
        apply_field_map({"missing": 1}, [LeftBlock()])


def test_apply_writes_owner():
    record = LeftBlock()
    apply_field_map({"shared": 7}, [record])
    assert record.shared == 7


# ============================================================================
# Damaged files
# ============================================================================

def test_bad_magic(encoded):
    data = bytearray(encoded)
    data[4] ^= 0xFF
    with pytest.raises(FormatError, match="bad magic"):
        parse_character(bytes(data))


def test_unsupported_data_version(document):
    document.data_version = 8
    with pytest.raises(FormatError, match="unsupported data version"):
        parse_character(serialize_character(document))


def test_data_version_6_is_accepted(document):
    document.data_version = 6
    assert parse_character(serialize_character(document)).data_version == 6


def test_trailing_bytes(encoded):
    with pytest.raises(FormatError, match="trailing"):
        parse_character(encoded + b"\x00")


def test_truncated_file(encoded):
    with pytest.raises(FormatError):
        parse_character(encoded[:-1])


def test_flipped_payload_byte_fails_checksum(encoded):
    # The final payload bytes are the last trigger token "abc"
    data = bytearray(encoded)
    data[-5] ^= 0xFF
    with pytest.raises(FormatError, match="block 10 checksum mismatch"):
        parse_character(bytes(data))


def test_flipped_header_checksum(encoded):
    data = bytearray(encoded)
    checksum_at = header_size(make_document()) - 4 - 16 - 4
    data[checksum_at] ^= 0x01
    with pytest.raises(FormatError, match="header checksum mismatch"):
        parse_character(bytes(data))
