"""
Nested records used inside character save blocks.

Items come in three variants sharing the same leading fields. The shared
fields live on ``Item`` and each variant adds its own trailing fields, so the
dataclass field order matches the on-disk order.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from ...errors import FormatError
from ..codec import (
    register_codec, read_framed, write_framed, read_fields, write_fields,
    read_structure, write_structure,
    ByteArray, String, boolean, uint32, float32, string, wstring, sequence,
)
from ..codec.primitives import read_uint32, write_uint32

# Nested block id of an inventory sack
SACK_BLOCK_ID = 0

UID_SIZE = 16


# ============================================================================
# Items
# ============================================================================

@dataclass
class Item:
    """Fields common to every item variant."""
    base_name: str = string()
    prefix_name: str = string()
    suffix_name: str = string()
    modifier_name: str = string()
    transmute_name: str = string()
    seed: int = uint32()
    relic_name: str = string()
    relic_bonus: str = string()
    relic_seed: int = uint32()
    augment_name: str = string()
    unknown: int = uint32()
    augment_seed: int = uint32()
    var1: int = uint32()
    stack_count: int = uint32(1)

    @property
    def is_empty(self) -> bool:
        return not self.base_name


@dataclass
class InventoryItem(Item):
    """Item in a bag, positioned on the sack grid."""
    x: int = uint32()
    y: int = uint32()


@dataclass
class StashItem(Item):
    """Item in the stash; the stash stores float coordinates."""
    x: float = float32()
    y: float = float32()


@dataclass
class EquipmentItem(Item):
    """Item in an equipment slot."""
    attached: bool = boolean()


AnyItem = Union[InventoryItem, StashItem, EquipmentItem]


# ============================================================================
# Inventory sack
# ============================================================================

@dataclass
class Sack:
    """Inventory bag. Stored as a nested block with id 0."""
    temp_bool: bool = boolean()
    items: list[InventoryItem] = sequence(InventoryItem)


@register_codec(Sack)
class SackCodec:
    @staticmethod
    def read(io, enc) -> Sack:
        return read_framed(io, enc, SACK_BLOCK_ID, lambda: read_fields(Sack, io, enc))

    @staticmethod
    def write(io, enc, sack: Sack):
        write_framed(io, enc, SACK_BLOCK_ID, lambda: write_fields(sack, io, enc))


# ============================================================================
# Small list records
# ============================================================================

@dataclass
class UidList:
    """Count-prefixed list of 16-byte world object ids."""
    uids: list[bytes] = sequence(ByteArray(UID_SIZE))


@dataclass
class TokenList:
    tokens: list[str] = sequence(String())


@dataclass
class Skill:
    skill_name: str = string()
    skill_level: int = uint32()
    enabled: bool = boolean()
    devotion_level: int = uint32()
    devotion_experience: int = uint32()
    sublevel: int = uint32()
    skill_active: bool = boolean()
    skill_transition: bool = boolean()
    auto_cast_skill: str = string()
    auto_cast_controller: str = string()


@dataclass
class ItemSkill:
    skill_name: str = string()
    auto_cast_skill: str = string()
    auto_cast_controller: str = string()
    item_slot: int = uint32()
    item_name: str = string()


@dataclass
class Faction:
    modified: bool = boolean()
    unlocked: bool = boolean()
    value: float = float32()
    positive_boost: float = float32()
    negative_boost: float = float32()


# ============================================================================
# Hot slots (tagged variant)
# ============================================================================

HOT_SLOT_SKILL = 0
HOT_SLOT_ITEM = 4


@dataclass
class SkillSlot:
    skill_name: str = string()
    is_item_skill: bool = boolean()
    item_name: str = string()
    equip_location: int = uint32()


@dataclass
class ItemSlot:
    item_name: str = string()
    bitmap_up: str = string()
    bitmap_down: str = string()
    label: str = wstring()


HOT_SLOT_VARIANTS: dict[int, type] = {
    HOT_SLOT_SKILL: SkillSlot,
    HOT_SLOT_ITEM: ItemSlot,
}


@dataclass
class HotSlot:
    """
    Quickbar slot. A UInt32 type tag selects the payload layout.

    Tags without a known layout carry no payload; only the tag is stored.
    """
    slot_type: int = HOT_SLOT_SKILL
    payload: Optional[Union[SkillSlot, ItemSlot]] = field(default_factory=SkillSlot)


@register_codec(HotSlot)
class HotSlotCodec:
    @staticmethod
    def read(io, enc) -> HotSlot:
        slot_type = read_uint32(io, enc)
        variant = HOT_SLOT_VARIANTS.get(slot_type)
        payload = read_structure(variant, io, enc) if variant is not None else None
        return HotSlot(slot_type=slot_type, payload=payload)

    @staticmethod
    def write(io, enc, slot: HotSlot):
        variant = HOT_SLOT_VARIANTS.get(slot.slot_type)
        if variant is None:
            if slot.payload is not None:
                raise FormatError(f"hot slot type {slot.slot_type} carries no payload")
        elif not isinstance(slot.payload, variant):
            raise FormatError(
                f"hot slot type {slot.slot_type} needs a {variant.__name__} payload, "
                f"got {type(slot.payload).__name__}"
            )
        write_uint32(io, enc, slot.slot_type)
        if slot.payload is not None:
            write_structure(slot.payload, io, enc)
