"""
Character save blocks.

Each block class is registered under its numeric block id. The first field
of every block is ``version``; all other top-level field names are unique
across blocks (and the header) so they can share one flat property map.
"""

from dataclasses import dataclass
from typing import ClassVar

from ..codec import (
    register_codec, schema_of, read_value, write_value, read_structure,
    write_structure, ByteArray, String, BYTE, UINT32,
    boolean, byte, uint32, float32, string, wstring, sequence,
)
from ..codec.primitives import read_uint32, write_uint32, read_bool, write_bool
from .records import (
    UID_SIZE, Sack, StashItem, EquipmentItem, UidList, TokenList, Skill,
    ItemSkill, Faction, HotSlot,
)

DIFFICULTIES = 3
EQUIPMENT_SLOTS = 12
WEAPON_SET_SLOTS = 2
HOT_SLOTS = 36


# Block type registry - maps block ids to block classes
BLOCK_TYPES: dict[int, type] = {}


def register_block(block_id: int):
    """Decorator to register a block class under its id."""
    def decorator(cls):
        cls.BLOCK_ID = block_id
        BLOCK_TYPES[block_id] = cls
        return cls
    return decorator


def get_block_class(block_id: int) -> type:
    """Block class for an id. Unknown ids are a format error upstream."""
    return BLOCK_TYPES[block_id]


@dataclass
class Header:
    """Character header, stored before the data version (not framed)."""
    player_name: str = wstring()
    player_sex: int = byte()
    player_class: str = string()
    player_level: int = uint32(1)
    hardcore: bool = boolean()


@dataclass
class Block:
    """Base class for framed blocks."""
    BLOCK_ID: ClassVar[int] = -1

    version: int = uint32()

    def __str__(self) -> str:
        return f"#{self.BLOCK_ID} {type(self).__name__} v{self.version}"


@register_block(1)
@dataclass
class CharacterInfo(Block):
    in_main_quest: bool = boolean()
    has_been_in_game: bool = boolean()
    difficulty: int = byte()
    greatest_difficulty: int = byte()
    money: int = uint32()
    greatest_survival_difficulty: int = byte()
    current_tribute: int = uint32()
    compass_state: int = byte()
    loot_mode: int = uint32()
    skill_window_show_help: bool = boolean()
    alternate_config: bool = boolean()
    alternate_config_enabled: bool = boolean()
    texture: str = string()


@register_block(2)
@dataclass
class CharacterBio(Block):
    level: int = uint32(1)
    experience: int = uint32()
    modifier_points: int = uint32()
    skill_points: int = uint32()
    devotion_points: int = uint32()
    total_devotion: int = uint32()
    physique: float = float32()
    cunning: float = float32()
    spirit: float = float32()
    health: float = float32()
    energy: float = float32()


@register_block(3)
@dataclass
class Inventory(Block):
    """
    Bags and equipment.

    On disk the sack count comes before the focused/selected sack indices
    rather than directly before the sacks, and everything after the
    ``has_items`` flag is omitted when the flag is clear.
    """
    has_items: bool = boolean()
    focused_sack: int = uint32()
    selected_sack: int = uint32()
    sacks: list[Sack] = sequence(Sack)
    use_alternate: bool = boolean()
    equipment: list[EquipmentItem] = sequence(EquipmentItem, EQUIPMENT_SLOTS)
    alternate1: bool = boolean()
    alternate1_items: list[EquipmentItem] = sequence(EquipmentItem, WEAPON_SET_SLOTS)
    alternate2: bool = boolean()
    alternate2_items: list[EquipmentItem] = sequence(EquipmentItem, WEAPON_SET_SLOTS)


# Fields after the sacks, read and written in declaration order
_INVENTORY_TAIL = (
    'use_alternate', 'equipment',
    'alternate1', 'alternate1_items',
    'alternate2', 'alternate2_items',
)


@register_codec(Inventory)
class InventoryCodec:
    @staticmethod
    def read(io, enc) -> Inventory:
        specs = {spec.name: spec.field_type for spec in schema_of(Inventory)}
        inv = Inventory(version=read_uint32(io, enc))
        inv.has_items = read_bool(io, enc)
        if not inv.has_items:
            return inv

        sack_count = read_uint32(io, enc)
        inv.focused_sack = read_uint32(io, enc)
        inv.selected_sack = read_uint32(io, enc)
        inv.sacks = [read_structure(Sack, io, enc) for _ in range(sack_count)]
        for name in _INVENTORY_TAIL:
            setattr(inv, name, read_value(specs[name], io, enc))
        return inv

    @staticmethod
    def write(io, enc, inv: Inventory):
        specs = {spec.name: spec.field_type for spec in schema_of(Inventory)}
        write_uint32(io, enc, inv.version)
        write_bool(io, enc, inv.has_items)
        if not inv.has_items:
            return

        write_uint32(io, enc, len(inv.sacks))
        write_uint32(io, enc, inv.focused_sack)
        write_uint32(io, enc, inv.selected_sack)
        for sack in inv.sacks:
            write_structure(sack, io, enc)
        for name in _INVENTORY_TAIL:
            write_value(specs[name], getattr(inv, name), io, enc)


@register_block(4)
@dataclass
class Stash(Block):
    stash_width: int = uint32()
    stash_height: int = uint32()
    stash_items: list[StashItem] = sequence(StashItem)


@register_block(5)
@dataclass
class Respawns(Block):
    respawn_uids: list[UidList] = sequence(UidList, DIFFICULTIES)
    respawn_points: list[bytes] = sequence(ByteArray(UID_SIZE), DIFFICULTIES)


@register_block(6)
@dataclass
class Teleports(Block):
    teleport_uids: list[UidList] = sequence(UidList, DIFFICULTIES)


@register_block(7)
@dataclass
class Markers(Block):
    marker_uids: list[UidList] = sequence(UidList, DIFFICULTIES)


@register_block(17)
@dataclass
class Shrines(Block):
    # Restored and discovered lists per difficulty
    shrine_uids: list[UidList] = sequence(UidList, DIFFICULTIES * 2)


@register_block(8)
@dataclass
class Skills(Block):
    skills: list[Skill] = sequence(Skill)
    masteries_allowed: int = uint32()
    skill_reclamation_points_used: int = uint32()
    devotion_reclamation_points_used: int = uint32()
    item_skills: list[ItemSkill] = sequence(ItemSkill)


@register_block(12)
@dataclass
class LoreNotes(Block):
    lore_notes: list[str] = sequence(String())


@register_block(13)
@dataclass
class Factions(Block):
    faction_current: int = uint32()
    factions: list[Faction] = sequence(Faction)


@register_block(14)
@dataclass
class UISettings(Block):
    ui_unknown1: int = byte()
    ui_unknown2: int = uint32()
    ui_unknown3: int = byte()
    ui_unknown4: list[str] = sequence(String(), 5)
    ui_unknown5: list[str] = sequence(String(), 5)
    ui_unknown6: list[int] = sequence(BYTE, 5)
    hot_slots: list[HotSlot] = sequence(HotSlot, HOT_SLOTS)
    camera_distance: float = float32()


@register_block(15)
@dataclass
class Tutorials(Block):
    tutorial_pages: list[int] = sequence(UINT32)


@register_block(16)
@dataclass
class PlayStats(Block):
    play_time: int = uint32()
    deaths: int = uint32()
    kills: int = uint32()
    experience_from_kills: int = uint32()
    health_potions_used: int = uint32()
    mana_potions_used: int = uint32()
    max_level: int = uint32()
    hits_received: int = uint32()
    hits_inflicted: int = uint32()
    crits_inflicted: int = uint32()
    crits_received: int = uint32()
    greatest_damage_inflicted: float = float32()
    greatest_monster_killed_name: list[str] = sequence(String(), DIFFICULTIES)
    greatest_monster_killed_level: list[int] = sequence(UINT32, DIFFICULTIES)
    greatest_monster_killed_life_and_mana: list[int] = sequence(UINT32, DIFFICULTIES)
    last_monster_hit: list[str] = sequence(String(), DIFFICULTIES)
    last_monster_hit_by: list[str] = sequence(String(), DIFFICULTIES)
    champion_kills: int = uint32()
    last_hit: float = float32()
    last_hit_by: float = float32()
    greatest_damage_received: float = float32()
    hero_kills: int = uint32()
    items_crafted: int = uint32()
    relics_crafted: int = uint32()
    transcendent_relics_crafted: int = uint32()
    mythical_relics_crafted: int = uint32()
    shrines_restored: int = uint32()
    one_shot_chests_opened: int = uint32()
    lore_notes_collected: int = uint32()
    boss_kills: list[int] = sequence(UINT32, DIFFICULTIES)
    survival_wave_tier: int = uint32()
    survival_greatest_wave: int = uint32()
    survival_greatest_score: int = uint32()
    survival_defenses_built: int = uint32()
    survival_power_ups_activated: int = uint32()
    unique_items_found: int = uint32()
    randomized_items_found: int = uint32()


@register_block(10)
@dataclass
class TriggerTokens(Block):
    trigger_tokens: list[TokenList] = sequence(TokenList, DIFFICULTIES)
