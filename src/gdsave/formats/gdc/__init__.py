"""Grim Dawn character save (GDC) format package."""
from .records import (
    Item, InventoryItem, StashItem, EquipmentItem, Sack, UidList, TokenList,
    Skill, ItemSkill, Faction, HotSlot, SkillSlot, ItemSlot,
    HOT_SLOT_SKILL, HOT_SLOT_ITEM, SACK_BLOCK_ID,
)
from .blocks import (
    Header, Block, BLOCK_TYPES, register_block, get_block_class,
    CharacterInfo, CharacterBio, Inventory, Stash, Respawns, Teleports,
    Markers, Shrines, Skills, LoreNotes, Factions, UISettings, Tutorials,
    PlayStats, TriggerTokens,
)
from .character import (
    CharacterDocument, BLOCK_ORDER, SEED_MASK, GDC_MAGIC,
    build_field_map, apply_field_map,
    read_character, write_character, parse_character, serialize_character,
    load_character, save_character,
)

__all__ = [
    # Records
    'Item', 'InventoryItem', 'StashItem', 'EquipmentItem', 'Sack', 'UidList',
    'TokenList', 'Skill', 'ItemSkill', 'Faction', 'HotSlot', 'SkillSlot',
    'ItemSlot', 'HOT_SLOT_SKILL', 'HOT_SLOT_ITEM', 'SACK_BLOCK_ID',
    # Blocks
    'Header', 'Block', 'BLOCK_TYPES', 'register_block', 'get_block_class',
    'CharacterInfo', 'CharacterBio', 'Inventory', 'Stash', 'Respawns',
    'Teleports', 'Markers', 'Shrines', 'Skills', 'LoreNotes', 'Factions',
    'UISettings', 'Tutorials', 'PlayStats', 'TriggerTokens',
    # Character file
    'CharacterDocument', 'BLOCK_ORDER', 'SEED_MASK', 'GDC_MAGIC',
    'build_field_map', 'apply_field_map',
    'read_character', 'write_character', 'parse_character', 'serialize_character',
    'load_character', 'save_character',
]
