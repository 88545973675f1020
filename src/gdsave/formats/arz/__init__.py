"""ARZ game database package."""
from .arz import ArzDatabase, ArzRecord, ArzHeader, ArzRecordHeader, ArzValueType, read_string_table

__all__ = [
    'ArzDatabase', 'ArzRecord', 'ArzHeader', 'ArzRecordHeader', 'ArzValueType',
    'read_string_table',
]
