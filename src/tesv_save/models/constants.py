"""Save container constants and the integer code tables used while decoding.

Each table maps an on-disk code to an enum member. Values not present in a
table are handled by the decoder that reads them (usually an UNRECOGNIZED
member plus a warning, see the individual parsers).
"""

from enum import IntEnum


MAGIC = b"TESV_SAVEGAME"

# Substituted for length-prefixed strings whose bytes are not valid UTF-8.
STRING_DECODE_ERROR = "Error while parsing string!"

# The file location table is followed by 15 unused uint32 slots.
LOCATION_TABLE_RESERVED_SIZE = 4 * 15


class CompressionType(IntEnum):
    """Body compression codes stored in the header."""
    NONE = 0
    ZLIB = 1   # legacy, not supported
    LZ4 = 2    # LZ4 block format


class RefIdKind(IntEnum):
    """Origin of a packed reference, taken from bits 6-7 of its first byte."""
    TABLE_INDEX = 0       # index into the save's form-id array
    AUTHORITATIVE = 64    # defined by the master file
    RUNTIME_CREATED = 128 # created in-game (0xFF plugin index)
    UNRECOGNIZED = 192


class LengthWidth(IntEnum):
    """Change-form length field width selector (bits 6-7 of the type byte)."""
    U8 = 0
    U16 = 64
    U32 = 128


LENGTH_WIDTH_BYTES: dict[int, int] = {
    LengthWidth.U8: 1,
    LengthWidth.U16: 2,
    LengthWidth.U32: 4,
}


class GlobalDataType(IntEnum):
    """Type tags of global data table records."""
    # Table 1
    MISC_STATS = 0
    PLAYER_LOCATION = 1
    TES = 2
    GLOBAL_VARIABLES = 3
    CREATED_OBJECTS = 4
    EFFECTS = 5
    WEATHER = 6
    AUDIO = 7
    SKY_CELLS = 8

    # Table 2
    PROCESS_LISTS = 100
    COMBAT = 101
    INTERFACE = 102
    ACTOR_CAUSES = 103
    UNKNOWN_104 = 104
    DETECTION_MANAGER = 105
    LOCATION_META_DATA = 106
    QUEST_STATIC_DATA = 107
    STORY_TELLER = 108
    MAGIC_FAVORITES = 109
    PLAYER_CONTROLS = 110
    STORY_EVENT_MANAGER = 111
    INGREDIENT_SHARED = 112
    MENU_CONTROLS = 113
    MENU_TOPIC_MANAGER = 114

    # Table 3
    TEMP_EFFECTS = 1000
    PAPYRUS = 1001
    ANIM_OBJECTS = 1002
    TIMER = 1003
    SYNCHRONIZED_ANIMATIONS = 1004
    MAIN = 1005


class MiscStatCategory(IntEnum):
    GENERAL = 0
    QUEST = 1
    COMBAT = 2
    MAGIC = 3
    CRAFTING = 4
    CRIME = 5
    DLC_STATS = 6   # Dawnguard / Dragonborn counters
    UNRECOGNIZED = -1


class CrimeType(IntEnum):
    THEFT = 0
    PICKPOCKETING = 1
    TRESPASSING = 2
    ASSAULT = 3
    MURDER = 4
    UNKNOWN_5 = 5
    LYCANTHROPY = 6
    UNRECOGNIZED = -1


class QuestRunDataType(IntEnum):
    """Value kinds inside a quest run-data item."""
    REF_ID_1 = 1
    REF_ID_2 = 2
    VALUE = 3
    REF_ID_4 = 4
    UNRECOGNIZED = -1


class ByteFlag(IntEnum):
    """A boolean stored as a single byte.

    Anything other than 0 or 1 is kept as UNRECOGNIZED instead of being
    coerced to True.
    """
    FALSE = 0
    TRUE = 1
    UNRECOGNIZED = -1

    def __bool__(self) -> bool:
        return self is ByteFlag.TRUE
