"""Global data table record models.

Each global data record is a type tag, a byte length, and a payload whose
shape depends on the tag. Every tag maps to one of the record classes
below; `GlobalDataEntry` pairs the decoded record with its tag and length.

Names like `u1`, `u2` follow the community format notes, where the purpose
of a field is still unknown.
"""

from dataclasses import dataclass

from tesv_save.models.constants import (
    ByteFlag,
    CrimeType,
    MiscStatCategory,
    QuestRunDataType,
)
from tesv_save.models.fundamentals import ResolvedRefId


# --- 0: Misc Stats ---

@dataclass(frozen=True, slots=True)
class MiscStat:
    name: str
    category: MiscStatCategory
    value: int


@dataclass(frozen=True, slots=True)
class MiscStats:
    stats: tuple[MiscStat, ...] = ()


# --- 1: Player Location ---

@dataclass(frozen=True, slots=True)
class PlayerLocation:
    next_object_id: int          # next save-specific (FFxxxxxx) object id
    world_space_1: ResolvedRefId # usually 0 or a worldspace; coor_x/y is a cell in it
    coor_x: int
    coor_y: int
    world_space_2: ResolvedRefId # worldspace or interior cell holding the player
    pos_x: float
    pos_y: float
    pos_z: float
    # Trailing field present only in some save versions; None when absent.
    unknown: bytes | None = None


# --- 2: TES ---

@dataclass(frozen=True, slots=True)
class TESUnknown0:
    form_id: ResolvedRefId
    unknown: int


@dataclass(frozen=True, slots=True)
class TES:
    u1: tuple[TESUnknown0, ...] = ()
    u2: tuple[ResolvedRefId, ...] = ()
    u3: tuple[ResolvedRefId, ...] = ()


# --- 3: Global Variables ---

@dataclass(frozen=True, slots=True)
class GlobalVariable:
    form_id: ResolvedRefId
    value: float


@dataclass(frozen=True, slots=True)
class GlobalVariables:
    variables: tuple[GlobalVariable, ...] = ()


# --- 4: Created Objects ---

@dataclass(frozen=True, slots=True)
class EnchantmentInfo:
    magnitude: float
    duration: int
    area: int


@dataclass(frozen=True, slots=True)
class CreatedMagicEffect:
    effect_id: ResolvedRefId
    info: EnchantmentInfo
    price: float    # amount added to the base item's price


@dataclass(frozen=True, slots=True)
class CreatedEnchantment:
    ref_id: ResolvedRefId
    times_used: int
    effects: tuple[CreatedMagicEffect, ...] = ()


@dataclass(frozen=True, slots=True)
class CreatedObjects:
    weapon_ench_table: tuple[CreatedEnchantment, ...] = ()
    armour_ench_table: tuple[CreatedEnchantment, ...] = ()
    potion_table: tuple[CreatedEnchantment, ...] = ()
    poison_table: tuple[CreatedEnchantment, ...] = ()


# --- 5: Effects ---

@dataclass(frozen=True, slots=True)
class ImageSpaceModifier:
    strength: float     # 0 = no effect, 1 = full effect
    timestamp: float    # time since the effect began
    unknown: int
    effect_id: ResolvedRefId


@dataclass(frozen=True, slots=True)
class Effects:
    image_space_modifiers: tuple[ImageSpaceModifier, ...]
    unknown1: float
    unknown2: float


# --- 6: Weather ---

@dataclass(frozen=True, slots=True)
class Weather:
    climate: ResolvedRefId
    weather: ResolvedRefId
    prev_weather: ResolvedRefId   # only set during a weather transition
    unk_weather_1: ResolvedRefId
    unk_weather_2: ResolvedRefId
    regn_weather: ResolvedRefId
    cur_time: float               # current in-game time in hours
    beg_time: float               # time the current weather began
    weather_pct: float            # 0.0-1.0 transition progress
    u1: int
    u2: int
    u3: int
    u4: int
    u5: int
    u6: int
    u7: float
    u8: int
    flags: int
    # Unresearched structures selected by `flags`; kept as raw bytes.
    trailing: bytes | None = None


# --- 7: Audio ---

@dataclass(frozen=True, slots=True)
class Audio:
    unknown: ResolvedRefId            # only UIActivateFail has been observed
    tracks: tuple[ResolvedRefId, ...]       # MUST records playing at save time
    bgm: ResolvedRefId


# --- 8: Sky Cells ---

@dataclass(frozen=True, slots=True)
class SkyCell:
    u1: ResolvedRefId
    u2: ResolvedRefId


@dataclass(frozen=True, slots=True)
class SkyCells:
    cells: tuple[SkyCell, ...] = ()


# --- 100: Process Lists ---

@dataclass(frozen=True, slots=True)
class Crime:
    witness_num: int
    crime_type: CrimeType
    u1: int
    quantity: int                 # stolen item count, thefts only
    serial_num: int
    u2: int
    u3: int
    elapsed_time: float           # negative, measured from the crime
    victim_id: ResolvedRefId
    criminal_id: ResolvedRefId
    item_base_id: ResolvedRefId   # thefts only
    ownership_id: ResolvedRefId   # thefts only
    witnesses: tuple[ResolvedRefId, ...]
    bounty: int
    crime_faction_id: ResolvedRefId
    is_cleared: ByteFlag
    u4: int


@dataclass(frozen=True, slots=True)
class ProcessLists:
    u1: float
    u2: float
    u3: float
    next_num: int
    all_crimes: tuple[Crime, ...] = ()


# --- 102: Interface ---

@dataclass(frozen=True, slots=True)
class Interface:
    shown_help_msg: tuple[int, ...]
    u0: int
    last_used_weapons: tuple[ResolvedRefId, ...]
    last_used_spells: tuple[ResolvedRefId, ...]
    last_used_shouts: tuple[ResolvedRefId, ...]
    u1: int
    # Only present in some saves; None when absent.
    trailing: bytes | None = None


# --- 103: Actor Causes ---

@dataclass(frozen=True, slots=True)
class ActorCause:
    x: float
    y: float
    z: float
    serial_num: int
    actor_id: ResolvedRefId


@dataclass(frozen=True, slots=True)
class ActorCauses:
    next_num: int
    causes: tuple[ActorCause, ...] = ()


# --- 105: Detection Manager ---

@dataclass(frozen=True, slots=True)
class DetectionEntry:
    u0: ResolvedRefId
    u1: int
    u2: int


@dataclass(frozen=True, slots=True)
class DetectionManager:
    entries: tuple[DetectionEntry, ...] = ()


# --- 106: Location Meta Data ---

@dataclass(frozen=True, slots=True)
class LocationMetaDataEntry:
    u0: ResolvedRefId
    u1: int


@dataclass(frozen=True, slots=True)
class LocationMetaData:
    entries: tuple[LocationMetaDataEntry, ...] = ()


# --- 107: Quest Static Data ---

@dataclass(frozen=True, slots=True)
class QuestRunDataValue:
    """One typed value of a quest run-data item.

    VALUE carries `value`; every other kind carries `ref_id`.
    """
    data_type: QuestRunDataType
    raw_type: int
    ref_id: ResolvedRefId | None = None
    value: int | None = None


@dataclass(frozen=True, slots=True)
class QuestRunDataItem:
    u1: int
    u2: float
    data: tuple[QuestRunDataValue, ...] = ()


@dataclass(frozen=True, slots=True)
class QuestStaticPair:
    unk_1_0: int
    unk_1_1: int


@dataclass(frozen=True, slots=True)
class QuestStaticEntry:
    unk0_0: ResolvedRefId
    u1: tuple[QuestStaticPair, ...] = ()


@dataclass(frozen=True, slots=True)
class QuestStaticData:
    u0: tuple[QuestRunDataItem, ...]
    u1: tuple[QuestRunDataItem, ...]
    u2: tuple[ResolvedRefId, ...]
    u3: tuple[ResolvedRefId, ...]
    u4: tuple[ResolvedRefId, ...]
    u5: tuple[QuestStaticEntry, ...]
    u6: int


# --- 108 - 114 ---

@dataclass(frozen=True, slots=True)
class StoryTeller:
    flag: ByteFlag


@dataclass(frozen=True, slots=True)
class MagicFavorites:
    favorited_magics: tuple[ResolvedRefId, ...]  # spells, shouts, abilities
    magic_hot_keys: tuple[ResolvedRefId, ...]    # hotkey = position in this sequence


@dataclass(frozen=True, slots=True)
class PlayerControls:
    u1: int
    u2: int
    u3: int
    u4: int
    u5: int


@dataclass(frozen=True, slots=True)
class StoryEventManager:
    u0: int
    count: int
    data: bytes    # `count` entries of unknown layout


@dataclass(frozen=True, slots=True)
class IngredientPair:
    ingredient0: ResolvedRefId
    ingredient1: ResolvedRefId


@dataclass(frozen=True, slots=True)
class IngredientShared:
    """Pairs of ingredients that failed to combine in alchemy."""
    pairs: tuple[IngredientPair, ...] = ()


@dataclass(frozen=True, slots=True)
class MenuControls:
    u1: int
    u2: int


@dataclass(frozen=True, slots=True)
class MenuTopicManager:
    u1: ResolvedRefId
    u2: ResolvedRefId


# --- 1002, 1003 ---

@dataclass(frozen=True, slots=True)
class AnimObject:
    achr: ResolvedRefId   # actor reference
    anim: ResolvedRefId   # animation form
    u1: int               # only 0 and 1 observed


@dataclass(frozen=True, slots=True)
class AnimObjects:
    objects: tuple[AnimObject, ...] = ()


@dataclass(frozen=True, slots=True)
class Timer:
    u1: int
    u2: int


# --- Opaque and empty records ---

@dataclass(frozen=True, slots=True)
class OpaqueRecord:
    """Payload of a record type whose layout is not decoded."""
    data: bytes

    def __repr__(self) -> str:
        return f"OpaqueRecord(size={len(self.data)})"


@dataclass(frozen=True, slots=True)
class EmptyRecord:
    """Terminal record (type 1005) and fallback for unknown type tags."""


GlobalDataRecord = (
    MiscStats | PlayerLocation | TES | GlobalVariables | CreatedObjects
    | Effects | Weather | Audio | SkyCells | ProcessLists | Interface
    | ActorCauses | DetectionManager | LocationMetaData | QuestStaticData
    | StoryTeller | MagicFavorites | PlayerControls | StoryEventManager
    | IngredientShared | MenuControls | MenuTopicManager | AnimObjects
    | Timer | OpaqueRecord | EmptyRecord
)


@dataclass(frozen=True, slots=True)
class GlobalDataEntry:
    """One global data table entry: its tag, declared length, and record."""
    type: int        # raw tag; a GlobalDataType member when known
    length: int
    record: GlobalDataRecord
