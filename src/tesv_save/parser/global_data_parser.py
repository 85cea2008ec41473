"""Parse global data tables.

A global data table is a run of records, each laid out as:
  uint32 type, uint32 length, `length` bytes of payload

Every payload is decoded through a reader sliced to exactly `length` bytes,
so a decoder that misreads its own record cannot shift the next one. The
type tag picks the decoder from `_DECODERS`; unknown tags decode to an
EmptyRecord and leave a warning, since new game versions add types.
"""

from collections.abc import Callable

from tesv_save.models.constants import (
    ByteFlag,
    CrimeType,
    GlobalDataType,
    MiscStatCategory,
    QuestRunDataType,
)
from tesv_save.models.global_data import (
    TES,
    ActorCause,
    ActorCauses,
    AnimObject,
    AnimObjects,
    Audio,
    CreatedEnchantment,
    CreatedMagicEffect,
    CreatedObjects,
    Crime,
    DetectionEntry,
    DetectionManager,
    Effects,
    EmptyRecord,
    EnchantmentInfo,
    GlobalDataEntry,
    GlobalDataRecord,
    GlobalVariable,
    GlobalVariables,
    ImageSpaceModifier,
    IngredientPair,
    IngredientShared,
    Interface,
    LocationMetaData,
    LocationMetaDataEntry,
    MagicFavorites,
    MenuControls,
    MenuTopicManager,
    MiscStat,
    MiscStats,
    OpaqueRecord,
    PlayerControls,
    PlayerLocation,
    ProcessLists,
    QuestRunDataItem,
    QuestRunDataValue,
    QuestStaticData,
    QuestStaticEntry,
    QuestStaticPair,
    SkyCell,
    SkyCells,
    StoryEventManager,
    StoryTeller,
    TESUnknown0,
    Timer,
    Weather,
)
from tesv_save.parser.binary_reader import (
    BinaryReader,
    read_array,
    read_ref_ids,
    read_uint32s,
)


RecordDecoder = Callable[[BinaryReader], GlobalDataRecord]


def _read_byte_flag(reader: BinaryReader, what: str) -> ByteFlag:
    raw = reader.uint8()
    if raw in (0, 1):
        return ByteFlag(raw)
    reader.warn("unrecognized_byte_flag", f"{what} has non-boolean value {raw}")
    return ByteFlag.UNRECOGNIZED


def _optional_trailing(reader: BinaryReader) -> bytes | None:
    """Bytes left in the record, or None if the optional field is absent."""
    if reader.remaining == 0:
        return None
    return reader.rest()


# --- 0: Misc Stats ---

def _read_misc_stat(reader: BinaryReader) -> MiscStat:
    name = reader.wstring()
    raw_category = reader.uint8()
    try:
        category = MiscStatCategory(raw_category)
    except ValueError:
        reader.warn(
            "unrecognized_misc_stat_category",
            f"Misc stat {name!r} has unknown category {raw_category}",
        )
        category = MiscStatCategory.UNRECOGNIZED
    return MiscStat(name=name, category=category, value=reader.uint32())


def parse_misc_stats(reader: BinaryReader) -> MiscStats:
    count = reader.uint32()
    return MiscStats(stats=read_array(reader, count, _read_misc_stat))


# --- 1: Player Location ---

def parse_player_location(reader: BinaryReader) -> PlayerLocation:
    return PlayerLocation(
        next_object_id=reader.uint32(),
        world_space_1=reader.ref_id(),
        coor_x=reader.int32(),
        coor_y=reader.int32(),
        world_space_2=reader.ref_id(),
        pos_x=reader.float32(),
        pos_y=reader.float32(),
        pos_z=reader.float32(),
        unknown=_optional_trailing(reader),
    )


# --- 2: TES ---

def parse_tes(reader: BinaryReader) -> TES:
    u1 = read_array(
        reader,
        reader.vsval_count(),
        lambda r: TESUnknown0(form_id=r.ref_id(), unknown=r.uint16()),
    )
    # Stored count is the number of ref id pairs.
    u2 = read_ref_ids(reader, reader.uint32() * 2)
    u3 = read_ref_ids(reader, reader.vsval_count())
    return TES(u1=u1, u2=u2, u3=u3)


# --- 3: Global Variables ---

def parse_global_variables(reader: BinaryReader) -> GlobalVariables:
    variables = read_array(
        reader,
        reader.vsval_count(),
        lambda r: GlobalVariable(form_id=r.ref_id(), value=r.float32()),
    )
    return GlobalVariables(variables=variables)


# --- 4: Created Objects ---

def _read_created_magic_effect(reader: BinaryReader) -> CreatedMagicEffect:
    return CreatedMagicEffect(
        effect_id=reader.ref_id(),
        info=EnchantmentInfo(
            magnitude=reader.float32(),
            duration=reader.uint32(),
            area=reader.uint32(),
        ),
        price=reader.float32(),
    )


def _read_created_enchantment(reader: BinaryReader) -> CreatedEnchantment:
    ref_id = reader.ref_id()
    times_used = reader.uint32()
    effects = read_array(reader, reader.vsval_count(), _read_created_magic_effect)
    return CreatedEnchantment(ref_id=ref_id, times_used=times_used, effects=effects)


def _read_enchantment_table(reader: BinaryReader) -> tuple[CreatedEnchantment, ...]:
    return read_array(reader, reader.vsval_count(), _read_created_enchantment)


def parse_created_objects(reader: BinaryReader) -> CreatedObjects:
    return CreatedObjects(
        weapon_ench_table=_read_enchantment_table(reader),
        armour_ench_table=_read_enchantment_table(reader),
        potion_table=_read_enchantment_table(reader),
        poison_table=_read_enchantment_table(reader),
    )


# --- 5: Effects ---

def parse_effects(reader: BinaryReader) -> Effects:
    modifiers = read_array(
        reader,
        reader.vsval_count(),
        lambda r: ImageSpaceModifier(
            strength=r.float32(),
            timestamp=r.float32(),
            unknown=r.uint32(),
            effect_id=r.ref_id(),
        ),
    )
    return Effects(
        image_space_modifiers=modifiers,
        unknown1=reader.float32(),
        unknown2=reader.float32(),
    )


# --- 6: Weather ---

def parse_weather(reader: BinaryReader) -> Weather:
    return Weather(
        climate=reader.ref_id(),
        weather=reader.ref_id(),
        prev_weather=reader.ref_id(),
        unk_weather_1=reader.ref_id(),
        unk_weather_2=reader.ref_id(),
        regn_weather=reader.ref_id(),
        cur_time=reader.float32(),
        beg_time=reader.float32(),
        weather_pct=reader.float32(),
        u1=reader.uint32(),
        u2=reader.uint32(),
        u3=reader.uint32(),
        u4=reader.uint32(),
        u5=reader.uint32(),
        u6=reader.uint32(),
        u7=reader.float32(),
        u8=reader.uint32(),
        flags=reader.uint8(),
        trailing=_optional_trailing(reader),
    )


# --- 7, 8: Audio, Sky Cells ---

def parse_audio(reader: BinaryReader) -> Audio:
    unknown = reader.ref_id()
    tracks = read_ref_ids(reader, reader.vsval_count())
    return Audio(unknown=unknown, tracks=tracks, bgm=reader.ref_id())


def parse_sky_cells(reader: BinaryReader) -> SkyCells:
    cells = read_array(
        reader,
        reader.vsval_count(),
        lambda r: SkyCell(u1=r.ref_id(), u2=r.ref_id()),
    )
    return SkyCells(cells=cells)


# --- 100: Process Lists ---

def _read_crime_type(reader: BinaryReader) -> CrimeType:
    raw = reader.uint32()
    try:
        return CrimeType(raw)
    except ValueError:
        reader.warn("unrecognized_crime_type", f"Unknown crime type {raw}")
        return CrimeType.UNRECOGNIZED


def _read_crime(reader: BinaryReader) -> Crime:
    witness_num = reader.uint32()
    crime_type = _read_crime_type(reader)
    u1 = reader.uint8()
    quantity = reader.uint32()
    serial_num = reader.uint32()
    u2 = reader.uint8()
    u3 = reader.uint32()
    elapsed_time = reader.float32()
    victim_id = reader.ref_id()
    criminal_id = reader.ref_id()
    item_base_id = reader.ref_id()
    ownership_id = reader.ref_id()
    witnesses = read_ref_ids(reader, reader.vsval_count())
    bounty = reader.uint32()
    crime_faction_id = reader.ref_id()
    is_cleared = _read_byte_flag(reader, "Crime isCleared")
    return Crime(
        witness_num=witness_num,
        crime_type=crime_type,
        u1=u1,
        quantity=quantity,
        serial_num=serial_num,
        u2=u2,
        u3=u3,
        elapsed_time=elapsed_time,
        victim_id=victim_id,
        criminal_id=criminal_id,
        item_base_id=item_base_id,
        ownership_id=ownership_id,
        witnesses=witnesses,
        bounty=bounty,
        crime_faction_id=crime_faction_id,
        is_cleared=is_cleared,
        u4=reader.uint16(),
    )


def parse_process_lists(reader: BinaryReader) -> ProcessLists:
    u1 = reader.float32()
    u2 = reader.float32()
    u3 = reader.float32()
    next_num = reader.uint32()
    crimes = read_array(reader, reader.vsval_count(), _read_crime)
    return ProcessLists(u1=u1, u2=u2, u3=u3, next_num=next_num, all_crimes=crimes)


# --- 102: Interface ---

def parse_interface(reader: BinaryReader) -> Interface:
    shown_help_msg = read_uint32s(reader, reader.uint32())
    u0 = reader.uint8()
    weapons = read_ref_ids(reader, reader.vsval_count())
    spells = read_ref_ids(reader, reader.vsval_count())
    shouts = read_ref_ids(reader, reader.vsval_count())
    return Interface(
        shown_help_msg=shown_help_msg,
        u0=u0,
        last_used_weapons=weapons,
        last_used_spells=spells,
        last_used_shouts=shouts,
        u1=reader.uint8(),
        trailing=_optional_trailing(reader),
    )


# --- 103, 105, 106 ---

def parse_actor_causes(reader: BinaryReader) -> ActorCauses:
    next_num = reader.uint32()
    causes = read_array(
        reader,
        reader.vsval_count(),
        lambda r: ActorCause(
            x=r.float32(),
            y=r.float32(),
            z=r.float32(),
            serial_num=r.uint32(),
            actor_id=r.ref_id(),
        ),
    )
    return ActorCauses(next_num=next_num, causes=causes)


def parse_detection_manager(reader: BinaryReader) -> DetectionManager:
    entries = read_array(
        reader,
        reader.vsval_count(),
        lambda r: DetectionEntry(u0=r.ref_id(), u1=r.uint32(), u2=r.uint32()),
    )
    return DetectionManager(entries=entries)


def parse_location_meta_data(reader: BinaryReader) -> LocationMetaData:
    entries = read_array(
        reader,
        reader.vsval_count(),
        lambda r: LocationMetaDataEntry(u0=r.ref_id(), u1=r.uint32()),
    )
    return LocationMetaData(entries=entries)


# --- 107: Quest Static Data ---

def _read_quest_run_data_value(reader: BinaryReader) -> QuestRunDataValue:
    raw_type = reader.uint32()
    if raw_type == QuestRunDataType.VALUE:
        return QuestRunDataValue(
            data_type=QuestRunDataType.VALUE, raw_type=raw_type, value=reader.uint32()
        )
    if raw_type in (QuestRunDataType.REF_ID_1, QuestRunDataType.REF_ID_2,
                    QuestRunDataType.REF_ID_4):
        return QuestRunDataValue(
            data_type=QuestRunDataType(raw_type), raw_type=raw_type, ref_id=reader.ref_id()
        )
    # Unknown kinds are read as a ref id to stay aligned.
    reader.warn(
        "unknown_quest_run_data_type",
        f"Unknown quest run data type {raw_type}; reading as ref id",
    )
    return QuestRunDataValue(
        data_type=QuestRunDataType.UNRECOGNIZED, raw_type=raw_type, ref_id=reader.ref_id()
    )


def _read_quest_run_data_item(reader: BinaryReader) -> QuestRunDataItem:
    u1 = reader.uint32()
    u2 = reader.float32()
    data = read_array(reader, reader.uint32(), _read_quest_run_data_value)
    return QuestRunDataItem(u1=u1, u2=u2, data=data)


def _read_quest_static_entry(reader: BinaryReader) -> QuestStaticEntry:
    ref_id = reader.ref_id()
    pairs = read_array(
        reader,
        reader.vsval_count(),
        lambda r: QuestStaticPair(unk_1_0=r.uint32(), unk_1_1=r.uint32()),
    )
    return QuestStaticEntry(unk0_0=ref_id, u1=pairs)


def parse_quest_static_data(reader: BinaryReader) -> QuestStaticData:
    u0 = read_array(reader, reader.uint32(), _read_quest_run_data_item)
    u1 = read_array(reader, reader.uint32(), _read_quest_run_data_item)
    u2 = read_ref_ids(reader, reader.uint32())
    u3 = read_ref_ids(reader, reader.uint32())
    u4 = read_ref_ids(reader, reader.uint32())
    u5 = read_array(reader, reader.vsval_count(), _read_quest_static_entry)
    return QuestStaticData(u0=u0, u1=u1, u2=u2, u3=u3, u4=u4, u5=u5, u6=reader.uint8())


# --- 108 - 114 ---

def parse_story_teller(reader: BinaryReader) -> StoryTeller:
    return StoryTeller(flag=_read_byte_flag(reader, "StoryTeller flag"))


def parse_magic_favorites(reader: BinaryReader) -> MagicFavorites:
    favorites = read_ref_ids(reader, reader.vsval_count())
    hot_keys = read_ref_ids(reader, reader.vsval_count())
    return MagicFavorites(favorited_magics=favorites, magic_hot_keys=hot_keys)


def parse_player_controls(reader: BinaryReader) -> PlayerControls:
    return PlayerControls(
        u1=reader.uint8(),
        u2=reader.uint8(),
        u3=reader.uint8(),
        u4=reader.uint16(),
        u5=reader.uint8(),
    )


def parse_story_event_manager(reader: BinaryReader) -> StoryEventManager:
    u0 = reader.uint32()
    count = reader.vsval_count()
    return StoryEventManager(u0=u0, count=count, data=reader.rest())


def parse_ingredient_shared(reader: BinaryReader) -> IngredientShared:
    pairs = read_array(
        reader,
        reader.uint32(),
        lambda r: IngredientPair(ingredient0=r.ref_id(), ingredient1=r.ref_id()),
    )
    return IngredientShared(pairs=pairs)


def parse_menu_controls(reader: BinaryReader) -> MenuControls:
    return MenuControls(u1=reader.uint8(), u2=reader.uint8())


def parse_menu_topic_manager(reader: BinaryReader) -> MenuTopicManager:
    return MenuTopicManager(u1=reader.ref_id(), u2=reader.ref_id())


# --- 1002, 1003 ---

def parse_anim_objects(reader: BinaryReader) -> AnimObjects:
    objects = read_array(
        reader,
        reader.uint32(),
        lambda r: AnimObject(achr=r.ref_id(), anim=r.ref_id(), u1=r.uint8()),
    )
    return AnimObjects(objects=objects)


def parse_timer(reader: BinaryReader) -> Timer:
    return Timer(u1=reader.uint8(), u2=reader.uint8())


# --- Opaque / empty ---

def parse_opaque(reader: BinaryReader) -> OpaqueRecord:
    return OpaqueRecord(data=reader.rest())


def parse_empty(reader: BinaryReader) -> EmptyRecord:
    # Type 1005 is never read by the game; its content is ignored.
    return EmptyRecord()


_DECODERS: dict[int, RecordDecoder] = {
    GlobalDataType.MISC_STATS: parse_misc_stats,
    GlobalDataType.PLAYER_LOCATION: parse_player_location,
    GlobalDataType.TES: parse_tes,
    GlobalDataType.GLOBAL_VARIABLES: parse_global_variables,
    GlobalDataType.CREATED_OBJECTS: parse_created_objects,
    GlobalDataType.EFFECTS: parse_effects,
    GlobalDataType.WEATHER: parse_weather,
    GlobalDataType.AUDIO: parse_audio,
    GlobalDataType.SKY_CELLS: parse_sky_cells,
    GlobalDataType.PROCESS_LISTS: parse_process_lists,
    GlobalDataType.COMBAT: parse_opaque,
    GlobalDataType.INTERFACE: parse_interface,
    GlobalDataType.ACTOR_CAUSES: parse_actor_causes,
    GlobalDataType.UNKNOWN_104: parse_opaque,
    GlobalDataType.DETECTION_MANAGER: parse_detection_manager,
    GlobalDataType.LOCATION_META_DATA: parse_location_meta_data,
    GlobalDataType.QUEST_STATIC_DATA: parse_quest_static_data,
    GlobalDataType.STORY_TELLER: parse_story_teller,
    GlobalDataType.MAGIC_FAVORITES: parse_magic_favorites,
    GlobalDataType.PLAYER_CONTROLS: parse_player_controls,
    GlobalDataType.STORY_EVENT_MANAGER: parse_story_event_manager,
    GlobalDataType.INGREDIENT_SHARED: parse_ingredient_shared,
    GlobalDataType.MENU_CONTROLS: parse_menu_controls,
    GlobalDataType.MENU_TOPIC_MANAGER: parse_menu_topic_manager,
    GlobalDataType.TEMP_EFFECTS: parse_opaque,
    GlobalDataType.PAPYRUS: parse_opaque,
    GlobalDataType.ANIM_OBJECTS: parse_anim_objects,
    GlobalDataType.TIMER: parse_timer,
    GlobalDataType.SYNCHRONIZED_ANIMATIONS: parse_opaque,
    GlobalDataType.MAIN: parse_empty,
}

# Decoders that never leave bytes behind, or deliberately ignore them.
_NO_CONSUMPTION_CHECK = {parse_opaque, parse_empty}


def parse_global_data_record(
    data_type: int,
    reader: BinaryReader,
    *,
    warn_unconsumed: bool = True,
) -> GlobalDataRecord:
    """Decode one record payload. *reader* must be bounded to the payload."""
    decoder = _DECODERS.get(data_type)
    if decoder is None:
        reader.warn(
            "unknown_global_data_type",
            f"Unknown global data type {data_type} ({reader.remaining} bytes); "
            "decoded as empty record",
        )
        return EmptyRecord()

    record = decoder(reader)
    if warn_unconsumed and decoder not in _NO_CONSUMPTION_CHECK and reader.remaining:
        reader.warn(
            "unconsumed_record_bytes",
            f"{GlobalDataType(data_type).name} left {reader.remaining} bytes unread",
        )
    return record


def read_global_data_entry(reader: BinaryReader, *, warn_unconsumed: bool = True) -> GlobalDataEntry:
    """Read one type/length/payload entry at the current position."""
    raw_type = reader.uint32()
    length = reader.uint32()
    payload = reader.slice(length)
    record = parse_global_data_record(raw_type, payload, warn_unconsumed=warn_unconsumed)
    data_type = GlobalDataType(raw_type) if raw_type in _DECODERS else raw_type
    return GlobalDataEntry(type=data_type, length=length, record=record)


def read_global_data_table(
    reader: BinaryReader,
    count: int,
    *,
    warn_unconsumed: bool = True,
) -> tuple[GlobalDataEntry, ...]:
    """Read *count* global data entries starting at the current position."""
    return tuple(
        read_global_data_entry(reader, warn_unconsumed=warn_unconsumed) for _ in range(count)
    )
