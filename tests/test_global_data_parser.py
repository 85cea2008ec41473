"""Tests for global data record decoding, one synthetic payload per record type."""

import struct

import pytest

from save_builder import global_record, ref_id, vsval, wstring
from tesv_save.models.constants import (
    ByteFlag,
    CrimeType,
    GlobalDataType,
    MiscStatCategory,
    QuestRunDataType,
    RefIdKind,
)
from tesv_save.models.fundamentals import ResolvedRefId
from tesv_save.models.global_data import (
    TES,
    ActorCauses,
    AnimObjects,
    Audio,
    CreatedObjects,
    DetectionManager,
    Effects,
    EmptyRecord,
    GlobalVariables,
    IngredientShared,
    Interface,
    LocationMetaData,
    MagicFavorites,
    MenuControls,
    MenuTopicManager,
    MiscStats,
    OpaqueRecord,
    PlayerControls,
    PlayerLocation,
    ProcessLists,
    QuestStaticData,
    SkyCells,
    StoryEventManager,
    StoryTeller,
    Timer,
    Weather,
)
from tesv_save.parser.binary_reader import BinaryReader
from tesv_save.parser.errors import OutOfBoundsError
from tesv_save.parser.global_data_parser import (
    parse_global_data_record,
    read_global_data_entry,
    read_global_data_table,
)


def _auth(value: int) -> ResolvedRefId:
    """Resolved value of ref_id(0x40, b, _) == 0x40bbbb."""
    return ResolvedRefId(RefIdKind.AUTHORITATIVE, (0x40 << 16) | (value << 8) | value)


def _decode(data_type: int, payload: bytes):
    reader = BinaryReader(payload)
    record = parse_global_data_record(data_type, reader)
    return record, reader


# --- Dispatch ---

def test_entry_reads_type_length_and_payload():
    raw = global_record(GlobalDataType.TIMER, b"\x01\x02") + b"next"
    r = BinaryReader(raw)
    entry = read_global_data_entry(r)
    assert entry.type == GlobalDataType.TIMER
    assert entry.length == 2
    assert entry.record == Timer(u1=1, u2=2)
    assert r.rest() == b"next"


@pytest.mark.parametrize("length", [0, 1, 17, 300])
def test_main_record_is_always_empty(length):
    raw = global_record(GlobalDataType.MAIN, b"\xab" * length)
    r = BinaryReader(raw)
    entry = read_global_data_entry(r)
    assert entry.record == EmptyRecord()
    assert entry.length == length
    assert r.remaining == 0
    assert r.warnings == []


def test_unknown_type_decodes_to_empty_with_warning():
    raw = global_record(9999, b"\x01\x02\x03") + global_record(GlobalDataType.TIMER, b"\x05\x06")
    r = BinaryReader(raw)
    entries = read_global_data_table(r, 2)

    assert entries[0].type == 9999
    assert entries[0].record == EmptyRecord()
    assert entries[1].record == Timer(u1=5, u2=6)
    assert [w.code for w in r.warnings] == ["unknown_global_data_type"]


def test_payload_slice_bounds_the_decoder():
    # Timer needs 2 bytes but the record only declares 1.
    raw = global_record(GlobalDataType.TIMER, b"\x01") + b"\x02\x03\x04"
    with pytest.raises(OutOfBoundsError):
        read_global_data_entry(BinaryReader(raw))


def test_declared_length_past_end_is_out_of_bounds():
    raw = struct.pack("<II", GlobalDataType.COMBAT, 50) + b"\x00" * 10
    with pytest.raises(OutOfBoundsError):
        read_global_data_entry(BinaryReader(raw))


def test_leftover_bytes_are_reported():
    raw = global_record(GlobalDataType.MENU_CONTROLS, b"\x01\x02\x03")
    r = BinaryReader(raw)
    entry = read_global_data_entry(r)
    assert entry.record == MenuControls(u1=1, u2=2)
    assert [w.code for w in r.warnings] == ["unconsumed_record_bytes"]
    # The next record still starts right after the declared span.
    assert r.remaining == 0


def test_leftover_bytes_check_can_be_disabled():
    raw = global_record(GlobalDataType.MENU_CONTROLS, b"\x01\x02\x03")
    r = BinaryReader(raw)
    read_global_data_entry(r, warn_unconsumed=False)
    assert r.warnings == []


def test_opaque_records_keep_raw_bytes():
    for data_type in (
        GlobalDataType.COMBAT,
        GlobalDataType.UNKNOWN_104,
        GlobalDataType.TEMP_EFFECTS,
        GlobalDataType.PAPYRUS,
        GlobalDataType.SYNCHRONIZED_ANIMATIONS,
    ):
        record, reader = _decode(data_type, b"\xde\xad\xbe\xef")
        assert record == OpaqueRecord(data=b"\xde\xad\xbe\xef")
        assert reader.warnings == []


# --- Table 1 ---

def test_misc_stats():
    payload = (
        struct.pack("<I", 3)
        + wstring("Locations Discovered") + b"\x00" + struct.pack("<I", 42)
        + wstring("Dragon Souls Collected") + b"\x06" + struct.pack("<I", 7)
        + wstring("Mystery") + b"\x09" + struct.pack("<I", 1)
    )
    record, reader = _decode(GlobalDataType.MISC_STATS, payload)
    assert isinstance(record, MiscStats)
    assert [(s.name, s.category, s.value) for s in record.stats] == [
        ("Locations Discovered", MiscStatCategory.GENERAL, 42),
        ("Dragon Souls Collected", MiscStatCategory.DLC_STATS, 7),
        ("Mystery", MiscStatCategory.UNRECOGNIZED, 1),
    ]
    assert [w.code for w in reader.warnings] == ["unrecognized_misc_stat_category"]


def test_player_location_without_trailing_field():
    payload = (
        struct.pack("<I", 0xFF000123)
        + ref_id(0x40, 0x01)
        + struct.pack("<ii", -3, 7)
        + ref_id(0x40, 0x02)
        + struct.pack("<fff", 1.0, 2.0, 3.0)
    )
    record, reader = _decode(GlobalDataType.PLAYER_LOCATION, payload)
    assert isinstance(record, PlayerLocation)
    assert record.next_object_id == 0xFF000123
    assert record.world_space_1 == _auth(0x01)
    assert (record.coor_x, record.coor_y) == (-3, 7)
    assert record.world_space_2 == _auth(0x02)
    assert (record.pos_x, record.pos_y, record.pos_z) == (1.0, 2.0, 3.0)
    assert record.unknown is None
    assert reader.warnings == []


def test_player_location_keeps_trailing_field():
    payload = (
        struct.pack("<I", 1) + ref_id() + struct.pack("<ii", 0, 0) + ref_id()
        + struct.pack("<fff", 0, 0, 0) + b"\x04"
    )
    record, _ = _decode(GlobalDataType.PLAYER_LOCATION, payload)
    assert record.unknown == b"\x04"


def test_tes():
    payload = (
        vsval(2)
        + ref_id(0x40, 1) + struct.pack("<H", 10)
        + ref_id(0x40, 2) + struct.pack("<H", 20)
        + struct.pack("<I", 1) + ref_id(0x40, 3) + ref_id(0x40, 4)
        + vsval(1) + ref_id(0x80, 5)
    )
    record, reader = _decode(GlobalDataType.TES, payload)
    assert isinstance(record, TES)
    assert [(u.form_id, u.unknown) for u in record.u1] == [(_auth(1), 10), (_auth(2), 20)]
    # The uint32 count is a number of pairs.
    assert record.u2 == (_auth(3), _auth(4))
    assert record.u3 == (ResolvedRefId(RefIdKind.RUNTIME_CREATED, 0x800505),)
    assert reader.remaining == 0


def test_global_variables():
    payload = vsval(2) + ref_id(0x40, 1) + struct.pack("<f", 1.5) + ref_id(0x40, 2) + struct.pack("<f", -2.0)
    record, _ = _decode(GlobalDataType.GLOBAL_VARIABLES, payload)
    assert isinstance(record, GlobalVariables)
    assert [(v.form_id, v.value) for v in record.variables] == [(_auth(1), 1.5), (_auth(2), -2.0)]


def test_created_objects():
    effect = ref_id(0x40, 9) + struct.pack("<fIIf", 25.0, 60, 0, 120.0)
    enchantment = ref_id(0x80, 1) + struct.pack("<I", 3) + vsval(2) + effect + effect
    payload = vsval(1) + enchantment + vsval(0) + vsval(0) + vsval(1) + enchantment
    record, reader = _decode(GlobalDataType.CREATED_OBJECTS, payload)

    assert isinstance(record, CreatedObjects)
    assert len(record.weapon_ench_table) == 1
    assert record.armour_ench_table == ()
    assert record.potion_table == ()
    assert len(record.poison_table) == 1
    ench = record.weapon_ench_table[0]
    assert ench.ref_id.kind == RefIdKind.RUNTIME_CREATED
    assert ench.times_used == 3
    assert len(ench.effects) == 2
    assert ench.effects[0].effect_id == _auth(9)
    assert ench.effects[0].info.magnitude == 25.0
    assert ench.effects[0].info.duration == 60
    assert ench.effects[0].price == 120.0
    assert reader.remaining == 0


def test_effects():
    payload = (
        vsval(1) + struct.pack("<ffI", 0.5, 2.0, 1) + ref_id(0x40, 7)
        + struct.pack("<ff", 3.0, 4.0)
    )
    record, _ = _decode(GlobalDataType.EFFECTS, payload)
    assert isinstance(record, Effects)
    mod = record.image_space_modifiers[0]
    assert (mod.strength, mod.timestamp, mod.unknown, mod.effect_id) == (0.5, 2.0, 1, _auth(7))
    assert (record.unknown1, record.unknown2) == (3.0, 4.0)


def _weather_payload(flags: int, trailing: bytes = b"") -> bytes:
    return (
        b"".join(ref_id(0x40, i) for i in range(1, 7))
        + struct.pack("<fff", 13.5, 12.0, 0.25)
        + struct.pack("<6I", 1, 2, 3, 4, 5, 6)
        + struct.pack("<fI", 7.0, 8)
        + bytes([flags])
        + trailing
    )


def test_weather():
    record, reader = _decode(GlobalDataType.WEATHER, _weather_payload(0))
    assert isinstance(record, Weather)
    assert record.climate == _auth(1)
    assert record.regn_weather == _auth(6)
    assert record.cur_time == 13.5
    assert record.weather_pct == 0.25
    assert (record.u1, record.u6, record.u7, record.u8) == (1, 6, 7.0, 8)
    assert record.flags == 0
    assert record.trailing is None
    assert reader.warnings == []


def test_weather_flagged_trailing_data_kept_raw():
    record, _ = _decode(GlobalDataType.WEATHER, _weather_payload(0x01, b"\x11\x22"))
    assert record.flags == 0x01
    assert record.trailing == b"\x11\x22"


def test_audio_and_sky_cells():
    audio, _ = _decode(
        GlobalDataType.AUDIO,
        ref_id(0x40, 1) + vsval(2) + ref_id(0x40, 2) + ref_id(0x40, 3) + ref_id(0x40, 4),
    )
    assert audio == Audio(unknown=_auth(1), tracks=(_auth(2), _auth(3)), bgm=_auth(4))

    cells, _ = _decode(GlobalDataType.SKY_CELLS, vsval(1) + ref_id(0x40, 5) + ref_id(0x40, 6))
    assert isinstance(cells, SkyCells)
    assert [(c.u1, c.u2) for c in cells.cells] == [(_auth(5), _auth(6))]


# --- Table 2 ---

def _crime(crime_type: int = 0, is_cleared: int = 0) -> bytes:
    return (
        struct.pack("<II", 2, crime_type)
        + b"\x00"
        + struct.pack("<II", 7, 1)
        + b"\x00"
        + struct.pack("<If", 0x12, -5.0)
        + ref_id(0x40, 1) + ref_id(0x40, 2) + ref_id(0x40, 3) + ref_id(0x40, 4)
        + vsval(2) + ref_id(0x40, 5) + ref_id(0x40, 6)
        + struct.pack("<I", 40)
        + ref_id(0x40, 7)
        + bytes([is_cleared])
        + struct.pack("<H", 0)
    )


def test_process_lists():
    payload = struct.pack("<fffI", 1.0, 2.0, 3.0, 99) + vsval(2) + _crime(0) + _crime(4, 1)
    record, reader = _decode(GlobalDataType.PROCESS_LISTS, payload)
    assert isinstance(record, ProcessLists)
    assert record.next_num == 99
    assert len(record.all_crimes) == 2
    theft, murder = record.all_crimes
    assert theft.crime_type == CrimeType.THEFT
    assert theft.quantity == 7
    assert theft.victim_id == _auth(1)
    assert theft.witnesses == (_auth(5), _auth(6))
    assert theft.bounty == 40
    assert theft.is_cleared is ByteFlag.FALSE
    assert murder.crime_type == CrimeType.MURDER
    assert murder.is_cleared is ByteFlag.TRUE
    assert bool(murder.is_cleared)
    assert reader.warnings == []


def test_crime_unrecognized_values_become_explicit_variants():
    payload = struct.pack("<fffI", 0, 0, 0, 0) + vsval(1) + _crime(crime_type=12, is_cleared=5)
    record, reader = _decode(GlobalDataType.PROCESS_LISTS, payload)
    crime = record.all_crimes[0]
    assert crime.crime_type == CrimeType.UNRECOGNIZED
    assert crime.is_cleared is ByteFlag.UNRECOGNIZED
    assert not crime.is_cleared
    assert [w.code for w in reader.warnings] == ["unrecognized_crime_type", "unrecognized_byte_flag"]


def test_interface():
    payload = (
        struct.pack("<III", 2, 0xEC, 0xEE)
        + b"\x01"
        + vsval(1) + ref_id(0x40, 1)
        + vsval(0)
        + vsval(2) + ref_id(0x40, 2) + ref_id(0x40, 3)
        + b"\x02"
    )
    record, reader = _decode(GlobalDataType.INTERFACE, payload)
    assert isinstance(record, Interface)
    assert record.shown_help_msg == (0xEC, 0xEE)
    assert record.u0 == 1
    assert record.last_used_weapons == (_auth(1),)
    assert record.last_used_spells == ()
    assert record.last_used_shouts == (_auth(2), _auth(3))
    assert record.u1 == 2
    assert record.trailing is None
    assert reader.warnings == []


def test_actor_causes_detection_and_location_metadata():
    causes, _ = _decode(
        GlobalDataType.ACTOR_CAUSES,
        struct.pack("<I", 5) + vsval(1) + struct.pack("<fffI", 1.0, 2.0, 3.0, 4) + ref_id(0x40, 1),
    )
    assert isinstance(causes, ActorCauses)
    assert causes.next_num == 5
    assert causes.causes[0].serial_num == 4
    assert causes.causes[0].actor_id == _auth(1)

    detection, _ = _decode(
        GlobalDataType.DETECTION_MANAGER, vsval(1) + ref_id(0x40, 2) + struct.pack("<II", 8, 9)
    )
    assert isinstance(detection, DetectionManager)
    assert [(e.u0, e.u1, e.u2) for e in detection.entries] == [(_auth(2), 8, 9)]

    metadata, _ = _decode(
        GlobalDataType.LOCATION_META_DATA, vsval(1) + ref_id(0x40, 3) + struct.pack("<I", 10)
    )
    assert isinstance(metadata, LocationMetaData)
    assert [(e.u0, e.u1) for e in metadata.entries] == [(_auth(3), 10)]


def _run_data_item(values: bytes, count: int) -> bytes:
    return struct.pack("<IfI", 1, 0.5, count) + values


def test_quest_static_data():
    values = (
        struct.pack("<I", 3) + struct.pack("<I", 77)
        + struct.pack("<I", 1) + ref_id(0x40, 1)
        + struct.pack("<I", 4) + ref_id(0x40, 2)
    )
    payload = (
        struct.pack("<I", 1) + _run_data_item(values, 3)
        + struct.pack("<I", 0)
        + struct.pack("<I", 1) + ref_id(0x40, 3)
        + struct.pack("<I", 0)
        + struct.pack("<I", 2) + ref_id(0x40, 4) + ref_id(0x40, 5)
        + vsval(1) + ref_id(0x40, 6) + vsval(1) + struct.pack("<II", 11, 12)
        + b"\x01"
    )
    record, reader = _decode(GlobalDataType.QUEST_STATIC_DATA, payload)
    assert isinstance(record, QuestStaticData)
    item = record.u0[0]
    assert (item.u1, item.u2) == (1, 0.5)
    assert [v.data_type for v in item.data] == [
        QuestRunDataType.VALUE, QuestRunDataType.REF_ID_1, QuestRunDataType.REF_ID_4,
    ]
    assert item.data[0].value == 77
    assert item.data[1].ref_id == _auth(1)
    assert record.u1 == ()
    assert record.u2 == (_auth(3),)
    assert record.u3 == ()
    assert record.u4 == (_auth(4), _auth(5))
    assert record.u5[0].unk0_0 == _auth(6)
    assert [(p.unk_1_0, p.unk_1_1) for p in record.u5[0].u1] == [(11, 12)]
    assert record.u6 == 1
    assert reader.warnings == []


def test_quest_run_data_unknown_type_reads_ref_id_and_warns():
    values = struct.pack("<I", 9) + ref_id(0x40, 1)
    payload = (
        struct.pack("<I", 1) + _run_data_item(values, 1)
        + struct.pack("<IIII", 0, 0, 0, 0) + vsval(0) + b"\x00"
    )
    record, reader = _decode(GlobalDataType.QUEST_STATIC_DATA, payload)
    value = record.u0[0].data[0]
    assert value.data_type == QuestRunDataType.UNRECOGNIZED
    assert value.raw_type == 9
    assert value.ref_id == _auth(1)
    assert [w.code for w in reader.warnings] == ["unknown_quest_run_data_type"]
    assert reader.remaining == 0


def test_story_teller_flag():
    record, _ = _decode(GlobalDataType.STORY_TELLER, b"\x01")
    assert record == StoryTeller(flag=ByteFlag.TRUE)
    record, reader = _decode(GlobalDataType.STORY_TELLER, b"\x02")
    assert record == StoryTeller(flag=ByteFlag.UNRECOGNIZED)
    assert [w.code for w in reader.warnings] == ["unrecognized_byte_flag"]


def test_magic_favorites():
    payload = vsval(2) + ref_id(0x40, 1) + ref_id(0x40, 2) + vsval(1) + ref_id(0x40, 3)
    record, _ = _decode(GlobalDataType.MAGIC_FAVORITES, payload)
    assert record == MagicFavorites(
        favorited_magics=(_auth(1), _auth(2)), magic_hot_keys=(_auth(3),)
    )


def test_player_controls():
    record, _ = _decode(GlobalDataType.PLAYER_CONTROLS, b"\x01\x02\x03" + struct.pack("<H", 0x405) + b"\x04")
    assert record == PlayerControls(u1=1, u2=2, u3=3, u4=0x405, u5=4)


def test_story_event_manager_keeps_unknown_entries_raw():
    payload = struct.pack("<I", 3) + vsval(2) + b"\xaa\xbb\xcc"
    record, reader = _decode(GlobalDataType.STORY_EVENT_MANAGER, payload)
    assert record == StoryEventManager(u0=3, count=2, data=b"\xaa\xbb\xcc")
    assert reader.warnings == []


def test_ingredient_shared():
    payload = struct.pack("<I", 1) + ref_id(0x40, 1) + ref_id(0x40, 2)
    record, _ = _decode(GlobalDataType.INGREDIENT_SHARED, payload)
    assert isinstance(record, IngredientShared)
    assert [(p.ingredient0, p.ingredient1) for p in record.pairs] == [(_auth(1), _auth(2))]


def test_menu_topic_manager():
    record, _ = _decode(GlobalDataType.MENU_TOPIC_MANAGER, ref_id(0x40, 1) + ref_id(0x00, 0))
    assert record == MenuTopicManager(
        u1=_auth(1), u2=ResolvedRefId(RefIdKind.AUTHORITATIVE, 0)
    )


# --- Table 3 ---

def test_anim_objects():
    payload = struct.pack("<I", 2) + ref_id(0x40, 1) + ref_id(0x40, 2) + b"\x01" + ref_id(0x40, 3) + ref_id(0x40, 4) + b"\x00"
    record, reader = _decode(GlobalDataType.ANIM_OBJECTS, payload)
    assert isinstance(record, AnimObjects)
    assert [(o.achr, o.anim, o.u1) for o in record.objects] == [
        (_auth(1), _auth(2), 1),
        (_auth(3), _auth(4), 0),
    ]
    assert reader.remaining == 0


def test_invalid_vsval_count_reads_zero_elements():
    record, reader = _decode(GlobalDataType.SKY_CELLS, b"\x03")
    assert record == SkyCells(cells=())
    assert [w.code for w in reader.warnings] == ["invalid_vsval"]
