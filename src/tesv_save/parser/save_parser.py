"""Decode a complete save container.

Layout, in read order:
  magic "TESV_SAVEGAME", uint32 header size, header, RGBA screenshot,
  uint32 uncompressed length, uint32 compressed length, body

Body (after decompression):
  uint8 form version, uint32 plugin info size, plugins, light plugins,
  file location table, 60 reserved bytes, global data table 1,
  global data table 2, change forms, global data table 3,
  form id array, visited worldspace array, unknown table 3

Sections are read strictly in this order. The offsets stored in the file
location table are only compared against where each section actually
started, never used to seek.
"""

from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path

from tesv_save.models.constants import LOCATION_TABLE_RESERVED_SIZE, MAGIC
from tesv_save.models.fundamentals import DecodeWarning
from tesv_save.models.header import (
    FileLocationTable,
    Header,
    ScreenshotData,
    SectionOffsets,
)
from tesv_save.models.save_file import SaveFile
from tesv_save.parser.binary_reader import BinaryReader, read_uint32s, read_wstrings
from tesv_save.parser.change_form_parser import read_change_forms
from tesv_save.parser.compression import read_body
from tesv_save.parser.decode_config import DecodeConfig
from tesv_save.parser.errors import BadMagicError, SaveFormatError
from tesv_save.parser.global_data_parser import read_global_data_table


@contextmanager
def _stage(name: str, warnings: list[DecodeWarning]):
    """Tag warnings raised in the block, and any SaveFormatError escaping
    it, with the section name.
    """
    start = len(warnings)
    try:
        yield
    except SaveFormatError as exc:
        if exc.stage is None:
            exc.stage = name
        raise
    warnings[start:] = [
        w if w.stage is not None else replace(w, stage=name) for w in warnings[start:]
    ]


def read_header(reader: BinaryReader) -> Header:
    return Header(
        version=reader.uint32(),
        save_number=reader.uint32(),
        player_name=reader.wstring(),
        player_level=reader.uint32(),
        player_location=reader.wstring(),
        game_date=reader.wstring(),
        player_race_editor_id=reader.wstring(),
        player_sex=reader.uint16(),
        player_cur_exp=reader.float32(),
        player_lvl_up_exp=reader.float32(),
        filetime=reader.filetime(),
        shot_width=reader.uint32(),
        shot_height=reader.uint32(),
        compression_type=reader.uint16(),
    )


def read_file_location_table(reader: BinaryReader) -> FileLocationTable:
    return FileLocationTable(
        form_id_array_count_offset=reader.uint32(),
        unknown_table_3_offset=reader.uint32(),
        global_data_table_1_offset=reader.uint32(),
        global_data_table_2_offset=reader.uint32(),
        change_forms_offset=reader.uint32(),
        global_data_table_3_offset=reader.uint32(),
        global_data_table_1_count=reader.uint32(),
        global_data_table_2_count=reader.uint32(),
        global_data_table_3_count=reader.uint32(),
        change_form_count=reader.uint32(),
    )


def _check_magic(reader: BinaryReader) -> str:
    magic = reader.bytes(len(MAGIC))
    if magic != MAGIC:
        raise BadMagicError(
            "File invalid or corrupted, could not read magic",
            offset=0,
            expected=MAGIC,
            found=magic,
        )
    return magic.decode("ascii")


def location_table_mismatches(
    table: FileLocationTable,
    observed: SectionOffsets,
    base: int,
) -> list[DecodeWarning]:
    """Compare stored section offsets with where the sections were found.

    *base* is the file offset that body offset 0 corresponds to.
    """
    pairs = (
        ("global_data_table_1", table.global_data_table_1_offset, observed.global_data_table_1),
        ("global_data_table_2", table.global_data_table_2_offset, observed.global_data_table_2),
        ("change_forms", table.change_forms_offset, observed.change_forms),
        ("global_data_table_3", table.global_data_table_3_offset, observed.global_data_table_3),
        ("form_id_array_count", table.form_id_array_count_offset, observed.form_id_array_count),
        ("unknown_table_3", table.unknown_table_3_offset, observed.unknown_table_3),
    )
    warnings: list[DecodeWarning] = []
    for name, stored, body_offset in pairs:
        actual = base + body_offset
        if stored != actual:
            warnings.append(DecodeWarning(
                code="location_table_mismatch",
                message=f"File location table puts {name} at {stored}, found at {actual}",
                offset=body_offset,
                stage="file_location_table",
            ))
    return warnings


def decode_save_file(data: bytes, config: DecodeConfig | None = None) -> SaveFile:
    """Decode a whole save container held in memory.

    Raises:
        SaveFormatError: (or a subclass) if the container is malformed.
            The exception's `stage` names the section that failed.
    """
    if config is None:
        config = DecodeConfig()
    warnings: list[DecodeWarning] = []
    reader = BinaryReader(data, warnings=warnings)

    with _stage("magic", warnings):
        magic = _check_magic(reader)

    with _stage("header", warnings):
        reader.uint32()  # header size, implied by the fields that follow
        header = read_header(reader)

    with _stage("screenshot", warnings):
        screenshot = ScreenshotData(
            width=header.shot_width,
            height=header.shot_height,
            data=reader.bytes(header.screenshot_size),
        )

    with _stage("body", warnings):
        uncompressed_len = reader.uint32()
        compressed_len = reader.uint32()
        body_start = reader.position
        body_data = read_body(reader, header.compression_type, uncompressed_len, compressed_len)

    # Offsets reported from here on are relative to the decompressed body.
    body = BinaryReader(body_data, warnings=warnings)

    with _stage("plugins", warnings):
        form_version = body.uint8()
        plugin_info_size = body.uint32()
        plugins = read_wstrings(body, body.uint8())
        light_plugins = read_wstrings(body, body.uint16())

    with _stage("file_location_table", warnings):
        table = read_file_location_table(body)
        body.skip(LOCATION_TABLE_RESERVED_SIZE)

    warn_unconsumed = config.warn_unconsumed_bytes

    with _stage("global_data_table_1", warnings):
        gdt1_offset = body.position
        global_data_table_1 = read_global_data_table(
            body, table.global_data_table_1_count, warn_unconsumed=warn_unconsumed
        )

    with _stage("global_data_table_2", warnings):
        gdt2_offset = body.position
        global_data_table_2 = read_global_data_table(
            body, table.global_data_table_2_count, warn_unconsumed=warn_unconsumed
        )

    with _stage("change_forms", warnings):
        change_forms_offset = body.position
        change_forms = read_change_forms(body, table.change_form_count)

    with _stage("global_data_table_3", warnings):
        gdt3_offset = body.position
        # The stored count is one lower than the number of records present.
        global_data_table_3 = read_global_data_table(
            body, table.global_data_table_3_count + 1, warn_unconsumed=warn_unconsumed
        )

    with _stage("form_id_array", warnings):
        form_id_array_offset = body.position
        form_id_array = read_uint32s(body, body.uint32())

    with _stage("visited_worldspace_array", warnings):
        visited_worldspace_array = read_uint32s(body, body.uint32())

    with _stage("unknown_table_3", warnings):
        unknown_table_3_offset = body.position
        body.uint32()  # byte size of the table
        unknown_table_3 = read_wstrings(body, body.uint32())

    section_offsets = SectionOffsets(
        global_data_table_1=gdt1_offset,
        global_data_table_2=gdt2_offset,
        change_forms=change_forms_offset,
        global_data_table_3=gdt3_offset,
        form_id_array_count=form_id_array_offset,
        unknown_table_3=unknown_table_3_offset,
    )
    if config.check_location_table:
        base = config.location_table_base
        if base is None:
            base = body_start
        warnings.extend(location_table_mismatches(table, section_offsets, base))

    return SaveFile(
        magic=magic,
        header=header,
        screenshot=screenshot,
        body_uncompressed_len=uncompressed_len,
        body_compressed_len=compressed_len,
        form_version=form_version,
        plugin_info_size=plugin_info_size,
        plugins=plugins,
        light_plugins=light_plugins,
        file_location_table=table,
        global_data_table_1=global_data_table_1,
        global_data_table_2=global_data_table_2,
        change_forms=change_forms,
        global_data_table_3=global_data_table_3,
        form_id_array=form_id_array,
        visited_worldspace_array=visited_worldspace_array,
        unknown_table_3=unknown_table_3,
        section_offsets=section_offsets,
        warnings=tuple(warnings),
    )


def read_save_file(path: Path, config: DecodeConfig | None = None) -> SaveFile:
    """Read and decode the save file at *path*."""
    return decode_save_file(Path(path).read_bytes(), config)
