"""Dump the contents of a Skyrim save file.

Usage:
    python -m scripts.dump_save SAVE [--tables] [--change-forms N]
                                     [--no-location-check]
"""

import argparse
from collections import Counter
from collections.abc import Sequence
from pathlib import Path

from tesv_save.models.constants import CompressionType, GlobalDataType
from tesv_save.models.global_data import GlobalDataEntry
from tesv_save.models.save_file import SaveFile
from tesv_save.parser.decode_config import DecodeConfig
from tesv_save.parser.errors import SaveFormatError
from tesv_save.parser.save_parser import read_save_file


def format_header(save: SaveFile) -> list[str]:
    h = save.header
    try:
        compression = CompressionType(h.compression_type).name
    except ValueError:
        compression = str(h.compression_type)
    return [
        f"Save #{h.save_number} (version {h.version}, form version {save.form_version})",
        f"Player:   {h.player_name}, level {h.player_level} {h.player_race_editor_id}"
        f" ({'female' if h.player_sex else 'male'})",
        f"Location: {h.player_location}",
        f"Date:     {h.game_date} (saved {h.filetime.to_datetime():%Y-%m-%d %H:%M:%S} UTC)",
        f"Exp:      {h.player_cur_exp:.1f} / {h.player_lvl_up_exp:.1f}",
        f"Shot:     {h.shot_width}x{h.shot_height}",
        f"Body:     {compression}, {save.body_compressed_len} -> {save.body_uncompressed_len} bytes",
    ]


def type_name(data_type: int) -> str:
    try:
        return GlobalDataType(data_type).name
    except ValueError:
        return f"UNKNOWN_{data_type}"


def format_table(entries: Sequence[GlobalDataEntry]) -> list[str]:
    """One line per record type with its count and total payload size."""
    counts: Counter[int] = Counter()
    sizes: Counter[int] = Counter()
    for entry in entries:
        counts[entry.type] += 1
        sizes[entry.type] += entry.length
    return [
        f"  {data_type:>4} {type_name(data_type):<24} x{counts[data_type]} ({sizes[data_type]} bytes)"
        for data_type in sorted(counts)
    ]


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Dump a Skyrim save file")
    parser.add_argument("save", type=Path, help="Path to the .ess save file")
    parser.add_argument("--tables", action="store_true",
                        help="Show record types in each global data table")
    parser.add_argument("--change-forms", type=int, default=0, metavar="N",
                        help="Show the first N change forms")
    parser.add_argument("--no-location-check", action="store_true",
                        help="Skip the file location table consistency check")
    args = parser.parse_args(argv)

    if not args.save.exists():
        print(f"Error: {args.save} not found")
        return 1

    config = DecodeConfig(check_location_table=not args.no_location_check)
    try:
        save = read_save_file(args.save, config)
    except SaveFormatError as exc:
        print(f"Error: {exc}")
        return 1

    for line in format_header(save):
        print(line)
    print()

    print(f"Plugins ({len(save.plugins)}):")
    for i, name in enumerate(save.plugins):
        print(f"  {i:02X} {name}")
    print(f"Light plugins ({len(save.light_plugins)}):")
    for i, name in enumerate(save.light_plugins):
        print(f"  FE:{i:03X} {name}")
    print()

    tables = (
        ("Global data table 1", save.global_data_table_1),
        ("Global data table 2", save.global_data_table_2),
        ("Global data table 3", save.global_data_table_3),
    )
    for label, entries in tables:
        print(f"{label}: {len(entries)} records")
        if args.tables:
            for line in format_table(entries):
                print(line)
    print(f"Change forms: {len(save.change_forms)}"
          f" ({sum(1 for cf in save.change_forms if cf.is_compressed)} compressed)")
    for cf in save.change_forms[: args.change_forms]:
        print(f"  {cf!r}")
    print(f"Form id array: {len(save.form_id_array)}")
    print(f"Visited worldspaces: {len(save.visited_worldspace_array)}")
    print(f"Unknown table 3: {len(save.unknown_table_3)} strings")

    if save.warnings:
        print()
        for warning in save.warnings:
            print(f"Warning: {warning}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
