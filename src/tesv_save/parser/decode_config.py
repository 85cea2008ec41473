"""Configuration knobs for decoding a save file.

Defaults suit unmodified Skyrim Special Edition saves.
"""

from dataclasses import dataclass


@dataclass(slots=True)
class DecodeConfig:
    """Options that change which diagnostics a decode reports."""

    check_location_table: bool = True   # compare stored offsets with observed ones
    location_table_base: int | None = None  # file offset of body offset 0; None = where the body starts
    warn_unconsumed_bytes: bool = True  # flag records with bytes left after decoding
