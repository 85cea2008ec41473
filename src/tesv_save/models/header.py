"""Save file header, screenshot, and file location table models."""

from dataclasses import dataclass

from tesv_save.models.constants import CompressionType
from tesv_save.models.fundamentals import FileTime


@dataclass(frozen=True, slots=True)
class Header:
    """Fixed header following the magic literal and header size."""
    version: int
    save_number: int
    player_name: str
    player_level: int
    player_location: str
    game_date: str             # in-game date as displayed, e.g. "000.17.02"
    player_race_editor_id: str
    player_sex: int            # 0 = male, 1 = female
    player_cur_exp: float
    player_lvl_up_exp: float
    filetime: FileTime
    shot_width: int
    shot_height: int
    compression_type: int      # CompressionType value

    @property
    def is_compressed(self) -> bool:
        return self.compression_type != CompressionType.NONE

    @property
    def screenshot_size(self) -> int:
        """Byte size of the RGBA screenshot that follows the header."""
        return 4 * self.shot_width * self.shot_height


@dataclass(frozen=True, slots=True)
class ScreenshotData:
    width: int
    height: int
    data: bytes    # RGBA, width * height * 4 bytes

    def __repr__(self) -> str:
        return f"ScreenshotData(width={self.width}, height={self.height}, size={len(self.data)})"


@dataclass(frozen=True, slots=True)
class FileLocationTable:
    """Offsets and counts describing the layout of the body.

    Offsets are informational only; sections are decoded in a fixed order.
    """
    form_id_array_count_offset: int
    unknown_table_3_offset: int
    global_data_table_1_offset: int
    global_data_table_2_offset: int
    change_forms_offset: int
    global_data_table_3_offset: int
    global_data_table_1_count: int
    global_data_table_2_count: int
    global_data_table_3_count: int   # stored one lower than the real count
    change_form_count: int


@dataclass(frozen=True, slots=True)
class SectionOffsets:
    """Body offsets at which each section actually started during decode."""
    global_data_table_1: int
    global_data_table_2: int
    change_forms: int
    global_data_table_3: int
    form_id_array_count: int
    unknown_table_3: int
