"""Root save file model."""

from collections.abc import Iterator
from dataclasses import dataclass

from tesv_save.models.change_form import ChangeForm
from tesv_save.models.constants import RefIdKind
from tesv_save.models.fundamentals import DecodeWarning, ResolvedRefId
from tesv_save.models.global_data import GlobalDataEntry, GlobalDataRecord
from tesv_save.models.header import (
    FileLocationTable,
    Header,
    ScreenshotData,
    SectionOffsets,
)


@dataclass(frozen=True, slots=True)
class SaveFile:
    """A fully decoded save container."""
    magic: str
    header: Header
    screenshot: ScreenshotData
    body_uncompressed_len: int
    body_compressed_len: int
    form_version: int
    plugin_info_size: int
    plugins: tuple[str, ...]
    light_plugins: tuple[str, ...]
    file_location_table: FileLocationTable
    global_data_table_1: tuple[GlobalDataEntry, ...]
    global_data_table_2: tuple[GlobalDataEntry, ...]
    change_forms: tuple[ChangeForm, ...]
    global_data_table_3: tuple[GlobalDataEntry, ...]
    form_id_array: tuple[int, ...]
    visited_worldspace_array: tuple[int, ...]
    unknown_table_3: tuple[str, ...]
    section_offsets: SectionOffsets
    warnings: tuple[DecodeWarning, ...] = ()

    @property
    def is_clean(self) -> bool:
        """True when the decode needed no fallback values."""
        return not self.warnings

    def global_data_entries(self) -> Iterator[GlobalDataEntry]:
        yield from self.global_data_table_1
        yield from self.global_data_table_2
        yield from self.global_data_table_3

    def global_data(self, data_type: int) -> Iterator[GlobalDataRecord]:
        """Yield every record of *data_type* across all three tables."""
        for entry in self.global_data_entries():
            if entry.type == data_type:
                yield entry.record

    def resolve_form_id(self, ref: ResolvedRefId) -> int | None:
        """Map a resolved reference to a form id.

        TABLE_INDEX references are looked up in the form-id array; None is
        returned when the index is out of range.
        """
        if ref.kind == RefIdKind.TABLE_INDEX:
            if 0 <= ref.value < len(self.form_id_array):
                return self.form_id_array[ref.value]
            return None
        return ref.value
