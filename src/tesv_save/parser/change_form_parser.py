"""Parse the change form table.

Each change form is laid out as:
  ref id (3), uint32 change flags, uint8 type, uint8 version,
  length1, length2, `length1` bytes of payload

The width of both length fields comes from bits 6-7 of the type byte
(0 -> uint8, 64 -> uint16, 128 -> uint32). When length2 is non-zero the
payload is a zlib stream that must inflate to exactly length2 bytes.
"""

from tesv_save.models.change_form import ChangeForm
from tesv_save.models.constants import LENGTH_WIDTH_BYTES, LengthWidth
from tesv_save.parser.binary_reader import BinaryReader
from tesv_save.parser.compression import inflate
from tesv_save.parser.errors import InvalidLengthWidthError


_LENGTH_READERS = {
    1: BinaryReader.uint8,
    2: BinaryReader.uint16,
    4: BinaryReader.uint32,
}


def length_field_size(data_type: int) -> int:
    """Byte width of the length fields selected by a change form type byte."""
    selector = data_type & 0b1100_0000
    size = LENGTH_WIDTH_BYTES.get(selector)
    if size is None:
        raise InvalidLengthWidthError(
            "Invalid change form length width",
            expected=[int(w) for w in LengthWidth],
            found=selector,
        )
    return size


def read_change_form(reader: BinaryReader) -> ChangeForm:
    """Read a single change form at the current position."""
    form_id = reader.packed_ref_id()
    change_flags = reader.uint32()
    type_offset = reader.position
    data_type = reader.uint8()
    version = reader.uint8()

    try:
        size = length_field_size(data_type)
    except InvalidLengthWidthError as exc:
        exc.offset = type_offset
        raise
    read_length = _LENGTH_READERS[size]
    length1 = read_length(reader)
    length2 = read_length(reader)

    payload_offset = reader.position
    payload = reader.bytes(length1)
    if length2 != 0:
        payload = inflate(payload, length2, offset=payload_offset)

    return ChangeForm(
        form_id=form_id,
        change_flags=change_flags,
        data_type=data_type,
        version=version,
        length1=length1,
        length2=length2,
        data=payload,
    )


def read_change_forms(reader: BinaryReader, count: int) -> tuple[ChangeForm, ...]:
    """Read *count* change forms starting at the current position."""
    return tuple(read_change_form(reader) for _ in range(count))
