"""Low-level binary reader with typed read methods and a moving cursor."""

import struct
from collections.abc import Callable
from typing import TypeVar

from tesv_save.models.constants import STRING_DECODE_ERROR
from tesv_save.models.fundamentals import (
    DecodeWarning,
    FileTime,
    RefId,
    ResolvedRefId,
    VarWidthInt,
)
from tesv_save.parser.errors import OutOfBoundsError


T = TypeVar("T")


class BinaryReader:
    """Wraps a bytes buffer with typed reads and a moving cursor.

    Key design: slice(size) returns a new BinaryReader bounded to the next
    `size` bytes. This lets record parsers read freely without overrunning
    into the next record. Positions are always absolute within the buffer.

    Every reader carries a warning list. Slices share their parent's list,
    so anything a record decoder reports ends up with the top-level reader.
    """

    __slots__ = ("_data", "_pos", "_end", "_warnings")

    def __init__(
        self,
        data: bytes,
        offset: int = 0,
        end: int | None = None,
        warnings: list[DecodeWarning] | None = None,
    ) -> None:
        self._data = bytes(data)
        self._pos = offset
        self._end = end if end is not None else len(self._data)
        self._warnings = warnings if warnings is not None else []

    @property
    def position(self) -> int:
        return self._pos

    @property
    def end(self) -> int:
        return self._end

    @property
    def remaining(self) -> int:
        return self._end - self._pos

    @property
    def warnings(self) -> list[DecodeWarning]:
        return self._warnings

    def warn(self, code: str, message: str) -> None:
        """Record a recoverable anomaly at the current position."""
        self._warnings.append(DecodeWarning(code=code, message=message, offset=self._pos))

    def _check(self, what: str, size: int) -> None:
        if size < 0 or self._pos + size > self._end:
            raise OutOfBoundsError(
                f"{what} of {size} bytes at offset {self._pos} "
                f"would exceed boundary at {self._end}",
                offset=self._pos,
                expected=size,
                found=self._end - self._pos,
            )

    def _read(self, size: int) -> bytes:
        self._check("Read", size)
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def uint8(self) -> int:
        return self._read(1)[0]

    def uint16(self) -> int:
        return struct.unpack_from("<H", self._read(2))[0]

    def uint32(self) -> int:
        return struct.unpack_from("<I", self._read(4))[0]

    def int32(self) -> int:
        return struct.unpack_from("<i", self._read(4))[0]

    def float32(self) -> float:
        return struct.unpack_from("<f", self._read(4))[0]

    def rest(self) -> bytes:
        """Read everything up to the boundary."""
        return self._read(self.remaining)

    def bytes(self, size: int) -> bytes:
        return self._read(size)

    def wstring(self) -> str:
        """Read a uint16 length-prefixed UTF-8 string.

        Undecodable bytes yield STRING_DECODE_ERROR plus a warning; the
        cursor still moves past the whole string.
        """
        length = self.uint16()
        start = self._pos
        raw = self._read(length)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            self._warnings.append(DecodeWarning(
                code="string_decode_error",
                message=f"String of {length} bytes is not valid UTF-8: {exc.reason}",
                offset=start,
            ))
            return STRING_DECODE_ERROR

    def vsval(self) -> VarWidthInt:
        """Read a variable-width (1-3 byte) unsigned integer.

        An invalid width tag (3) yields a zero value and a warning.
        """
        start = self._pos
        byte0 = self.uint8()
        width_tag = byte0 & 0b11
        if width_tag == 0:
            return VarWidthInt(value=(byte0 & 0xFC) >> 2, width=1)
        if width_tag == 1:
            byte1 = self.uint8()
            return VarWidthInt(value=((byte1 << 8) | byte0) >> 2, width=2)
        if width_tag == 2:
            byte1 = self.uint8()
            byte2 = self.uint8()
            return VarWidthInt(value=((byte2 << 16) | (byte1 << 8) | byte0) >> 2, width=3)
        self._warnings.append(DecodeWarning(
            code="invalid_vsval",
            message=f"Invalid vsval width tag in byte {byte0:#04x}; using 0",
            offset=start,
        ))
        return VarWidthInt(value=0, width=1)

    def vsval_count(self) -> int:
        """Read a vsval used as an array length."""
        return self.vsval().value

    def packed_ref_id(self) -> RefId:
        raw = self._read(3)
        return RefId(byte0=raw[0], byte1=raw[1], byte2=raw[2])

    def ref_id(self) -> ResolvedRefId:
        return self.packed_ref_id().resolve()

    def filetime(self) -> FileTime:
        return FileTime(low=self.uint32(), high=self.uint32())

    def skip(self, size: int) -> None:
        self._check("Skip", size)
        self._pos += size

    def slice(self, size: int) -> "BinaryReader":
        """Return a new BinaryReader bounded to the next `size` bytes.

        Advances this reader's cursor past the sliced region.
        """
        self._check("Slice", size)
        sub = BinaryReader(self._data, self._pos, self._pos + size, self._warnings)
        self._pos += size
        return sub


def read_array(reader: BinaryReader, count: int, read_one: Callable[[BinaryReader], T]) -> tuple[T, ...]:
    """Call *read_one* `count` times and collect the results."""
    return tuple(read_one(reader) for _ in range(count))


def read_ref_ids(reader: BinaryReader, count: int) -> tuple[ResolvedRefId, ...]:
    return read_array(reader, count, BinaryReader.ref_id)


def read_uint32s(reader: BinaryReader, count: int) -> tuple[int, ...]:
    return read_array(reader, count, BinaryReader.uint32)


def read_wstrings(reader: BinaryReader, count: int) -> tuple[str, ...]:
    return read_array(reader, count, BinaryReader.wstring)
