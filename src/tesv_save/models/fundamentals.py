"""Small value types shared by every part of the save file."""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from tesv_save.models.constants import RefIdKind


@dataclass(frozen=True, slots=True)
class VarWidthInt:
    """A self-describing 1/2/3 byte unsigned integer (a "vsval").

    The two low bits of the first byte give the width, the remaining bits
    hold the value, little-endian, shifted left by 2.
    """
    value: int
    width: int   # bytes occupied on disk: 1, 2 or 3

    def __int__(self) -> int:
        return self.value


@dataclass(frozen=True, slots=True)
class ResolvedRefId:
    """A packed reference resolved to its origin kind and numeric value.

    TABLE_INDEX values are already zero-based indexes into the save's
    form-id array.
    """
    kind: RefIdKind
    value: int


@dataclass(frozen=True, slots=True)
class RefId:
    """The three raw bytes of a packed reference."""
    byte0: int
    byte1: int
    byte2: int

    @property
    def magnitude(self) -> int:
        # NOTE: byte1 is combined twice and byte2 never contributes. This is
        # how the value has always been computed for this format and
        # existing tooling relies on it; the reference still occupies 3
        # bytes on disk. Do not "fix" this without a corpus of saves to
        # check against.
        return (self.byte0 << 16) ^ (self.byte1 << 8) ^ self.byte1

    def resolve(self) -> ResolvedRefId:
        magnitude = self.magnitude
        tag = self.byte0 & 0b1100_0000
        if tag == RefIdKind.TABLE_INDEX:
            # Index 0 means "no form" (form id 0x00000000).
            if magnitude == 0:
                return ResolvedRefId(RefIdKind.AUTHORITATIVE, 0)
            return ResolvedRefId(RefIdKind.TABLE_INDEX, magnitude - 1)
        if tag == RefIdKind.AUTHORITATIVE:
            return ResolvedRefId(RefIdKind.AUTHORITATIVE, magnitude)
        if tag == RefIdKind.RUNTIME_CREATED:
            return ResolvedRefId(RefIdKind.RUNTIME_CREATED, magnitude)
        return ResolvedRefId(RefIdKind.UNRECOGNIZED, magnitude)


# Windows FILETIME epoch
_FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True, slots=True)
class FileTime:
    """Windows FILETIME: 100ns ticks since 1601-01-01, split in two uint32."""
    low: int
    high: int

    @property
    def ticks(self) -> int:
        return (self.high << 32) | self.low

    def to_datetime(self) -> datetime:
        return _FILETIME_EPOCH + timedelta(microseconds=self.ticks // 10)


@dataclass(frozen=True, slots=True)
class DecodeWarning:
    """A recoverable anomaly found while decoding.

    The decode carried on with a fallback value; `offset` is the absolute
    position where the anomaly was noticed. `stage` names the section being
    decoded. Offsets of the stages in FILE_STAGES are file offsets; every
    later stage reads the decompressed body, so its offsets are body
    offsets.
    """
    code: str
    message: str
    offset: int
    stage: str | None = None   # filled in by the save parser

    @property
    def is_file_offset(self) -> bool:
        return self.stage in FILE_STAGES

    def __str__(self) -> str:
        if self.stage is None:
            return f"[{self.code}] @{self.offset:#x} {self.message}"
        buffer = "file" if self.is_file_offset else "body"
        return f"[{self.code}] {self.stage} {buffer}@{self.offset:#x} {self.message}"


# Stages that read the save file directly rather than the decompressed body.
FILE_STAGES = frozenset({"magic", "header", "screenshot", "body"})
