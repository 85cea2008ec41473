"""Read-only decoder for Skyrim save containers (TESV_SAVEGAME)."""

from tesv_save.models.fundamentals import DecodeWarning
from tesv_save.models.save_file import SaveFile
from tesv_save.parser.decode_config import DecodeConfig
from tesv_save.parser.errors import (
    BadMagicError,
    DecompressionError,
    InvalidLengthWidthError,
    OutOfBoundsError,
    SaveFormatError,
    UnsupportedCompressionError,
)
from tesv_save.parser.save_parser import decode_save_file, read_save_file

__all__ = [
    "BadMagicError",
    "DecodeConfig",
    "DecodeWarning",
    "DecompressionError",
    "InvalidLengthWidthError",
    "OutOfBoundsError",
    "SaveFile",
    "SaveFormatError",
    "UnsupportedCompressionError",
    "decode_save_file",
    "read_save_file",
]
