"""Exceptions for save data that cannot be decoded.

All of them are ValueErrors. Anything raised here aborts the whole decode;
recoverable anomalies are reported as DecodeWarning values instead.
"""


class SaveFormatError(ValueError):
    """The input violates the container format.

    `stage` names the section being decoded when the error surfaced. The
    save parser fills it in on the way out if the raising code did not.
    """

    def __init__(
        self,
        message: str,
        *,
        offset: int | None = None,
        expected: object = None,
        found: object = None,
        stage: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.offset = offset
        self.expected = expected
        self.found = found
        self.stage = stage

    def __str__(self) -> str:
        parts: list[str] = []
        if self.stage:
            parts.append(f"[{self.stage}]")
        parts.append(self.message)
        if self.offset is not None:
            parts.append(f"(offset {self.offset})")
        if self.expected is not None or self.found is not None:
            parts.append(f"expected {self.expected!r}, found {self.found!r}")
        return " ".join(parts)


class OutOfBoundsError(SaveFormatError):
    """A read would run past the end of the bounded region."""


class BadMagicError(SaveFormatError):
    pass


class UnsupportedCompressionError(SaveFormatError):
    pass


class InvalidLengthWidthError(SaveFormatError):
    """A change form's length width selector is not 0, 64 or 128."""


class DecompressionError(SaveFormatError):
    """Decompression failed or produced the wrong number of bytes."""
