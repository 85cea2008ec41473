"""Change form record model."""

from dataclasses import dataclass

from tesv_save.models.fundamentals import RefId


@dataclass(frozen=True, slots=True)
class ChangeForm:
    """Delta state of one in-game object.

    `data` holds the payload as stored, or inflated when `length2` is
    non-zero. Its internal layout depends on the form type and is not
    decoded.
    """
    form_id: RefId
    change_flags: int
    data_type: int     # bits 6-7: length width selector, bits 0-5: form type
    version: int
    length1: int       # stored payload size
    length2: int       # inflated size, 0 when stored uncompressed
    data: bytes

    @property
    def form_type(self) -> int:
        return self.data_type & 0b0011_1111

    @property
    def length_width(self) -> int:
        return self.data_type & 0b1100_0000

    @property
    def is_compressed(self) -> bool:
        return self.length2 != 0

    def __repr__(self) -> str:
        return (
            f"ChangeForm(form_id={self.form_id.resolve()}, "
            f"change_flags={self.change_flags:#010x}, form_type={self.form_type}, "
            f"version={self.version}, compressed={self.is_compressed}, "
            f"size={len(self.data)})"
        )
