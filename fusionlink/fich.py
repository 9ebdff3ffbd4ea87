"""The frame information channel (FICH) fields of a YSF frame."""

from __future__ import annotations

_FICH_LENGTH = 6
_RAW_LENGTH = 4


class Fich:
    """The six FICH bytes with access to the individual fields.

    The first four bytes carry the fields; the last two hold a CRC when
    the channel is encoded into a frame.
    """

    def __init__(self, raw: bytes | None = None) -> None:
        self._fich = bytearray(_FICH_LENGTH)
        if raw is not None:
            self.raw = raw

    def copy(self) -> Fich:
        """Return an independent copy holding the same six bytes."""
        other = Fich()
        other._fich[:] = self._fich
        return other

    def __bytes__(self) -> bytes:
        return bytes(self._fich)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fich):
            return NotImplemented
        return self._fich == other._fich

    def __repr__(self) -> str:
        return f"Fich({bytes(self._fich).hex()})"

    @property
    def raw(self) -> bytes:
        """The four field bytes."""
        return bytes(self._fich[:_RAW_LENGTH])

    @raw.setter
    def raw(self, value: bytes) -> None:
        if len(value) < _RAW_LENGTH:
            raise ValueError(f"raw FICH needs at least {_RAW_LENGTH} bytes, got {len(value)}")
        count = min(len(value), _FICH_LENGTH)
        self._fich[:count] = value[:count]

    @property
    def fi(self) -> int:
        """Frame indicator."""
        return (self._fich[0] >> 6) & 0x03

    @fi.setter
    def fi(self, value: int) -> None:
        self._fich[0] = (self._fich[0] & 0x3F) | ((value << 6) & 0xC0)

    @property
    def cm(self) -> int:
        """Call mode."""
        return (self._fich[0] >> 2) & 0x03

    @property
    def bn(self) -> int:
        """Block number."""
        return self._fich[0] & 0x03

    @bn.setter
    def bn(self, value: int) -> None:
        self._fich[0] = (self._fich[0] & 0xFC) | (value & 0x03)

    @property
    def bt(self) -> int:
        """Block total."""
        return (self._fich[1] >> 6) & 0x03

    @bt.setter
    def bt(self, value: int) -> None:
        self._fich[1] = (self._fich[1] & 0x3F) | ((value << 6) & 0xC0)

    @property
    def fn(self) -> int:
        """Frame number."""
        return (self._fich[1] >> 3) & 0x07

    @fn.setter
    def fn(self, value: int) -> None:
        self._fich[1] = (self._fich[1] & 0xC7) | ((value << 3) & 0x38)

    @property
    def ft(self) -> int:
        """Frame total."""
        return self._fich[1] & 0x07

    @ft.setter
    def ft(self, value: int) -> None:
        self._fich[1] = (self._fich[1] & 0xF8) | (value & 0x07)

    @property
    def dt(self) -> int:
        """Data type."""
        return self._fich[2] & 0x03

    @property
    def mr(self) -> int:
        """Message route."""
        return (self._fich[2] >> 3) & 0x03

    @mr.setter
    def mr(self, value: int) -> None:
        self._fich[2] = (self._fich[2] & 0xC7) | ((value << 3) & 0x38)

    @property
    def voip(self) -> bool:
        """Whether the frame has passed through a VoIP link."""
        return bool(self._fich[2] & 0x04)

    @voip.setter
    def voip(self, on: bool) -> None:
        if on:
            self._fich[2] |= 0x04
        else:
            self._fich[2] &= 0xFB

    @property
    def dev(self) -> bool:
        """Narrow deviation flag."""
        return (self._fich[2] & 0x40) == 0x40

    @dev.setter
    def dev(self, on: bool) -> None:
        if on:
            self._fich[2] |= 0x40
        else:
            self._fich[2] &= 0xBF

    @property
    def dgid(self) -> int:
        """Digital group id."""
        return self._fich[3] & 0x7F

    @dgid.setter
    def dgid(self, value: int) -> None:
        self._fich[3] = (self._fich[3] & 0x80) | (value & 0x7F)