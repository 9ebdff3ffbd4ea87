"""Detection of DTMF key presses in V/D mode 2 voice frames."""

from __future__ import annotations

import enum

_SYNC_LENGTH_BYTES = 5
_FICH_LENGTH_BYTES = 25
_PAYLOAD_OFFSET = _SYNC_LENGTH_BYTES + _FICH_LENGTH_BYTES
_SLICE_OFFSETS = range(5, 90, 18)
_SLICE_LENGTH = 13

_VD2_MASK = bytes.fromhex("CCCCDDDDEEEEFFFFEEEEDD9998")
_VD2_SIG = bytes.fromhex("0880C91026A0E331E2E6D50888")

_VD2_SYM_MASK = bytes.fromhex("3333222211111111226666")
_SYMBOL_POSITIONS = (0, 1, 2, 3, 4, 5, 8, 9, 10, 11, 12)

_VD2_SYMBOLS = {
    bytes.fromhex("3311220200000111000462"): "0",
    bytes.fromhex("3310202000010110000462"): "1",
    bytes.fromhex("2223020200100101000462"): "2",
    bytes.fromhex("2222002000110100000462"): "3",
    bytes.fromhex("1111220201000011000644"): "4",
    bytes.fromhex("1110202001010010000644"): "5",
    bytes.fromhex("0023020201100001000644"): "6",
    bytes.fromhex("0022002001110000000644"): "7",
    bytes.fromhex("3311220210001111226022"): "8",
    bytes.fromhex("3310202010011110226022"): "9",
    bytes.fromhex("2223020210101101226022"): "A",
    bytes.fromhex("2222002010111100226022"): "B",
    bytes.fromhex("1111220211001011226204"): "C",
    bytes.fromhex("1110202011011010226204"): "D",
    bytes.fromhex("0023020211101001226204"): "*",
    bytes.fromhex("0022002011111000226204"): "#",
}

_VD2_SILENCE = bytes.fromhex("7BB28E4336E4A23978493368 33".replace(" ", ""))

_PRESS_THRESHOLD = 3
_RELEASE_THRESHOLD = 100


class DtmfStatus(enum.Enum):
    """What a completed DTMF command asks for."""

    NONE = enum.auto()
    CONNECT_YSF = enum.auto()
    CONNECT_FCS = enum.auto()
    DISCONNECT = enum.auto()


def _is_tone(ambe: bytes | bytearray) -> bool:
    return all((b & m) == s for b, m, s in zip(ambe, _VD2_MASK, _VD2_SIG))


def _tone_char(ambe: bytes | bytearray) -> str:
    symbols = bytes(ambe[pos] & mask for pos, mask in zip(_SYMBOL_POSITIONS, _VD2_SYM_MASK))
    return _VD2_SYMBOLS.get(symbols, " ")


def _all_digits(text: str) -> bool:
    return all(c in "0123456789" for c in text)


class DtmfDecoder:
    """Collects DTMF digits from successive frames into a command."""

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Forget any collected digits and command."""
        self._data = ""
        self._command = ""
        self._pressed = False
        self._press_count = 0
        self._release_count = 0
        self._last_char = " "

    def decode_vd_mode2(self, frame: bytearray, end: bool) -> DtmfStatus:
        """Scan the voice slices of ``frame``, blanking any tones found in place."""
        needed = _PAYLOAD_OFFSET + _SLICE_OFFSETS[-1] + _SLICE_LENGTH
        if len(frame) < needed:
            raise ValueError(f"frame must hold at least {needed} bytes, got {len(frame)}")

        for offset in _SLICE_OFFSETS:
            start = _PAYLOAD_OFFSET + offset
            status = self._decode_slice(frame, start, end)
            if status is not DtmfStatus.NONE:
                return status
        return DtmfStatus.NONE

    def _decode_slice(self, frame: bytearray, start: int, end: bool) -> DtmfStatus:
        ambe = frame[start:start + _SLICE_LENGTH]

        if not end and _is_tone(ambe):
            c = _tone_char(ambe)

            if c != " ":
                frame[start:start + _SLICE_LENGTH] = _VD2_SILENCE

            if c == self._last_char:
                self._press_count += 1
            else:
                self._last_char = c
                self._press_count = 0

            if c != " " and not self._pressed and self._press_count >= _PRESS_THRESHOLD:
                self._data += c
                self._release_count = 0
                self._pressed = True
        else:
            if (end or self._release_count >= _RELEASE_THRESHOLD) and self._data:
                self._command = self._data
                self._data = ""
                self._release_count = 0

            self._pressed = False
            self._release_count += 1
            self._press_count = 0
            self._last_char = " "

        return self._validate()

    def _validate(self) -> DtmfStatus:
        command = self._command
        if not command:
            return DtmfStatus.NONE

        first, rest = command[0], command[1:]
        if command == "#":
            return DtmfStatus.DISCONNECT
        if first == "A" and len(command) in (3, 4):
            return DtmfStatus.CONNECT_FCS if _all_digits(rest) else DtmfStatus.NONE
        if first == "#" and len(command) == 6:
            if not _all_digits(rest):
                return DtmfStatus.NONE
            if command == "#99999":
                return DtmfStatus.DISCONNECT
            return DtmfStatus.CONNECT_YSF
        return DtmfStatus.NONE

    def reflector(self) -> str:
        """Return the command without its leading key and reset the decoder."""
        command = self._command
        self.reset()
        return command[1:]