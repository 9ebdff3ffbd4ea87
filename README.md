# fusionlink

Building blocks for Yaesu System Fusion (YSF / C4FM) gateways, in plain
Python with no third-party dependencies.

## Modules

- `fusionlink.utils`: bit helpers (`read_bit`, `write_bit`,
  `byte_to_bits_be`, `byte_to_bits_le`, `bits_to_byte_be`,
  `bits_to_byte_le`), hex dumps (`hex_dump`, `bits_dump`, `log_hex_dump`)
  and `Timer`, a countdown advanced by explicit `clock(ticks)` calls.
- `fusionlink.crc`: CRC-CCITT frame checksums (`ccitt16`, `add_ccitt16`,
  `check_ccitt16`) and the 8-bit additive `checksum8`.
- `fusionlink.convolution`: the rate 1/2, constraint length 5 convolutional
  `encode` and a hard-decision `ViterbiDecoder` (`start`, `decode`,
  `chainback`).
- `fusionlink.payload`: readers and writers for the data channels of a
  frame: `read_header_data` / `write_header_data` (40 bytes),
  `read_vd_mode1_data` / `write_vd_mode1_data` (20 bytes),
  `read_vd_mode2_data` / `write_vd_mode2_data` (10 bytes),
  `read_voice_fr_mode_data` / `write_voice_fr_mode_data`,
  `read_data_fr_mode_data1` / `write_data_fr_mode_data1` and
  `read_data_fr_mode_data2` / `write_data_fr_mode_data2` (20 bytes each).
  Readers return the bytes, or `None` when the CRC fails; writers update a
  `bytearray` frame in place.
- `fusionlink.fich`: `Fich`, the six frame-information bytes with the
  fields `fi`, `cm`, `bn`, `bt`, `fn`, `ft`, `dt`, `mr`, `voip`, `dev` and
  `dgid` as properties, the four field bytes as `raw`, and `copy()`.
- `fusionlink.dtmf`: `DtmfDecoder` finds DTMF key presses in V/D mode 2
  voice frames, blanks them in place, and reports a completed command as a
  `DtmfStatus` (`NONE`, `CONNECT_YSF`, `CONNECT_FCS`, `DISCONNECT`);
  `reflector()` returns the command digits and resets the decoder.
- `fusionlink.gps`: `decode_position` turns a radio's GPS data block into a
  `GpsPosition`; `radio_name` names the radio model; `GpsDecoder` collects
  the data across the frames of a transmission and hands one position per
  transmission to an `AprsWriter`.
- `fusionlink.aprs`: `AprsWriter` sends position reports for heard stations
  and a station beacon to an APRS gateway over UDP. `position_report` and
  `id_frame` return the packet text; `format_coordinates` and `band_name`
  are available on their own.
- `fusionlink.conf`: `load_config` reads the gateway's INI-style settings
  file into a `Config` dataclass, with defaults for absent keys.
- `fusionlink.ysf_network`: `YsfNetwork`, a polled UDP link to a YSF
  reflector, with its state as a `LinkStatus`.
- `fusionlink.fcs_network`: `FcsNetwork`, a UDP link to FCS reflector rooms
  (resolved as `<name>.xreflector.net`), with its state as an `FcsState`.
- `fusionlink.reflectors`: `ReflectorList` loads a semicolon-separated hosts
  file, resolving each host, and finds a `Reflector` by id or by name.

## Installation

```
pip install .
```

## Examples

```python
from fusionlink.crc import add_ccitt16, check_ccitt16

block = bytearray(b"hello world!") + bytearray(2)
add_ccitt16(block)
assert check_ccitt16(block)
```

```python
from fusionlink.payload import read_vd_mode2_data, write_vd_mode2_data

frame = bytearray(120)
write_vd_mode2_data(b"0123456789", frame)
assert read_vd_mode2_data(frame) == b"0123456789"
```

```python
from fusionlink.fich import Fich

fich = Fich()
fich.fn = 3
fich.ft = 5
fich.dgid = 42
assert (fich.fn, fich.ft, fich.dgid) == (3, 5, 42)
```

Timing is driven by the caller. `AprsWriter`, `YsfNetwork` and `FcsNetwork`
have a `clock(ms)` method to call from your main loop with the number of
milliseconds that have passed; the network classes also take in at most one
waiting packet on each call. Failures to open a link or resolve an address
are raised as `ConnectionError` or `OSError`.

## What this package does not do

- There is no gateway program or command: nothing here connects a repeater
  to the networks or routes frames between them. You assemble that from the
  pieces above.
- `Fich` only holds and edits the field bytes; it does not Golay-encode,
  interleave or decode the frame information channel of a received frame.
- `AprsWriter` beacons a fixed location only; it does not read positions
  from a GPS daemon.
- Logging goes through the standard `logging` module; no log files are set
  up, and the log settings in `Config` are not acted on.

## Running the tests

```
pip install .[test]
pytest
```