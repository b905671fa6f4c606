# ysflink

Building blocks for Yaesu System Fusion (YSF / C4FM) gateways, in plain
Python with no third-party dependencies.

## What is inside

- `ysflink.crc`: the CCITT-16 CRC (`add_ccitt16`, `check_ccitt16`) and the
  additive `checksum` (sum of bytes modulo 256) used in GPS data blocks.
- `ysflink.convolution`: `ConvolutionalCodec`, the rate-1/2, K=5 encoder
  (`encode`) and hard-decision Viterbi decoder (`start`, `decode`,
  `chainback`).
- `ysflink.fich`: `Fich`, the six decoded Frame Information Channel bytes,
  with the fields `fi`, `cm`, `bn`, `bt`, `fn`, `ft`, `dt`, `mr`, `voip`,
  `dev` and `dgid` as properties, and `raw()` / `load_raw()` for the four
  bytes that travel over the network.
- `ysflink.payload`: read and write functions for the header, V/D mode 1,
  V/D mode 2, voice full-rate and data full-rate payload sections of a frame.
  The read functions return the data bytes, or `None` when the CRC fails; the
  write functions fill a `bytearray` frame in place.
- `ysflink.dtmf`: `DtmfDecoder`, which finds DTMF tones in V/D mode 2 frames,
  replaces them with silence in place, and turns the digits entered into a
  `DtmfStatus`: `CONNECT_YSF` for `#` and five digits, `CONNECT_FCS` for `A`
  and two or three digits, `DISCONNECT` for `#` alone or `#99999`.
  `pop_reflector()` returns the command without its first character and
  resets the decoder.
- `ysflink.gps`: `decode_gps_position`, which turns a GPS data block into a
  `GpsPosition`, and `GpsDecoder`, which gathers the block from the V/D mode 1
  or mode 2 frames of a transmission and hands the position to a writer once.
- `ysflink.aprs`: `AprsWriter`, which builds the station report (`id_frame`)
  and reports for positions received from radios (`position_report`), and
  sends them over UDP (`write`, and `clock` for the periodic station report).
- `ysflink.reflectors`: `ReflectorList` and `Reflector`, which load a
  semicolon-separated hosts file, skip YCS entries and unresolvable hosts,
  and look reflectors up with `find_by_id` and `find_by_name`.
- `ysflink.config`: `Config`, `load_config` and `parse_config` for the
  gateway's `.ini` file.
- `ysflink.ysf_network`: `YsfNetwork` and `LinkStatus`, a UDP link to a YSF
  reflector with polling and link-loss detection.
- `ysflink.fcs_network`: `FcsNetwork` and `FcsState`, a UDP link to an FCS
  room, translating its packets to and from YSF frames.
- `ysflink.utils`: hex dumps (`format_dump`, `dump`, `dump_bits`) and bit/byte
  conversions.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from ysflink.crc import add_ccitt16, check_ccitt16
from ysflink.payload import read_vd_mode1_data, write_vd_mode1_data
from ysflink.config import load_config

block = add_ccitt16(b"\x01\x02\x03\x04\x00\x00")
assert check_ccitt16(block)

frame = bytearray(155)
data = bytes(range(20))
write_vd_mode1_data(data, frame)
assert read_vd_mode1_data(frame) == data

config = load_config("YSFGateway.ini")   # raises OSError if it cannot be opened
print(config.callsign, config.network_startup)
```

The network classes are driven by calling `clock(ms)` regularly from your own
loop. Each call advances the timers, sends any polls that are due and takes in
at most one packet from the socket. Buffered frames are then collected with
`YsfNetwork.read(dgid)` or `FcsNetwork.read()`, which return `None` when
nothing is waiting. `open()` on `YsfNetwork` and `AprsWriter`, and on
`FcsNetwork` when the server cannot be resolved, raises `OSError`.

## What it does not do

- There is no gateway program and no command to run: the package provides
  the pieces, and the main loop that ties a repeater to the networks is yours
  to write.
- `AprsWriter` reports only a fixed station location; it does not read
  positions from a GPS daemon.
- `Fich` holds and edits header fields but does not encode or decode the
  FICH section of a frame over the air.
- Logging goes through the standard `logging` module; the package does not
  set up log files or handlers.