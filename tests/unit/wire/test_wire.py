"""
Copyright (c) 2019-2020, the Decred developers
See LICENSE for details
"""

import pytest

from bip143 import SighashError
from bip143.util.encode import ByteArray
from bip143.wire import wire


class TestWire:
    # fmt: off
    data = (
        (0,                  [0x00]),
        (0xFC,               [0xFC]),
        (0xFD,               [0xFD, 0xFD, 0x0]),
        (wire.MaxUint16,     [0xFD, 0xFF, 0xFF]),
        (wire.MaxUint16 + 1, [0xFE, 0x0,  0x0,  0x1,  0x0]),
        (wire.MaxUint32,     [0xFE, 0xFF, 0xFF, 0xFF, 0xFF]),
        (wire.MaxUint32 + 1, [0xFF, 0x0,  0x0,  0x0,  0x0,  0x1,  0x0,  0x0,  0x0]),
        (wire.MaxUint64,     [0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0xFF]),
    )
    # fmt: on

    def test_write_var_int(self, prepareLogger):
        for val, bytes_ in self.data:
            from_val = wire.writeVarInt(wire.ProtocolVersion, val)
            from_bytes = ByteArray(bytes_)
            assert from_val == from_bytes
            assert wire.varIntSerializeSize(val) == len(from_bytes)
            val_from_bytes = wire.readVarInt(from_bytes, wire.ProtocolVersion)
            assert val_from_bytes == val
        with pytest.raises(SighashError):
            wire.writeVarInt(wire.ProtocolVersion, wire.MaxUint64 + 1)
        with pytest.raises(SighashError):
            wire.writeVarInt(wire.ProtocolVersion, -1)

    def test_var_int_length_classes(self):
        sizes = (
            (0, 1),
            (0xFC, 1),
            (0xFD, 3),
            (0xFFFF, 3),
            (0x10000, 5),
            (0xFFFFFFFF, 5),
            (0x100000000, 9),
        )
        for val, size in sizes:
            assert len(wire.writeVarInt(0, val)) == size, hex(val)

    def test_protocol_version_ignored(self):
        for val, _ in self.data:
            assert wire.writeVarInt(0, val) == wire.writeVarInt(wire.ProtocolVersion, val)

    def test_read_var_int(self, prepareLogger):
        assert wire.readVarInt(ByteArray([0xFC]), wire.ProtocolVersion) == 0xFC
        # Non-canonical encodings.
        with pytest.raises(SighashError):
            wire.readVarInt(ByteArray([0xFE, 0xFF, 0xFF, 0x0, 0x0]), wire.ProtocolVersion)
        with pytest.raises(SighashError):
            wire.readVarInt(ByteArray([0xFD, 0xFC, 0x0]), wire.ProtocolVersion)
        with pytest.raises(SighashError):
            wire.readVarInt(
                ByteArray([0xFF, 0xFF, 0xFF, 0xFF, 0xFF, 0x0, 0x0, 0x0, 0x0]),
                wire.ProtocolVersion,
            )
        # Truncated.
        with pytest.raises(SighashError):
            wire.readVarInt(ByteArray([0xFD, 0x01]), wire.ProtocolVersion)

    def test_write_var_bytes(self):
        assert wire.writeVarBytes(0, ByteArray()) == [0x00]
        assert wire.writeVarBytes(0, ByteArray("0102")) == [0x02, 0x01, 0x02]
        b = ByteArray(bytearray(0xFD))
        enc = wire.writeVarBytes(0, b)
        assert len(enc) == 3 + 0xFD
        assert enc[:3] == [0xFD, 0xFD, 0x00]
        assert enc[3:] == b

    def test_int64(self):
        tests = (
            (0, "0000000000000000"),
            (600000000, "0046c32300000000"),
            (-1, "ffffffffffffffff"),
            (wire.MaxInt64, "ffffffffffffff7f"),
            (wire.MinInt64, "0000000000000080"),
        )
        for val, hexStr in tests:
            b = wire.writeInt64LE(val)
            assert b.hex() == hexStr
            assert wire.readInt64LE(b) == val
        with pytest.raises(SighashError):
            wire.writeInt64LE(wire.MaxInt64 + 1)
        with pytest.raises(SighashError):
            wire.writeInt64LE(wire.MinInt64 - 1)
