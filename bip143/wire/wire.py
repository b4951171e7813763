"""
Copyright (c) 2019, Brian Stafford
Copyright (c) 2019-2020, The Decred developers
See LICENSE for details

Constants and the compact integer and byte string encodings of the bitcoin
wire protocol.
"""

from bip143 import SighashError
from bip143.util.encode import ByteArray


# fmt: off
MaxUint16 = (1 << 16) - 1
MaxUint32 = (1 << 32) - 1
MaxUint64 = (1 << 64) - 1
MaxInt64  = (1 << 63) - 1
MinInt64  = -1 << 63
# fmt: on

# MaxMessagePayload is the maximum bytes a message can be regardless of other
# individual limits imposed by messages themselves.
MaxMessagePayload = 1024 * 1024 * 32  # 32MB

# MaxBlockPayload is the maximum bytes a block message can be in bytes.
# After Segregated Witness, the max block payload has been raised to 4MB.
MaxBlockPayload = 4000000

# ProtocolVersion is the latest protocol version this package supports. None
# of the encodings here vary with the protocol version.
ProtocolVersion = 70013


def varIntSerializeSize(i):
    """
    varIntSerializeSize returns the number of bytes it would take to serialize
    i as a variable length integer.
    """
    # The value is small enough to be represented by itself, so it's
    # just 1 byte.
    if i < 0xFD:
        return 1

    # Discriminant 1 byte plus 2 bytes for the uint16.
    if i <= MaxUint16:
        return 3

    # Discriminant 1 byte plus 4 bytes for the uint32.
    if i <= MaxUint32:
        return 5

    # Discriminant 1 byte plus 8 bytes for the uint64.
    return 9


def writeVarInt(pver, val):
    """
    writeVarInt serializes val using a variable number of bytes depending
    on its value.

    Args:
        pver int: the protocol version (unused).
        val int: the value to be serialized.

    Returns:
        ByteArray: The encoded integer.
    """
    if val < 0:
        raise SighashError(f"writeVarInt: negative value {val}")

    if val < 0xFD:
        return ByteArray(val, length=1)

    if val <= MaxUint16:
        b = ByteArray(0xFD)
        b += ByteArray(val, length=2).littleEndian()
        return b

    if val <= MaxUint32:
        b = ByteArray(0xFE)
        b += ByteArray(val, length=4).littleEndian()
        return b

    b = ByteArray(0xFF)
    b += ByteArray(val, length=8).littleEndian()
    return b


def writeVarBytes(pver, inBytes):
    """
    writeVarBytes serializes a variable length byte array as a varInt
    containing the number of bytes, followed by the bytes themselves.
    """
    slen = len(inBytes)
    b = writeVarInt(pver, slen)
    b += inBytes
    return b


def readVarInt(b, pver):
    """
    readVarInt reads a variable length integer from b and returns it as an int.

    Args:
        b ByteArray: the encoded integer. The bytes are consumed.
        pver int: the protocol version (unused).
    """
    data = {
        0xFF: dict(pop_bytes=8, minRv=0x100000000,),
        0xFE: dict(pop_bytes=4, minRv=0x10000,),
        0xFD: dict(pop_bytes=2, minRv=0xFD,),
    }
    discriminant = b.pop(1).int()
    if discriminant not in data.keys():
        return discriminant
    rv = b.pop(data[discriminant]["pop_bytes"]).unLittle().int()
    # The encoding is not canonical if the value could have been
    # encoded using fewer bytes.
    minRv = data[discriminant]["minRv"]
    if rv < minRv:
        raise SighashError(
            "ReadVarInt noncanon error: {} - {} <= {}".format(rv, discriminant, minRv)
        )
    return rv


def writeInt64LE(val):
    """
    writeInt64LE encodes a signed 64-bit integer as 8 little-endian bytes in
    two's complement, the encoding of output amounts.

    Args:
        val int: the value. Must fit in an int64.

    Returns:
        ByteArray: The encoded integer.
    """
    if val < MinInt64 or val > MaxInt64:
        raise SighashError(f"writeInt64LE: {val} out of range for int64")
    return ByteArray(val & MaxUint64, length=8).littleEndian()


def readInt64LE(b):
    """
    readInt64LE pops 8 little-endian bytes from b and decodes them as a signed
    64-bit integer.
    """
    v = b.pop(8).unLittle().int()
    if v > MaxInt64:
        v -= 1 << 64
    return v
