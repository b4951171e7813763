"""
Copyright (c) 2020, the Decred developers
See LICENSE for details

ByteArray wraps a bytearray with the fixed-width integer and byte order
conversions the wire encoder needs.
"""

from bip143 import SighashError


def intToBytes(i, signed=False):
    """
    Encode an integer as the shortest big-endian byte string that holds it.
    """
    bits = (~i if i < 0 else i).bit_length() + signed
    size = max(1, (bits + 7) // 8)
    return bytearray(i.to_bytes(size, "big", signed=signed))


def intFromBytes(b, signed=False):
    """Decode a big-endian integer."""
    return int.from_bytes(b, "big", signed=signed)


def decodeBA(b, copy=False):
    """
    Decode into a bytearray.

    Args:
        b (str, bytes-like, ByteArray, int, list(int)): The value to decode.
            Strings are hexadecimal. Integers are minimally encoded, unsigned.
        copy (bool): Copy the underlying memory of a bytearray or ByteArray.

    Returns:
        bytearray: The decoded bytes.
    """
    if isinstance(b, ByteArray):
        b = b.b
    if isinstance(b, bytearray):
        return bytearray(b) if copy else b
    if isinstance(b, int):
        if b < 0:
            raise SighashError(f"decodeBA: cannot encode negative integer {b}")
        return intToBytes(b)
    if isinstance(b, str):
        return bytearray.fromhex(b)
    if isinstance(b, bytes) or hasattr(b, "__iter__"):
        return bytearray(b)
    raise TypeError(f"decodeBA: unknown type {type(b)}")


class ByteArray:
    """
    ByteArray is a bytearray manager. An integer argument is encoded
    big-endian in as few bytes as possible, unlike bytearray, where it is a
    length. Use the `length` keyword for a zero-padded, fixed-width value. A
    value that does not fit in `length` bytes raises a SighashError.
    """

    def __init__(self, b=b"", copy=True, length=None):
        """
        Set copy to False to share memory with a bytearray or ByteArray
        argument.
        """
        if length is None:
            self.b = decodeBA(b, copy=copy)
            return
        v = decodeBA(b)
        if len(v) > length:
            # Leading zeros are only padding.
            v = v.lstrip(b"\x00")
            if len(v) > length:
                raise SighashError(f"ByteArray: {len(v)} bytes do not fit in {length}")
        self.b = bytearray(length - len(v)) + v

    def __eq__(self, a):
        try:
            return self.b == decodeBA(a)
        except (TypeError, ValueError, SighashError):
            return False

    def __ne__(self, a):
        return not self.__eq__(a)

    def __hash__(self):
        return hash(bytes(self.b))

    def __repr__(self):
        return f"ByteArray({self.hex()})"

    def __len__(self):
        return len(self.b)

    def __add__(self, a):
        return ByteArray(self.b + decodeBA(a), copy=False)

    __iadd__ = __add__

    def __getitem__(self, k):
        if isinstance(k, slice):
            return ByteArray(self.b[k], copy=False)
        return self.b[k]

    def __setitem__(self, i, v):
        """Overwrite bytes starting at index i. The length never changes."""
        v = decodeBA(v)
        if i + len(v) > len(self.b):
            raise SighashError(f"cannot write {len(v)} bytes at {i} of {len(self.b)}")
        self.b[i : i + len(v)] = v

    def __reversed__(self):
        return self.littleEndian()

    def hex(self):
        return self.b.hex()

    def rhex(self):
        """
        The hex of the reversed bytes, the order in which transaction hashes
        are displayed.
        """
        return self.b[::-1].hex()

    def iszero(self):
        return not any(self.b)

    def int(self):
        """The bytes as a big-endian unsigned integer."""
        return intFromBytes(self.b)

    def bytes(self):
        return bytes(self.b)

    def littleEndian(self):
        """A reversed copy. Converts a big-endian integer to little-endian."""
        return ByteArray(self.b[::-1], copy=False)

    # Reversal is its own inverse.
    unLittle = littleEndian

    def copy(self):
        return ByteArray(self.b)

    def pop(self, n):
        """
        Remove and return the first n bytes. A SighashError is raised if fewer
        than n bytes remain.
        """
        if n > len(self.b):
            raise SighashError(f"pop: {n} bytes requested, {len(self.b)} available")
        head = ByteArray(self.b[:n], copy=False)
        self.b = self.b[n:]
        return head
