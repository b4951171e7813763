"""
Copyright (c) 2019-2020, the Decred developers
See LICENSE for details

Bitcoin transactions and their wire encoding, in the legacy format and the
BIP0144 witness format.
"""

import hashlib
from typing import List, Optional

from bip143 import SighashError
from bip143.util.encode import ByteArray
from bip143.wire import wire


HASH_SIZE = 32

TxVersion = 1

MaxTxInSequenceNum = 0xFFFFFFFF
MaxPrevOutIndex = 0xFFFFFFFF

# The smallest possible input is an outpoint, an empty signature script and a
# sequence number. The smallest possible output is an amount and an empty
# script. These bound the counts a decoder will accept.
minTxInPayload = HASH_SIZE + 4 + 1 + 4
minTxOutPayload = 8 + 1
maxTxInPerMessage = wire.MaxMessagePayload // minTxInPayload + 1
maxTxOutPerMessage = wire.MaxMessagePayload // minTxOutPayload + 1

maxWitnessItemsPerInput = 500000
maxWitnessItemSize = 11000

# A witness transaction has a zero marker byte where the input count would be,
# followed by a flag byte.
TxFlagMarker = 0x00
WitnessFlag = 0x01

# Encodings for btcEncode and btcDecode.
BaseEncoding = 1 << 0
WitnessEncoding = 1 << 1


def doubleHashH(b: bytes) -> ByteArray:
    """
    SHA-256 applied twice. The digest is in hashing order, not the reversed
    display order.
    """
    return ByteArray(hashlib.sha256(hashlib.sha256(b).digest()).digest())


class OutPoint:
    """
    OutPoint identifies a previous transaction output by the hash of its
    transaction and its index.
    """

    def __init__(self, txHash: Optional[ByteArray], idx: int):
        self.hash = ByteArray(txHash) if txHash else ByteArray(length=HASH_SIZE)
        if len(self.hash) != HASH_SIZE:
            raise SighashError(f"OutPoint: hash must be {HASH_SIZE} bytes, got {len(self.hash)}")
        self.index = idx

    def __eq__(self, other):
        return self.hash == other.hash and self.index == other.index

    def txid(self) -> str:
        """The previous transaction hash in display order."""
        return self.hash.rhex()


class TxIn:
    """
    TxIn is a transaction input. Before a signature hash is calculated, the
    signature script holds the witness program of the output being spent.
    """

    def __init__(
        self,
        previousOutPoint: OutPoint,
        sequence: int = MaxTxInSequenceNum,
        signatureScript: Optional[ByteArray] = None,
        witness: Optional[List[ByteArray]] = None,
    ):
        self.previousOutPoint = previousOutPoint
        self.sequence = sequence
        self.signatureScript = ByteArray(signatureScript) if signatureScript else ByteArray()
        self.witness = witness or []

    def __eq__(self, other):
        return (
            self.previousOutPoint == other.previousOutPoint
            and self.sequence == other.sequence
            and self.signatureScript == other.signatureScript
            and self.witness == other.witness
        )

    def serializeSize(self) -> int:
        """Encoded size without the witness."""
        n = len(self.signatureScript)
        return HASH_SIZE + 4 + wire.varIntSerializeSize(n) + n + 4

    def witnessSerializeSize(self) -> int:
        n = wire.varIntSerializeSize(len(self.witness))
        for item in self.witness:
            n += wire.varIntSerializeSize(len(item)) + len(item)
        return n


class TxOut:
    """
    TxOut is a transaction output. The value is a signed 64-bit amount.
    """

    def __init__(self, value: int = 0, pkScript: Optional[ByteArray] = None):
        self.value = value
        self.pkScript = ByteArray(pkScript) if pkScript else ByteArray()

    def __eq__(self, other):
        return self.value == other.value and self.pkScript == other.pkScript

    def serializeSize(self) -> int:
        n = len(self.pkScript)
        return 8 + wire.varIntSerializeSize(n) + n


class MsgTx:
    """
    MsgTx is a bitcoin transaction.
    """

    def __init__(
        self,
        version: int = TxVersion,
        txIn: Optional[List[TxIn]] = None,
        txOut: Optional[List[TxOut]] = None,
        lockTime: int = 0,
    ):
        self.version = version
        self.txIn = txIn or []
        self.txOut = txOut or []
        self.lockTime = lockTime

    def __eq__(self, other):
        return (
            self.version == other.version
            and self.lockTime == other.lockTime
            and self.txIn == other.txIn
            and self.txOut == other.txOut
        )

    def addTxIn(self, ti: TxIn):
        self.txIn.append(ti)

    def addTxOut(self, to: TxOut):
        self.txOut.append(to)

    def hasWitness(self) -> bool:
        return any(ti.witness for ti in self.txIn)

    def hash(self) -> ByteArray:
        """The transaction hash (txid), which never covers witness data."""
        return doubleHashH(self.serializeNoWitness().bytes())

    def witnessHash(self) -> ByteArray:
        """
        The BIP0141 witness transaction hash (wtxid). It is the txid when no
        input has witness data.
        """
        if not self.hasWitness():
            return self.hash()
        return doubleHashH(self.serialize().bytes())

    def copy(self) -> "MsgTx":
        """A deep copy."""
        return MsgTx(
            version=self.version,
            txIn=[
                TxIn(
                    previousOutPoint=OutPoint(ti.previousOutPoint.hash.copy(), ti.previousOutPoint.index),
                    sequence=ti.sequence,
                    signatureScript=ti.signatureScript.copy(),
                    witness=[item.copy() for item in ti.witness],
                )
                for ti in self.txIn
            ],
            txOut=[TxOut(to.value, to.pkScript.copy()) for to in self.txOut],
            lockTime=self.lockTime,
        )

    @staticmethod
    def btcDecode(b: ByteArray, pver: int, enc: int) -> "MsgTx":
        """
        Decode a transaction, consuming its bytes from b. With
        WitnessEncoding, a zero input count is read as the BIP0144 marker.
        """
        tx = MsgTx(version=b.pop(4).unLittle().int())

        count = wire.readVarInt(b, pver)
        witness = False
        if count == TxFlagMarker and enc == WitnessEncoding:
            flag = b.pop(1)[0]
            if flag != WitnessFlag:
                raise SighashError(f"MsgTx.btcDecode: witness tx but flag byte is {flag}")
            witness = True
            count = wire.readVarInt(b, pver)

        if count > maxTxInPerMessage:
            raise SighashError(f"MsgTx.btcDecode: {count} inputs exceeds the maximum {maxTxInPerMessage}")
        for _ in range(count):
            tx.addTxIn(readTxIn(b, pver, tx.version))

        count = wire.readVarInt(b, pver)
        if count > maxTxOutPerMessage:
            raise SighashError(f"MsgTx.btcDecode: {count} outputs exceeds the maximum {maxTxOutPerMessage}")
        for _ in range(count):
            tx.addTxOut(readTxOut(b, pver, tx.version))

        if witness:
            for ti in tx.txIn:
                ti.witness = readTxWitness(b, pver, tx.version)

        tx.lockTime = b.pop(4).unLittle().int()
        return tx

    @staticmethod
    def deserialize(b: ByteArray) -> "MsgTx":
        """Decode either format. The bytes are consumed."""
        return MsgTx.btcDecode(b, 0, WitnessEncoding)

    @staticmethod
    def deserializeNoWitness(b: ByteArray) -> "MsgTx":
        return MsgTx.btcDecode(b, 0, BaseEncoding)

    def btcEncode(self, pver: int, enc: int) -> ByteArray:
        """
        Encode the transaction. The BIP0144 format is only used with
        WitnessEncoding, and only if some input has witness data.
        """
        witness = enc == WitnessEncoding and self.hasWitness()

        b = ByteArray(self.version, length=4).littleEndian()
        if witness:
            b += ByteArray([TxFlagMarker, WitnessFlag])
        b += wire.writeVarInt(pver, len(self.txIn))
        for ti in self.txIn:
            b += writeTxIn(pver, self.version, ti)
        b += wire.writeVarInt(pver, len(self.txOut))
        for to in self.txOut:
            b += writeTxOut(pver, self.version, to)
        if witness:
            for ti in self.txIn:
                b += writeTxWitness(pver, self.version, ti.witness)
        return b + ByteArray(self.lockTime, length=4).littleEndian()

    def serialize(self) -> ByteArray:
        return self.btcEncode(0, WitnessEncoding)

    def serializeNoWitness(self) -> ByteArray:
        return self.btcEncode(0, BaseEncoding)

    def baseSize(self) -> int:
        """Encoded size without witness data."""
        n = 4 + wire.varIntSerializeSize(len(self.txIn)) + wire.varIntSerializeSize(len(self.txOut)) + 4
        n += sum(ti.serializeSize() for ti in self.txIn)
        return n + sum(to.serializeSize() for to in self.txOut)

    def serializeSize(self) -> int:
        """The length of serialize()."""
        if not self.hasWitness():
            return self.baseSize()
        # Marker and flag.
        n = self.baseSize() + 2
        return n + sum(ti.witnessSerializeSize() for ti in self.txIn)

    def serializeSizeStripped(self) -> int:
        """The length of serializeNoWitness()."""
        return self.baseSize()


def readOutPoint(b: ByteArray, pver: int, version: int) -> OutPoint:
    txHash = b.pop(HASH_SIZE)
    return OutPoint(txHash, b.pop(4).unLittle().int())


def writeOutPoint(pver: int, version: int, op: OutPoint) -> ByteArray:
    """
    The 32-byte hash followed by the index as a little-endian uint32.
    """
    return op.hash + ByteArray(op.index, length=4).littleEndian()


def readScript(b: ByteArray, pver: int, maxAllowed: int, fieldName: str) -> ByteArray:
    """
    Read a length-prefixed byte string, refusing lengths above maxAllowed.
    fieldName is for the error message.
    """
    count = wire.readVarInt(b, pver)
    if count > maxAllowed:
        raise SighashError(f"readScript: {fieldName} of {count} bytes exceeds the maximum {maxAllowed}")
    return b.pop(count)


def readTxIn(b: ByteArray, pver: int, version: int) -> TxIn:
    op = readOutPoint(b, pver, version)
    script = readScript(b, pver, wire.MaxMessagePayload, "signature script")
    return TxIn(op, sequence=b.pop(4).unLittle().int(), signatureScript=script)


def writeTxIn(pver: int, version: int, ti: TxIn) -> ByteArray:
    b = writeOutPoint(pver, version, ti.previousOutPoint)
    b += wire.writeVarBytes(pver, ti.signatureScript)
    return b + ByteArray(ti.sequence, length=4).littleEndian()


def readTxOut(b: ByteArray, pver: int, version: int) -> TxOut:
    value = wire.readInt64LE(b)
    return TxOut(value, readScript(b, pver, wire.MaxMessagePayload, "public key script"))


def writeTxOut(pver: int, version: int, to: TxOut) -> ByteArray:
    """
    The amount as a little-endian int64 followed by the length-prefixed
    script. pver and version do not change the encoding.
    """
    return wire.writeInt64LE(to.value) + wire.writeVarBytes(pver, to.pkScript)


def readTxWitness(b: ByteArray, pver: int, version: int) -> List[ByteArray]:
    count = wire.readVarInt(b, pver)
    if count > maxWitnessItemsPerInput:
        raise SighashError(f"readTxWitness: {count} items exceeds the maximum {maxWitnessItemsPerInput}")
    return [readScript(b, pver, maxWitnessItemSize, "witness item") for _ in range(count)]


def writeTxWitness(pver: int, version: int, wit: List[ByteArray]) -> ByteArray:
    """The item count followed by each length-prefixed item."""
    b = wire.writeVarInt(pver, len(wit))
    for item in wit:
        b += wire.writeVarBytes(pver, item)
    return b
