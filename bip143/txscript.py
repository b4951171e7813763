"""
Copyright (c) 2019, Brian Stafford
Copyright (c) 2019-2020, The Decred developers
See LICENSE for details

Based on btcd txscript. Computes the BIP0143 segregated witness signature hash
for pay-to-witness-pubkey-hash inputs.
"""

from bip143 import InputIndexError, MalformedPlaceholderError, SighashError
from bip143.util import helpers
from bip143.util.encode import ByteArray
from bip143.wire import msgtx, wire


log = helpers.getLogger("TXSCRIPT")

HASH_SIZE = 32

# Hash type bits from the end of a signature.
SigHashAll = 0x1
SigHashNone = 0x2
SigHashSingle = 0x3
SigHashAnyOneCanPay = 0x80

# sigHashMask defines the number of bits of the hash type which is used
# to identify which outputs are signed.
sigHashMask = 0x1F

sigHashNames = {
    "ALL": SigHashAll,
    "NONE": SigHashNone,
    "SINGLE": SigHashSingle,
    "ANYONECANPAY": SigHashAnyOneCanPay,
}

# Opcodes used by the P2WPKH witness program and its script code.
OP_0 = 0x00
OP_DATA_20 = 0x14
OP_DUP = 0x76
OP_HASH160 = 0xA9
OP_EQUALVERIFY = 0x88
OP_CHECKSIG = 0xAC

# P2WPKHProgramSize is the size of the version 0 witness program placed in the
# signature script of an input before hashing:
#
#   - OP_0
#   - OP_DATA_20
#   - 20 bytes pubkey hash
P2WPKHProgramSize = 22

# P2PKHScriptCodeSize is the length prefix of the script code. The script
# code is serialized like a script inside a transaction output.
#
#   - OP_DUP
#   - OP_HASH160
#   - OP_DATA_20
#   - 20 bytes pubkey hash
#   - OP_EQUALVERIFY
#   - OP_CHECKSIG
P2PKHScriptCodeSize = 0x19

# Sub-hash commitment kinds.
CommitHash = "hash"  # hash of every input or output
CommitZero = "zero"  # 32 zero bytes
CommitSingle = "single"  # hash of the output at the signing index only


def zeroHash():
    """A fresh 32-byte zero digest."""
    return ByteArray(0, length=HASH_SIZE)


def hashTypeFromString(s):
    """
    Parse a signature hash type. Names are ALL, NONE and SINGLE, optionally
    combined with ANYONECANPAY using "|", e.g. "SINGLE|ANYONECANPAY". Integers
    in decimal, leading zeros allowed, or 0x-prefixed hexadecimal are accepted
    as-is. ANYONECANPAY on its own means ALL|ANYONECANPAY.

    Args:
        s (str): The hash type.

    Returns:
        int: The hash type.
    """
    s = s.strip()
    if not s:
        raise SighashError("empty signature hash type")
    if s[0].isdigit():
        try:
            hashType = int(s, 16) if s.lower().startswith("0x") else int(s)
        except ValueError:
            raise SighashError(f"invalid signature hash type {s!r}")
        if hashType < 0 or hashType > wire.MaxUint32:
            raise SighashError(f"signature hash type {s} out of range")
        return hashType
    hashType = 0
    for part in s.upper().split("|"):
        part = part.strip()
        if part.startswith("SIGHASH_"):
            part = part[len("SIGHASH_"):]
        if part not in sigHashNames:
            raise SighashError(f"unknown signature hash type {part!r}")
        hashType |= sigHashNames[part]
    if hashType == SigHashAnyOneCanPay:
        hashType |= SigHashAll
    return hashType


def hashTypeString(hashType):
    """
    A human readable name for the hash type, e.g. "SINGLE|ANYONECANPAY".
    Undefined base values are shown as hex.
    """
    baseNames = {SigHashAll: "ALL", SigHashNone: "NONE", SigHashSingle: "SINGLE"}
    base = hashType & sigHashMask
    name = baseNames.get(base, "0x%02x" % base)
    if hashType & SigHashAnyOneCanPay:
        name += "|ANYONECANPAY"
    return name


class SigHashCommitments:
    """
    SigHashCommitments records which transaction data the three BIP0143
    sub-hashes commit to for a signature hash type.

    The decision table is:

        hash type            prevOuts  sequence  outputs
        ALL (or undefined)   hash      hash      hash
        NONE                 hash      zero      zero
        SINGLE               hash      zero      single, or zero if no
                                                 output at the input index
        |ANYONECANPAY        zero      zero      (as the base type)
    """

    def __init__(self, prevOuts, sequence, outputs):
        self.prevOuts = prevOuts
        self.sequence = sequence
        self.outputs = outputs

    def __eq__(self, other):
        return (
            self.prevOuts == other.prevOuts
            and self.sequence == other.sequence
            and self.outputs == other.outputs
        )

    def __repr__(self):
        return f"SigHashCommitments(prevOuts={self.prevOuts}, sequence={self.sequence}, outputs={self.outputs})"


def sigHashCommitments(hashType, idx, numTxOut, literalSingle=False):
    """
    sigHashCommitments applies the decision table to a hash type.

    Args:
        hashType (int): The signature hash type.
        idx (int): The index of the input being signed.
        numTxOut (int): The number of transaction outputs.
        literalSingle (bool): Use the non-strict `idx <= numTxOut` boundary
            for SIGHASH_SINGLE, under which only an index beyond the end of
            the outputs commits to a single output. The default is the BIP0143
            rule, committing to the output at idx when idx < numTxOut.

    Returns:
        SigHashCommitments: The commitment for each sub-hash.
    """
    anyoneCanPay = hashType & SigHashAnyOneCanPay != 0
    base = hashType & sigHashMask

    prevOuts = CommitZero if anyoneCanPay else CommitHash

    sequence = CommitHash
    if anyoneCanPay or base in (SigHashSingle, SigHashNone):
        sequence = CommitZero

    outputs = CommitHash
    if base == SigHashNone:
        outputs = CommitZero
    elif base == SigHashSingle:
        if literalSingle:
            outputs = CommitZero if idx <= numTxOut else CommitSingle
        else:
            outputs = CommitSingle if idx < numTxOut else CommitZero

    return SigHashCommitments(prevOuts, sequence, outputs)


class TxSigHashes:
    """
    TxSigHashes houses the partial set of sighashes introduced within BIP0143.
    These sub-hashes only depend on the transaction, so they can be computed
    once and reused to sign every input of the transaction. Each field is only
    used where the signature hash type commits to it.
    """

    def __init__(self, tx):
        """
        Args:
            tx (MsgTx): The transaction. It must not be modified while the
                TxSigHashes is in use.
        """
        self.hashPrevOuts = calcHashPrevOuts(tx, SigHashAll)
        self.hashSequence = calcHashSequence(tx, SigHashAll)
        self.hashOutputs = calcHashOutputs(tx, 0, SigHashAll)


def calcHashPrevOuts(tx, hashType, sigHashes=None):
    """
    calcHashPrevOuts makes a single hash of the outpoints of all the
    transaction's inputs: each 32-byte previous transaction hash followed by
    the little-endian 4-byte output index. SIGHASH_ANYONECANPAY commits to
    a zero hash instead.

    Args:
        tx (MsgTx): The transaction.
        hashType (int): The signature hash type.
        sigHashes (TxSigHashes): Optional. Precomputed sub-hashes for tx.

    Returns:
        ByteArray: The 32-byte hash.
    """
    if sigHashCommitments(hashType, 0, len(tx.txOut)).prevOuts == CommitZero:
        return zeroHash()

    if sigHashes is not None:
        return sigHashes.hashPrevOuts.copy()

    pre = ByteArray(b"")
    for txIn in tx.txIn:
        pre += msgtx.writeOutPoint(0, tx.version, txIn.previousOutPoint)
    log.debug(f"prevouts: {pre.hex()}")
    return msgtx.doubleHashH(pre.bytes())


def calcHashSequence(tx, hashType, sigHashes=None):
    """
    calcHashSequence is the hash of every input's sequence number, each as
    4 little-endian bytes, stuck together. SIGHASH_SINGLE, SIGHASH_NONE and
    SIGHASH_ANYONECANPAY commit to a zero hash instead.
    """
    if sigHashCommitments(hashType, 0, len(tx.txOut)).sequence == CommitZero:
        return zeroHash()

    if sigHashes is not None:
        return sigHashes.hashSequence.copy()

    pre = ByteArray(b"")
    for txIn in tx.txIn:
        pre += ByteArray(txIn.sequence, length=4).littleEndian()
    log.debug(f"sequences: {pre.hex()}")
    return msgtx.doubleHashH(pre.bytes())


def calcHashOutputs(tx, idx, hashType, literalSingle=False, sigHashes=None):
    """
    calcHashOutputs hashes the serialized outputs of the transaction. The
    input index is only used for SIGHASH_SINGLE, which commits to the output at
    the same index as the input. SIGHASH_NONE, and SIGHASH_SINGLE without a
    corresponding output, commit to a zero hash.

    Args:
        tx (MsgTx): The transaction.
        idx (int): The index of the input being signed.
        hashType (int): The signature hash type.
        literalSingle (bool): See sigHashCommitments.
        sigHashes (TxSigHashes): Optional. Precomputed sub-hashes for tx.

    Returns:
        ByteArray: The 32-byte hash.
    """
    if idx < 0:
        raise InputIndexError(f"calcHashOutputs: negative input index {idx}")

    commit = sigHashCommitments(hashType, idx, len(tx.txOut), literalSingle).outputs
    if commit == CommitZero:
        return zeroHash()

    if commit == CommitSingle:
        if idx >= len(tx.txOut):
            raise SighashError(
                "SIGHASH_SINGLE commits to output %d but there are only %d outputs"
                % (idx, len(tx.txOut))
            )
        pre = msgtx.writeTxOut(0, tx.version, tx.txOut[idx])
        log.debug(f"single output: {pre.hex()}")
        return msgtx.doubleHashH(pre.bytes())

    if sigHashes is not None:
        return sigHashes.hashOutputs.copy()

    pre = ByteArray(b"")
    for txOut in tx.txOut:
        pre += msgtx.writeTxOut(0, tx.version, txOut)
    log.debug(f"outputs: {pre.hex()}")
    return msgtx.doubleHashH(pre.bytes())


def p2wpkhPlaceholder(pkHash):
    """
    p2wpkhPlaceholder creates the version 0 witness program for the pubkey
    hash. The program is stored in the signature script of the input before
    computing the signature hash, where the script code is built from it.

    Args:
        pkHash (bytes-like): The 20-byte pubkey hash.

    Returns:
        ByteArray: The 22-byte witness program.
    """
    pkHash = ByteArray(pkHash)
    if len(pkHash) != 20:
        raise SighashError(f"pubkey hash must be 20 bytes, got {len(pkHash)}")
    return ByteArray([OP_0, OP_DATA_20]) + pkHash


def witnessScriptCode(txIn):
    """
    witnessScriptCode builds the length-prefixed P2PKH script code for the
    input, using the pubkey hash at bytes 2 through 22 of the witness program
    in its signature script. The rest of the program is not inspected.

    Args:
        txIn (TxIn): The input being signed.

    Returns:
        ByteArray: The 26-byte serialized script code.
    """
    script = txIn.signatureScript
    if len(script) < P2WPKHProgramSize:
        raise MalformedPlaceholderError(
            "signature script must hold a %d-byte witness program, got %d bytes"
            % (P2WPKHProgramSize, len(script))
        )
    b = ByteArray([P2PKHScriptCodeSize, OP_DUP, OP_HASH160, OP_DATA_20])
    b += script[2:P2WPKHProgramSize]
    b += ByteArray([OP_EQUALVERIFY, OP_CHECKSIG])
    return b


def checkInputIndex(tx, idx):
    """
    Raise an InputIndexError if idx is not the index of an input of tx.
    """
    if idx < 0 or idx >= len(tx.txIn):
        raise InputIndexError(
            "input index %d out of range for transaction with %d inputs"
            % (idx, len(tx.txIn))
        )


def witnessSigHashPreimage(tx, hashType, idx, amt, literalSingle=False, sigHashes=None):
    """
    witnessSigHashPreimage assembles the BIP0143 serialization that is double
    hashed to produce the signature hash. The fields are:

    1) transaction version (as little-endian uint32)
    2) hashPrevOuts (32 bytes)
    3) hashSequence (32 bytes)
    4) outpoint being spent (32-byte hash, little-endian uint32 index)
    5) script code of the input (length-prefixed P2PKH script)
    6) amount being spent (as little-endian int64)
    7) sequence of the input (as little-endian uint32)
    8) hashOutputs (32 bytes)
    9) transaction lock time (as little-endian uint32)
    10) signature hash type (as little-endian uint32)

    Args:
        tx (MsgTx): The transaction. The signature script of the input being
            signed must hold the witness program, see p2wpkhPlaceholder.
        hashType (int): The signature hash type.
        idx (int): The index of the input being signed.
        amt (int): The amount held by the output being spent.
        literalSingle (bool): See sigHashCommitments.
        sigHashes (TxSigHashes): Optional. Precomputed sub-hashes for tx.

    Returns:
        ByteArray: The preimage.
    """
    checkInputIndex(tx, idx)
    if literalSingle and hashType & sigHashMask == SigHashSingle:
        log.warning("using the non-strict SIGHASH_SINGLE output boundary")

    txIn = tx.txIn[idx]

    pre = ByteArray(tx.version, length=4).littleEndian()
    pre += calcHashPrevOuts(tx, hashType, sigHashes)
    pre += calcHashSequence(tx, hashType, sigHashes)

    # outpoint being spent
    pre += msgtx.writeOutPoint(0, tx.version, txIn.previousOutPoint)

    pre += witnessScriptCode(txIn)

    # amount being signed off
    pre += wire.writeInt64LE(amt)

    pre += ByteArray(txIn.sequence, length=4).littleEndian()

    pre += calcHashOutputs(tx, idx, hashType, literalSingle, sigHashes)

    pre += ByteArray(tx.lockTime, length=4).littleEndian()

    # The hash type is a single byte in a signature, but 4 bytes here.
    pre += ByteArray(hashType, length=4).littleEndian()

    log.debug(f"preimage: {pre.hex()}")
    return pre


def calcWitnessSignatureHash(hashType, tx, idx, amt, literalSingle=False, sigHashes=None):
    """
    calcWitnessSignatureHash computes the BIP0143 signature hash for the input
    at idx. The result is the raw double-SHA256 of the preimage, with no byte
    order reversal.

    Args:
        hashType (int): The signature hash type.
        tx (MsgTx): The transaction.
        idx (int): The index of the input being signed.
        amt (int): The amount held by the output being spent.
        literalSingle (bool): See sigHashCommitments.
        sigHashes (TxSigHashes): Optional. Precomputed sub-hashes for tx.

    Returns:
        ByteArray: The 32-byte signature hash.
    """
    pre = witnessSigHashPreimage(tx, hashType, idx, amt, literalSingle, sigHashes)
    return msgtx.doubleHashH(pre.bytes())
