"""
Copyright (c) 2019-2020, the Decred developers
See LICENSE for details

Command line driver. Loads an unsigned transaction from a hex file, stores the
witness programs of the outputs being spent in the signature scripts, and
prints the BIP0143 signature hash of one input.
"""

import argparse
import logging
import os
import sys

from bip143 import SighashError, config
from bip143.txscript import (
    calcWitnessSignatureHash,
    checkInputIndex,
    hashTypeFromString,
    hashTypeString,
)
from bip143.util import helpers
from bip143.util.encode import ByteArray
from bip143.wire import msgtx


log = helpers.getLogger("CLI")


def parseArgs(argv=None):
    parser = argparse.ArgumentParser(
        prog="bip143",
        description="Compute the BIP0143 signature hash of a transaction input.",
    )
    parser.add_argument(
        "--tx", default="tx.hex", help="hex encoded transaction file, - for stdin"
    )
    parser.add_argument(
        "--input", type=int, required=True, help="index of the input to sign"
    )
    parser.add_argument(
        "--amount", type=int, required=True, help="amount held by the spent output"
    )
    parser.add_argument(
        "--hashtype", default="ALL", help="e.g. ALL, NONE, SINGLE|ANYONECANPAY, 0x83"
    )
    parser.add_argument(
        "--prevscript",
        action="append",
        default=[],
        metavar="IDX:HEX",
        help="witness program of the output spent by input IDX",
    )
    parser.add_argument(
        "--literal-single",
        action="store_true",
        default=None,
        help="use the non-strict SIGHASH_SINGLE output boundary",
    )
    parser.add_argument(
        "--no-literal-single",
        action="store_false",
        dest="literal_single",
        default=None,
        help="use the BIP0143 SIGHASH_SINGLE output boundary, overriding the configuration file",
    )
    parser.add_argument("--configfile", help="configuration file path")
    parser.add_argument("--debug", action="store_true", help="log the preimages")
    return parser.parse_args(argv)


def readTx(path):
    """
    Read and deserialize a hex encoded transaction.

    Args:
        path (str): The file path, or - to read standard input.

    Returns:
        MsgTx: The transaction.
    """
    if path == "-":
        raw = sys.stdin.buffer.read()
    else:
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise SighashError(f"cannot read transaction file: {e}")

    try:
        b = ByteArray(raw.decode("ascii").strip())
    except (UnicodeDecodeError, ValueError):
        raise SighashError("transaction file is not hex encoded")

    log.debug(f"loaded {len(b)} byte tx {b.hex()}")
    tx = msgtx.MsgTx.deserialize(b)
    if len(b) != 0:
        raise SighashError(f"{len(b)} unexpected bytes after the transaction")
    return tx


def applyPrevScripts(tx, entries):
    """
    Store each previous output script in the signature script of its input.

    Args:
        tx (MsgTx): The transaction. It is modified.
        entries (list(str)): IDX:HEX pairs.
    """
    for entry in entries:
        idxStr, sep, scriptHex = entry.partition(":")
        try:
            if not sep:
                raise ValueError("missing ':'")
            idx = int(idxStr)
            script = ByteArray(scriptHex.strip())
        except ValueError as e:
            raise SighashError(f"invalid previous script {entry!r}: {e}")
        checkInputIndex(tx, idx)
        tx.txIn[idx].signatureScript = script


def main(argv=None):
    args = parseArgs(argv)

    try:
        cfg = config.load(args.configfile)
    except SighashError as e:
        print(f"configuration error: {e}", file=sys.stderr)
        return 1

    if cfg.logFile:
        logDir = os.path.dirname(os.path.abspath(cfg.logFile))
        if not helpers.mkdir(logDir):
            print(f"configuration error: cannot create log directory {logDir}", file=sys.stderr)
            return 1

    helpers.prepareLogging(
        filepath=cfg.logFile,
        logLvl=logging.DEBUG if args.debug else cfg.logLevel,
    )
    literalSingle = cfg.literalSingle if args.literal_single is None else args.literal_single

    try:
        hashType = hashTypeFromString(args.hashtype)
        tx = readTx(args.tx)
        applyPrevScripts(tx, args.prevscript)
        log.info(
            f"signing input {args.input} of {tx.hash().rhex()} with {hashTypeString(hashType)}"
        )
        sigHash = calcWitnessSignatureHash(
            hashType, tx, args.input, args.amount, literalSingle=literalSingle
        )
    except SighashError as e:
        log.debug(helpers.formatTraceback(e))
        log.error(str(e))
        return 1

    print(f"sighash: {sigHash.hex()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
