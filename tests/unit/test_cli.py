"""
Copyright (c) 2020, the Decred developers
See LICENSE for details
"""

import io
import sys

import pytest

from bip143 import cli, SighashError
from bip143.util.encode import ByteArray
from bip143.wire import msgtx


SIGHASH_ALL = "c37af31116d1b27caf68aae9e3ac82f1477929014d5b917657d0eb49478cb670"
SIGHASH_LITERAL_SINGLE = "471a6e7963aa0c328ee12392fb1a345148edf326b4223660e1a770fdc2826435"
SIGHASH_SINGLE = "f4fe57286dd2ca8ac0e3dfccd54c352fcdcacbed80f194e264b75d7a7c74e4ce"


@pytest.fixture
def workDir(tmp_path, bip143Vector, resetConfig):
    (tmp_path / "tx.hex").write_text(bip143Vector["tx"] + "\n")
    (tmp_path / "empty.conf").write_text("")
    return tmp_path


def run(workDir, bip143Vector, *args, configfile="empty.conf"):
    argv = [
        "--tx", str(workDir / "tx.hex"),
        "--configfile", str(workDir / configfile),
        "--input", "1",
        "--amount", str(bip143Vector["amounts"][1]),
        "--prevscript", "1:" + bip143Vector["prevScripts"][1],
    ]
    return cli.main(argv + list(args))


def test_sighash(workDir, bip143Vector, capsys):
    assert run(workDir, bip143Vector) == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_ALL}\n"

    assert run(workDir, bip143Vector, "--hashtype", "SIGHASH_ALL", "--debug") == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_ALL}\n"


def test_default_tx_file(workDir, bip143Vector, monkeypatch, capsys):
    monkeypatch.chdir(workDir)
    argv = [
        "--configfile", str(workDir / "empty.conf"),
        "--input", "1",
        "--amount", str(bip143Vector["amounts"][1]),
        "--prevscript", "1:" + bip143Vector["prevScripts"][1],
    ]
    assert cli.main(argv) == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_ALL}\n"


def test_stdin(workDir, bip143Vector, monkeypatch, capsys):
    stdin = io.TextIOWrapper(io.BytesIO(bip143Vector["tx"].encode()))
    monkeypatch.setattr(sys, "stdin", stdin)
    assert run(workDir, bip143Vector, "--tx", "-") == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_ALL}\n"


def test_literal_single(workDir, bip143Vector, capsys):
    assert run(workDir, bip143Vector, "--hashtype", "SINGLE", "--literal-single") == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_LITERAL_SINGLE}\n"

    logPath = workDir / "logs" / "bip143.log"
    (workDir / "literal.conf").write_text(f"literalsingle = true\nlogfile = {logPath}\n")
    assert run(workDir, bip143Vector, "--hashtype", "SINGLE", configfile="literal.conf") == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_LITERAL_SINGLE}\n"
    assert logPath.is_file()

    # The command line overrides the configuration file.
    assert run(
        workDir, bip143Vector, "--hashtype", "SINGLE", "--no-literal-single", configfile="literal.conf"
    ) == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_SINGLE}\n"


def test_decimal_hash_type(workDir, bip143Vector, capsys):
    assert run(workDir, bip143Vector, "--hashtype", "03") == 0
    assert capsys.readouterr().out == f"sighash: {SIGHASH_SINGLE}\n"


def test_errors(workDir, bip143Vector, capsys):
    tests = (
        ("--input", "2"),
        ("--input", "-1"),
        ("--hashtype", "EVERYTHING"),
        ("--prevscript", "1-0014"),
        ("--prevscript", "x:0014"),
        ("--prevscript", "1:zz"),
        ("--prevscript", "5:00141d0f172a0ecb48aee1be1f2687d2963ae33f71a1"),
        ("--prevscript", "1:0014"),
        ("--amount", str(1 << 63)),
        ("--tx", str(workDir / "missing.hex")),
    )
    for args in tests:
        assert run(workDir, bip143Vector, *args) == 1, args
    assert capsys.readouterr().out == ""

    # A missing configuration file is reported before anything else.
    assert run(workDir, bip143Vector, configfile="missing.conf") == 1
    assert "configuration error" in capsys.readouterr().err


def test_missing_placeholder(workDir, bip143Vector):
    argv = [
        "--tx", str(workDir / "tx.hex"),
        "--configfile", str(workDir / "empty.conf"),
        "--input", "1",
        "--amount", "1",
    ]
    assert cli.main(argv) == 1


def test_readTx(tmp_path, bip143Vector):
    path = tmp_path / "tx.hex"
    path.write_text("  " + bip143Vector["tx"] + "\n\n")
    tx = cli.readTx(str(path))
    assert len(tx.txIn) == 2
    assert tx.lockTime == 17

    for bad in ("not hex", bip143Vector["tx"] + "00", bip143Vector["tx"][:-2], "0"):
        path.write_text(bad)
        with pytest.raises(SighashError):
            cli.readTx(str(path))

    path.write_bytes(b"\xff\xfe\x00\x01")
    with pytest.raises(SighashError):
        cli.readTx(str(path))


def test_applyPrevScripts(bip143Vector):
    tx = msgtx.MsgTx.deserialize(ByteArray(bip143Vector["tx"]))
    cli.applyPrevScripts(tx, ["0:00", " 1:" + bip143Vector["prevScripts"][1]])
    assert tx.txIn[0].signatureScript.hex() == "00"
    assert tx.txIn[1].signatureScript.hex() == bip143Vector["prevScripts"][1]


def test_unreadable_files(workDir, bip143Vector, capsys):
    (workDir / "bad.conf").write_text("literalsingle\n")
    assert run(workDir, bip143Vector, configfile="bad.conf") == 1
    assert "configuration error" in capsys.readouterr().err

    (workDir / "tx.hex").write_bytes(b"\xff\xfe\x00\x01")
    assert run(workDir, bip143Vector) == 1
    assert capsys.readouterr().out == ""
