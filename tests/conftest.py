"""
Copyright (c) 2019, the Decred developers
See LICENSE for details
"""

import random

import pytest

from bip143 import config
from bip143.util import helpers


# Seed initialization is delegated to tests.
# random.seed(0)


@pytest.fixture
def randBytes():
    def _randBytes(low=0, high=50):
        return bytes(random.randint(0, 255) for _ in range(random.randint(low, high)))

    return _randBytes


@pytest.fixture(scope="module")
def prepareLogger(request):
    helpers.prepareLogging()


@pytest.fixture
def resetConfig(monkeypatch):
    monkeypatch.setattr(config, "sighashConfig", None)


# The native P2WPKH example from BIP0143. Input 1 spends a P2WPKH output
# holding 6 BTC.
BIP143_UNSIGNED_TX = (
    "0100000002fff7f7881a8099afa6940d42d1e7f6362bec38171ea3edf433541db4e4ad96"
    "9f0000000000eeffffffef51e1b804cc89d182d279655c3aa89e815b1b309fe287d9b2b5"
    "5d57b90ec68a0100000000ffffffff02202cb206000000001976a9148280b37df378db99"
    "f66f85c95a783a76ac7a6d5988ac9093510d000000001976a9143bde42dbee7e4dbe6a21"
    "b2d50ce2f0167faa815988ac11000000"
)
BIP143_PREV_SCRIPT_0 = "2103c9f4836b9a4f77fc0d81f7bcb01b7f1b35916864b9476c241ce9fc198bd25432ac"
BIP143_AMOUNT_0 = 625000000
BIP143_PREV_SCRIPT_1 = "00141d0f172a0ecb48aee1be1f2687d2963ae33f71a1"
BIP143_AMOUNT_1 = 600000000


@pytest.fixture
def bip143Vector():
    return dict(
        tx=BIP143_UNSIGNED_TX,
        prevScripts=[BIP143_PREV_SCRIPT_0, BIP143_PREV_SCRIPT_1],
        amounts=[BIP143_AMOUNT_0, BIP143_AMOUNT_1],
    )
