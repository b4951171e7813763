"""
Copyright (c) 2019-2020, the Decred developers
See LICENSE for details
"""


class SighashError(Exception):
    pass


class InputIndexError(SighashError):
    """
    The input index being signed does not refer to an input of the
    transaction.
    """

    pass


class MalformedPlaceholderError(SighashError):
    """
    The signature script of the input being signed is too short to hold the
    witness program placeholder that the script code is built from.
    """

    pass
