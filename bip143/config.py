"""
Copyright (c) 2019, Brian Stafford
Copyright (c) 2019-2020, the Decred developers
See LICENSE for details

Configuration settings for the bip143 tool.
"""

import configparser
import logging
import os

from appdirs import AppDirs

from bip143 import SighashError
from bip143.util import helpers


# The configuration file lives in an OS-appropriate location.
_ad = AppDirs("bip143", False)
DATA_DIR = _ad.user_data_dir

CONFIG_NAME = "bip143.conf"
CONFIG_PATH = os.path.join(DATA_DIR, CONFIG_NAME)

# Recognized configuration file keys.
LOG_LEVEL = "loglevel"
LOG_FILE = "logfile"
LITERAL_SINGLE = "literalsingle"
CONFIG_KEYS = (LOG_LEVEL, LOG_FILE, LITERAL_SINGLE)

log = helpers.getLogger("CONFIG")


def parseBool(k, v):
    """
    Parse an INI boolean.

    Args:
        k (str): The setting key, for error messages.
        v (str): The value.

    Returns:
        bool: The parsed value.
    """
    v = v.strip().lower()
    if v in ("1", "yes", "true", "on"):
        return True
    if v in ("0", "no", "false", "off"):
        return False
    raise SighashError(f"invalid boolean {v!r} for {k}")


class SighashConfig:
    """
    SighashConfig is the configuration settings. The configuration file is INI
    formatted, with or without section headers.
    """

    def __init__(self, path=None):
        """
        Args:
            path (str): Optional. The configuration file path. If not provided,
                the default location is used, and a missing file means default
                settings. An explicitly provided file must exist.
        """
        self.path = path or CONFIG_PATH
        self.file = {}
        if os.path.isfile(self.path):
            try:
                self.file = helpers.readINI(self.path, CONFIG_KEYS)
            except (configparser.Error, UnicodeDecodeError) as e:
                raise SighashError(f"cannot parse configuration file {self.path}: {e}")
        elif path:
            raise SighashError(f"configuration file {path} not found")
        else:
            log.debug(f"no configuration file at {self.path}, using defaults")

        self.logLevel = logging.INFO
        if LOG_LEVEL in self.file:
            try:
                self.logLevel = helpers.parseLogLevel(self.file[LOG_LEVEL])
            except ValueError as e:
                raise SighashError(f"invalid {LOG_LEVEL}: {e}")

        self.logFile = self.file.get(LOG_FILE) or None

        self.literalSingle = False
        if LITERAL_SINGLE in self.file:
            self.literalSingle = parseBool(LITERAL_SINGLE, self.file[LITERAL_SINGLE])

    def get(self, k):
        """
        Retrieve the raw file setting for the key.

        Args:
            k (str): The setting key.

        Returns:
            str: The value, or None if not set.
        """
        return self.file.get(k)


sighashConfig = None


def load(path=None):
    """
    Load and return the current configuration.

    The configuration is only loaded once. Successive calls to the modular `load`
    function will return the same instance, unless a different path is
    requested.

    Returns:
        SighashConfig: The current configuration.
    """
    global sighashConfig
    if not sighashConfig or (path and sighashConfig.path != path):
        sighashConfig = SighashConfig(path)
    return sighashConfig
