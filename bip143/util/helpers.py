"""
Copyright (c) 2019-2020, The Decred developers
See LICENSE for details

Logging, file system and configuration file helpers.
"""

import configparser
import logging
from logging import Logger
from logging.handlers import RotatingFileHandler
import os
from pathlib import Path
import sys
import traceback
from typing import Dict, Iterable, List, Optional, Union


# Rotate the log file at 5 MB, keeping two old files.
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 2

LOG_FORMAT = "%(asctime)s %(module)s %(levelname)s %(funcName)s(%(lineno)d) %(message)s"


def formatTraceback(err: Exception) -> str:
    """
    The error message followed by its traceback, for logging.
    """
    return "".join(traceback.format_exception(type(err), err, err.__traceback__))


def mkdir(path: Union[Path, str]) -> bool:
    """
    Create the directory and any missing parents.

    Args:
        path: the directory path.

    Returns:
        False if a file is in the way, otherwise True.
    """
    if os.path.isfile(path):
        return False
    os.makedirs(path, exist_ok=True)
    return True


class LogSettings:
    """
    Module-wide logging state. Named loggers are children of the root logger
    with their own levels, so the root itself passes everything.
    """

    root = logging.getLogger("")
    defaultLevel = logging.INFO
    moduleLevels: Dict[str, int] = {}
    loggers: Dict[str, Logger] = {}
    handlers: List[logging.Handler] = []


LogSettings.root.setLevel(logging.NOTSET)


def prepareLogging(
    filepath: Union[Path, str, None] = None,
    logLvl: int = logging.INFO,
    lvlMap: Optional[Dict[str, int]] = None,
) -> None:
    """
    Set the logging levels and install the log handlers. Records go to
    stderr, and also to a rotating log file if filepath is provided. Handlers
    from an earlier call are replaced.

    Args:
        filepath: The base name for the rotating log file.
        logLvl: The level of loggers without an entry in lvlMap, including
            loggers created later.
        lvlMap: Per-name levels, merged into those from earlier calls.
    """
    LogSettings.defaultLevel = logLvl
    if lvlMap:
        LogSettings.moduleLevels.update(lvlMap)
    for name, logger in LogSettings.loggers.items():
        logger.setLevel(LogSettings.moduleLevels.get(name, logLvl))

    for handler in LogSettings.handlers:
        LogSettings.root.removeHandler(handler)
        handler.close()
    LogSettings.handlers = []

    if filepath:
        LogSettings.handlers.append(
            RotatingFileHandler(
                filepath, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS
            )
        )
    # pythonw on Windows has no console.
    if not sys.executable.endswith("pythonw.exe"):
        LogSettings.handlers.append(logging.StreamHandler())

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in LogSettings.handlers:
        handler.setFormatter(formatter)
        LogSettings.root.addHandler(handler)


def getLogger(name: str) -> Logger:
    """
    Gets a named logger, with the level registered for the name in
    prepareLogging, or the default level.
    """
    logger = LogSettings.root.getChild(name)
    logger.setLevel(LogSettings.moduleLevels.get(name, LogSettings.defaultLevel))
    LogSettings.loggers[name] = logger
    return logger


def parseLogLevel(lvl: Union[str, int]) -> int:
    """
    Parse a logging level given by name (case-insensitive) or number.

    Args:
        lvl: The level, e.g. "debug", "WARNING" or "10".

    Returns:
        The numeric logging level.

    Raises:
        ValueError if the level is not recognized.
    """
    if isinstance(lvl, int):
        return lvl
    lvl = lvl.strip()
    if lvl.isdigit():
        return int(lvl)
    num = logging.getLevelName(lvl.upper())
    if not isinstance(num, int):
        raise ValueError(f"unknown log level {lvl!r}")
    return num


def readINI(path: str, keys: Iterable[str]) -> Dict[str, str]:
    """
    Read the keys from an INI file. Settings before the first section header
    are allowed, and every section is searched. Keys that are not found are
    absent from the result.

    Args:
        path: The path to the INI configuration file.
        keys: Keys to search for.

    Returns:
        Discovered keys and values.
    """
    parser = configparser.ConfigParser(strict=False, interpolation=None)
    with open(path, encoding="utf-8") as f:
        parser.read_string("[bip143]\n" + f.read())
    keys = set(keys)
    res = {}
    for section in parser.sections():
        for k, v in parser.items(section):
            if k in keys:
                res[k] = v
    return res
