"""
Logging Setup

Verbosity follows the scan plugin scale 0..6:

    0       errors only
    1-2     warnings
    3-4     messages (default)
    5-6     debug, with function name and line number

Log targets are 'off', 'stdout', 'stderr' and 'syslog'.
"""

import logging
import logging.handlers
import sys


LOG_TARGETS = ('off', 'stdout', 'stderr', 'syslog')

DEFAULT_VERBOSITY = 3


def verbosity_to_level(verbosity: int) -> int:
    """Map a 0..6 verbosity to a logging level."""
    if verbosity <= 0:
        return logging.ERROR
    if verbosity <= 2:
        return logging.WARNING
    if verbosity <= 4:
        return logging.INFO
    return logging.DEBUG


def setup_logging(verbosity: int = DEFAULT_VERBOSITY, target: str = 'stdout',
                  logger_name: str = 'dvbscan') -> logging.Logger:
    """
    Configure the package logger.

    Replaces handlers installed by an earlier call.

    Args:
        verbosity: 0..6
        target: One of LOG_TARGETS
        logger_name: Logger to configure

    Returns:
        The configured logger

    Raises:
        ValueError: For an unknown target
    """
    if target not in LOG_TARGETS:
        raise ValueError(f"unknown log target '{target}', expected one of {LOG_TARGETS}")

    logger = logging.getLogger(logger_name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(verbosity_to_level(verbosity))

    if target == 'off':
        logger.addHandler(logging.NullHandler())
        return logger

    if target == 'syslog':
        handler = logging.handlers.SysLogHandler(address='/dev/log')
        handler.setFormatter(logging.Formatter('%(name)s: %(message)s'))
    else:
        handler = logging.StreamHandler(sys.stdout if target == 'stdout' else sys.stderr)
        fmt = '%(asctime)s '
        if verbosity >= 5:
            fmt += '%(funcName)s:%(lineno)d '
        fmt += '%(message)s'
        handler.setFormatter(logging.Formatter(fmt, datefmt='%H:%M:%S'))

    logger.addHandler(handler)
    return logger
