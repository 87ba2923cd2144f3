"""
Console logging setup.
"""

import logging
from typing import Union

import colorlog

LOG_FORMAT = '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def setup_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Install a colored stream handler on the root logger.

    Calling it again replaces the handler instead of stacking a second one.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = colorlog.StreamHandler()
    handler.setFormatter(colorlog.ColoredFormatter(
        LOG_FORMAT,
        log_colors={
            'DEBUG': 'cyan',
            'INFO': 'green',
            'WARNING': 'yellow',
            'ERROR': 'red',
            'CRITICAL': 'red,bg_white'
        }
    ))

    root = logging.getLogger()
    for existing in list(root.handlers):
        if getattr(existing, '_shift_indexer', False):
            root.removeHandler(existing)
    handler._shift_indexer = True
    root.addHandler(handler)
    root.setLevel(level)
    return root
