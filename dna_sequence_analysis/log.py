#!/usr/bin/env python3
"""
Copyright (c) 2025, Josh Walker

Redistribution and use in source and binary forms, with or without
modification, are permitted provided that the following conditions are met:

1. Redistributions of source code must retain the above copyright notice, this
   list of conditions and the following disclaimer.

2. Redistributions in binary form must reproduce the above copyright notice,
   this list of conditions and the following disclaimer in the documentation
   and/or other materials provided with the distribution.

THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE
DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE
FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL
DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR
SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY,
OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE
OF THIS SOFTWARE, EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.

Logging configuration for the command line front end.

The library modules only create module-level loggers; nothing is configured
until setup_logger (or the first get_logger call) runs.
"""

import logging
import os
import sys
import threading
from typing import Optional

import coloredlogs

_is_configured = False
_lock = threading.Lock()

VALID_PREFIXES = ["dna_sequence_analysis"]

# The format of the log messages in the file
FILE_FORMAT = "%(levelname)s:%(asctime)s:%(name)s:%(message)s"
DATE_FORMAT = "%H-%M-%S"

# Format of log messages in the console
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


class CodebaseFilter(logging.Filter):
    def filter(self, record):
        return any(record.name.startswith(prefix) for prefix in VALID_PREFIXES)


def setup_logger(verbose: bool = False, log_file: Optional[str] = None):
    """
    Configures the root logger for the package.

    Args:
        verbose (bool): If True, the console handler is set to DEBUG level.
        log_file (Optional[str]): Path of a log file. If None, no file logging is done.
    """
    global _is_configured

    root_logger = logging.getLogger()

    # Avoid adding duplicate handlers
    if root_logger.hasHandlers():
        root_logger.handlers.clear()
    root_logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(coloredlogs.ColoredFormatter(fmt=CONSOLE_FORMAT))
    console.addFilter(CodebaseFilter())
    root_logger.addHandler(console)

    if log_file is not None:
        directory = os.path.dirname(log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fh = logging.FileHandler(filename=log_file, mode="w")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        fh.addFilter(CodebaseFilter())
        root_logger.addHandler(fh)

    _is_configured = True
    if log_file is not None:
        logging.getLogger(__name__).debug(f"Logging to file: {log_file}")


def get_logger(name: str) -> logging.Logger:
    with _lock:
        if not _is_configured:
            setup_logger()

    return logging.getLogger(name)
