"""Configuración de logging.

La librería solo emite con `logging.getLogger(__name__)`; quien la usa decide
los handlers. La CLI instala un `RichHandler` para que los mensajes convivan
con los paneles de Rich.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "interactsh_client"


def setup_logging(verbose: bool = False, console: Console | None = None) -> logging.Logger:
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(console=console, show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
