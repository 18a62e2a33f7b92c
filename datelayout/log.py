"""Console logging for the ``datelayout`` command."""
import logging
import sys

from colorama import Fore, Style, just_fix_windows_console

LOGGER_NAME = "datelayout"


class ColoredFormatter(logging.Formatter):
    COLORS = {
        'DEBUG': Fore.CYAN,
        'INFO': Fore.GREEN,
        'WARNING': Fore.YELLOW,
        'ERROR': Fore.RED,
        'CRITICAL': Fore.MAGENTA,
    }

    def format(self, record):
        color = self.COLORS.get(record.levelname, '')
        formatter = logging.Formatter(f"{color}[%(levelname)s]{Style.RESET_ALL}\t%(message)s")
        return formatter.format(record)


def configure_logging(verbose: bool = False, stream=None) -> logging.Logger:
    """Attach a colored stream handler to the ``datelayout`` logger.

    Calling it again replaces the handler instead of adding another one.
    """
    just_fix_windows_console()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    for h in list(logger.handlers):
        if getattr(h, "_datelayout", False):
            logger.removeHandler(h)
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(ColoredFormatter())
    handler._datelayout = True
    logger.addHandler(handler)
    return logger
