"""
Logging setup for the assistant process.
"""
import logging
import sys

LOG_FILE = "yo_assistant.log"


def setup_logging(verbose: bool = False, quiet: bool = False, log_file: str = LOG_FILE):
    """Log to stdout and ``log_file``."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(log_file)
        ]
    )
    set_log_level(verbose=verbose, quiet=quiet)


def set_log_level(verbose: bool = False, quiet: bool = False):
    """Adjust the root level; quiet wins over verbose."""
    if quiet:
        level = logging.WARNING
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    logging.getLogger().setLevel(level)
