import logging
import sys

FORMAT = "%(asctime)s - %(levelname)s - %(module)s %(lineno)d: %(message)s"
DATE_FORMAT = "[%d/%m/%Y %H:%M]"


class LessThanFilter(logging.Filter):
    def __init__(self, exclusive_maximum, name=""):
        super(LessThanFilter, self).__init__(name)
        self.max_level = exclusive_maximum

    def filter(self, record):
        # non-zero return means we log this message
        return 1 if record.levelno < self.max_level else 0


def create_logger(level: str = "WARNING", name: str = None) -> logging.Logger:
    """
    Attach stdout/stderr handlers to a logger and set its level

    Warnings and errors from the dispatcher go to stderr, everything below to stdout.

    :param level: str
    :param name: str

    :return: logging.Logger
    """
    fmt = logging.Formatter(FORMAT, datefmt=DATE_FORMAT)

    _logger = get_logger(name)
    if any(handler.get_name() in ("stdout", "stderr") for handler in _logger.handlers):
        _logger.setLevel(level.upper())
        return _logger

    stdout_handler = logging.StreamHandler(stream=sys.stdout)
    stdout_handler.setFormatter(fmt)
    stdout_handler.set_name("stdout")
    stdout_handler.setLevel(logging.DEBUG)
    stdout_handler.addFilter(LessThanFilter(logging.WARNING))

    stderr_handler = logging.StreamHandler(stream=sys.stderr)
    stderr_handler.setFormatter(fmt)
    stderr_handler.set_name("stderr")
    stderr_handler.setLevel(logging.WARNING)

    _logger.addHandler(stdout_handler)
    _logger.addHandler(stderr_handler)
    _logger.setLevel(level.upper())
    _logger.propagate = False
    _logger.log(logging.INFO, f"Setting loglevel to {level} for Logger {name}.")
    return _logger


def get_logger(name: str = None) -> logging.Logger:
    return logging.getLogger(name)
