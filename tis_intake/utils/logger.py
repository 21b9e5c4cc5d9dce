import logging, os, sys


_ROOT_LOGGER_NAME = "tis_intake"


def _root_logger() -> logging.Logger:
    root = logging.getLogger(_ROOT_LOGGER_NAME)
    if root.handlers:
        return root
    root.setLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    ch = logging.StreamHandler(sys.stdout)
    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ch.setFormatter(fmt)
    root.addHandler(ch)
    return root


def get_logger(name: str) -> logging.Logger:
    """Child of the package logger, so server, client and CLI share one handler."""
    _root_logger()
    return logging.getLogger(f"{_ROOT_LOGGER_NAME}.{name}")


def set_level(level: str | int) -> None:
    _root_logger().setLevel(level)
