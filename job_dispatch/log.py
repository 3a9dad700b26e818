"""Output logging."""
# pylint: disable=global-statement
from __future__ import annotations

import logging
import os

import attr
import attrs
import click
import yaml
from rich.logging import RichHandler
from rich.traceback import install

SUPRESS_TRACEBACK_MODULES = [attr, attrs, click, yaml]


def update_traceback():
    install(show_locals=False, suppress=SUPRESS_TRACEBACK_MODULES)


def add_supress_traceback_module(module):
    SUPRESS_TRACEBACK_MODULES.append(module)
    update_traceback()


update_traceback()


def get_time_str(log_time):
    return log_time.strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]


SAVED_LEVEL = "WARNING"


def configure_logger(level=None, third_party_level="ERROR"):
    """
    Configures the logging system with customizable settings.

    :param level: The logging level to set for the ``job_dispatch`` logger. If None,
        uses the previously saved logging level. If an integer is provided, it is
        interpreted as a verbosity count (0 -> WARNING, 1 -> INFO, 2 -> DEBUG). If a
        string is provided, it should be one of the logging level names.
    :param third_party_level: The logging level to set for third-party libraries
        (``kubernetes``, ``urllib3``). Defaults to 'ERROR'.

    .. note::
        A plain stream handler is used when running inside a pod, a rich handler
        otherwise.

    :returns: None
    """

    for _ in (
        "kubernetes",
        "kubernetes.client.rest",
        "urllib3",
        "urllib3.connectionpool",
    ):
        logging.getLogger(_).setLevel(third_party_level)

    global SAVED_LEVEL
    if level is None:
        level = SAVED_LEVEL
    else:
        if isinstance(level, int):
            level = max(10, 30 - 10 * level)
        SAVED_LEVEL = level

    stream_handler = logging.StreamHandler()
    formatter = logging.Formatter("%(asctime)s %(name)s %(levelname)s: %(message)s")
    stream_handler.setFormatter(formatter)

    rich_handler = RichHandler(
        rich_tracebacks=True,
        show_path=False,
        show_time=True,
        enable_link_path=False,
        log_time_format=get_time_str,
        tracebacks_word_wrap=False,
    )
    if "KUBERNETES_SERVICE_HOST" in os.environ:
        handlers: list[logging.Handler] = [stream_handler]
    else:
        handlers = [rich_handler]
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers)
    logging.getLogger("job_dispatch").setLevel(level)


def get_logger(name):
    """
    Get a logger with the specified name, creating it if necessary.

    :param name: An identifying name (channel) for the logger to get. Code in this
        package uses "job_dispatch".

    :returns: Logger instance
    """

    configure_logger()
    return logging.getLogger(name)


def set_verbosity(verbosity_level):
    """
    Set the log level of the ``job_dispatch`` logger, as well as the default
    verbosity for any subsequently-created loggers.

    :param verbosity_level: The logging level name (e.g., 'DEBUG', 'INFO').

    :returns: None
    """
    global SAVED_LEVEL
    SAVED_LEVEL = verbosity_level
    logging.getLogger("job_dispatch").setLevel(verbosity_level)
