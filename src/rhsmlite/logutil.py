# Copyright (c) 2024 Red Hat, Inc.
#
# This software is licensed to you under the GNU General Public License,
# version 2 (GPLv2). There is NO WARRANTY for this software, express or
# implied, including the implied warranties of MERCHANTABILITY or FITNESS
# FOR A PARTICULAR PURPOSE. You should have received a copy of GPLv2
# along with this software; if not, see
# http://www.gnu.org/licenses/old-licenses/gpl-2.0.txt.
#
# Red Hat trademarks are not licensed under GPLv2. No permission is
# granted to use or replicate Red Hat trademarks that are incorporated
# in this software or its documentation.
#

from typing import List, Optional, Tuple, Union

import logging
import logging.handlers
import os
import sys

from rhsmlite import config as rhsm_config

LOGFILE_DIR = "/var/log/rhsm/"
LOGFILE_PATH = os.path.join(LOGFILE_DIR, "rhsm.log")
USER_LOGFILE_DIR = os.path.join(
    os.path.expanduser(os.getenv("XDG_CACHE_HOME", "~/.cache")),
    "rhsm",
)
USER_LOGFILE_PATH = os.path.join(USER_LOGFILE_DIR, "rhsm.log")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(cmd_name)s:%(process)d @%(filename)s:%(lineno)d - %(message)s"

DEBUG_ENV_VAR = "SUBMAN_DEBUG"

_rhsm_log_handler: Optional[logging.Handler] = None
_subman_debug_handler: Optional["SubmanDebugHandler"] = None
log: Optional[logging.Logger] = None
ROOT_NAMESPACES = [
    "rhsmlite",
    "subman",
    "rhsm-app",
]


class ContextLoggingFilter(logging.Filter):
    """Find the name of the process as 'cmd_name'"""

    current_cmd: str = os.path.basename(sys.argv[0])

    def filter(self, record: logging.LogRecord) -> bool:
        record.cmd_name = self.current_cmd
        return True


class SubmanDebugLoggingFilter(logging.Filter):
    """Filter all log records unless env SUBMAN_DEBUG exists

    Used to turn on stderr logging for cli debugging.
    """

    def __init__(self, name: str = "") -> None:
        super().__init__(name)
        self.on: bool = os.environ.get(DEBUG_ENV_VAR, "") != ""

    def filter(self, record: logging.LogRecord) -> bool:
        return self.on


def RHSMLogHandler(
    root_log_file: str, user_log_file: str
) -> Tuple[Union[logging.handlers.RotatingFileHandler, logging.StreamHandler], Optional[str]]:
    """Factory for the file logging handler.

    When run as root, /var/log/rhsm/rhsm.log is used. Other users log to
    $XDG_CACHE_HOME (~/.cache).

    If the directory is not writable, the messages will be written to stderr
    instead.
    """
    err: Optional[str] = None
    result: Union[logging.handlers.RotatingFileHandler, logging.StreamHandler]

    log_file: str = root_log_file if os.getuid() == 0 else user_log_file

    try:
        os.makedirs(os.path.dirname(log_file), exist_ok=True)
        result = logging.handlers.RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=5)
    except OSError as exc:
        result = logging.StreamHandler()
        err = f"{exc} - Further logging output will be written to stderr"

    result.addFilter(ContextLoggingFilter())
    return result, err


class SubmanDebugHandler(logging.StreamHandler):
    """Logging Handler for cli debugging.

    This handler only emits records if SUBMAN_DEBUG exists in os.environ."""

    def __init__(self, *args, **kwargs):
        super(SubmanDebugHandler, self).__init__(*args, **kwargs)
        self.addFilter(ContextLoggingFilter())
        self.addFilter(SubmanDebugLoggingFilter())


def _get_default_rhsm_log_handler() -> Tuple[logging.Handler, Optional[str]]:
    global _rhsm_log_handler
    error: Optional[str] = None
    if not _rhsm_log_handler:
        _rhsm_log_handler, error = RHSMLogHandler(LOGFILE_PATH, USER_LOGFILE_PATH)
        _rhsm_log_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return _rhsm_log_handler, error


def _get_default_subman_debug_handler() -> "SubmanDebugHandler":
    global _subman_debug_handler
    if not _subman_debug_handler:
        _subman_debug_handler = SubmanDebugHandler()
        _subman_debug_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return _subman_debug_handler


def _log_level(config: rhsm_config.RhsmConfigParser, value: str) -> int:
    value = value.strip().upper()
    if not config.is_log_level_valid(value):
        # This is not a valid logging level, set to INFO
        value = "INFO"
    return getattr(logging, value)


def init_logger(config: Optional[rhsm_config.RhsmConfigParser] = None) -> None:
    """Setup logging for all our root namespaces.

    Only needs to be called once per process.
    """

    global log
    if log:
        log.warning("logging already initialized")
        return

    if config is None:
        config = rhsm_config.get_config_parser()

    default_log_level = _log_level(config, config.get("logging", "default_log_level"))

    pending_error_messages: List[str] = []

    for root_namespace in ROOT_NAMESPACES:
        logger = logging.getLogger(root_namespace)
        rhsm_handler, error = _get_default_rhsm_log_handler()
        if error:
            pending_error_messages.append(error)
        logger.addHandler(rhsm_handler)
        logger.addHandler(_get_default_subman_debug_handler())
        logger.setLevel(default_log_level)

    # Per-logger levels, e.g. "subman.session = DEBUG" in the [logging] section
    for logger_name, logging_level in config.items("logging"):
        logger_name = logger_name.strip()
        if logger_name.split(".")[0] not in ROOT_NAMESPACES:
            # Don't allow our logging configuration to mess with loggers
            # outside the namespaces we claim as ours
            continue
        logging.getLogger(logger_name).setLevel(_log_level(config, logging_level))

    log = logging.getLogger(__name__)

    # Errors from setting up the file handler are only logged once our own
    # handlers are attached; logging them earlier would configure the root logger.
    for error_message in pending_error_messages:
        log.error(error_message)
