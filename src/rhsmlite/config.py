# This module has been originally modified and enhanced from Red Hat Update
# Agent's config module.
#
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

import os
import logging
import re
import sys
from typing import Dict, List, NamedTuple, Optional, Tuple
from urllib.parse import urlparse

from iniparse import SafeConfigParser
from iniparse.compat import NoOptionError, InterpolationMissingOptionError, NoSectionError

from subman.i18n import ugettext as _

CONFIG_ENV_VAR = "RHSM_CONFIG"

DEFAULT_CONFIG_DIR = "/etc/rhsm/"
DEFAULT_CONFIG_PATH = "%srhsm.conf" % DEFAULT_CONFIG_DIR
DEFAULT_SERVER_TIMEOUT = "180"

DEFAULT_HOSTNAME = "subscription.rhsm.redhat.com"
DEFAULT_PORT = "443"
DEFAULT_PREFIX = "/subscription"

DEFAULT_CDN_HOSTNAME = "cdn.redhat.com"

DEFAULT_CA_CERT_DIR = "/etc/rhsm/ca/"
DEFAULT_ENT_CERT_DIR = "/etc/pki/entitlement"

SERVER_DEFAULTS = {
    "hostname": DEFAULT_HOSTNAME,
    "prefix": DEFAULT_PREFIX,
    "port": DEFAULT_PORT,
    "server_timeout": DEFAULT_SERVER_TIMEOUT,
    "insecure": "0",
}
RHSM_DEFAULTS = {
    "baseurl": "https://" + DEFAULT_CDN_HOSTNAME,
    "ca_cert_dir": DEFAULT_CA_CERT_DIR,
    "repo_ca_cert": "%(ca_cert_dir)sredhat-uep.pem",
    "productcertdir": "/etc/pki/product",
    "entitlementcertdir": DEFAULT_ENT_CERT_DIR,
    "consumercertdir": "/etc/pki/consumer",
}

LOGGING_DEFAULTS = {
    "default_log_level": "INFO",
}

# Defaults are applied to each section in the config file.
DEFAULTS = {
    "server": SERVER_DEFAULTS,
    "rhsm": RHSM_DEFAULTS,
    "logging": LOGGING_DEFAULTS,
}

VALID_LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

log = logging.getLogger(__name__)


class RhsmConfigParser(SafeConfigParser):
    """Config file parser for rhsm configuration."""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file: Optional[str] = config_file
        SafeConfigParser.__init__(self)
        if self.config_file is not None:
            self.read(self.config_file)

    def read(self, file_names: Optional[List[str]] = None) -> List[str]:
        """
        Read configuration files. When configuration files are not specified, then read self.config_file
        :param file_names: list of configuration files
        :return: list of configuration files read
        """
        if file_names is None:
            return super(RhsmConfigParser, self).read(self.config_file)
        else:
            return super(RhsmConfigParser, self).read(file_names)

    def get(self, section: str, prop: str) -> str:
        """Get a value from rhsm config.

        :param section: config file section
        :param prop: what config property to find, the config item name
        :return: The string value of the config item.

        If config item exists, but is not set, an empty string is returned.
        """
        try:
            return SafeConfigParser.get(self, section, prop)
        except InterpolationMissingOptionError:
            # Defaults aren't interpolated by iniparse, so bake them in as necessary
            raw_val: str = super(RhsmConfigParser, self).get(section, prop, True)
            interpolations: List[str] = re.findall(r"%\((.*?)\)s", raw_val)
            changed: bool = False
            for interp in interpolations:
                if self.has_option(section, interp):
                    super(RhsmConfigParser, self).set(section, interp, self.get(section, interp))
                    changed = True
            if changed:
                return self.get(section, prop)
            raise
        except (NoOptionError, NoSectionError) as er:
            try:
                default: str = DEFAULTS[section][prop.lower()]
            except KeyError:
                # re-raise the NoOptionError, not the key error
                raise er
            return self._interpolate_default(section, default)

    def _interpolate_default(self, section: str, value: str) -> str:
        for interp in re.findall(r"%\((.*?)\)s", value):
            value = value.replace("%%(%s)s" % interp, self.get(section, interp))
        return value

    def set(self, section: str, name: str, value: str) -> None:
        if not self.has_section(section):
            self.add_section(section)
        super(RhsmConfigParser, self).set(section, name, value)

    def is_log_level_valid(self, value: str, print_warning: bool = True) -> bool:
        """
        Check if provided default_log_level value is valid or not
        :param value: value of default_log_level
        :param print_warning: print warning, when provided value is not valid
        :return: True, when value is valid. Otherwise return False
        """
        if value not in VALID_LOG_LEVELS + ["NOTSET"]:
            if print_warning is True:
                print(
                    _("Invalid Log Level: {lvl}, setting to INFO for this run.").format(lvl=value),
                    file=sys.stderr,
                )
                valid_str = ", ".join(VALID_LOG_LEVELS)
                print(_("Valid Values: {valid_str}").format(valid_str=valid_str), file=sys.stderr)
            return False
        return True

    def get_int(self, section: str, prop: str) -> Optional[int]:
        """Get an int value from the config.

        :param section: the config section
        :param prop: the config item name
        :return:
            An int cast from the string read from.
            If config item is unset, return None.
        :raises ValueError:
            If the config value found can not be coerced into an int
        """
        value_string: str = self.get(section, prop)
        if value_string == "":
            return None
        try:
            value_int = int(value_string)
        except (ValueError, TypeError):
            raise ValueError("Section: %s, Property: %s - Integer value expected" % (section, prop))
        return value_int

    def sections(self) -> List[str]:
        result: List[str] = super(RhsmConfigParser, self).sections()
        for section in DEFAULTS:
            if section not in result:
                result.append(section)
        return result

    def has_option(self, section: str, prop: str) -> bool:
        try:
            self.get(section, prop)
            return True
        except (NoOptionError, NoSectionError):
            return False

    def items(self, section: str) -> List[Tuple[str, str]]:
        result: Dict[str, str] = {}
        for key in DEFAULTS.get(section, {}):
            result[key] = self.get(section, key)
        if self.has_section(section):
            for key in super(RhsmConfigParser, self).options(section):
                value = self.get(section, key)
                if value and len(value.strip()) > 0:
                    result[key] = value
        return list(result.items())


class ServerEndpoint(NamedTuple):
    """Where the entitlement server lives. Built once from configuration."""

    hostname: str
    port: int
    prefix: str
    insecure: bool = False

    @classmethod
    def from_config(cls, parser: RhsmConfigParser) -> "ServerEndpoint":
        port: Optional[int] = parser.get_int("server", "port")
        insecure: Optional[int] = parser.get_int("server", "insecure")
        return cls(
            hostname=parser.get("server", "hostname"),
            port=port or int(DEFAULT_PORT),
            prefix=normalize_prefix(parser.get("server", "prefix")),
            insecure=bool(insecure),
        )

    @classmethod
    def from_url(cls, url: str, insecure: bool = False) -> "ServerEndpoint":
        """Endpoint of a content delivery network given as a base URL."""
        parsed = urlparse(url)
        return cls(
            hostname=parsed.hostname or DEFAULT_CDN_HOSTNAME,
            port=parsed.port or int(DEFAULT_PORT),
            prefix=normalize_prefix(parsed.path),
            insecure=insecure,
        )

    def __str__(self) -> str:
        return "https://%s:%s%s" % (self.hostname, self.port, self.prefix)


def normalize_prefix(prefix: Optional[str]) -> str:
    """
    Return the handler prefix with a leading slash and without a trailing one,
    so that paths can be appended as prefix + "/" + path.
    """
    prefix = (prefix or "").strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


CFG: Optional[RhsmConfigParser] = None


def get_config_parser() -> RhsmConfigParser:
    """
    Get the process-wide :class:`RhsmConfigParser` instance.

    The file named by the RHSM_CONFIG environment variable is used when set,
    /etc/rhsm/rhsm.conf otherwise.
    """
    global CFG

    if CFG is None:
        config_file = os.environ.get(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
        log.debug("Loading configuration from %s" % config_file)
        CFG = RhsmConfigParser(config_file=config_file)

    return CFG
