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
import gettext
import locale
import logging
import os

# Localization domain:
APP = "rhsm"
# Directory where translations are deployed:
DIR = "/usr/share/locale/"

TRANSLATION = gettext.translation(APP, fallback=True)

log = logging.getLogger(__name__)


def configure_i18n() -> None:
    """
    Configure internationalization for the application. Should only be
    called once per invocation.
    """
    try:
        locale.setlocale(category=locale.LC_ALL, locale="")
    except locale.Error:
        # The language code may be valid, but the system has not been
        # configured to use it (see `locale -a`)
        os.environ["LC_ALL"] = "C.UTF-8"
        locale.setlocale(category=locale.LC_ALL, locale="")
    configure_gettext()


def configure_gettext() -> None:
    """Bind the rhsm text domain for all code using this module."""
    global TRANSLATION
    gettext.bindtextdomain(APP, DIR)
    gettext.textdomain(APP)
    TRANSLATION = gettext.translation(APP, DIR, fallback=True)


def ugettext(*args, **kwargs) -> str:
    return TRANSLATION.gettext(*args, **kwargs)


def ungettext(*args, **kwargs) -> str:
    return TRANSLATION.ngettext(*args, **kwargs)
