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

"""
Read-only access to the local system purpose file, whose attributes are
sent to the server during registration.
"""

import errno
import json
import logging
from typing import Any, Dict, List, Optional

from subman.i18n import ugettext as _

log = logging.getLogger(__name__)

USER_SYSPURPOSE = "/etc/rhsm/syspurpose/syspurpose.json"

ROLE = "role"
ADDONS = "addons"
SERVICE_LEVEL = "service_level_agreement"
USAGE = "usage"


def read_syspurpose(
    path: str = USER_SYSPURPOSE,
    raise_on_error: bool = False,
    warnings: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Reads the system purpose from the file system. A file which exists but
    can not be used is reported in warnings, when given.
    :return: A dictionary containing the total syspurpose.
    """
    try:
        with open(path, "r") as syspurpose_file:
            content = json.load(syspurpose_file)
    except (OSError, ValueError) as err:
        # In the event this file could not be read treat it as empty
        if raise_on_error:
            raise
        if isinstance(err, OSError) and err.errno == errno.ENOENT:
            log.warning("Unable to read system purpose file %s: %s" % (path, err))
        else:
            _warn(warnings, _("Unable to read system purpose file {path}: {error}").format(path=path, error=err))
        return {}

    if not isinstance(content, dict):
        _warn(warnings, _("System purpose file {path} does not contain JSON object").format(path=path))
        return {}
    return content


def _warn(warnings: Optional[List[str]], message: str) -> None:
    log.warning(message)
    if warnings is not None:
        warnings.append(message)


def registration_attributes(syspurpose: Dict[str, Any]) -> Dict[str, Any]:
    """
    Translate system purpose into keyword arguments of
    UEPConnection.registerConsumer(). Attributes which are not set are left out.
    """
    attributes: Dict[str, Any] = {}
    for key, arg in ((ROLE, "role"), (SERVICE_LEVEL, "service_level"), (USAGE, "usage")):
        value = syspurpose.get(key)
        if isinstance(value, str) and value:
            attributes[arg] = value
        elif value:
            log.warning("Ignoring system purpose attribute %s with unexpected value: %s" % (key, value))

    addons = syspurpose.get(ADDONS)
    if isinstance(addons, list) and addons:
        attributes["addons"] = addons
    elif addons:
        log.warning("Ignoring system purpose attribute %s with unexpected value: %s" % (ADDONS, addons))
    return attributes
