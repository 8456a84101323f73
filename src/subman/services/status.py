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
Read-only queries: compliance status of the consumer and versions of the
client and the server.
"""

import logging
from typing import Dict

from rhsmlite import connection
from rhsmlite.certificate import CertificateException

from subman import version
from subman.cp_provider import CPProvider
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity

log = logging.getLogger(__name__)

UNKNOWN = "unknown"
DISABLED = "disabled"


class StatusService:
    def __init__(self, cp_provider: CPProvider, identity: ConsumerIdentity) -> None:
        self.cp_provider = cp_provider
        self.identity = identity

    def get_status(self) -> Dict[str, str]:
        """
        Overall status and system purpose status of the consumer. Both are
        "unknown" when the system is not registered.
        """
        try:
            uuid = self.identity.read_uuid()
        except (CertificateException, OSError) as err:
            log.debug("Unable to read consumer UUID: %s" % err)
            return {"status": UNKNOWN, "system_purpose_status": UNKNOWN}

        uep = self.cp_provider.get_consumer_auth_cp()
        compliance = uep.getCompliance(uuid) or {}
        status = compliance.get("status") or UNKNOWN

        # Without entitlement tracking (e.g. SCA) there is no purpose compliance either
        if status == DISABLED:
            return {"status": status, "system_purpose_status": DISABLED}

        purpose_compliance = uep.getSyspurposeCompliance(uuid) or {}
        return {
            "status": status,
            "system_purpose_status": purpose_compliance.get("status") or UNKNOWN,
        }


class VersionService:
    def __init__(self, cp_provider: CPProvider) -> None:
        self.cp_provider = cp_provider

    def get_version(self) -> Dict[str, str]:
        """
        Versions of this client and of the server. The server part is
        "Unknown" when the server can not be asked.
        """
        result = {
            "client_version": version.rpm_version,
            "server_version": _("Unknown"),
            "server_rules_version": _("Unknown"),
        }
        try:
            status = self.cp_provider.get_no_auth_cp().getStatus() or {}
        except connection.ConnectionException as err:
            log.warning("Unable to get server status: %s" % err)
            return result

        if status.get("version"):
            server_version = status["version"]
            if status.get("release"):
                server_version = "%s-%s" % (server_version, status["release"])
            result["server_version"] = server_version
        if status.get("rulesVersion"):
            result["server_rules_version"] = status["rulesVersion"]
        return result
