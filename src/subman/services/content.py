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
This module includes class used for activation of content: installing the
entitlement certificates of the consumer and generating the repo file.
"""

import logging
from typing import Any, Dict, List, Optional

from rhsmlite import entitlement
from rhsmlite.certificate import CertificateException
from rhsmlite.entitlement import ContentDefinition

from subman.certdirectory import EntitlementDirectory
from subman.cp_provider import CPProvider
from subman.exceptions import EntitlementError
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity
from subman.repofile import RepoGenerator

log = logging.getLogger(__name__)


class ContentService:
    """
    Fetches entitlement certificates of the consumer, installs them and
    writes the repo file with the content they provide.

    Failures of single certificates do not stop the activation. They are
    appended to the warnings list.
    """

    def __init__(
        self,
        cp_provider: CPProvider,
        identity: ConsumerIdentity,
        ent_dir: EntitlementDirectory,
        repo_generator: RepoGenerator,
        repo_file_path: str,
        warnings: Optional[List[str]] = None,
    ) -> None:
        self.cp_provider = cp_provider
        self.identity = identity
        self.ent_dir = ent_dir
        self.repo_generator = repo_generator
        self.repo_file_path = repo_file_path
        self.warnings: List[str] = warnings if warnings is not None else []

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)

    def enable_content(self) -> Dict[int, List[ContentDefinition]]:
        """
        :return: decoded content definitions keyed by serial number of
            entitlement certificate
        """
        uuid = self.identity.read_uuid()
        uep = self.cp_provider.get_consumer_auth_cp()
        certificates = uep.getCertificates(uuid)
        if not certificates:
            raise EntitlementError(_("No entitlement certificate returned from server"))
        if len(certificates) > 1:
            log.debug("Server returned %d entitlement certificates" % len(certificates))

        content: Dict[int, List[ContentDefinition]] = {}
        for ent_cert in certificates:
            serial = self._install(ent_cert)
            if serial is None:
                continue
            try:
                content[serial] = entitlement.decode(ent_cert["cert"])
            except CertificateException as err:
                self._warn(
                    _("Unable to read content of entitlement certificate {serial}: {error}").format(
                        serial=serial, error=err
                    )
                )

        if content:
            self.repo_generator.write_all(content, self.repo_file_path)
            log.info("Repo file %s generated from %d entitlement certificate(s)" % (self.repo_file_path, len(content)))
        return content

    def _install(self, ent_cert: Dict[str, Any]) -> Optional[int]:
        """
        Write one entitlement certificate and key returned by the server
        :return: serial number of the installed certificate, None on failure
        """
        try:
            serial = ent_cert["serial"]["serial"]
            cert = ent_cert["cert"]
            key = ent_cert["key"]
        except (KeyError, TypeError):
            self._warn(_("Server returned malformed entitlement certificate"))
            return None

        try:
            self.ent_dir.write_pair(serial, cert, key)
        except OSError as err:
            self._warn(
                _("Unable to install entitlement certificate {serial}: {error}").format(serial=serial, error=err)
            )
            return None
        log.debug("Installed entitlement certificate %s" % self.ent_dir.cert_path(serial))
        return serial
