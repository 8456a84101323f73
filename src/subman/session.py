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
The session drives one client run: registration, content activation,
unregistration and the read-only queries. It owns the connections
(through CPProvider) and every path the client writes to.
"""

import enum
import logging
import os
from typing import Any, Dict, List, Optional

from rhsmlite.certificate import CertificateException
from rhsmlite.config import RhsmConfigParser, get_config_parser

from subman import syspurposelib
from subman.certdirectory import DEFAULT_PRODUCT_CERT_DIR, EntitlementDirectory, ProductDirectory
from subman.cp_provider import CPProvider
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity
from subman.repofile import DEFAULT_REPO_FILE, RepoGenerator
from subman.services.content import ContentService
from subman.services.register import RegisterService
from subman.services.status import StatusService, VersionService
from subman.services.unregister import UnregisterService

log = logging.getLogger(__name__)

# Content access mode of an organization using Simple Content Access
SCA_CONTENT_ACCESS_MODE = "org_environment"


class SessionState(enum.Enum):
    UNREGISTERED = "unregistered"
    REGISTERED_NO_CONTENT = "registered"
    REGISTERED_SCA_CONTENT = "registered_sca_content"


class Session:
    """
    State of the system is derived from the files on disk: without the
    consumer certificate and key it is unregistered; with installed
    entitlement certificates it has content.

    A certificate without its key, or a key without its certificate, is
    removed before the state is determined and before every operation.

    Errors which do not stop an operation are collected in warnings.
    """

    def __init__(
        self,
        config: Optional[RhsmConfigParser] = None,
        repo_file_path: str = DEFAULT_REPO_FILE,
        syspurpose_path: str = syspurposelib.USER_SYSPURPOSE,
        default_product_dir: Optional[str] = DEFAULT_PRODUCT_CERT_DIR,
    ) -> None:
        self.config = config if config is not None else get_config_parser()
        self.repo_file_path = repo_file_path
        self.syspurpose_path = syspurpose_path
        self.warnings: List[str] = []
        # UUID of the consumer known in this run, kept in memory only
        self.consumer_uuid: Optional[str] = None

        self.identity = ConsumerIdentity.from_config(self.config)
        self.ent_dir = EntitlementDirectory(self.config.get("rhsm", "entitlementcertdir"))
        self.product_dir = ProductDirectory(self.config.get("rhsm", "productcertdir"), default_product_dir)
        self.cp_provider = CPProvider(self.config, self.identity, self.ent_dir)
        self.repo_generator = RepoGenerator.from_config(self.config, self.ent_dir)

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)

    def _resolve_uuid(self) -> Optional[str]:
        if self.consumer_uuid is None:
            try:
                self.consumer_uuid = self.identity.read_uuid()
            except (CertificateException, OSError) as err:
                log.debug("Unable to read consumer UUID: %s" % err)
        return self.consumer_uuid

    def repair_orphans(self) -> None:
        """
        Remove every certificate without its key and every key without its
        certificate from the consumer and entitlement directories.
        """
        orphans: List[str] = []
        consumer_orphan = self.identity.orphan()
        if consumer_orphan is not None:
            if consumer_orphan == self.identity.certpath():
                self._resolve_uuid()
            orphans.append(consumer_orphan)
        orphans.extend(self.ent_dir.orphans())

        for path in orphans:
            try:
                os.remove(path)
            except OSError as err:
                self._warn(
                    _("Unable to remove {file} whose pair is missing: {error}").format(file=path, error=err.strerror)
                )
            else:
                self._warn(_("Removed {file} whose pair is missing").format(file=path))

    @property
    def state(self) -> SessionState:
        self.repair_orphans()
        if not self.identity.exists():
            return SessionState.UNREGISTERED
        if self.ent_dir.serials():
            return SessionState.REGISTERED_SCA_CONTENT
        return SessionState.REGISTERED_NO_CONTENT

    def is_registered(self) -> bool:
        return self.state != SessionState.UNREGISTERED

    def register(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        org: Optional[str] = None,
        activation_keys: Optional[List[str]] = None,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Register the system. When the organization uses Simple Content
        Access, content is activated right away.
        :return: consumer returned by the server
        """
        self.repair_orphans()
        service = RegisterService(
            self.cp_provider, self.identity, self.product_dir, self.syspurpose_path, warnings=self.warnings
        )
        consumer = service.register(
            org, activation_keys=activation_keys, username=username, password=password, name=name
        )
        self.consumer_uuid = consumer.get("uuid")

        # The new consumer certificate replaces the connection used so far
        self.cp_provider.swap_consumer_auth_cp()

        content_access_mode = (consumer.get("owner") or {}).get("contentAccessMode")
        if content_access_mode == SCA_CONTENT_ACCESS_MODE:
            self.enable_content()
        else:
            log.info("Content access mode is %s, content is not activated" % content_access_mode)
        return consumer

    def enable_content(self) -> Dict[int, list]:
        self.repair_orphans()
        service = ContentService(
            self.cp_provider,
            self.identity,
            self.ent_dir,
            self.repo_generator,
            self.repo_file_path,
            warnings=self.warnings,
        )
        return service.enable_content()

    def unregister(self) -> None:
        """
        Unregister the consumer. Called again in the same run, the consumer
        is deleted on the server again and the missing files are reported
        as warnings.
        """
        self.repair_orphans()
        service = UnregisterService(
            self.cp_provider,
            self.identity,
            self.ent_dir,
            self.repo_file_path,
            warnings=self.warnings,
            uuid=self._resolve_uuid(),
        )
        service.unregister()

    def status(self) -> Dict[str, str]:
        return StatusService(self.cp_provider, self.identity).get_status()

    def consumer_identity(self) -> Dict[str, Optional[str]]:
        """
        UUID and owner of the consumer, read from the consumer certificate
        """
        return {"uuid": self.identity.read_uuid(), "owner": self.identity.read_owner()}

    def version(self) -> Dict[str, str]:
        return VersionService(self.cp_provider).get_version()
