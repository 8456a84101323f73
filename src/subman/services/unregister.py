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
This module includes class used for unregistering system from candlepin
server.
"""

import errno
import logging
import os
from typing import List, Optional

from rhsmlite import connection
from rhsmlite.certificate import CertificateException

from subman.certdirectory import EntitlementDirectory
from subman.cp_provider import CPProvider
from subman.exceptions import UnregisterError
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity

log = logging.getLogger(__name__)


class UnregisterService:
    """
    Class providing functionality of unregistering the system from
    Candlepin server.

    Local data is removed whatever the result of the request to the server
    is. Every file which can not be removed is reported in the warnings list.

    The consumer UUID is read from the consumer certificate unless it is
    given. It is kept after the certificate is removed, so unregistering
    again still deletes the consumer on the server.
    """

    def __init__(
        self,
        cp_provider: CPProvider,
        identity: ConsumerIdentity,
        ent_dir: EntitlementDirectory,
        repo_file_path: str,
        warnings: Optional[List[str]] = None,
        uuid: Optional[str] = None,
    ) -> None:
        self.cp_provider = cp_provider
        self.uuid = uuid
        self.identity = identity
        self.ent_dir = ent_dir
        self.repo_file_path = repo_file_path
        self.warnings: List[str] = warnings if warnings is not None else []

    def _warn(self, message: str) -> None:
        log.warning(message)
        self.warnings.append(message)

    def unregister(self) -> None:
        """
        Try to unregister the system from candlepin server and remove all
        local data of the consumer
        :return: None
        """
        server_error: Optional[Exception] = None
        try:
            self._delete_consumer()
        except Exception as err:
            log.error("Unable to unregister consumer: %s" % err)
            server_error = err

        identity_errors = self._clean_identity()
        self._clean_entitlements()
        self._clean_repo_file()
        self.cp_provider.clean()

        if identity_errors:
            raise UnregisterError(
                _("Unable to remove consumer identity: {errors}").format(
                    errors=", ".join(str(err) for err in identity_errors)
                ),
                errors=identity_errors,
            ) from server_error
        if server_error is not None:
            raise server_error

    def _resolve_uuid(self) -> Optional[str]:
        if self.uuid is None:
            try:
                self.uuid = self.identity.read_uuid()
            except (CertificateException, OSError) as err:
                log.debug("Unable to read consumer UUID: %s" % err)
        return self.uuid

    def _delete_consumer(self) -> None:
        uuid = self._resolve_uuid()
        if uuid is None:
            self._warn(_("Unable to determine consumer UUID, the consumer was not deleted on the server"))
            return
        uep = self.cp_provider.get_consumer_auth_cp()
        try:
            uep.unregisterConsumer(uuid)
            log.info("Successfully un-registered consumer %s" % uuid)
        except connection.GoneError as ge:
            if ge.deleted_id == uuid:
                log.debug(
                    "This consumer's profile has been deleted from the server. Local certificates "
                    "will be cleaned now."
                )
            else:
                raise

    def _clean_identity(self) -> List[OSError]:
        """
        Remove consumer certificate and key. Files which do not exist are
        only reported; any other error is returned.
        """
        errors: List[OSError] = []
        for err in self.identity.delete():
            self._warn(_("Unable to remove {file}: {error}").format(file=err.filename, error=err.strerror))
            if err.errno != errno.ENOENT:
                errors.append(err)
        return errors

    def _clean_entitlements(self) -> None:
        for err in self.ent_dir.clean():
            self._warn(_("Unable to remove {file}: {error}").format(file=err.filename, error=err.strerror))

    def _clean_repo_file(self) -> None:
        try:
            os.remove(self.repo_file_path)
        except OSError as err:
            self._warn(
                _("Unable to remove {file}: {error}").format(file=self.repo_file_path, error=err.strerror)
            )
