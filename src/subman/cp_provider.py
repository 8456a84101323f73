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
import logging
from typing import Optional

from rhsmlite import connection
from rhsmlite.config import RhsmConfigParser, ServerEndpoint

from subman.certdirectory import EntitlementDirectory
from subman.exceptions import EntitlementError
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity

log = logging.getLogger(__name__)


class CPProvider:
    """
    CPProvider provides candlepin connections of varying authentication levels
    in order to avoid creating more than we need, and reuse the ones we have.

    Please try not to hold a self.cp or self.uep, instead the instance of CPProvider
    and use get_X_auth_cp() when a connection is needed.

    consumer_auth_cp: authenticates with consumer cert/key
    no_auth_cp: no client certificate, username/password may be sent
    entitlement_auth_cp: ent cert based auth connection to cdn
    """

    consumer_auth_cp: Optional[connection.UEPConnection] = None
    no_auth_cp: Optional[connection.UEPConnection] = None
    entitlement_auth_cp: Optional[connection.UEPConnection] = None

    def __init__(
        self,
        config: RhsmConfigParser,
        identity: ConsumerIdentity,
        ent_dir: EntitlementDirectory,
    ) -> None:
        self.config = config
        self.identity = identity
        self.ent_dir = ent_dir
        self.endpoint: ServerEndpoint = ServerEndpoint.from_config(config)
        self.timeout: Optional[int] = config.get_int("server", "server_timeout")
        self._trust: Optional[connection.TrustContext] = None
        self.clean()

    @property
    def trust(self) -> connection.TrustContext:
        # The CA directory is read only once
        if self._trust is None:
            self._trust = connection.TrustContext.load(self.config.get("rhsm", "ca_cert_dir"))
        return self._trust

    def _create(
        self,
        endpoint: ServerEndpoint,
        auth_type: connection.ConnectionType,
        cert_file: Optional[str] = None,
        key_file: Optional[str] = None,
    ) -> connection.UEPConnection:
        context = connection.build_client(self.trust, cert_file, key_file, insecure=endpoint.insecure)
        conn = connection.Connection(endpoint, auth_type, context, timeout=self.timeout)
        return connection.UEPConnection(conn)

    # Force connections to be re-initialized
    def clean(self) -> None:
        self.consumer_auth_cp = None
        self.no_auth_cp = None
        self.entitlement_auth_cp = None

    def get_no_auth_cp(self) -> connection.UEPConnection:
        if not self.no_auth_cp:
            self.no_auth_cp = self._create(self.endpoint, connection.ConnectionType.NO_AUTH)
        return self.no_auth_cp

    def get_consumer_auth_cp(self) -> connection.UEPConnection:
        """
        Connection authenticated by the consumer certificate. When the
        certificate or the key does not exist, the no auth connection is
        returned instead.
        """
        if self.consumer_auth_cp:
            return self.consumer_auth_cp
        if not self.identity.exists():
            log.debug("Consumer certificate or key does not exist, using connection without authentication")
            return self.get_no_auth_cp()
        self.consumer_auth_cp = self._create(
            self.endpoint,
            connection.ConnectionType.CONSUMER_CERT_AUTH,
            self.identity.certpath(),
            self.identity.keypath(),
        )
        return self.consumer_auth_cp

    def swap_consumer_auth_cp(self) -> connection.UEPConnection:
        """
        Drop the current consumer connection and build a new one from the
        consumer certificate and key on disk.
        """
        self.consumer_auth_cp = None
        return self.get_consumer_auth_cp()

    def get_entitlement_auth_cp(self, serial: Optional[str] = None) -> connection.UEPConnection:
        """
        Connection to the content delivery network (rhsm.baseurl) authenticated
        by an entitlement certificate. The first installed certificate is used
        when no serial is given.
        """
        if self.entitlement_auth_cp and serial is None:
            return self.entitlement_auth_cp

        if serial is None:
            serials = self.ent_dir.serials()
            if not serials:
                raise EntitlementError(_("No entitlement certificate installed in {path}").format(path=self.ent_dir))
            serial = serials[0]

        endpoint = ServerEndpoint.from_url(self.config.get("rhsm", "baseurl"), insecure=self.endpoint.insecure)
        self.entitlement_auth_cp = self._create(
            endpoint,
            connection.ConnectionType.ENTITLEMENT_CERT_AUTH,
            self.ent_dir.cert_path(serial),
            self.ent_dir.key_path(serial),
        )
        return self.entitlement_auth_cp
