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
This module includes class used for registering the system to candlepin
server.
"""

import logging
import socket
from typing import Any, Dict, List, Optional

from subman import syspurposelib
from subman.certdirectory import ProductDirectory
from subman.cp_provider import CPProvider
from subman.exceptions import ServiceError, UsageError
from subman.i18n import ugettext as _
from subman.identity import ConsumerIdentity

log = logging.getLogger(__name__)

# The server generates v3 (compressed payload) entitlement certificates only
# for consumers reporting certificate version 3.0 or higher.
SYSTEM_FACTS = {
    "system.certificate_version": "3.2",
}


class RegisterService:
    def __init__(
        self,
        cp_provider: CPProvider,
        identity: ConsumerIdentity,
        product_dir: ProductDirectory,
        syspurpose_path: str = syspurposelib.USER_SYSPURPOSE,
        warnings: Optional[List[str]] = None,
    ) -> None:
        self.cp_provider = cp_provider
        self.identity = identity
        self.product_dir = product_dir
        self.syspurpose_path = syspurpose_path
        self.warnings: List[str] = warnings if warnings is not None else []

    def register(
        self,
        org: Optional[str],
        activation_keys: Optional[List[str]] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Register the system and persist the consumer certificate and key.
        :return: consumer returned by the server
        """
        self.validate_options(org, activation_keys, username, password, name)

        syspurpose = syspurposelib.read_syspurpose(self.syspurpose_path, warnings=self.warnings)
        installed_products = self.product_dir.list(warnings=self.warnings)
        content_tags = self.product_dir.get_provided_tags(installed_products)

        # Default to the hostname if no name is given
        consumer_name = name or socket.gethostname()

        uep = self.cp_provider.get_no_auth_cp()
        consumer = uep.registerConsumer(
            name=consumer_name,
            facts=dict(SYSTEM_FACTS),
            owner=org,
            keys=activation_keys or None,
            installed_products=[product.format_for_server() for product in installed_products],
            content_tags=content_tags,
            username=username,
            password=password,
            **syspurposelib.registration_attributes(syspurpose)
        )
        self.persist_consumer_cert(consumer)
        log.info("System registered with consumer UUID: %s" % consumer.get("uuid"))
        return consumer

    def validate_options(
        self,
        org: Optional[str],
        activation_keys: Optional[List[str]],
        username: Optional[str],
        password: Optional[str],
        name: Optional[str] = None,
    ) -> None:
        """
        Validate options of registration. Nothing is sent to the server
        when the options are not valid.
        """
        if self.identity.exists():
            raise UsageError(_("This system is already registered. Unregister it first."))
        if name == "":
            raise UsageError(_("Error: system name can not be empty."))

        has_credentials = username is not None or password is not None
        if activation_keys:
            if "" in activation_keys:
                raise UsageError(_("Error: Must specify an activation key"))
            if has_credentials:
                raise UsageError(_("Error: Activation keys do not require user credentials."))
            if not org:
                raise UsageError(_("Error: Must provide --org with activation keys."))
        elif not has_credentials:
            raise UsageError(_("Error: Provide either username and password or activation keys."))
        elif not username or not password:
            raise UsageError(_("Error: Missing username or password."))

    def persist_consumer_cert(self, consumer: Dict[str, Any]) -> None:
        """
        Write the identity certificate and key returned by the server
        """
        try:
            cert = consumer["idCert"]["cert"]
            key = consumer["idCert"]["key"]
        except (KeyError, TypeError):
            raise ServiceError(_("Server did not return identity certificate of the new consumer"))
        self.identity.write(cert, key)
