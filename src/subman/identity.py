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
import os
from typing import List, Optional

from rhsmlite.certificate import read_consumer_owner, read_consumer_uuid, remove_cert_pair, write_pem_file
from rhsmlite.config import RhsmConfigParser

log = logging.getLogger(__name__)

ID_CERT_PERMS = 0o640


class ConsumerIdentity:
    """Consumer identity certificate and key.

    The uuid and owner are read from the certificate on disk every time
    they are asked for, so they always match the files."""

    KEY = "key.pem"
    CERT = "cert.pem"

    def __init__(self, cert_dir: str) -> None:
        self.cert_dir = cert_dir

    @classmethod
    def from_config(cls, config: RhsmConfigParser) -> "ConsumerIdentity":
        return cls(config.get("rhsm", "consumercertdir"))

    def keypath(self) -> str:
        return os.path.join(self.cert_dir, self.KEY)

    def certpath(self) -> str:
        return os.path.join(self.cert_dir, self.CERT)

    def exists(self) -> bool:
        return os.path.exists(self.keypath()) and os.path.exists(self.certpath())

    def orphan(self) -> Optional[str]:
        """
        Path of the certificate or the key when the other one is missing
        """
        cert_exists = os.path.exists(self.certpath())
        key_exists = os.path.exists(self.keypath())
        if cert_exists and not key_exists:
            return self.certpath()
        if key_exists and not cert_exists:
            return self.keypath()
        return None

    def read_uuid(self) -> str:
        return read_consumer_uuid(self.certpath())

    def read_owner(self) -> Optional[str]:
        return read_consumer_owner(self.certpath())

    def write(self, cert: str, key: str) -> None:
        """
        Write the certificate and then the key. When the key can not be
        written, the certificate is removed and the error is raised.
        """
        self.__mkdir()
        write_pem_file(self.certpath(), cert, ID_CERT_PERMS)
        try:
            write_pem_file(self.keypath(), key, ID_CERT_PERMS)
        except OSError:
            try:
                os.remove(self.certpath())
            except OSError as err:
                log.error("Unable to remove consumer certificate %s: %s" % (self.certpath(), err))
            raise
        log.debug("Consumer identity written to %s" % self.cert_dir)

    def delete(self) -> List[OSError]:
        return remove_cert_pair(self.certpath(), self.keypath())

    def __mkdir(self) -> None:
        if not os.path.exists(self.cert_dir):
            os.makedirs(self.cert_dir)

    def __str__(self) -> str:
        return "consumer identity in %s" % self.cert_dir
