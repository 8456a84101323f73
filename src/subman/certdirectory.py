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

from rhsmlite.certificate import (
    CertificateException,
    InstalledProduct,
    parse_product_certificate,
    write_pem_file,
)

from subman.i18n import ugettext as _

log = logging.getLogger(__name__)

# Directory with the pre-installed product certificate. It can not be
# changed in rhsm.conf.
DEFAULT_PRODUCT_CERT_DIR = "/etc/pki/product-default"


def _warn(warnings: Optional[List[str]], message: str) -> None:
    log.warning(message)
    if warnings is not None:
        warnings.append(message)


class Directory:
    def __init__(self, path: str) -> None:
        self.path = path

    def list_all(self) -> List[str]:
        """
        Return names of all regular files in the directory, sorted.
        A missing directory is empty.
        """
        if not os.path.exists(self.path):
            return []
        return sorted(fn for fn in os.listdir(self.path) if not os.path.isdir(self.abspath(fn)))

    def create(self) -> None:
        if not os.path.exists(self.path):
            os.makedirs(self.path)

    def clean(self) -> List[OSError]:
        """
        Remove every file of the directory. Each removal is attempted; the
        errors are returned.
        """
        errors: List[OSError] = []
        try:
            file_names = self.list_all()
        except OSError as err:
            return [err]
        for file_name in file_names:
            try:
                os.unlink(self.abspath(file_name))
            except OSError as err:
                errors.append(err)
        return errors

    def abspath(self, filename: str) -> str:
        """
        Return path for a filename relative to this directory.
        """
        return os.path.join(self.path, filename)

    def __str__(self) -> str:
        return self.path


class EntitlementDirectory(Directory):
    """
    Entitlement certificates are stored as <serial>.pem with the key
    in <serial>-key.pem.
    """

    KEY_SUFFIX = "-key.pem"

    def cert_path(self, serial: int) -> str:
        return self.abspath("%s.pem" % serial)

    def key_path(self, serial: int) -> str:
        return self.abspath("%s%s" % (serial, self.KEY_SUFFIX))

    def write_pair(self, serial: int, cert: str, key: str) -> None:
        """
        Write one entitlement certificate and its key. When the key can not be
        written, the certificate is removed again, since it is useless without
        the key, and the error is raised.
        """
        self.create()
        cert_path = self.cert_path(serial)
        write_pem_file(cert_path, cert)
        try:
            write_pem_file(self.key_path(serial), key)
        except OSError:
            try:
                os.remove(cert_path)
            except OSError as err:
                log.error("Unable to remove entitlement certificate %s: %s" % (cert_path, err))
            raise

    def _pair_name(self, file_name: str) -> str:
        if file_name.endswith(self.KEY_SUFFIX):
            return file_name[: -len(self.KEY_SUFFIX)] + ".pem"
        return file_name[: -len(".pem")] + self.KEY_SUFFIX

    def serials(self) -> List[str]:
        """
        Serials of the installed certificates. Only complete pairs count.
        """
        file_names = set(self.list_all())
        return [
            fn[: -len(".pem")]
            for fn in sorted(file_names)
            if fn.endswith(".pem") and not fn.endswith(self.KEY_SUFFIX) and self._pair_name(fn) in file_names
        ]

    def orphans(self) -> List[str]:
        """
        Paths of certificates without a key and of keys without a certificate
        """
        file_names = set(self.list_all())
        return [
            self.abspath(fn)
            for fn in sorted(file_names)
            if fn.endswith(".pem") and self._pair_name(fn) not in file_names
        ]


class ProductDirectory:
    """
    Installed products, read from the configured product certificate
    directory and the directory with the pre-installed product certificate.
    """

    def __init__(self, path: str, default_path: Optional[str] = DEFAULT_PRODUCT_CERT_DIR) -> None:
        self.directories = [Directory(path)]
        if default_path:
            self.directories.append(Directory(default_path))

    def list(self, warnings: Optional[List[str]] = None) -> List[InstalledProduct]:
        """
        Products of all readable product certificates. Directories and
        certificates which can not be read are skipped and reported in
        warnings, when given.
        """
        products: List[InstalledProduct] = []
        for directory in self.directories:
            try:
                file_names = directory.list_all()
            except OSError as err:
                _warn(
                    warnings,
                    _("Unable to read directory {path} with product certificates: {error}").format(
                        path=directory, error=err
                    ),
                )
                continue
            for file_name in file_names:
                if not file_name.endswith(".pem"):
                    continue
                path = directory.abspath(file_name)
                try:
                    products.append(parse_product_certificate(path))
                except (CertificateException, OSError) as err:
                    _warn(warnings, _("Skipping product certificate {path}: {error}").format(path=path, error=err))
        return products

    def get_provided_tags(self, products: Optional[List[InstalledProduct]] = None) -> set:
        """
        Content tags provided by the given products, or by all installed ones
        """
        if products is None:
            products = self.list()
        tags = set()
        for product in products:
            tags.update(product.provided_tags)
        return tags
