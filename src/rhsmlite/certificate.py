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
Reading and writing of the PEM files kept on the system: the consumer
(identity) certificate, installed product certificates and entitlement
certificate/key pairs.
"""

import logging
import os
from typing import Iterator, List, Optional, Set, Tuple

from asn1crypto import core, pem
from cryptography import x509
from cryptography.x509.oid import NameOID

log = logging.getLogger(__name__)

REDHAT_OID_NAMESPACE = "1.3.6.1.4.1.2312.9"
# Product extensions: REDHAT_OID_NAMESPACE + ".1.<product_id>.<extension_id>"
PRODUCT_OID_NAMESPACE = REDHAT_OID_NAMESPACE + ".1."

CERTIFICATE_BLOCK = "CERTIFICATE"


class CertificateException(Exception):
    pass


class ParseError(CertificateException):
    """
    Thrown when a PEM file does not contain the expected data, or the data
    can not be decoded.
    """

    def __init__(self, path: Optional[str], reason: str) -> None:
        self.path = path
        self.reason = reason

    def __str__(self) -> str:
        if self.path:
            return "Unable to parse %s: %s" % (self.path, self.reason)
        return "Unable to parse PEM data: %s" % self.reason


def parse_tags(tag_str: str) -> List[str]:
    """
    Split a comma separated list of tags from a certificate into a list.
    """
    tags: List[str] = []
    if tag_str:
        tags = tag_str.split(",")
    return tags


def pem_blocks(content: bytes, path: Optional[str] = None) -> Iterator[Tuple[str, bytes]]:
    """
    Yield (block type, DER bytes) for every PEM block of content, in order.
    ParseError is raised when the content holds no PEM block at all or a
    block body is not valid base64.
    """
    try:
        for type_name, _headers, der_bytes in pem.unarmor(content, multiple=True):
            yield type_name, der_bytes
    except ValueError as err:
        # binascii.Error is a ValueError too
        raise ParseError(path, str(err))


def write_pem_file(path: str, content: str, mode: Optional[int] = None) -> None:
    """
    Write PEM content to path, replacing the file. The file is not replaced
    atomically. OSError is raised when the file can not be written.
    """
    with open(path, "w") as pem_file:
        pem_file.write(content)
    if mode is not None:
        os.chmod(path, mode)
    log.debug("Wrote PEM file: %s" % path)


def read_pem_file(path: str) -> str:
    with open(path, "r") as pem_file:
        return pem_file.read()


def _load_first_certificate(path: str) -> x509.Certificate:
    with open(path, "rb") as cert_file:
        content = cert_file.read()

    for type_name, der_bytes in pem_blocks(content, path):
        if type_name != CERTIFICATE_BLOCK:
            raise ParseError(path, "unexpected PEM block type: %s" % type_name)
        try:
            return x509.load_der_x509_certificate(der_bytes)
        except ValueError as err:
            raise ParseError(path, "invalid X.509 certificate: %s" % err)
    raise ParseError(path, "no PEM block found")


def _subject_attribute(cert: x509.Certificate, oid: x509.ObjectIdentifier) -> Optional[str]:
    attributes = cert.subject.get_attributes_for_oid(oid)
    if not attributes:
        return None
    return attributes[0].value


def read_consumer_uuid(path: str) -> str:
    """
    Return the subject CN of the consumer certificate, which is the UUID of
    the consumer. The first PEM block of the file has to be a certificate.
    """
    cert = _load_first_certificate(path)
    uuid = _subject_attribute(cert, NameOID.COMMON_NAME)
    if uuid is None:
        raise ParseError(path, "certificate subject has no common name")
    return uuid


def read_consumer_owner(path: str) -> Optional[str]:
    """
    Return the subject O of the consumer certificate (the owner key), if any.
    """
    cert = _load_first_certificate(path)
    return _subject_attribute(cert, NameOID.ORGANIZATION_NAME)


class InstalledProduct:
    """
    A product installed on the system, described by Red Hat extensions of
    its product certificate.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        name: Optional[str] = None,
        version: Optional[str] = None,
        architecture: Optional[str] = None,
        provided_tags: Optional[Set[str]] = None,
        brand_type: Optional[str] = None,
        brand_name: Optional[str] = None,
    ) -> None:
        self.id = id
        self.name = name
        self.version = version
        self.architecture = architecture
        self.provided_tags: Set[str] = provided_tags or set()
        self.brand_type = brand_type
        self.brand_name = brand_name

    def format_for_server(self) -> dict:
        """
        Installed product as reported in the registration request
        """
        return {
            "productId": self.id,
            "productName": self.name,
            "version": self.version,
            "arch": self.architecture,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, InstalledProduct):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self) -> str:
        return "<InstalledProduct id=%s name=%s version=%s>" % (self.id, self.name, self.version)


def _extension_string(path: str, oid: str, value: bytes) -> str:
    try:
        parsed = core.load(value)
    except ValueError as err:
        raise ParseError(path, "unable to parse ASN.1 value of extension %s: %s" % (oid, err))

    if isinstance(parsed, core.UTF8String):
        return parsed.native
    if isinstance(parsed, core.OctetString):
        return parsed.native.decode("utf-8", errors="replace")
    raise ParseError(path, "extension %s contains unsupported tag type: %s" % (oid, parsed.tag))


def _apply_product_extension(product: InstalledProduct, path: str, oid: str, value: bytes) -> None:
    ids = oid[len(PRODUCT_OID_NAMESPACE):].split(".")
    if len(ids) != 2:
        raise ParseError(path, "OID %s does not contain product ID and extension ID" % oid)
    product_id, extension_id = ids

    text = _extension_string(path, oid, value)

    # First product ID wins
    if product.id is None:
        product.id = product_id

    if extension_id == "1":
        product.name = text
    elif extension_id == "2":
        product.version = text
    elif extension_id == "3":
        product.architecture = text
    elif extension_id == "4":
        product.provided_tags = set(parse_tags(text))
    elif extension_id == "5":
        product.brand_type = text
    elif extension_id == "6":
        product.brand_name = text


def parse_product_certificate(path: str) -> InstalledProduct:
    """
    Read the installed product from the first CERTIFICATE block of a product
    certificate. Other blocks are skipped.
    """
    with open(path, "rb") as cert_file:
        content = cert_file.read()

    for type_name, der_bytes in pem_blocks(content, path):
        if type_name != CERTIFICATE_BLOCK:
            continue
        try:
            cert = x509.load_der_x509_certificate(der_bytes)
            extensions = list(cert.extensions)
        except (ValueError, x509.DuplicateExtension) as err:
            raise ParseError(path, "invalid X.509 certificate: %s" % err)

        product = InstalledProduct()
        for extension in extensions:
            oid = extension.oid.dotted_string
            if not oid.startswith(PRODUCT_OID_NAMESPACE):
                continue
            _apply_product_extension(product, path, oid, extension.value.value)
        return product

    raise ParseError(path, "PEM file does not contain block CERTIFICATE")


def remove_cert_pair(cert_path: str, key_path: str) -> List[OSError]:
    """
    Remove a certificate and its key. Both removals are attempted; errors are
    returned, not raised.
    """
    errors: List[OSError] = []
    for path in (cert_path, key_path):
        try:
            os.remove(path)
            log.debug("Removed: %s" % path)
        except OSError as err:
            errors.append(err)
    return errors
