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
Decoding of the content payload of entitlement certificates.

Version 3 entitlement certificates carry their payload in an additional
PEM block:

    -----BEGIN ENTITLEMENT DATA-----
    <base64 of zlib compressed JSON>
    -----END ENTITLEMENT DATA-----

The JSON document describes the subscription, the order and the products
with their content sets.
"""

import datetime
import json
import logging
import zlib
from typing import Any, Dict, List, Optional, Union

from dateutil import parser as date_parser

from rhsmlite.certificate import CertificateException, pem_blocks

log = logging.getLogger(__name__)

ENTITLEMENT_DATA_BLOCK = "ENTITLEMENT DATA"


class DecompressionError(CertificateException):
    def __init__(self, reason: Union[str, Exception]) -> None:
        self.reason = reason

    def __str__(self) -> str:
        return "Unable to decompress entitlement data: %s" % self.reason


class PayloadParseError(CertificateException):
    def __init__(self, reason: Union[str, Exception]) -> None:
        self.reason = reason

    def __str__(self) -> str:
        return "Unable to parse entitlement data: %s" % self.reason


class ContentDefinition:
    """
    One content set (repository) a certificate grants access to.
    """

    def __init__(
        self,
        id: Optional[str] = None,
        content_type: Optional[str] = None,
        name: Optional[str] = None,
        label: Optional[str] = None,
        vendor: Optional[str] = None,
        path: Optional[str] = None,
        enabled: bool = True,
        gpg_url: Optional[str] = None,
        metadata_expire: Optional[int] = None,
        arches: Optional[List[str]] = None,
        required_tags: Optional[List[str]] = None,
    ) -> None:
        self.id = id
        self.content_type = content_type
        self.name = name
        self.label = label
        self.vendor = vendor
        self.path = path
        self.enabled = enabled
        self.gpg_url = gpg_url
        self.metadata_expire = metadata_expire
        self.arches: List[str] = arches or []
        self.required_tags: List[str] = required_tags or []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContentDefinition):
            return NotImplemented
        return self.__dict__ == other.__dict__

    def __repr__(self) -> str:
        return "<ContentDefinition: content_type=%s name=%s label=%s enabled=%s>" % (
            self.content_type,
            self.name,
            self.label,
            self.enabled,
        )


class EntitledProduct:
    def __init__(
        self,
        id: Optional[str],
        name: Optional[str],
        version: Optional[str],
        architectures: List[Any],
        content: List[ContentDefinition],
    ) -> None:
        self.id = id
        self.name = name
        self.version = version
        self.architectures = architectures
        self.content = content


class EntitlementData:
    """
    Whole payload of an ENTITLEMENT DATA block.
    """

    def __init__(
        self,
        consumer: Optional[str],
        sku: Optional[str],
        subscription_name: Optional[str],
        start: Optional[datetime.datetime],
        end: Optional[datetime.datetime],
        products: List[EntitledProduct],
    ) -> None:
        self.consumer = consumer
        self.sku = sku
        self.subscription_name = subscription_name
        self.start = start
        self.end = end
        self.products = products

    @property
    def content(self) -> List[ContentDefinition]:
        """
        Every content set of every product, in payload order.
        """
        return [content for product in self.products for content in product.content]


def _get(data: Dict[str, Any], key: str, types: Union[type, tuple], default: Any = None) -> Any:
    value = data.get(key)
    if value is None:
        return default
    # bool is an int; it is only accepted where asked for explicitly
    if isinstance(value, bool) and bool not in (types if isinstance(types, tuple) else (types,)):
        raise PayloadParseError("'%s' has unexpected type: %s" % (key, type(value).__name__))
    if not isinstance(value, types):
        raise PayloadParseError("'%s' has unexpected type: %s" % (key, type(value).__name__))
    return value


def _get_string_list(data: Dict[str, Any], key: str) -> List[str]:
    values = _get(data, key, list, [])
    for value in values:
        if not isinstance(value, str):
            raise PayloadParseError("'%s' has to be a list of strings" % key)
    return values


def _get_date(data: Dict[str, Any], key: str) -> Optional[datetime.datetime]:
    value = _get(data, key, str)
    if value is None:
        return None
    try:
        return date_parser.parse(value)
    except (ValueError, OverflowError) as err:
        raise PayloadParseError("'%s' is not a valid date: %s" % (key, err))


def _get_object(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    return _get(data, key, dict, {})


def _unique(values: List[str]) -> List[str]:
    result: List[str] = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def _parse_content(payload: Dict[str, Any]) -> ContentDefinition:
    return ContentDefinition(
        id=_get(payload, "id", str),
        content_type=_get(payload, "type", str),
        name=_get(payload, "name", str),
        label=_get(payload, "label", str),
        vendor=_get(payload, "vendor", str),
        path=_get(payload, "path", str),
        # If enabled isn't specified in cert we assume True.
        enabled=_get(payload, "enabled", bool, True),
        gpg_url=_get(payload, "gpg_url", str),
        metadata_expire=_get(payload, "metadata_expire", int),
        arches=_unique(_get_string_list(payload, "arches")),
        required_tags=_get_string_list(payload, "required_tags"),
    )


def _parse_products(payload: Dict[str, Any]) -> List[EntitledProduct]:
    products: List[EntitledProduct] = []
    for product in _get(payload, "products", list, []):
        if not isinstance(product, dict):
            raise PayloadParseError("product has to be an object")
        content: List[ContentDefinition] = []
        for item in _get(product, "content", list, []):
            if not isinstance(item, dict):
                raise PayloadParseError("content has to be an object")
            content.append(_parse_content(item))
        products.append(
            EntitledProduct(
                id=_get(product, "id", str),
                name=_get(product, "name", str),
                version=_get(product, "version", str),
                architectures=_get(product, "architectures", list, []),
                content=content,
            )
        )
    return products


def parse_payload(payload: Any) -> EntitlementData:
    """
    Build EntitlementData from the decoded JSON document.
    """
    if not isinstance(payload, dict):
        raise PayloadParseError("payload has to be an object")

    subscription = _get_object(payload, "subscription")
    order = _get_object(payload, "order")

    return EntitlementData(
        consumer=_get(payload, "consumer", str),
        sku=_get(subscription, "sku", str),
        subscription_name=_get(subscription, "name", str),
        start=_get_date(order, "start"),
        end=_get_date(order, "end"),
        products=_parse_products(payload),
    )


def _decompress_payload(payload: bytes) -> Any:
    """
    Certificate payloads arrive in zlib compressed strings
    of JSON.
    """
    try:
        decompressed = zlib.decompress(payload)
    except zlib.error as err:
        raise DecompressionError(err)

    try:
        return json.loads(decompressed.decode("utf-8"))
    except ValueError as err:
        # UnicodeDecodeError is a ValueError too
        raise PayloadParseError(err)


def load_entitlement_data(pem: Union[str, bytes]) -> Optional[EntitlementData]:
    """
    Decode the ENTITLEMENT DATA block of an entitlement certificate.

    :param pem: text of the certificate, possibly holding several PEM blocks
    :return: decoded payload, or None when the certificate has no
        ENTITLEMENT DATA block
    :raises ParseError: when the text holds no PEM data at all
    :raises DecompressionError: when the block is not a valid zlib stream
    :raises PayloadParseError: when the JSON does not have the expected structure
    """
    if isinstance(pem, str):
        pem = pem.encode("utf-8")

    for type_name, block_bytes in pem_blocks(pem):
        if type_name == ENTITLEMENT_DATA_BLOCK:
            return parse_payload(_decompress_payload(block_bytes))

    log.debug("Certificate does not contain %s block" % ENTITLEMENT_DATA_BLOCK)
    return None


def decode(pem: Union[str, bytes]) -> List[ContentDefinition]:
    """
    Return every content definition of every product of the certificate.
    A certificate without an ENTITLEMENT DATA block yields no content.
    """
    data = load_entitlement_data(pem)
    if data is None:
        return []
    return data.content
