# A proxy interface to initiate and interact with candlepin.
#
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

import base64
import enum
import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple, Union
from urllib.parse import urlencode, quote, quote_plus

from rhsmlite.config import ServerEndpoint
from rhsmlite.https import httplib, ssl
from subman import version

logging.getLogger("rhsmlite").addHandler(logging.NullHandler())

log = logging.getLogger(__name__)

USER_AGENT = "RHSM-lite/%s" % version.pkg_version

# Pseudo-headers a caller may use to pass credentials on a NoAuth connection
USERNAME_HEADER = "username"
PASSWORD_HEADER = "password"


class ConnectionException(Exception):
    pass


class ConnectionSetupException(ConnectionException):
    pass


class TrustSetupError(ConnectionSetupException):
    """Thrown when the CA directory is unreadable or a CA certificate can not be loaded."""

    def __init__(self, ca_path: str, reason: Union[str, Exception]) -> None:
        self.ca_path = ca_path
        self.reason = reason

    def __str__(self) -> str:
        return "Unable to load CA certificate(s) from %s: %s" % (self.ca_path, self.reason)


class KeyPairError(ConnectionSetupException):
    """Thrown when a client certificate and key can not be loaded, or do not match."""

    def __init__(self, cert_file: Optional[str], key_file: Optional[str], reason: Union[str, Exception]) -> None:
        self.cert_file = cert_file
        self.key_file = key_file
        self.reason = reason

    def __str__(self) -> str:
        return "Unable to use certificate %s with key %s: %s" % (self.cert_file, self.key_file, self.reason)


class TransportError(ConnectionException):
    """
    Thrown when a request could not be completed because of a network
    or TLS failure. Carries the method and path of the request.
    """

    def __init__(self, request_type: str, handler: str, exc: Exception) -> None:
        self.request_type = request_type
        self.handler = handler
        self.exc = exc

    def __str__(self) -> str:
        return "Unable to %s %s: %s" % (self.request_type, self.handler, self.exc)


class ServerError(ConnectionException):
    """
    Raised when the server answers with a status code that is not 2xx.
    The msg attribute holds the message reported by the server, if any.
    See UEPConnection.validateResult to see when this and other exceptions are raised.
    """

    def __init__(
        self,
        code: int,
        msg: Optional[str] = None,
        request_type: Optional[str] = None,
        handler: Optional[str] = None,
    ) -> None:
        self.code = code
        self.msg = msg or ""
        self.request_type = request_type
        self.handler = handler

    @property
    def title(self) -> str:
        return httplib.responses.get(self.code, "Unknown")

    def __str__(self) -> str:
        if self.msg:
            return "HTTP error (%s - %s): %s" % (self.code, self.title, self.msg)
        if self.request_type and self.handler:
            return "Server error attempting a %s to %s returned status %s" % (
                self.request_type,
                self.handler,
                self.code,
            )
        return "Server returned %s" % self.code


class GoneError(ServerError):
    """
    Raised on 410 with 'deletedId' in the body, meaning the consumer has been
    deleted on the server side. Callers should compare deleted_id with their
    own consumer uuid before acting on it.
    """

    def __init__(self, code: int, msg: str, deleted_id: Any) -> None:
        super(GoneError, self).__init__(code, msg)
        self.deleted_id = deleted_id


class AuthenticationError(ServerError):
    prefix = "Authentication error"

    def __str__(self) -> str:
        buf = super(AuthenticationError, self).__str__()
        buf += "\n"
        buf += "%s: Invalid credentials for request." % self.prefix
        return buf


class UnauthorizedError(AuthenticationError):
    """
    Thrown in response to http status code 401 with no valid json content
    """

    prefix = "Unauthorized"


class ForbiddenError(AuthenticationError):
    """
    Thrown in response to http status code 403 with no valid json content
    """

    prefix = "Forbidden"


class ConnectionType(enum.Enum):
    """
    Enumerate of allowed connection types
    """

    # Connection uses no client certificate (username and password may be sent)
    NO_AUTH = enum.auto()

    # Connection uses consumer certificate for authentication
    CONSUMER_CERT_AUTH = enum.auto()

    # Connection uses an entitlement certificate (CDN style access)
    ENTITLEMENT_CERT_AUTH = enum.auto()


def _encode_auth(username: str, password: str) -> str:
    encoded = base64.b64encode(":".join((username, password)).encode("utf-8")).decode("utf-8")
    return "Basic %s" % encoded


class TrustContext:
    """
    Private pool of CA certificates built from all *.pem files of one
    directory. System-wide trust roots are never added to it.
    """

    def __init__(self, ca_dir: str, certificates: Dict[str, str]) -> None:
        self.ca_dir = ca_dir
        # path of CA file -> PEM text
        self.certificates = certificates

    @classmethod
    def load(cls, ca_dir: str) -> "TrustContext":
        try:
            file_names = sorted(os.listdir(ca_dir))
        except OSError as err:
            raise TrustSetupError(ca_dir, err.strerror or err)

        certificates: Dict[str, str] = {}
        for file_name in file_names:
            if not file_name.endswith(".pem"):
                continue
            cert_path = os.path.join(ca_dir, file_name)
            try:
                with open(cert_path, "r") as cert_file:
                    certificates[cert_path] = cert_file.read()
            except (OSError, UnicodeDecodeError) as err:
                raise TrustSetupError(cert_path, err)

        if certificates:
            log.debug("Found CA certificates in %s: %s" % (ca_dir, ", ".join(certificates)))
        else:
            log.warning("Unable to find any CA certificate in: %s" % ca_dir)
        return cls(ca_dir, certificates)

    def apply(self, context: ssl.SSLContext) -> None:
        """
        Append every CA certificate of the pool to the SSL context
        """
        for cert_path, pem in self.certificates.items():
            try:
                context.load_verify_locations(cadata=pem)
            except (ssl.SSLError, ValueError) as err:
                raise TrustSetupError(cert_path, err)


def build_client(
    trust: Optional[TrustContext],
    cert_file: Optional[str] = None,
    key_file: Optional[str] = None,
    insecure: bool = False,
) -> ssl.SSLContext:
    """
    Create the TLS client context used by a Connection.

    :param trust: private pool of CA certificates used to verify the server
    :param cert_file: client certificate; mutual TLS is used when given with key_file
    :param key_file: private key matching cert_file
    :param insecure: do not verify the server certificate. The client certificate
        is still presented.
    :raises TrustSetupError: a CA certificate could not be loaded
    :raises KeyPairError: the certificate and key could not be loaded or do not match
    """
    # Select the highest TLS version supported by both the client and the server.
    # Unlike ssl.create_default_context(), no system CA certificates are loaded.
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)

    if insecure:
        # Allow clients to connect to servers with missing or invalid certificates.
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    else:
        context.verify_mode = ssl.CERT_REQUIRED
        if trust is not None:
            trust.apply(context)

    if cert_file or key_file:
        if not (cert_file and key_file):
            raise KeyPairError(cert_file, key_file, "both certificate and key are required")
        try:
            context.load_cert_chain(cert_file, keyfile=key_file)
        except OSError as err:
            # ssl.SSLError is an OSError too
            raise KeyPairError(cert_file, key_file, err)

    return context


class Connection:
    """
    HTTPS client bound to one server endpoint and one authentication mode.

    A new TCP and TLS connection is made for every request; nothing is
    retried.
    """

    def __init__(
        self,
        endpoint: ServerEndpoint,
        auth_type: ConnectionType,
        context: ssl.SSLContext,
        timeout: Optional[int] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        self.endpoint = endpoint
        self.auth_type = auth_type
        self.context = context
        self.timeout = timeout
        self.user_agent = user_agent or USER_AGENT

        self.headers: Dict[str, str] = {
            "Accept": "application/json",
            "User-Agent": self.user_agent,
            "x-subscription-manager-version": version.pkg_version,
        }

        log.debug(
            "Connection built: host=%s port=%s handler=%s auth=%s"
            % (endpoint.hostname, endpoint.port, endpoint.prefix, auth_type.name.lower())
        )

    def _handler(self, path: str, query: Union[str, Dict[str, Any], None] = None) -> str:
        handler = "%s/%s" % (self.endpoint.prefix, path.lstrip("/"))
        if query:
            if not isinstance(query, str):
                query = urlencode(query)
            handler = "%s?%s" % (handler, query)
        return handler

    def _final_headers(self, headers: Optional[Dict[str, str]]) -> Dict[str, str]:
        final_headers = self.headers.copy()
        headers = dict(headers or {})

        username = None
        password = None
        for name in list(headers):
            if name.lower() == USERNAME_HEADER:
                username = headers.pop(name)
            elif name.lower() == PASSWORD_HEADER:
                password = headers.pop(name)

        if username is not None or password is not None:
            if self.auth_type == ConnectionType.NO_AUTH:
                final_headers["Authorization"] = _encode_auth(username or "", password or "")
            else:
                log.debug("Credentials are not used by %s connection" % self.auth_type.name.lower())

        # Headers given by the caller override the default ones
        for name, value in headers.items():
            for existing in [key for key in final_headers if key.lower() == name.lower()]:
                del final_headers[existing]
            final_headers[name] = value

        return final_headers

    def request(
        self,
        method: str,
        path: str,
        query: Union[str, Dict[str, Any], None] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Union[bytes, str, None] = None,
    ) -> Tuple[int, bytes]:
        """
        Make HTTP request to the server
        :param method: string representing request type (GET, POST, ...)
        :param path: path of the request relative to the endpoint prefix
        :param query: query string or dictionary of query parameters
        :param headers: dictionary with HTTP headers
        :param body: raw body of the request if any
        :return: status code and raw body of the response
        """
        handler = self._handler(path, query)
        final_headers = self._final_headers(headers)
        if isinstance(body, str):
            body = body.encode("utf-8")
        if body is None:
            final_headers["Content-Length"] = "0"

        log.debug("Making request: %s %s" % (method, handler))

        conn = httplib.HTTPSConnection(
            self.endpoint.hostname, self.endpoint.port, context=self.context, timeout=self.timeout
        )
        try:
            conn.request(method, handler, body=body, headers=final_headers)
            response = conn.getresponse()
            content = response.read()
        except (OSError, httplib.HTTPException) as err:
            raise TransportError(method, handler, err) from err
        finally:
            conn.close()

        log.debug('Response: status=%s, request="%s %s"' % (response.status, method, handler))
        return response.status, content


class UEPConnection:
    """
    Class for communicating with the REST interface of a Red Hat Unified
    Entitlement Platform.
    """

    def __init__(self, conn: Connection) -> None:
        self.conn = conn

    @property
    def auth_type(self) -> ConnectionType:
        return self.conn.auth_type

    def _request(
        self,
        request_type: str,
        method: str,
        params: Any = None,
        query: Union[str, Dict[str, Any], None] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        headers = dict(headers or {})
        body = None
        if params is not None:
            body = json.dumps(params)
            headers["Content-type"] = "application/json"

        status, content = self.conn.request(request_type, method, query=query, headers=headers, body=body)
        self.validateResult(status, content, request_type, method)
        return self._extract_content_from_response(content)

    def validateResult(
        self, status: int, content: bytes, request_type: Optional[str] = None, handler: Optional[str] = None
    ) -> None:
        """
        Try to validate result of HTTP request. Raise exception, when validation of
        result failed
        :param status: HTTP status code of the response
        :param content: raw body of the response
        :param request_type: String representation of original request
        :param handler: String containing handler of request
        """
        if 200 <= status < 300:
            return

        parsed: Any = {}
        if content:
            # try vaguely to see if it had a json parseable body
            try:
                parsed = json.loads(content)
            except ValueError as e:
                log.error("Response: %s" % status)
                log.error("JSON parsing error: %s" % e)

        if parsed and isinstance(parsed, dict):
            if status == 410 and "deletedId" in parsed:
                raise GoneError(status, parsed.get("displayMessage"), parsed["deletedId"])

            error_msg = self._parse_msg_from_error_response_body(parsed)
            if error_msg:
                raise ServerError(status, error_msg, request_type=request_type, handler=handler)

        if status == 401:
            raise UnauthorizedError(status, request_type=request_type, handler=handler)
        elif status == 403:
            raise ForbiddenError(status, request_type=request_type, handler=handler)
        raise ServerError(status, request_type=request_type, handler=handler)

    @staticmethod
    def _parse_msg_from_error_response_body(body: dict) -> Optional[str]:
        # Old style with a single displayMessage:
        if "displayMessage" in body:
            return body["displayMessage"]

        # New style list of error messages:
        if "errors" in body:
            return " ".join("%s" % errmsg for errmsg in body["errors"])

        return None

    @staticmethod
    def _extract_content_from_response(content: bytes) -> Any:
        """
        Decode the JSON body of a successful response. None is returned for an
        empty body (e.g. 204); a body that is not JSON is returned as text.
        """
        if not content:
            return None
        try:
            return json.loads(content)
        except ValueError:
            return content.decode("utf-8", errors="replace")

    def registerConsumer(
        self,
        name: str = "unknown",
        consumer_type: str = "system",
        facts: Optional[dict] = None,
        owner: Optional[str] = None,
        keys: Optional[List[str]] = None,
        installed_products: Optional[List[dict]] = None,
        content_tags: Optional[set] = None,
        role: Optional[str] = None,
        addons: Optional[List[str]] = None,
        service_level: Optional[str] = None,
        usage: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> dict:
        """
        Creates a consumer on candlepin server
        """
        params: Dict[str, Any] = {
            "type": consumer_type,
            "name": name,
            "facts": facts or {},
        }
        if installed_products:
            params["installedProducts"] = installed_products
        if content_tags is not None:
            params["contentTags"] = sorted(content_tags)
        if role is not None:
            params["role"] = role
        if addons is not None:
            params["addOns"] = addons
        if usage is not None:
            params["usage"] = usage
        if service_level is not None:
            params["serviceLevel"] = service_level

        headers = {}
        if username is not None or password is not None:
            headers[USERNAME_HEADER] = username or ""
            headers[PASSWORD_HEADER] = password or ""

        query = None
        if owner:
            query = urlencode({"owner": owner})
            if keys:
                query += "&activation_keys=" + ",".join(self.sanitize(key) for key in keys)

        return self._request("POST", "consumers", params, query=query, headers=headers)

    def getConsumer(self, uuid: str) -> dict:
        """
        Returns a consumer object with pem/key for existing consumers
        :param uuid: UUID of consumer (part of installed consumer cert, when system is registered)
        """
        method = "consumers/%s" % self.sanitize(uuid)
        return self._request("GET", method)

    def unregisterConsumer(self, consumerId: str) -> bool:
        """
        Deletes a consumer from candlepin server
        :param consumerId: consumer UUID (it could be found in consumer cert, when system is registered)
        """
        method = "consumers/%s" % self.sanitize(consumerId)
        return self._request("DELETE", method) is None

    def getCertificates(self, consumer_uuid: str, serials: Optional[List[str]] = None) -> List[dict]:
        """
        Fetch all entitlement certificates for this consumer. Specify a list of serial numbers to
        filter if desired

        :param consumer_uuid: consumer UUID
        :param serials: list of entitlement serial numbers
        """
        method = "consumers/%s/certificates" % self.sanitize(consumer_uuid)
        query = None
        if serials:
            query = "serials=%s" % ",".join(str(serial) for serial in serials)
        return self._request("GET", method, query=query)

    def getCertificateSerials(self, consumerId: str) -> List[dict]:
        """
        Get serial numbers for certs for a given consumer. Returned list is list of dictionaries, because
        it contains additional information about entitlement certificates
        :param consumerId: consumer UUID
        """
        method = "consumers/%s/certificates/serials" % self.sanitize(consumerId)
        return self._request("GET", method)

    def getCompliance(self, uuid: str) -> dict:
        """
        Returns a compliance object with compliance status information
        """
        method = "consumers/%s/compliance" % self.sanitize(uuid)
        return self._request("GET", method)

    def getSyspurposeCompliance(self, uuid: str) -> dict:
        """
        Returns a system purpose compliance object with compliance status information
        """
        method = "consumers/%s/purpose_compliance" % self.sanitize(uuid)
        return self._request("GET", method)

    def getStatus(self) -> dict:
        """
        Try to get information about status of server and supported capabilities
        :return: Dictionary with information about server
        """
        return self._request("GET", "status")

    def sanitize(self, url_param: str, plus: bool = False) -> str:
        """
        This is a wrapper around urllib.quote to avoid issues like the one
        discussed in http://bugs.python.org/issue9301
        :param url_param: String with URL parameter
        :param plus: If True, then replace ' ' with '+'
        :return: Sanitized string
        """
        if plus:
            sane_string = quote_plus(str(url_param))
        else:
            sane_string = quote(str(url_param))
        return sane_string
