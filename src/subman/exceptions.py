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
import inspect
from typing import Callable, Dict, List, Optional, Tuple

from rhsmlite import connection
from rhsmlite.certificate import ParseError
from rhsmlite.entitlement import DecompressionError, PayloadParseError
from rhsmlite.https import ssl

from subman.i18n import ugettext as _

SOCKET_MESSAGE = _(
    "Network error, unable to connect to server. Please see /var/log/rhsm/rhsm.log for more information."
)
CONNECTION_UNREACHABLE_MESSAGE = _("Unable to reach the server at {host}: {message}")
UNAUTHORIZED_MESSAGE = _("Unauthorized: Invalid credentials for request.")
FORBIDDEN_MESSAGE = _("Forbidden: Invalid credentials for request.")
UNKNOWN_SERVER_MESSAGE = _("Unknown server reply (HTTP error code {code}: {title})")
GONE_MESSAGE = _("Consumer {deleted_id} has been deleted")
BAD_CA_CERT_MESSAGE = _("Bad CA certificate: {file}: {reason}")
BAD_KEY_PAIR_MESSAGE = _("Unable to use certificate {cert} with key {key}: {reason}")
SSL_MESSAGE = _("Unable to verify server's identity: %s")
CERTIFICATE_LOADING_PATH_ERROR = _("Bad certificate: {file}: {message}")
CERTIFICATE_LOADING_ERROR = _("Bad certificate: {message}")
ENTITLEMENT_DATA_ERROR = _("Bad entitlement certificate: {message}")

# TRANSLATORS: example: "You don't have permission to perform this action (HTTP error code 403: Forbidden)"
# (the part before the opening bracket originates on the server)
SERVER_MESSAGE = _("{message} (HTTP error code {code}: {title})")


class ServiceError(Exception):
    """
    Base class of errors raised by the services driving the session.
    """

    pass


class UsageError(ServiceError):
    """
    Invalid combination of arguments, or an operation that is not allowed
    in the current state of the system. Raised before any network request.
    """

    pass


class EntitlementError(ServiceError):
    """
    No entitlement certificate could be obtained from the server.
    """

    pass


class UnregisterError(ServiceError):
    """
    The consumer identity could not be removed from the system.
    The errors attribute holds every failure collected during cleanup.
    """

    def __init__(self, message: str, errors: Optional[List[Exception]] = None) -> None:
        super(UnregisterError, self).__init__(message)
        self.errors = errors or []


class ExceptionMapper:
    def __init__(self):
        self.message_map: Dict[type, Tuple[Optional[str], Callable]] = {
            connection.TransportError: (CONNECTION_UNREACHABLE_MESSAGE, self.format_transport_error),
            connection.TrustSetupError: (BAD_CA_CERT_MESSAGE, self.format_trust_setup_error),
            connection.KeyPairError: (BAD_KEY_PAIR_MESSAGE, self.format_key_pair_error),
            connection.UnauthorizedError: (UNAUTHORIZED_MESSAGE, self.format_using_template),
            connection.ForbiddenError: (FORBIDDEN_MESSAGE, self.format_using_template),
            connection.GoneError: (GONE_MESSAGE, self.format_gone_error),
            # The message of ServerError is already translated server-side.
            connection.ServerError: (SERVER_MESSAGE, self.format_server_error),
            ParseError: (None, self.format_parse_error),
            DecompressionError: (ENTITLEMENT_DATA_ERROR, self.format_entitlement_data_error),
            PayloadParseError: (ENTITLEMENT_DATA_ERROR, self.format_entitlement_data_error),
            ssl.SSLError: (SSL_MESSAGE, self.format_ssl_error),
            ConnectionError: (SOCKET_MESSAGE, self.format_using_template),
        }

    def format_using_template(self, _: Exception, message: str) -> str:
        """Return unaltered message template."""
        return message

    def format_using_error(self, exc: Exception, _: Optional[str]) -> str:
        """Return string representation of the error."""
        return str(exc)

    def format_transport_error(self, exc: connection.TransportError, message_template: str) -> str:
        return message_template.format(host=exc.handler, message=str(exc.exc))

    def format_trust_setup_error(self, exc: connection.TrustSetupError, message_template: str) -> str:
        return message_template.format(file=exc.ca_path, reason=str(exc.reason))

    def format_key_pair_error(self, exc: connection.KeyPairError, message_template: str) -> str:
        return message_template.format(cert=exc.cert_file, key=exc.key_file, reason=str(exc.reason))

    def format_gone_error(self, exc: connection.GoneError, message_template: str) -> str:
        if exc.msg:
            return exc.msg
        return message_template.format(deleted_id=exc.deleted_id)

    def format_server_error(self, exc: connection.ServerError, message_template: str) -> str:
        if not exc.msg:
            return UNKNOWN_SERVER_MESSAGE.format(code=exc.code, title=exc.title)
        return message_template.format(message=exc.msg, code=exc.code, title=exc.title)

    def format_parse_error(self, exc: ParseError, _: Optional[str]) -> str:
        if exc.path is not None:
            return CERTIFICATE_LOADING_PATH_ERROR.format(file=exc.path, message=exc.reason)
        return CERTIFICATE_LOADING_ERROR.format(message=exc.reason)

    def format_entitlement_data_error(self, exc: Exception, message_template: str) -> str:
        return message_template.format(message=str(exc))

    def format_ssl_error(self, ssl_error: ssl.SSLError, message_template: str) -> str:
        return message_template % ssl_error

    def get_message(self, exception: Exception) -> str:
        """Get string representation of an exception.

        The exception may have special handler (to allow us to fill in
        variables into the message), or it may only use custom string template
        (so we can display translated version).

        If the message does not have any handler defined its string
        representation is returned.
        """
        for exception_class in inspect.getmro(exception.__class__):
            if exception_class in self.message_map:
                message_template, formatter = self.message_map[exception_class]
                return formatter(exception, message_template)
        return self.format_using_error(exception, None)
