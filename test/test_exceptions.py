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
import socket

from rhsmlite import connection
from rhsmlite.certificate import ParseError
from rhsmlite.entitlement import DecompressionError
from rhsmlite.https import ssl

from subman.exceptions import ExceptionMapper, UnregisterError, UsageError

from test.fixture import SubManFixture


class TestExceptionMapper(SubManFixture):
    def setUp(self):
        super(TestExceptionMapper, self).setUp()
        self.mapper = ExceptionMapper()

    def test_transport_error(self):
        err = connection.TransportError("GET", "/subscription/status", socket.error("Connection refused"))
        self.assertEqual(
            self.mapper.get_message(err),
            "Unable to reach the server at /subscription/status: Connection refused",
        )

    def test_trust_setup_error(self):
        err = connection.TrustSetupError("/etc/rhsm/ca/bad.pem", "no start line")
        self.assertEqual(self.mapper.get_message(err), "Bad CA certificate: /etc/rhsm/ca/bad.pem: no start line")

    def test_key_pair_error(self):
        err = connection.KeyPairError("cert.pem", "key.pem", "key values mismatch")
        self.assertEqual(
            self.mapper.get_message(err), "Unable to use certificate cert.pem with key key.pem: key values mismatch"
        )

    def test_unauthorized(self):
        err = connection.UnauthorizedError(401)
        self.assertEqual(self.mapper.get_message(err), "Unauthorized: Invalid credentials for request.")

    def test_forbidden(self):
        err = connection.ForbiddenError(403)
        self.assertEqual(self.mapper.get_message(err), "Forbidden: Invalid credentials for request.")

    def test_gone(self):
        err = connection.GoneError(410, None, "abc")
        self.assertEqual(self.mapper.get_message(err), "Consumer abc has been deleted")

    def test_gone_with_message(self):
        err = connection.GoneError(410, "Unit abc has been deleted", "abc")
        self.assertEqual(self.mapper.get_message(err), "Unit abc has been deleted")

    def test_server_error_with_message(self):
        err = connection.ServerError(400, "Invalid Credentials")
        self.assertEqual(self.mapper.get_message(err), "Invalid Credentials (HTTP error code 400: Bad Request)")

    def test_server_error_without_message(self):
        err = connection.ServerError(500)
        self.assertEqual(
            self.mapper.get_message(err), "Unknown server reply (HTTP error code 500: Internal Server Error)"
        )

    def test_parse_error(self):
        self.assertEqual(
            self.mapper.get_message(ParseError("/etc/pki/consumer/cert.pem", "no PEM block found")),
            "Bad certificate: /etc/pki/consumer/cert.pem: no PEM block found",
        )
        self.assertEqual(
            self.mapper.get_message(ParseError(None, "no PEM block found")),
            "Bad certificate: no PEM block found",
        )

    def test_entitlement_data_error(self):
        err = DecompressionError("incorrect header check")
        self.assertEqual(
            self.mapper.get_message(err),
            "Bad entitlement certificate: Unable to decompress entitlement data: incorrect header check",
        )

    def test_ssl_error(self):
        err = ssl.SSLError("certificate verify failed")
        self.assertEqual(self.mapper.get_message(err), "Unable to verify server's identity: certificate verify failed")

    def test_connection_error(self):
        self.assertIn("Network error", self.mapper.get_message(ConnectionRefusedError()))

    def test_not_mapped(self):
        self.assertEqual(self.mapper.get_message(UsageError("Bad arguments")), "Bad arguments")

    def test_unregister_error(self):
        errors = [OSError(13, "Permission denied")]
        err = UnregisterError("Unable to remove consumer identity", errors)
        self.assertEqual(self.mapper.get_message(err), "Unable to remove consumer identity")
        self.assertEqual(err.errors, errors)
