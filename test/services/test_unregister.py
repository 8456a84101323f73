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
import errno
import os

import mock

from rhsmlite import connection

from subman.certdirectory import EntitlementDirectory
from subman.cp_provider import CPProvider
from subman.exceptions import UnregisterError
from subman.identity import ConsumerIdentity
from subman.services import unregister

from test import certdata
from test.fixture import SubManFixture, write_file


class TestUnregisterService(SubManFixture):
    def setUp(self):
        super(TestUnregisterService, self).setUp()
        self.install_consumer()
        self.install_entitlement()
        write_file(self.repo_file_path, "[repo]\nname = repo\n")

        self.identity = ConsumerIdentity.from_config(self.config)
        self.ent_dir = EntitlementDirectory(self.ent_dir_path)
        self.mock_cp = mock.Mock(spec=connection.UEPConnection, name="UEPConnection")
        self.mock_provider = mock.Mock(spec=CPProvider, name="CPProvider")
        self.mock_provider.get_consumer_auth_cp.return_value = self.mock_cp

        self.warnings = []
        self.service = unregister.UnregisterService(
            self.mock_provider, self.identity, self.ent_dir, self.repo_file_path, warnings=self.warnings
        )

    def assert_cleaned(self):
        self.assertFalse(self.identity.exists())
        self.assertEqual(self.ent_dir.list_all(), [])
        self.assertFalse(os.path.exists(self.repo_file_path))
        self.mock_provider.clean.assert_called_once_with()

    def test_unregister(self):
        """
        Testing normal unregistration process
        """
        result = self.service.unregister()
        self.assertIsNone(result)
        self.mock_cp.unregisterConsumer.assert_called_once_with(certdata.CONSUMER_UUID)
        self.assert_cleaned()
        self.assertEqual(self.warnings, [])

    def test_consumer_gone(self):
        self.mock_cp.unregisterConsumer.side_effect = connection.GoneError(
            410, "Consumer has been deleted", certdata.CONSUMER_UUID
        )
        self.service.unregister()
        self.assert_cleaned()

    def test_other_consumer_gone(self):
        self.mock_cp.unregisterConsumer.side_effect = connection.GoneError(410, "Consumer has been deleted", "other")
        self.assertRaises(connection.GoneError, self.service.unregister)
        self.assert_cleaned()

    def test_server_error_still_cleans(self):
        self.mock_cp.unregisterConsumer.side_effect = connection.ServerError(500)
        self.assertRaises(connection.ServerError, self.service.unregister)
        self.assert_cleaned()

    def test_transport_error_still_cleans(self):
        self.mock_cp.unregisterConsumer.side_effect = connection.TransportError(
            "DELETE", "/subscription/consumers/x", OSError("Connection refused")
        )
        self.assertRaises(connection.TransportError, self.service.unregister)
        self.assert_cleaned()

    def test_unregister_twice(self):
        self.service.unregister()
        self.assertEqual(self.warnings, [])

        # Files are gone already; the consumer is still deleted on the server
        self.service.unregister()

        self.assertEqual(
            self.mock_cp.unregisterConsumer.call_args_list,
            [mock.call(certdata.CONSUMER_UUID), mock.call(certdata.CONSUMER_UUID)],
        )
        # consumer cert, consumer key and the repo file
        self.assertEqual(len(self.warnings), 3)

    def test_given_uuid(self):
        service = unregister.UnregisterService(
            self.mock_provider, self.identity, self.ent_dir, self.repo_file_path, uuid="other-uuid"
        )
        service.unregister()
        self.mock_cp.unregisterConsumer.assert_called_once_with("other-uuid")

    def test_unknown_consumer(self):
        self.identity.delete()

        self.service.unregister()

        self.mock_cp.unregisterConsumer.assert_not_called()
        self.assertIn("consumer UUID", self.warnings[0])
        # The remaining local data is removed anyway
        self.assertEqual(self.ent_dir.list_all(), [])
        self.assertFalse(os.path.exists(self.repo_file_path))

    def test_identity_removal_failure(self):
        errors = [OSError(errno.EACCES, "Permission denied", self.identity.keypath())]
        with mock.patch.object(self.identity, "delete", return_value=errors):
            with self.assertRaises(UnregisterError) as cm:
                self.service.unregister()
        self.assertEqual(cm.exception.errors, errors)
        self.assertEqual(len(self.warnings), 1)

    def test_identity_removal_failure_after_server_error(self):
        self.mock_cp.unregisterConsumer.side_effect = connection.ServerError(500)
        errors = [OSError(errno.EACCES, "Permission denied", self.identity.keypath())]
        with mock.patch.object(self.identity, "delete", return_value=errors):
            with self.assertRaises(UnregisterError) as cm:
                self.service.unregister()
        self.assertIsInstance(cm.exception.__cause__, connection.ServerError)

    def test_entitlement_removal_failure_is_warning(self):
        errors = [OSError(errno.EACCES, "Permission denied", self.ent_dir.cert_path(1))]
        with mock.patch.object(self.ent_dir, "clean", return_value=errors):
            self.service.unregister()
        self.assertFalse(self.identity.exists())
        self.assertEqual(len(self.warnings), 1)
        self.assertIn(self.ent_dir.cert_path(1), self.warnings[0])
