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
from subman.cli_command.status import StatusCommand

from test import certdata
from test.test_managercli import CliCommandTestCase

CONSUMER_PATH = "consumers/%s" % certdata.CONSUMER_UUID


class TestStatusCommand(CliCommandTestCase):
    command_class = StatusCommand
    hide_do = False

    def test_not_registered(self):
        code, out, _err = self.run_command([])

        self.assertEqual(code, 1)
        self.assertIn("Overall Status: unknown", out)
        self.assertIn("System Purpose Status: unknown", out)

    def test_simple_content_access(self):
        self.install_consumer()
        self.server.add("GET", CONSUMER_PATH + "/compliance", {"status": "disabled"})

        code, out, _err = self.run_command([])

        self.assertEqual(code, 0)
        self.assertIn("Overall Status: disabled", out)
        self.assertIn("System Purpose Status: disabled", out)

    def test_valid(self):
        self.install_consumer()
        self.server.add("GET", CONSUMER_PATH + "/compliance", {"status": "valid"})
        self.server.add("GET", CONSUMER_PATH + "/purpose_compliance", {"status": "matched"})

        code, out, _err = self.run_command([])

        self.assertEqual(code, 0)
        self.assertIn("Overall Status: valid", out)
        self.assertIn("System Purpose Status: matched", out)

    def test_invalid(self):
        self.install_consumer()
        self.server.add("GET", CONSUMER_PATH + "/compliance", {"status": "invalid"})
        self.server.add("GET", CONSUMER_PATH + "/purpose_compliance", {"status": "mismatched"})

        code, out, _err = self.run_command([])

        self.assertEqual(code, 1)
        self.assertIn("Overall Status: invalid", out)
