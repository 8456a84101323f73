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
import sys

from subman.cli import flush_stdout_stderr
from subman.cli_command.cli import CliCommand

from subman.i18n import ugettext as _


class UnregisterCommand(CliCommand):
    def __init__(self):
        shortdesc = _("Unregister this system from the Customer Portal or another subscription management service")
        super(UnregisterCommand, self).__init__("unregister", shortdesc, True)

    def _do_command(self) -> None:
        if not self.session.is_registered():
            self.print_warnings()
            print(_("This system is currently not registered."))
            flush_stdout_stderr()
            sys.exit(1)

        print(_("Unregistering from: {server}").format(server=self._server_description()))
        self.session.unregister()
        print(_("System has been unregistered."))
