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
from subman.cli_command.cli import CliCommand

from subman.i18n import ugettext as _


class StatusCommand(CliCommand):
    def __init__(self):
        shortdesc = _("Show status information for this system's subscriptions and products")
        super(StatusCommand, self).__init__("status", shortdesc, True)

    def _do_command(self) -> int:
        status = self.session.status()

        print("+-------------------------------------------+")
        print("   " + _("System Status Details"))
        print("+-------------------------------------------+")
        print(_("Overall Status: {status}").format(status=status["status"]))
        print(
            _("System Purpose Status: {status}").format(status=status["system_purpose_status"])
        )
        print("")

        if status["status"] in ("valid", "disabled"):
            return 0
        return 1
