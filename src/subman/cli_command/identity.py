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


class IdentityCommand(CliCommand):
    def __init__(self):
        shortdesc = _("Display the identity certificate for this system")
        super(IdentityCommand, self).__init__("identity", shortdesc, False)

    def _do_command(self) -> None:
        self.assert_should_be_registered()

        consumer = self.session.consumer_identity()
        print(_("system identity: {uuid}").format(uuid=consumer["uuid"]))
        print(_("org ID: {owner}").format(owner=consumer["owner"] or ""))
