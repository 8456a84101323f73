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
from subman.cli import CLI
from subman.cli_command.identity import IdentityCommand
from subman.cli_command.register import RegisterCommand
from subman.cli_command.status import StatusCommand
from subman.cli_command.unregister import UnregisterCommand
from subman.cli_command.version import VersionCommand


class ManagerCLI(CLI):
    def __init__(self):
        commands = [
            RegisterCommand,
            UnregisterCommand,
            StatusCommand,
            IdentityCommand,
            VersionCommand,
        ]
        CLI.__init__(self, command_classes=commands)
