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
import logging
from typing import List

from subman.cli_command.cli import CliCommand
from subman.session import SCA_CONTENT_ACCESS_MODE

from subman.i18n import ugettext as _

log = logging.getLogger(__name__)


def split_activation_keys(values: List[str]) -> List[str]:
    """
    --activationkey may be given more times and each value may hold
    a comma separated list of keys
    """
    keys = []
    for value in values or []:
        keys.extend(key.strip() for key in value.split(","))
    return keys


class RegisterCommand(CliCommand):
    def __init__(self):
        shortdesc = _("Register this system to the Customer Portal or another subscription management service")
        super(RegisterCommand, self).__init__("register", shortdesc, True)

        self.parser.add_argument(
            "--username",
            "-u",
            dest="username",
            help=_("username to use when authorizing against the server"),
        )
        self.parser.add_argument(
            "--password",
            "-p",
            dest="password",
            help=_("password to use when authorizing against the server"),
        )
        self.parser.add_argument(
            "--org",
            "-o",
            dest="org",
            metavar="ORG_KEY",
            help=_("register with one of multiple organizations for the user, using organization key"),
        )
        self.parser.add_argument(
            "--activationkey",
            action="append",
            dest="activation_keys",
            help=_("activation key to use for registration (can be specified more than once)"),
        )
        self.parser.add_argument(
            "--name",
            dest="consumername",
            metavar="SYSTEM_NAME",
            help=_("name of the system to register, defaults to the hostname"),
        )

    def _do_command(self) -> None:
        activation_keys = None
        if self.options.activation_keys:
            activation_keys = split_activation_keys(self.options.activation_keys)

        print(_("Registering to: {server}").format(server=self._server_description()))
        consumer = self.session.register(
            username=self.options.username,
            password=self.options.password,
            org=self.options.org,
            activation_keys=activation_keys,
            name=self.options.consumername,
        )

        print(_("The system has been registered with ID: {uuid}").format(uuid=consumer["uuid"]))
        print(_("The registered system name is: {name}").format(name=consumer["name"]))

        owner = consumer.get("owner") or {}
        if owner.get("contentAccessMode") == SCA_CONTENT_ACCESS_MODE:
            serials = self.session.ent_dir.serials()
            print(
                _("Content access is enabled by {count} entitlement certificate(s)").format(
                    count=len(serials)
                )
            )
        self.log.info("System registered with ID %s" % consumer["uuid"])
