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
import os
import sys
from typing import List, Optional

from rhsmlite.config import ServerEndpoint

from subman.cli import AbstractCLICommand, InvalidCLIOptionError, flush_stdout_stderr, system_exit
from subman.exceptions import UsageError
from subman.session import Session

from subman.i18n import ugettext as _

log = logging.getLogger(__name__)

ERR_NOT_REGISTERED_MSG = _(
    "This system is not yet registered. Try 'subman register --help' for more information."
)
ERR_NOT_REGISTERED_CODE = 1


def handle_exception(msg: str, ex: Exception) -> None:
    # sys.exit was already called with the message printed
    if isinstance(ex, SystemExit):
        raise ex

    log.error(msg)
    log.exception(ex)

    system_exit(os.EX_SOFTWARE, ex)


class CliCommand(AbstractCLICommand):
    """Base class for all sub-commands."""

    def __init__(self, name: str = "cli", shortdesc: Optional[str] = None, primary: bool = False):
        super(CliCommand, self).__init__(name=name, shortdesc=shortdesc, primary=primary)
        self.session: Optional[Session] = None
        self.options = None

    def _get_logger(self) -> logging.Logger:
        return logging.getLogger("rhsm-app.%s.%s" % (self.__module__, self.__class__.__name__))

    def _create_session(self) -> Session:
        return Session()

    def _server_description(self) -> str:
        endpoint = ServerEndpoint.from_config(self.session.config)
        return "%s:%s%s" % (endpoint.hostname, endpoint.port, endpoint.prefix)

    def assert_should_be_registered(self) -> None:
        if not self.session.is_registered():
            self.print_warnings()
            print(ERR_NOT_REGISTERED_MSG)
            flush_stdout_stderr()
            sys.exit(ERR_NOT_REGISTERED_CODE)

    def print_warnings(self) -> None:
        for warning in self.session.warnings:
            sys.stderr.write(_("Warning: {warning}").format(warning=warning) + "\n")

    def main(self, args: Optional[List[str]] = None) -> Optional[int]:
        # In testing we sometimes specify args, otherwise use the default:
        if args is None:
            args = sys.argv[2:]

        (self.options, unknown_args) = self.parser.parse_known_args(args)

        # check for unparsed arguments
        if unknown_args:
            message = _("{prog}: error: no such option: {args}").format(
                prog=os.path.basename(sys.argv[0]),
                args=" ".join(unknown_args),
            )
            system_exit(os.EX_USAGE, message)

        self.log = self._get_logger()

        try:
            self._validate_options()
        except InvalidCLIOptionError as error:
            system_exit(os.EX_USAGE, error)

        self.session = self._create_session()

        return_code: Optional[int] = None
        try:
            return_code = self._do_command()
        except UsageError as err:
            self.print_warnings()
            system_exit(os.EX_USAGE, err)
        except Exception as err:
            self.print_warnings()
            handle_exception(_("Error: {command} failed").format(command=self.name), err)
        else:
            self.print_warnings()

        flush_stdout_stderr()
        if return_code is not None:
            return return_code
        return None
