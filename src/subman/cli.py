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
import os
import sys
import logging
from typing import Dict, List, Optional, Type, Union

from subman.exceptions import ExceptionMapper
from subman.i18n_argparse import ArgumentParser
from subman.utils import print_error

from subman.i18n import ugettext as _


log = logging.getLogger(__name__)


class InvalidCLIOptionError(Exception):
    def __init__(self, message: str):
        Exception.__init__(self, message)


def flush_stdout_stderr() -> None:
    """
    Try to flush stdout and stderr, when it is not possible
    due to blocking process, then print error message to log file.
    """
    try:
        sys.stdout.flush()
        sys.stderr.flush()
    except IOError as io_err:
        log.error("Error: Unable to print data to stdout/stderr output during exit process: %s" % io_err)


class AbstractCLICommand:
    """
    Base class for commands. This class provides a templated run
    strategy.
    """

    def __init__(
        self,
        name: str = "cli",
        shortdesc: Optional[str] = None,
        primary: bool = False,
    ):
        self.name: str = name
        self.shortdesc: Optional[str] = shortdesc
        self.primary: bool = primary

        self.parser: ArgumentParser = self._create_argparser()

    def main(self, args: Optional[List[str]] = None) -> Optional[int]:
        raise NotImplementedError("Commands must implement: main(self, args=None)")

    def _validate_options(self) -> None:
        """
        Validates the command's arguments.
        @raise InvalidCLIOptionError: Raised when arg validation fails.
        """
        # No argument validation by default.
        pass

    def _get_usage(self) -> str:
        """
        Usage format strips any leading 'usage' so do not include it.
        """
        return _("%(prog)s {name} [OPTIONS]").format(name=self.name)

    def _do_command(self) -> Optional[int]:
        """
        Does the work that this command intends.
        """
        raise NotImplementedError("Commands must implement: _do_command(self)")

    def _create_argparser(self) -> ArgumentParser:
        """
        Creates an argparse.ArgumentParser object for this command.
        """
        return ArgumentParser(usage=self._get_usage(), description=self.shortdesc)


class CLI:
    def __init__(self, command_classes: Optional[List[Type[AbstractCLICommand]]] = None):
        command_classes = command_classes or []
        self.cli_commands: Dict[str, AbstractCLICommand] = {}
        for clazz in command_classes:
            cmd: AbstractCLICommand = clazz()
            # ignore the base class
            if cmd.name != "cli":
                self.cli_commands[cmd.name] = cmd

    def _usage(self) -> None:
        print(_("Usage: %s MODULE-NAME [MODULE-OPTIONS] [--help]") % os.path.basename(sys.argv[0]))
        print("")
        items = sorted(self.cli_commands.items())
        width = max([len(name) for name in self.cli_commands] or [0]) + 4

        print(_("Primary Modules:"))
        for name, cmd in items:
            if cmd.primary:
                print("  %s%s" % (name.ljust(width), cmd.shortdesc or ""))
        print("")
        print(_("Other Modules:"))
        for name, cmd in items:
            if not cmd.primary:
                print("  %s%s" % (name.ljust(width), cmd.shortdesc or ""))
        print("")

    def _find_command(self, args: List[str]) -> Optional[AbstractCLICommand]:
        """
        Returns the command named by the first argument, which does not
        begin with -
        """
        for arg in args[1:]:
            if not arg.startswith("-"):
                return self.cli_commands.get(arg)
        return None

    def main(self) -> Optional[int]:
        if len(sys.argv) < 2:
            self._usage()
            flush_stdout_stderr()
            sys.exit(0)

        cmd: Optional[AbstractCLICommand] = self._find_command(sys.argv)
        if not cmd:
            self._usage()
            # Allow for a 0 return code if just calling --help
            return_code: int = 1
            if sys.argv[1] == "--help":
                return_code = 0
            flush_stdout_stderr()
            sys.exit(return_code)

        try:
            return cmd.main()
        except InvalidCLIOptionError as error:
            system_exit(os.EX_USAGE, error)


def system_exit(code: int, msg: Union[str, Exception, None] = None) -> None:
    """
    Exits the process with an exit code and optional message(s).

    :param code: A unix-style system exit code.
    :param msg: A system exit message, a single exception, or none. This parameter defaults to None.
    """

    if msg:
        if isinstance(msg, Exception):
            exception_mapper: ExceptionMapper = ExceptionMapper()
            msg = exception_mapper.get_message(msg)
        print_error(msg)

    flush_stdout_stderr()

    sys.exit(code)
