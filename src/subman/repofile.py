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
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from iniparse import RawConfigParser as ConfigParser
import logging
import os
import string

from rhsmlite.config import RhsmConfigParser
from rhsmlite.entitlement import ContentDefinition

from subman import utils
from subman.certdirectory import EntitlementDirectory

log = logging.getLogger(__name__)

YUM_REPOS_DIR = "/etc/yum.repos.d"
REPO_FILE_NAME = "redhat.repo"
DEFAULT_REPO_FILE = os.path.join(YUM_REPOS_DIR, REPO_FILE_NAME)


class Repo(dict):
    # Keys in the order they are written to the repo file
    PROPERTIES: Tuple[str, ...] = (
        "name",
        "baseurl",
        "enabled",
        "enabled_metadata",
        "gpgcheck",
        "gpgkey",
        "sslverify",
        "sslcacert",
        "sslclientkey",
        "sslclientcert",
        "metadata_expire",
        "arches",
    )

    def __init__(self, repo_id: str):
        super().__init__()
        self.id: str = self._clean_id(repo_id)

        # used to store key order, so we can write things out in the order
        # they were set.
        self._order: List[str] = []

    @classmethod
    def from_content(
        cls,
        content: ContentDefinition,
        baseurl: str,
        ca_cert: str,
        cert_path: str,
        key_path: str,
    ) -> "Repo":
        """Create an instance of Repo() from one content definition of an
        entitlement certificate.

        And the other out of band info we need including baseurl, ca_cert,
        and the paths of the entitlement certificate and key.
        """
        repo: Repo = cls(content.name or content.label or "")

        repo["name"] = content.name
        repo["baseurl"] = utils.url_base_join(baseurl, content.path or "")

        if content.enabled:
            repo["enabled"] = "1"
            repo["enabled_metadata"] = "1"
        else:
            repo["enabled"] = "0"
            repo["enabled_metadata"] = "0"

        # Without a GPG key URL, gpgcheck and gpgkey are not written at all
        if content.gpg_url:
            repo["gpgcheck"] = "1"
            repo["gpgkey"] = utils.url_base_join(baseurl, content.gpg_url)

        repo["sslverify"] = "1"
        repo["sslcacert"] = ca_cert
        repo["sslclientkey"] = key_path
        repo["sslclientcert"] = cert_path
        if content.metadata_expire is not None:
            repo["metadata_expire"] = str(content.metadata_expire)
        # Architectures are joined without any separator
        repo["arches"] = "".join(content.arches)

        return repo

    def _clean_id(self, repo_id: str) -> str:
        """
        Format the config file id to contain only characters that yum expects
        (we'll just replace 'bad' chars with -)
        """
        new_id = ""
        valid_chars = string.ascii_letters + string.digits + "-_.:"
        for byte in repo_id:
            if byte not in valid_chars:
                new_id += "-"
            else:
                new_id += byte

        return new_id

    def items(self) -> Tuple[Tuple[str, str], ...]:
        """
        Called when we fetch the items for this yum repo to write to disk.
        """
        # Skip anything set to None or empty string, as the content
        # definition did not have the value set.
        return tuple([(k, self[k]) for k in self._order if k in self and self[k]])

    def __setitem__(self, key: str, value: Optional[str]):
        if key not in self._order:
            self._order.append(key)
        dict.__setitem__(self, key, value)

    def __str__(self) -> str:
        s = []
        s.append("[%s]" % self.id)
        for k in self.PROPERTIES:
            v = self.get(k)
            if not v:
                continue
            s.append("%s=%s" % (k, v))

        return "\n".join(s)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Repo) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


class TidyWriter:
    """
    ini file writer that removes successive newlines,
    and adds a trailing newline to the end of a file.
    """

    def __init__(self, backing_file: TextIO):
        self.backing_file = backing_file
        self.ends_with_newline: bool = False
        self.writing_empty_lines: bool = False

    def write(self, line: str) -> None:
        lines = line.split("\n")
        last = len(lines) - 1
        for i, line in enumerate(lines):
            if line == "":
                if i != last:
                    if not self.writing_empty_lines:
                        self.backing_file.write("\n")
                    self.writing_empty_lines = True
            else:
                self.writing_empty_lines = False
                self.backing_file.write(line)
                if i != last:
                    self.backing_file.write("\n")

        self.ends_with_newline = lines[-1] == ""

    def close(self) -> None:
        if not self.ends_with_newline:
            self.backing_file.write("\n")


class YumRepoFile(ConfigParser):
    """
    The generated yum repo file. It is always written as a whole; whatever
    was in the file before is replaced.
    """

    REPOFILE_HEADER = """#
# Certificate-Based Repositories
# Managed by (rhsm) subscription-manager-lite
#
# *** This file is auto-generated.  Changes made here will be over-written. ***
#
"""

    def __init__(self, path: str = DEFAULT_REPO_FILE):
        ConfigParser.__init__(self)
        self.path = path

    def read(self) -> None:
        ConfigParser.read(self, self.path)

    def add(self, repo: Repo) -> None:
        if self.has_section(repo.id):
            log.warning("Repository %s defined more than once, last definition is used" % repo.id)
            self.remove_section(repo.id)
        self.add_section(repo.id)
        for k, v in repo.items():
            ConfigParser.set(self, repo.id, k, v)

    def section(self, section: str) -> Optional[Dict[str, str]]:
        if self.has_section(section):
            return dict(self.items(section))
        return None

    def create_dir_path(self) -> None:
        repos_dir = os.path.dirname(self.path)
        if repos_dir and not os.path.exists(repos_dir):
            log.debug("The directory %s does not exist. Trying to create it" % repos_dir)
            os.makedirs(name=repos_dir, mode=0o755)

    def write(self) -> None:
        self.create_dir_path()
        with open(self.path, "w") as f:
            tidy_writer = TidyWriter(f)
            tidy_writer.write(self.REPOFILE_HEADER)
            ConfigParser.write(self, tidy_writer)
            tidy_writer.close()
        log.debug("Wrote %d repositories to %s" % (len(self.sections()), self.path))


class RepoGenerator:
    """
    Turns content definitions of entitlement certificates into the yum
    repo file.
    """

    def __init__(self, baseurl: str, ca_cert: str, ent_dir: EntitlementDirectory) -> None:
        self.baseurl = baseurl
        self.ca_cert = ca_cert
        self.ent_dir = ent_dir

    @classmethod
    def from_config(cls, config: RhsmConfigParser, ent_dir: EntitlementDirectory) -> "RepoGenerator":
        return cls(config.get("rhsm", "baseurl"), config.get("rhsm", "repo_ca_cert"), ent_dir)

    def repos(self, serial: int, definitions: Iterable[ContentDefinition]) -> List[Repo]:
        cert_path = self.ent_dir.cert_path(serial)
        key_path = self.ent_dir.key_path(serial)
        return [
            Repo.from_content(content, self.baseurl, self.ca_cert, cert_path, key_path)
            for content in definitions
        ]

    def write(self, serial: int, definitions: Iterable[ContentDefinition], output_path: str) -> YumRepoFile:
        """
        Replace the repo file at output_path with one section per content
        definition of the entitlement certificate with the given serial.
        """
        return self.write_all({serial: definitions}, output_path)

    def write_all(self, content: Dict[int, Iterable[ContentDefinition]], output_path: str) -> YumRepoFile:
        """
        Replace the repo file at output_path with the content of several
        entitlement certificates.
        """
        repo_file = YumRepoFile(output_path)
        for serial, definitions in content.items():
            for repo in self.repos(serial, definitions):
                repo_file.add(repo)
        repo_file.write()
        return repo_file
