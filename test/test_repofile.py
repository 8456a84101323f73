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
import io
import os

from iniparse import RawConfigParser

from rhsmlite.entitlement import ContentDefinition

from subman.certdirectory import EntitlementDirectory
from subman.repofile import Repo, RepoGenerator, TidyWriter, YumRepoFile

from test.fixture import SubManFixture

BASEURL = "https://cdn.example.com"
CA_CERT = "/etc/rhsm/ca/redhat-uep.pem"


def content(**kwargs):
    values = {
        "id": "1",
        "content_type": "yum",
        "name": "awesomeos-rpms",
        "label": "awesomeos-rpms",
        "path": "/content/awesomeos/$basearch/os",
        "gpg_url": "/gpg/awesomeos",
        "metadata_expire": 3600,
        "arches": ["x86_64"],
    }
    values.update(kwargs)
    return ContentDefinition(**values)


class RepoTests(SubManFixture):
    def from_content(self, content_def):
        return Repo.from_content(content_def, BASEURL, CA_CERT, "/ent/1.pem", "/ent/1-key.pem")

    def test_from_content(self):
        repo = self.from_content(content())
        self.assertEqual(repo.id, "awesomeos-rpms")
        self.assertEqual(repo["name"], "awesomeos-rpms")
        self.assertEqual(repo["baseurl"], "https://cdn.example.com/content/awesomeos/$basearch/os")
        self.assertEqual(repo["enabled"], "1")
        self.assertEqual(repo["enabled_metadata"], "1")
        self.assertEqual(repo["gpgcheck"], "1")
        self.assertEqual(repo["gpgkey"], "https://cdn.example.com/gpg/awesomeos")
        self.assertEqual(repo["sslverify"], "1")
        self.assertEqual(repo["sslcacert"], CA_CERT)
        self.assertEqual(repo["sslclientcert"], "/ent/1.pem")
        self.assertEqual(repo["sslclientkey"], "/ent/1-key.pem")
        self.assertEqual(repo["metadata_expire"], "3600")
        self.assertEqual(repo["arches"], "x86_64")

    def test_disabled(self):
        repo = self.from_content(content(enabled=False))
        self.assertEqual(repo["enabled"], "0")
        self.assertEqual(repo["enabled_metadata"], "0")

    def test_no_gpg_url(self):
        repo = self.from_content(content(gpg_url=None))
        self.assertNotIn("gpgcheck", repo)
        self.assertNotIn("gpgkey", repo)

    def test_full_gpg_url_kept(self):
        repo = self.from_content(content(gpg_url="file:///etc/pki/rpm-gpg/RPM-GPG-KEY-redhat-release"))
        self.assertEqual(repo["gpgkey"], "file:///etc/pki/rpm-gpg/RPM-GPG-KEY-redhat-release")

    def test_arches_joined_without_separator(self):
        repo = self.from_content(content(arches=["x86_64", "aarch64"]))
        self.assertEqual(repo["arches"], "x86_64aarch64")

    def test_no_arches_not_written(self):
        repo = self.from_content(content(arches=[], metadata_expire=None))
        keys = [key for key, _value in repo.items()]
        self.assertNotIn("arches", keys)
        self.assertNotIn("metadata_expire", keys)

    def test_id_cleaned(self):
        repo = self.from_content(content(name="Awesome OS (RPMs)"))
        self.assertEqual(repo.id, "Awesome-OS--RPMs-")
        self.assertEqual(repo["name"], "Awesome OS (RPMs)")

    def test_id_from_label_without_name(self):
        repo = self.from_content(content(name=None, label="awesomeos-label"))
        self.assertEqual(repo.id, "awesomeos-label")

    def test_items_keep_order(self):
        repo = Repo("test")
        repo["sslverify"] = "1"
        repo["name"] = "test"
        repo["gpgkey"] = ""
        self.assertEqual(repo.items(), (("sslverify", "1"), ("name", "test")))

    def test_str(self):
        repo = Repo("test")
        repo["baseurl"] = "https://example.com"
        repo["name"] = "Test"
        self.assertEqual(str(repo), "[test]\nname=Test\nbaseurl=https://example.com")


class TidyWriterTests(SubManFixture):
    def test_collapse_newlines(self):
        output = io.StringIO()
        writer = TidyWriter(output)
        writer.write("[a]\n\n\n\nkey = value\n\n")
        writer.write("[b]")
        writer.close()
        self.assertEqual(output.getvalue(), "[a]\n\nkey = value\n\n[b]\n")


class YumRepoFileTests(SubManFixture):
    def test_write(self):
        repo_file = YumRepoFile(self.repo_file_path)
        repo = Repo("test")
        repo["name"] = "Test"
        repo_file.add(repo)
        repo_file.write()

        with open(self.repo_file_path) as f:
            text = f.read()
        self.assertTrue(text.startswith(YumRepoFile.REPOFILE_HEADER))
        self.assertIn("[test]\nname = Test\n", text)
        self.assertEqual(YumRepoFile(self.repo_file_path).section("missing"), None)

    def test_duplicate_id_last_wins(self):
        repo_file = YumRepoFile(self.repo_file_path)
        first = Repo("test")
        first["name"] = "first"
        first["gpgkey"] = "https://example.com/key"
        second = Repo("test")
        second["name"] = "second"

        repo_file.add(first)
        with self.assertLogs("subman.repofile", level="WARNING"):
            repo_file.add(second)

        self.assertEqual(repo_file.section("test"), {"name": "second"})


class RepoGeneratorTests(SubManFixture):
    def setUp(self):
        super(RepoGeneratorTests, self).setUp()
        self.ent_dir = EntitlementDirectory(self.ent_dir_path)
        self.generator = RepoGenerator.from_config(self.config, self.ent_dir)

    def read_repo_file(self):
        parser = RawConfigParser()
        parser.read(self.repo_file_path)
        return parser

    def test_from_config(self):
        self.assertEqual(self.generator.baseurl, "https://cdn.example.com")
        self.assertEqual(self.generator.ca_cert, os.path.join(self.ca_dir, "redhat-uep.pem"))

    def test_write(self):
        definitions = [content(), content(id="2", name="other-rpms", label="other-rpms", enabled=False)]
        self.generator.write(42, definitions, self.repo_file_path)

        parser = self.read_repo_file()
        self.assertEqual(parser.sections(), ["awesomeos-rpms", "other-rpms"])
        self.assertEqual(parser.get("awesomeos-rpms", "sslclientcert"), os.path.join(self.ent_dir_path, "42.pem"))
        self.assertEqual(parser.get("awesomeos-rpms", "sslclientkey"), os.path.join(self.ent_dir_path, "42-key.pem"))
        self.assertEqual(parser.get("other-rpms", "enabled"), "0")

    def test_write_replaces_file(self):
        self.generator.write(1, [content(name="old-rpms")], self.repo_file_path)
        self.generator.write(2, [content(name="new-rpms")], self.repo_file_path)
        self.assertEqual(self.read_repo_file().sections(), ["new-rpms"])

    def test_write_all(self):
        self.generator.write_all(
            {1: [content(name="first-rpms")], 2: [content(name="second-rpms")]},
            self.repo_file_path,
        )
        parser = self.read_repo_file()
        self.assertEqual(parser.sections(), ["first-rpms", "second-rpms"])
        self.assertEqual(parser.get("second-rpms", "sslclientcert"), os.path.join(self.ent_dir_path, "2.pem"))

    def test_write_no_content(self):
        self.generator.write(1, [], self.repo_file_path)
        with open(self.repo_file_path) as f:
            self.assertEqual(f.read(), YumRepoFile.REPOFILE_HEADER)
