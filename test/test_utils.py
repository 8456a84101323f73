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
from subman.utils import print_error, url_base_join

from test.fixture import Capture, SubManFixture


class TestUrlBaseJoinEmptyBase(SubManFixture):
    def test_blank_base_blank_url(self):
        self.assertEqual("", url_base_join("", ""))

    def test_blank_base_url(self):
        url = "http://foo.notreal/"
        self.assertEqual(url, url_base_join("", url))

    def test_blank_base_url_fragment(self):
        url = "baz"
        self.assertEqual(url, url_base_join("", url))


class TestUrlBaseJoin(SubManFixture):
    base = "http://foo/bar"

    def test_file_url(self):
        # File urls should be preserved
        self.assertEqual("file://this/is/a/file", url_base_join(self.base, "file://this/is/a/file"))

    def test_http_url(self):
        # Http locations should be preserved
        self.assertEqual("http://this/is/a/url", url_base_join(self.base, "http://this/is/a/url"))

    def test_blank_url(self):
        self.assertEqual("", url_base_join(self.base, ""))

    def test_url_fragments(self):
        self.assertEqual(self.base + "/baz", url_base_join(self.base, "baz"))
        self.assertEqual(self.base + "/baz", url_base_join(self.base, "/baz"))

    def test_base_slash(self):
        base = self.base + "/"
        self.assertEqual(self.base + "/baz", url_base_join(base, "baz"))
        self.assertEqual(self.base + "/baz", url_base_join(base, "/baz"))


class TestUrlBaseJoinFileUrl(TestUrlBaseJoin):
    base = "file:///etc"


class TestUrlBaseJoinHttps(TestUrlBaseJoin):
    base = "https://cdn.example.com"


class TestUrlBaseJoinHostname(TestUrlBaseJoin):
    base = "cdn.example.com"


class TestPrintError(SubManFixture):
    def test_print_error(self):
        with Capture() as cap:
            print_error("Something went wrong")
        self.assertEqual(cap.err, "Something went wrong\n")
        self.assertEqual(cap.out, "")
