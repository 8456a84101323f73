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
import urllib.parse


def url_base_join(base: str, url: str) -> str:
    """Join a baseurl (hostname) and url (full or relpath).

    If url is a full url, just return it. Otherwise combine
    it with base, skipping redundant separators if needed."""

    if len(url) == 0:
        return url
    elif "://" in url:
        return url
    else:
        if base and (not base.endswith("/")):
            base = base + "/"
        if url and (url.startswith("/")):
            url = url.lstrip("/")
        return urllib.parse.urljoin(base, url)


def print_error(message: str) -> None:
    """
    Prints the specified message to stderr
    """
    sys.stderr.write(message)
    sys.stderr.write("\n")
