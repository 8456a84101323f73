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
import json
import os
import shutil
import sys
import tempfile
import unittest
from contextlib import contextmanager
from typing import Any, Callable, Dict, List, Optional, Tuple

import mock

from rhsmlite import config as rhsm_config
from rhsmlite import connection

from test import certdata


@contextmanager
def temp_file(content, *args, **kwargs):
    try:
        kwargs["delete"] = False
        kwargs.setdefault("prefix", "sub-man-test")
        fh = tempfile.NamedTemporaryFile(mode="w+", *args, **kwargs)
        fh.write(content)
        fh.close()
        yield fh.name
    finally:
        os.unlink(fh.name)


def write_file(path: str, content: str) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as f:
        f.write(content)
    return path


class FakeServer:
    """
    Stands in for Connection.request: answers (method, path) with canned
    JSON responses and records every request.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Callable] = {}
        self.requests: List[Dict[str, Any]] = []

    def add(self, method: str, path: str, response: Any = None, status: int = 200) -> None:
        if callable(response):
            self.routes[(method, path)] = response
        else:
            self.routes[(method, path)] = lambda request: (status, response)

    def request(self, method, path, query=None, headers=None, body=None):
        request = {"method": method, "path": path, "query": query, "headers": headers or {}, "body": body}
        self.requests.append(request)
        try:
            handler = self.routes[(method, path)]
        except KeyError:
            return 404, json.dumps({"displayMessage": "Not found: %s" % path}).encode("utf-8")
        status, response = handler(request)
        if response is None:
            return status, b""
        if isinstance(response, bytes):
            return status, response
        return status, json.dumps(response).encode("utf-8")

    def paths(self) -> List[Tuple[str, str]]:
        return [(request["method"], request["path"]) for request in self.requests]


class SubManFixture(unittest.TestCase):
    """
    Can be extended by any subscription manager test case to get a private
    directory tree and a configuration pointing into it.
    """

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp(prefix="subman-test-")
        self.addCleanup(shutil.rmtree, self.tmp_dir, ignore_errors=True)

        self.ca_dir = self.path("ca")
        self.consumer_dir = self.path("consumer")
        self.ent_dir_path = self.path("entitlement")
        self.product_dir_path = self.path("product")
        self.default_product_dir_path = self.path("product-default")
        self.repo_file_path = self.path("yum.repos.d", "redhat.repo")
        self.syspurpose_path = self.path("syspurpose", "syspurpose.json")
        os.makedirs(self.ca_dir)

        self.certs = certdata.CertFactory()
        write_file(os.path.join(self.ca_dir, "redhat-uep.pem"), self.certs.ca.pem)

        self.config = self.make_config()

    def path(self, *names: str) -> str:
        return os.path.join(self.tmp_dir, *names)

    def make_config(self, content: Optional[str] = None) -> rhsm_config.RhsmConfigParser:
        if content is None:
            content = """
[server]
hostname = subscription.example.com
port = 443
prefix = /subscription
insecure = 0

[rhsm]
baseurl = https://cdn.example.com
ca_cert_dir = %(ca_dir)s/
repo_ca_cert = %%(ca_cert_dir)sredhat-uep.pem
productcertdir = %(product)s
entitlementcertdir = %(ent)s
consumercertdir = %(consumer)s

[logging]
default_log_level = DEBUG
""" % {
                "ca_dir": self.ca_dir,
                "product": self.product_dir_path,
                "ent": self.ent_dir_path,
                "consumer": self.consumer_dir,
            }
        config_path = write_file(self.path("rhsm.conf"), content)
        return rhsm_config.RhsmConfigParser(config_file=config_path)

    def install_consumer(self, uuid: str = certdata.CONSUMER_UUID, owner: str = certdata.OWNER_KEY):
        cert, key = self.certs.consumer(uuid, owner)
        write_file(os.path.join(self.consumer_dir, "cert.pem"), cert)
        write_file(os.path.join(self.consumer_dir, "key.pem"), key)
        return cert, key

    def install_entitlement(self, serial: int = certdata.ENT_SERIAL, payload: Optional[dict] = None):
        cert, key = self.certs.entitlement(payload, serial)
        write_file(os.path.join(self.ent_dir_path, "%s.pem" % serial), cert)
        write_file(os.path.join(self.ent_dir_path, "%s-key.pem" % serial), key)
        return cert, key

    def install_product(self, directory: Optional[str] = None, file_name: str = "69.pem", **kwargs) -> str:
        return write_file(os.path.join(directory or self.product_dir_path, file_name), self.certs.product(**kwargs))

    def patch_server(self) -> FakeServer:
        """
        Route every request of every Connection to a FakeServer
        """
        server = FakeServer()
        patcher = mock.patch.object(connection.Connection, "request", side_effect=server.request)
        self.request_mock = patcher.start()
        self.addCleanup(patcher.stop)
        return server

    def assert_items_equals(self, a, b):
        """Assert that two lists contain the same items regardless of order."""
        if sorted(a) != sorted(b):
            self.fail("%s != %s" % (a, b))
        return True


class Capture:
    class Tee:
        def __init__(self, stream, silent):
            self.buf = io.StringIO()
            self.stream = stream
            self.silent = silent

        def write(self, data):
            self.buf.write(data)
            if not self.silent:
                self.stream.write(data)

        def flush(self):
            pass

        def getvalue(self):
            return self.buf.getvalue()

        def isatty(self):
            return False

    def __init__(self, silent=True):
        self.silent = silent

    def __enter__(self):
        self.buffs = (self.Tee(sys.stdout, self.silent), self.Tee(sys.stderr, self.silent))
        self.stdout = sys.stdout
        self.stderr = sys.stderr
        sys.stdout, sys.stderr = self.buffs
        return self

    @property
    def out(self):
        return self.buffs[0].getvalue()

    @property
    def err(self):
        return self.buffs[1].getvalue()

    def __exit__(self, exc_type, exc_value, traceback):
        sys.stdout = self.stdout
        sys.stderr = self.stderr
