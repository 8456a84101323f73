# A wrapper that provides httplib and ssl using the standard libs,
# checking for the required parts of them.
#
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
import ssl as _ssl
import sys

import http.client as _httplib

log = logging.getLogger(__name__)

_SSL_REQUIRED_FEATURES = [
    "SSLContext",
    "CERT_NONE",
    "CERT_REQUIRED",
    "PROTOCOL_TLS_CLIENT",
]

_SSL_CONTEXT_REQUIRED_FEATURES = [
    "check_hostname",
    "load_cert_chain",
    "load_verify_locations",
    "verify_mode",
]

using_stdlibs: bool = all(hasattr(_ssl, _feature) for _feature in _SSL_REQUIRED_FEATURES)

if using_stdlibs:
    using_stdlibs = all(hasattr(_ssl.SSLContext, _feature) for _feature in _SSL_CONTEXT_REQUIRED_FEATURES)

if not using_stdlibs:
    log.critical("Missing features in the standard ssl library, exiting")
    sys.exit("Missing features in the standard ssl library, exiting")

ssl = _ssl
httplib = _httplib
