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
import locale
import os
import unittest

from mock import patch

from subman import i18n


class TestI18N(unittest.TestCase):
    @patch("subman.i18n.configure_gettext")
    @patch("subman.i18n.locale.setlocale")
    def test_configure_i18n(self, setlocale, configure_gettext):
        i18n.configure_i18n()

        setlocale.assert_called_once_with(category=locale.LC_ALL, locale="")
        configure_gettext.assert_called_once_with()

    @patch("subman.i18n.configure_gettext")
    @patch("subman.i18n.locale.setlocale")
    def test_configure_i18n_unsupported_locale(self, setlocale, configure_gettext):
        setlocale.side_effect = [locale.Error("unsupported locale setting"), None]

        with patch.dict(os.environ, {"LANG": "xx_XX.UTF-8"}):
            i18n.configure_i18n()
            self.assertEqual(os.environ["LC_ALL"], "C.UTF-8")

        self.assertEqual(setlocale.call_count, 2)
        configure_gettext.assert_called_once_with()

    def test_untranslated_message(self):
        self.assertEqual(i18n.ugettext("Overall Status: {status}"), "Overall Status: {status}")

    def test_plural_forms(self):
        self.assertEqual(i18n.ungettext("certificate", "certificates", 1), "certificate")
        self.assertEqual(i18n.ungettext("certificate", "certificates", 2), "certificates")
