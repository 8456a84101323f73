#!/usr/bin/env python

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
from setuptools import setup, find_packages


setup_requires = []

install_requires = [
    'iniparse',
    'python-dateutil',
    'cryptography',
    'asn1crypto',
]

test_require = [
    'mock',
    'pytest',
    'pytest-randomly',
    'coverage',
    'flake8',
] + install_requires + setup_requires

setup(
    name="subscription-manager-lite",
    version='1.0.0',
    url="http://www.candlepinproject.org",
    description="Register a system to a subscription management service and enable its content.",
    license="GPLv2",
    packages=find_packages('src'),
    package_dir={'': 'src'},
    entry_points={
        'console_scripts': [
            'subman = subman.scripts.subman:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: GPL License",
        "Operating System :: Linux",
    ],
    python_requires='>=3.6',
    setup_requires=setup_requires,
    install_requires=install_requires,
    tests_require=test_require,
    extras_require={
        'test': test_require,
    },
)
