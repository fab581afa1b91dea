#!/usr/bin/env python
# Copyright (c) 2013 Hewlett-Packard Development Company, L.P.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#    http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or
# implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import setuptools

project = 'carbide-db'

setuptools.setup(
    name=project,
    version='0.1.0',
    description='Data access layer for bare metal infrastructure records',
    classifiers=[
        'Intended Audience :: Information Technology',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
    python_requires='>=3.9',
    packages=setuptools.find_packages(),
    include_package_data=True,
    package_data={
        'carbide.db.sqlalchemy': [
            'alembic.ini',
            'alembic/script.py.mako',
            'alembic/versions/*.py',
        ],
    },
    install_requires=[
        'pbr>=3.1.1',
        'SQLAlchemy>=2.0.0',
        'alembic>=1.4.2',
        'oslo.config>=6.8.0',
        'oslo.db>=12.1.0',
        'oslo.i18n>=3.20.0',
        'oslo.log>=4.3.0',
        'oslo.utils>=4.5.0',
        'osprofiler>=1.5.0',
        'stevedore>=1.29.0',
    ],
    extras_require={
        'test': [
            'fixtures>=3.0.0',
            'oslotest>=3.2.0',
            'stestr>=2.0.0',
            'testtools>=2.2.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'carbide-dbsync = carbide.cmd.dbsync:main',
        ],
        'oslo.config.opts': [
            'carbide = carbide.conf.opts:list_opts',
        ],
        'carbide.database.migration_backend': [
            'sqlalchemy = carbide.db.sqlalchemy.migration',
        ],
    },
)
