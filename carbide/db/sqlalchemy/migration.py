# Copyright 2010 United States Government as represented by the
# Administrator of the National Aeronautics and Space Administration.
# All Rights Reserved.
#
#    Licensed under the Apache License, Version 2.0 (the "License"); you may
#    not use this file except in compliance with the License. You may obtain
#    a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#    WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#    License for the specific language governing permissions and limitations
#    under the License.

"""Alembic based schema management for the SQLAlchemy backend."""

import os

import alembic
from alembic import config as alembic_config
import alembic.migration as alembic_migration
from alembic import script as alembic_script
from oslo_db import exception as db_exc
from oslo_db.sqlalchemy import enginefacade
from oslo_log import log

from carbide.db.sqlalchemy import models

LOG = log.getLogger(__name__)


def _alembic_config():
    path = os.path.join(os.path.dirname(__file__), 'alembic.ini')
    return alembic_config.Config(path)


def version(config=None, engine=None):
    """Return the alembic revision the database is stamped with.

    :returns: The revision string, or None for an unmanaged database.
    """
    if engine is None:
        engine = enginefacade.writer.get_engine()
    with engine.connect() as conn:
        context = alembic_migration.MigrationContext.configure(conn)
        return context.get_current_revision()


def head(config=None):
    """Return the newest revision among the shipped migration scripts."""
    script = alembic_script.ScriptDirectory.from_config(
        config or _alembic_config())
    return script.get_current_head()


def upgrade(revision, config=None):
    """Apply the migrations up to ``revision``.

    :param revision: Target alembic revision. Defaults to 'head'.
    """
    revision = revision or 'head'
    LOG.info('Upgrading the database schema to revision %s', revision)
    alembic.command.upgrade(config or _alembic_config(), revision)


def create_schema(config=None, engine=None):
    """Create every table from the models and stamp the newest revision.

    Meant for new installations; a database that already carries a
    revision has to go through upgrade() instead.

    :raises: DBMigrationError if the database is already versioned.
    """
    if engine is None:
        engine = enginefacade.writer.get_engine()

    # create_all() only adds missing tables and would leave older ones
    # behind, so a versioned schema is refused.
    if version(engine=engine) is not None:
        raise db_exc.DBMigrationError("DB schema is already under version"
                                      " control. Use upgrade() instead")

    models.Base.metadata.create_all(engine)
    stamp('head', config=config)


def stamp(revision, config=None):
    """Record ``revision`` as applied without running any migration.

    :param revision: An alembic revision, or 'head' for the newest one.
    """
    return alembic.command.stamp(config or _alembic_config(),
                                 revision=revision)


def revision(message=None, autogenerate=False, config=None):
    """Create a new migration script.

    :param message: Title of the migration.
    :param autogenerate: Compare the models against the database and fill
                         the script with the differences.
    """
    return alembic.command.revision(config or _alembic_config(),
                                    message=message,
                                    autogenerate=autogenerate)
