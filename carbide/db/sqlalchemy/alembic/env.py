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

from logging import config as log_config

from alembic import context
from oslo_db.sqlalchemy import enginefacade

from carbide.db.sqlalchemy import models

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Interpret the config file for Python logging, unless the caller already
# set logging up (dbsync does, through oslo.log).
if config.attributes.get('configure_logger', True):
    log_config.fileConfig(config.config_file_name)

# The models' MetaData object, for 'autogenerate' support.
target_metadata = models.Base.metadata


def run_migrations_online():
    """Run migrations in 'online' mode.

    The engine comes from the [database] section of the carbide
    configuration, through oslo.db.
    """
    engine = enginefacade.writer.get_engine()
    with engine.connect() as connection:
        context.configure(connection=connection,
                          target_metadata=target_metadata,
                          render_as_batch=connection.dialect.name == 'sqlite')
        with context.begin_transaction():
            context.run_migrations()


run_migrations_online()
