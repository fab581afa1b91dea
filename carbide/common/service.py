# -*- encoding: utf-8 -*-
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.

from oslo_log import log

from carbide.common import config
from carbide.common import profiler
from carbide.conf import CONF
from carbide.conf import opts


def prepare_command(argv=None, name='carbide'):
    """Prepare any carbide command for execution.

    Sets up configuration, logging and profiling.
    """
    argv = [] if argv is None else argv
    log.register_options(CONF)
    opts.update_opt_defaults()
    config.parse_args(argv)
    # Logging is set up after argv was parsed so that options coming from
    # the config file are honoured.
    log.setup(CONF, 'carbide')
    profiler.setup(name)
