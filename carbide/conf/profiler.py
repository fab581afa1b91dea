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

from osprofiler import opts as profiler_opts


def register_opts(conf):
    # NOTE: set_defaults() also registers the [profiler] group, which has
    # to exist before the DB API class is decorated at import time.
    profiler_opts.set_defaults(conf)


def list_opts():
    return profiler_opts.list_opts()[0][1]
