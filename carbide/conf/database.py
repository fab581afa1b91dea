# Copyright 2016 Intel Corporation
# Copyright 2013 Hewlett-Packard Development Company, L.P.
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

from oslo_config import cfg

from carbide.common.i18n import _

opts = [
    cfg.StrOpt('mysql_engine',
               default='InnoDB',
               help=_('MySQL engine to use.')),
    cfg.IntOpt('default_page_size',
               default=20,
               min=1,
               help=_('Number of records returned by a list query when the '
                      'caller does not ask for a specific limit.')),
    cfg.IntOpt('max_page_size',
               default=1000,
               min=1,
               help=_('Largest limit a caller may request from a list '
                      'query. Larger limits are rejected.')),
    cfg.IntOpt('max_batch_items',
               default=100,
               min=1,
               help=_('Maximum number of records accepted by a single '
                      'batch create or batch update call. Larger batches '
                      'are rejected before any database access.')),
    cfg.StrOpt('search_language',
               default='english',
               help=_('Text search configuration used to build the '
                      'tsvector/tsquery pair of full-text search filters '
                      'on PostgreSQL.')),
]


def register_opts(conf):
    conf.register_opts(opts, group='database')
