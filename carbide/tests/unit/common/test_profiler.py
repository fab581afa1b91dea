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

from unittest import mock

from osprofiler import initializer
from osprofiler import profiler as osp_profiler

from carbide.common import profiler
from carbide.tests import base


class ProfilerTestCase(base.TestCase):

    @mock.patch.object(osp_profiler, 'trace_cls', autospec=True)
    def test_trace_cls_disabled(self, mock_trace_cls):
        self.config(enabled=False, group='profiler')

        class Traced(object):
            pass

        self.assertIs(Traced, profiler.trace_cls('db_api')(Traced))
        self.assertFalse(mock_trace_cls.called)

    @mock.patch.object(osp_profiler, 'trace_cls', autospec=True)
    def test_trace_cls_enabled(self, mock_trace_cls):
        self.config(enabled=True, group='profiler')
        decorated = object()
        mock_trace_cls.return_value = lambda cls: decorated

        class Traced(object):
            pass

        self.assertIs(decorated,
                      profiler.trace_cls('db_api', hide_args=True)(Traced))
        mock_trace_cls.assert_called_once_with('db_api', hide_args=True)

    @mock.patch.object(initializer, 'init_from_conf', autospec=True)
    def test_setup_disabled(self, mock_init):
        self.config(enabled=False, group='profiler')
        profiler.setup('carbide-dbsync')
        self.assertFalse(mock_init.called)

    @mock.patch.object(initializer, 'init_from_conf', autospec=True)
    def test_setup_enabled(self, mock_init):
        self.config(enabled=True, group='profiler')
        profiler.setup('carbide-dbsync', 'db-host')
        mock_init.assert_called_once_with(
            conf=profiler.CONF, context={}, project='carbide',
            service='carbide-dbsync', host='db-host')
