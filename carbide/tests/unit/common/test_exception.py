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

from http import client as http_client
from unittest import mock

from carbide.common import exception
from carbide.tests import base


class TestException(exception.CarbideException):
    _msg_fmt = 'Some exception: %(spam)s, %(ham)s'


class TestCarbideException(base.TestCase):

    def test___init__(self):
        exc = TestException(spam=[1, 2, 3], ham='eggs')
        self.assertEqual('Some exception: [1, 2, 3], eggs', str(exc))
        self.assertEqual(500, exc.kwargs['code'])

    def test___init___message(self):
        exc = TestException('custom message')
        self.assertEqual('custom message', str(exc))

    @mock.patch.object(exception.LOG, 'exception', autospec=True)
    def test___init___missing_kwarg(self, log_mock):
        exc = TestException(spam='spam')
        self.assertEqual('Some exception: %(spam)s, %(ham)s', str(exc))
        self.assertTrue(log_mock.called)

    def test_code_override(self):
        exc = TestException(spam=1, ham=2, code=418)
        self.assertEqual(418, exc.code)

    def test_not_found(self):
        exc = exception.MachineNotFound(machine='fm100ht1')
        self.assertIsInstance(exc, exception.NotFound)
        self.assertEqual(http_client.NOT_FOUND, exc.code)
        self.assertEqual('Machine fm100ht1 could not be found.', str(exc))

    def test_batch_size_exceeded(self):
        exc = exception.BatchSizeExceeded(size=101, maximum=100)
        self.assertIsInstance(exc, exception.Invalid)
        self.assertEqual(http_client.BAD_REQUEST, exc.code)
        self.assertEqual('Batch size 101 exceeds maximum allowed 100',
                         str(exc))

    def test_duplicate_entity(self):
        exc = exception.DuplicateEntity(entity='Machine', columns='id',
                                        value='fm100ht1')
        self.assertEqual(http_client.CONFLICT, exc.code)
        self.assertEqual('A Machine with id fm100ht1 already exists.',
                         str(exc))
