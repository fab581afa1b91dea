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

"""Tests for manipulating machines via the DB API"""

from oslo_db import exception as db_exc
from oslo_utils import uuidutils
import sqlalchemy as sa

from carbide.common import exception
from carbide.common import states
from carbide.db import api as db_api
from carbide.db.sqlalchemy import api as sqlalchemy_api
from carbide.db.sqlalchemy import models
from carbide.tests.unit.db import base
from carbide.tests.unit.db import utils as db_utils


class MachinesTestCase(base.DbTestCase):

    def setUp(self):
        super(MachinesTestCase, self).setUp()
        self.provider = db_utils.create_test_infrastructure_provider()
        self.site = db_utils.create_test_site(
            infrastructure_provider_id=self.provider.id)
        self.instance_type = db_utils.create_test_instance_type(
            name='gpu.large', infrastructure_provider_id=self.provider.id,
            site_id=self.site.id)

    def _create_test_machine(self, **kw):
        kw.setdefault('infrastructure_provider_id', self.provider.id)
        kw.setdefault('site_id', self.site.id)
        return db_utils.create_test_machine(**kw)

    def _create_test_machine_range(self, count, **kw):
        return [self._create_test_machine(id='machine-%02d' % i, **kw).id
                for i in range(count)]

    def test_create(self):
        machine = self._create_test_machine(id='fm100htabc',
                                            labels={'rack': 'r1'})
        self.assertEqual('fm100htabc', machine.id)
        self.assertEqual({'rack': 'r1'}, machine.labels)
        self.assertFalse(machine.is_assigned)
        self.assertEqual(states.MACHINE_READY, machine.status)

    def test_create_without_id(self):
        values = db_utils.get_test_machine(
            infrastructure_provider_id=self.provider.id,
            site_id=self.site.id)
        del values['id']
        self.assertRaises(exception.InvalidParameterValue,
                          self.dbapi.create_machine, values)

    def test_create_duplicate_id(self):
        self._create_test_machine(id='fm100htabc')
        self.assertRaises(exception.DuplicateEntity,
                          self._create_test_machine, id='fm100htabc')

    def test_create_unknown_site(self):
        self.assertRaises(db_exc.DBReferenceError,
                          self._create_test_machine,
                          site_id=uuidutils.generate_uuid())

    def test_get_by_id_with_relations(self):
        machine = self._create_test_machine(
            instance_type_id=self.instance_type.id)
        res = self.dbapi.get_machine_by_id(
            machine.id, relations=[db_api.SITE_RELATION,
                                   db_api.INSTANCE_TYPE_RELATION])
        self.assertEqual(self.site.id, res.site.id)
        self.assertEqual('gpu.large', res.instance_type.name)

    def test_get_by_id_that_does_not_exist(self):
        self.assertRaises(exception.MachineNotFound,
                          self.dbapi.get_machine_by_id, 'nope')

    def test_get_list_default_page(self):
        ids = self._create_test_machine_range(30)
        res, total = self.dbapi.get_machine_list()
        self.assertEqual(30, total)
        self.assertEqual(20, len(res))
        res, total = self.dbapi.get_machine_list(offset=20)
        self.assertEqual(30, total)
        self.assertEqual(10, len(res))
        res, total = self.dbapi.get_machine_list(limit=30)
        self.assertEqual(set(ids), {r.id for r in res})

    def test_get_list_filtered_by_provider(self):
        other_provider = db_utils.create_test_infrastructure_provider(
            name='other-provider')
        other_site = db_utils.create_test_site(
            infrastructure_provider_id=other_provider.id)
        ids = self._create_test_machine_range(15)
        for i in range(15):
            self._create_test_machine(
                id='other-%02d' % i,
                infrastructure_provider_id=other_provider.id,
                site_id=other_site.id)

        res, total = self.dbapi.get_machine_list()
        self.assertEqual(30, total)
        self.assertEqual(20, len(res))
        self.assertEqual(30, self.dbapi.get_machine_count())

        filters = {'infrastructure_provider_ids': [self.provider.id]}
        res, total = self.dbapi.get_machine_list(filters=filters)
        self.assertEqual(15, total)
        self.assertEqual(set(ids), {r.id for r in res})
        self.assertEqual(15, self.dbapi.get_machine_count(filters=filters))

    def test_get_list_sorted_by_id(self):
        ids = self._create_test_machine_range(5)
        res, _ = self.dbapi.get_machine_list(sort_keys=['id'],
                                             sort_dirs=['desc'])
        self.assertEqual(sorted(ids, reverse=True), [r.id for r in res])

    def test_get_list_sorted_by_instance_type_name(self):
        small = db_utils.create_test_instance_type(
            name='cpu.small', infrastructure_provider_id=self.provider.id,
            site_id=self.site.id)
        large = self._create_test_machine(
            id='m-large', instance_type_id=self.instance_type.id)
        unset = self._create_test_machine(id='m-unset')
        cpu = self._create_test_machine(id='m-cpu',
                                        instance_type_id=small.id)
        res, total = self.dbapi.get_machine_list(
            sort_keys=['instance_type_name'],
            relations=[db_api.INSTANCE_TYPE_RELATION])
        self.assertEqual(3, total)
        ids = [r.id for r in res]
        self.assertEqual(3, len(ids))
        self.assertLess(ids.index(cpu.id), ids.index(large.id))
        self.assertIn(unset.id, ids)
        by_id = {r.id: r for r in res}
        self.assertEqual('cpu.small', by_id[cpu.id].instance_type.name)
        self.assertIsNone(by_id[unset.id].instance_type)

    def test_get_list_filters(self):
        self._create_test_machine_range(3)
        assigned = self._create_test_machine(
            id='assigned', is_assigned=True, status=states.MACHINE_IN_USE,
            instance_type_id=self.instance_type.id)
        res, total = self.dbapi.get_machine_list(
            filters={'is_assigned': True})
        self.assertEqual([assigned.id], [r.id for r in res])
        res, total = self.dbapi.get_machine_list(
            filters={'statuses': [states.MACHINE_IN_USE,
                                  states.MACHINE_ERROR]})
        self.assertEqual([assigned.id], [r.id for r in res])
        res, total = self.dbapi.get_machine_list(
            filters={'instance_type_ids': [self.instance_type.id],
                     'site_ids': [self.site.id]})
        self.assertEqual(1, total)

    def test_get_list_empty_list_filter(self):
        self._create_test_machine_range(3)
        self.assertEqual(([], 0), self.dbapi.get_machine_list(
            filters={'machine_ids': []}))
        self.assertEqual(0, self.dbapi.get_machine_count(
            filters={'site_ids': []}))

    def test_get_list_search_labels(self):
        self._create_test_machine(id='m-1', labels={'rack': 'blue-7'})
        self._create_test_machine(id='m-2', labels={'rack': 'red-3'})
        res, total = self.dbapi.get_machine_list(
            filters={'search_query': 'BLUE'})
        self.assertEqual(['m-1'], [r.id for r in res])

    def test_get_count_by_status(self):
        self._create_test_machine_range(3)
        self._create_test_machine(id='broken', status=states.MACHINE_ERROR)
        gone = self._create_test_machine(id='gone',
                                         status=states.MACHINE_ERROR)
        self.dbapi.destroy_machine(gone.id)
        res = self.dbapi.get_machine_count_by_status()
        self.assertEqual(4, res['total'])
        self.assertEqual(3, res[states.MACHINE_READY])
        self.assertEqual(1, res[states.MACHINE_ERROR])
        self.assertEqual(0, res[states.MACHINE_IN_USE])
        self.assertEqual(set(states.MACHINE_STATES) | {'total'}, set(res))

    def test_get_count_by_status_empty_list_filter(self):
        self._create_test_machine_range(2)
        res = self.dbapi.get_machine_count_by_status(
            filters={'site_ids': []})
        self.assertEqual(0, res['total'])
        self.assertEqual(0, res[states.MACHINE_READY])

    def test_update(self):
        machine = self._create_test_machine(id='m-1')
        res = self.dbapi.update_machine(
            machine.id, {'is_in_maintenance': True,
                         'maintenance_message': 'disk swap',
                         'machine_metadata': {'bios': '2.1'}})
        self.assertTrue(res.is_in_maintenance)
        self.assertEqual({'bios': '2.1'}, res.machine_metadata)
        res = self.dbapi.get_machine_by_id(machine.id)
        self.assertEqual('disk swap', res.maintenance_message)

    def test_update_multiple(self):
        ids = self._create_test_machine_range(3)
        res = self.dbapi.update_multiple_machines(
            [{'id': ids[2], 'status': states.MACHINE_IN_USE,
              'is_assigned': True},
             {'id': ids[0], 'hostname': 'host-0'}])
        self.assertEqual([ids[2], ids[0]], [r.id for r in res])
        self.assertEqual(states.MACHINE_IN_USE, res[0].status)
        self.assertTrue(res[0].is_assigned)
        self.assertIsNone(res[0].hostname)
        self.assertEqual(states.MACHINE_READY, res[1].status)
        self.assertEqual('host-0', res[1].hostname)
        untouched = self.dbapi.get_machine_by_id(ids[1])
        self.assertIsNone(untouched.hostname)

    def test_update_multiple_json_field(self):
        ids = self._create_test_machine_range(2)
        res = self.dbapi.update_multiple_machines(
            [{'id': ids[0], 'labels': {'a': '1'}},
             {'id': ids[1], 'labels': {'b': '2'}}])
        self.assertEqual({'a': '1'}, res[0].labels)
        self.assertEqual({'b': '2'}, res[1].labels)

    def test_clear(self):
        machine = self._create_test_machine(
            id='m-1', instance_type_id=self.instance_type.id,
            hostname='host-1')
        res = self.dbapi.clear_machine(machine.id,
                                       ['instance_type_id', 'hostname'])
        self.assertIsNone(res.instance_type_id)
        self.assertIsNone(res.hostname)

    def test_clear_not_nullable(self):
        machine = self._create_test_machine(id='m-1')
        self.assertRaises(exception.InvalidParameterValue,
                          self.dbapi.clear_machine, machine.id, ['status'])

    def test_destroy(self):
        machine = self._create_test_machine(id='m-1')
        self.dbapi.destroy_machine(machine.id)
        self.assertRaises(exception.MachineNotFound,
                          self.dbapi.get_machine_by_id, machine.id)
        self.dbapi.destroy_machine(machine.id)

    def _get_row_with_deleted(self, machine_id):
        with sqlalchemy_api._session_for_read() as session:
            return session.execute(
                sa.select(models.Machine)
                .where(models.Machine.id == machine_id)).scalar_one_or_none()

    def test_destroy_keeps_row(self):
        machine = self._create_test_machine(id='m-1')
        self.dbapi.destroy_machine(machine.id)
        row = self._get_row_with_deleted(machine.id)
        self.assertIsNotNone(row.deleted_at)

    def test_destroy_purge(self):
        machine = self._create_test_machine(id='m-1')
        self.dbapi.destroy_machine(machine.id, purge=True)
        self.assertIsNone(self._get_row_with_deleted(machine.id))
        self.assertEqual(0, self.dbapi.get_machine_count())

    def test_destroy_purge_deleted_machine(self):
        machine = self._create_test_machine(id='m-1')
        self.dbapi.destroy_machine(machine.id)
        self.dbapi.destroy_machine(machine.id, purge=True)
        self.assertIsNone(self._get_row_with_deleted(machine.id))

    def test_destroy_purge_missing_machine(self):
        self.dbapi.destroy_machine('nope', purge=True)

    def test_destroy_purge_referenced_machine(self):
        machine = self._create_test_machine(id='m-1')
        tenant = db_utils.create_test_tenant()
        vpc = db_utils.create_test_vpc(site_id=self.site.id,
                                       tenant_id=tenant.id)
        db_utils.create_test_instance(
            tenant_id=tenant.id, infrastructure_provider_id=self.provider.id,
            site_id=self.site.id, vpc_id=vpc.id, machine_id=machine.id)
        self.assertRaises(db_exc.DBReferenceError,
                          self.dbapi.destroy_machine, machine.id, purge=True)
        self.assertIsNotNone(self._get_row_with_deleted(machine.id))
