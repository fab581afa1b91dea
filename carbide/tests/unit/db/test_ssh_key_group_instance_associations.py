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

"""Tests for manipulating SSH key group associations via the DB API"""

from oslo_db import exception as db_exc
from oslo_utils import uuidutils

from carbide.common import exception
from carbide.db import api as db_api
from carbide.tests.unit.db import base
from carbide.tests.unit.db import utils as db_utils


class SSHKeyGroupInstanceAssociationsTestCase(base.DbTestCase):

    def setUp(self):
        super(SSHKeyGroupInstanceAssociationsTestCase, self).setUp()
        provider = db_utils.create_test_infrastructure_provider()
        tenant = db_utils.create_test_tenant()
        self.site = db_utils.create_test_site(
            infrastructure_provider_id=provider.id)
        vpc = db_utils.create_test_vpc(site_id=self.site.id,
                                       tenant_id=tenant.id)
        self.instances = [
            db_utils.create_test_instance(
                name='instance%d' % i, infrastructure_provider_id=provider.id,
                tenant_id=tenant.id, site_id=self.site.id, vpc_id=vpc.id)
            for i in range(2)]
        self.group = db_utils.create_test_ssh_key_group(tenant_id=tenant.id)
        self.association = self._create_test_association(
            instance_id=self.instances[0].id)

    def _create_test_association(self, **kw):
        kw.setdefault('ssh_key_group_id', self.group.id)
        kw.setdefault('site_id', self.site.id)
        return db_utils.create_test_ssh_key_group_instance_association(**kw)

    def test_create(self):
        self.assertTrue(uuidutils.is_uuid_like(self.association.id))
        self.assertEqual(self.group.id, self.association.ssh_key_group_id)

    def test_create_unknown_instance(self):
        self.assertRaises(db_exc.DBReferenceError,
                          self._create_test_association,
                          instance_id=uuidutils.generate_uuid())

    def test_get_by_id_with_relations(self):
        res = self.dbapi.get_ssh_key_group_instance_association_by_id(
            self.association.id,
            relations=[db_api.SSH_KEY_GROUP_RELATION,
                       db_api.INSTANCE_RELATION, db_api.SITE_RELATION])
        self.assertEqual('ssh-keys', res.ssh_key_group.name)
        self.assertEqual('instance0', res.instance.name)
        self.assertEqual(self.site.id, res.site.id)

    def test_get_by_id_that_does_not_exist(self):
        self.assertRaises(
            exception.SSHKeyGroupInstanceAssociationNotFound,
            self.dbapi.get_ssh_key_group_instance_association_by_id,
            uuidutils.generate_uuid())

    def test_get_list(self):
        other = self._create_test_association(
            instance_id=self.instances[1].id)
        res, total = self.dbapi.get_ssh_key_group_instance_association_list(
            filters={'ssh_key_group_ids': [self.group.id]},
            sort_keys=['created'])
        self.assertEqual(2, total)
        self.assertEqual({self.association.id, other.id},
                         {r.id for r in res})
        res, total = self.dbapi.get_ssh_key_group_instance_association_list(
            filters={'instance_ids': [self.instances[1].id]})
        self.assertEqual([other.id], [r.id for r in res])

    def test_get_count(self):
        self.assertEqual(
            1, self.dbapi.get_ssh_key_group_instance_association_count(
                filters={'site_ids': [self.site.id]}))
        self.assertEqual(
            0, self.dbapi.get_ssh_key_group_instance_association_count(
                filters={'instance_ids': []}))

    def test_update(self):
        res = self.dbapi.update_ssh_key_group_instance_association(
            self.association.id, {'instance_id': self.instances[1].id})
        self.assertEqual(self.instances[1].id, res.instance_id)

    def test_clear_nothing_clearable(self):
        self.assertRaises(
            exception.InvalidParameterValue,
            self.dbapi.clear_ssh_key_group_instance_association,
            self.association.id, ['instance_id'])
        res = self.dbapi.clear_ssh_key_group_instance_association(
            self.association.id, [])
        self.assertEqual(self.instances[0].id, res.instance_id)

    def test_update_multiple(self):
        other = self._create_test_association(
            instance_id=self.instances[1].id)
        res = self.dbapi.update_multiple_ssh_key_group_instance_associations(
            [{'id': other.id, 'instance_id': self.instances[0].id},
             {'id': self.association.id,
              'instance_id': self.instances[1].id}])
        self.assertEqual([self.instances[0].id, self.instances[1].id],
                         [r.instance_id for r in res])

    def test_destroy(self):
        self.dbapi.destroy_ssh_key_group_instance_association(
            self.association.id)
        self.assertRaises(
            exception.SSHKeyGroupInstanceAssociationNotFound,
            self.dbapi.get_ssh_key_group_instance_association_by_id,
            self.association.id)
        self.dbapi.destroy_ssh_key_group_instance_association(
            self.association.id)
