# Copyright 2013 Hewlett-Packard Development Company, L.P.
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
"""Carbide test utilities."""


from oslo_utils import uuidutils

from carbide.common import states
from carbide.db import api as db_api


def _create(method, values, kw, generated_id=True):
    # Records whose ID is generated by the DB layer are created without one
    # unless the test asks for a specific value.
    if generated_id and 'id' not in kw:
        del values['id']
    return getattr(db_api.get_instance(), method)(values)


def get_test_infrastructure_provider(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'provider'),
        'display_name': kw.get('display_name', 'Provider'),
        'org': kw.get('org', 'provider-org'),
        'org_display_name': kw.get('org_display_name', 'Provider Org'),
        'created_by': kw.get('created_by'),
    }


def create_test_infrastructure_provider(**kw):
    provider = get_test_infrastructure_provider(**kw)
    return _create('create_infrastructure_provider', provider, kw)


def get_test_tenant(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'tenant'),
        'org': kw.get('org', 'tenant-org'),
        'org_display_name': kw.get('org_display_name', 'Tenant Org'),
        'created_by': kw.get('created_by'),
    }


def create_test_tenant(**kw):
    return _create('create_tenant', get_test_tenant(**kw), kw)


def get_test_site(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'site'),
        'description': kw.get('description'),
        'infrastructure_provider_id': kw['infrastructure_provider_id'],
        'status': kw.get('status', 'Registered'),
        'created_by': kw.get('created_by'),
    }


def create_test_site(**kw):
    return _create('create_site', get_test_site(**kw), kw)


def get_test_instance_type(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'gpu.large'),
        'description': kw.get('description'),
        'infrastructure_provider_id': kw['infrastructure_provider_id'],
        'site_id': kw['site_id'],
        'created_by': kw.get('created_by'),
    }


def create_test_instance_type(**kw):
    return _create('create_instance_type', get_test_instance_type(**kw), kw)


def get_test_allocation(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'allocation'),
        'description': kw.get('description'),
        'infrastructure_provider_id': kw['infrastructure_provider_id'],
        'tenant_id': kw['tenant_id'],
        'site_id': kw['site_id'],
        'status': kw.get('status', states.ALLOCATION_PENDING),
        'created_by': kw.get('created_by'),
    }


def create_test_allocation(**kw):
    return _create('create_allocation', get_test_allocation(**kw), kw)


def get_test_allocation_constraint(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'allocation_id': kw['allocation_id'],
        'resource_type': kw.get('resource_type',
                                db_api.RESOURCE_TYPE_INSTANCE_TYPE),
        'resource_type_id': kw['resource_type_id'],
        'constraint_type': kw.get('constraint_type', 'Reserved'),
        'constraint_value': kw.get('constraint_value', 1),
        'derived_resource_id': kw.get('derived_resource_id'),
        'created_by': kw.get('created_by'),
    }


def create_test_allocation_constraint(**kw):
    constraint = get_test_allocation_constraint(**kw)
    return _create('create_allocation_constraint', constraint, kw)


def get_test_machine(**kw):
    return {
        'id': kw.get('id', 'fm100ht%s' % uuidutils.generate_uuid()[:12]),
        'infrastructure_provider_id': kw['infrastructure_provider_id'],
        'site_id': kw['site_id'],
        'instance_type_id': kw.get('instance_type_id'),
        'controller_machine_id': kw.get('controller_machine_id',
                                        uuidutils.generate_uuid()),
        'controller_machine_type': kw.get('controller_machine_type'),
        'vendor': kw.get('vendor', 'Dell'),
        'product_name': kw.get('product_name', 'PowerEdge R750'),
        'serial_number': kw.get('serial_number'),
        'machine_metadata': kw.get('machine_metadata'),
        'is_in_maintenance': kw.get('is_in_maintenance', False),
        'hostname': kw.get('hostname'),
        'labels': kw.get('labels'),
        'status': kw.get('status', states.MACHINE_READY),
        'is_assigned': kw.get('is_assigned', False),
        'is_missing_on_site': kw.get('is_missing_on_site', False),
    }


def create_test_machine(**kw):
    return _create('create_machine', get_test_machine(**kw), kw,
                   generated_id=False)


def get_test_vpc(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'vpc'),
        'site_id': kw['site_id'],
        'tenant_id': kw['tenant_id'],
        'created_by': kw.get('created_by'),
    }


def create_test_vpc(**kw):
    return _create('create_vpc', get_test_vpc(**kw), kw)


def get_test_instance(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'instance'),
        'description': kw.get('description'),
        'allocation_id': kw.get('allocation_id'),
        'allocation_constraint_id': kw.get('allocation_constraint_id'),
        'tenant_id': kw['tenant_id'],
        'infrastructure_provider_id': kw['infrastructure_provider_id'],
        'site_id': kw['site_id'],
        'instance_type_id': kw.get('instance_type_id'),
        'vpc_id': kw['vpc_id'],
        'machine_id': kw.get('machine_id'),
        'hostname': kw.get('hostname'),
        'labels': kw.get('labels'),
        'status': kw.get('status', states.INSTANCE_PENDING),
        'power_status': kw.get('power_status'),
        'created_by': kw.get('created_by'),
    }


def create_test_instance(**kw):
    return _create('create_instance', get_test_instance(**kw), kw)


def get_test_infiniband_partition(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'ib-partition'),
        'description': kw.get('description'),
        'org': kw.get('org', 'tenant-org'),
        'site_id': kw['site_id'],
        'tenant_id': kw['tenant_id'],
        'controller_ib_partition_id': kw.get('controller_ib_partition_id'),
        'partition_key': kw.get('partition_key'),
        'partition_name': kw.get('partition_name'),
        'mtu': kw.get('mtu'),
        'labels': kw.get('labels'),
        'status': kw.get('status', states.IB_PARTITION_PENDING),
        'created_by': kw.get('created_by'),
    }


def create_test_infiniband_partition(**kw):
    partition = get_test_infiniband_partition(**kw)
    return _create('create_infiniband_partition', partition, kw)


def get_test_nvlink_logical_partition(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'nvlink-partition'),
        'site_id': kw['site_id'],
        'tenant_id': kw['tenant_id'],
        'created_by': kw.get('created_by'),
    }


def create_test_nvlink_logical_partition(**kw):
    partition = get_test_nvlink_logical_partition(**kw)
    return _create('create_nvlink_logical_partition', partition, kw)


def get_test_nvlink_interface(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'instance_id': kw['instance_id'],
        'site_id': kw['site_id'],
        'nvlink_logical_partition_id': kw['nvlink_logical_partition_id'],
        'nvlink_domain_id': kw.get('nvlink_domain_id'),
        'device': kw.get('device', 'GB200'),
        'device_instance': kw.get('device_instance', 0),
        'gpu_guid': kw.get('gpu_guid'),
        'status': kw.get('status', states.NVLINK_INTERFACE_PENDING),
        'created_by': kw.get('created_by'),
    }


def create_test_nvlink_interface(**kw):
    interface = get_test_nvlink_interface(**kw)
    return _create('create_nvlink_interface', interface, kw)


def get_test_ssh_key_group(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'name': kw.get('name', 'ssh-keys'),
        'org': kw.get('org', 'tenant-org'),
        'tenant_id': kw['tenant_id'],
        'created_by': kw.get('created_by'),
    }


def create_test_ssh_key_group(**kw):
    return _create('create_ssh_key_group', get_test_ssh_key_group(**kw), kw)


def get_test_ssh_key_group_instance_association(**kw):
    return {
        'id': kw.get('id', uuidutils.generate_uuid()),
        'ssh_key_group_id': kw['ssh_key_group_id'],
        'site_id': kw['site_id'],
        'instance_id': kw['instance_id'],
        'created_by': kw.get('created_by'),
    }


def create_test_ssh_key_group_instance_association(**kw):
    association = get_test_ssh_key_group_instance_association(**kw)
    return _create('create_ssh_key_group_instance_association',
                   association, kw)
