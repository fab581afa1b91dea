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

"""initial schema

Revision ID: 4c1d2e9f7a10
Revises: None
Create Date: 2026-10-17 09:12:44.418925

"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '4c1d2e9f7a10'
down_revision = None

_TABLE_KWARGS = {'mysql_engine': 'InnoDB', 'mysql_charset': 'utf8'}


def _timestamps():
    return [sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.Column('deleted_at', sa.DateTime(), nullable=True)]


def _flag(name):
    return sa.Column(name, sa.Boolean(), nullable=False,
                     server_default=sa.false())


def upgrade():
    op.create_table('infrastructure_providers',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('display_name', sa.String(length=255),
                              nullable=True),
                    sa.Column('org', sa.String(length=255), nullable=False),
                    sa.Column('org_display_name', sa.String(length=255),
                              nullable=True),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.Index('infrastructure_providers_org_idx', 'org'),
                    **_TABLE_KWARGS)
    op.create_table('tenants',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('org', sa.String(length=255), nullable=False),
                    sa.Column('org_display_name', sa.String(length=255),
                              nullable=True),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.Index('tenants_org_idx', 'org'),
                    **_TABLE_KWARGS)
    op.create_table('sites',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('infrastructure_provider_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('status', sa.String(length=32), nullable=True),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['infrastructure_provider_id'],
                                            ['infrastructure_providers.id']),
                    sa.Index('sites_infrastructure_provider_idx',
                             'infrastructure_provider_id'),
                    **_TABLE_KWARGS)
    op.create_table('instance_types',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('infrastructure_provider_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['infrastructure_provider_id'],
                                            ['infrastructure_providers.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.Index('instance_types_site_idx', 'site_id'),
                    **_TABLE_KWARGS)
    op.create_table('allocations',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('infrastructure_provider_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('status', sa.String(length=32),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['infrastructure_provider_id'],
                                            ['infrastructure_providers.id']),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.Index('allocations_tenant_idx', 'tenant_id'),
                    sa.Index('allocations_site_idx', 'site_id'),
                    **_TABLE_KWARGS)
    op.create_table('allocation_constraints',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('allocation_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('resource_type', sa.String(length=32),
                              nullable=False),
                    sa.Column('resource_type_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('constraint_type', sa.String(length=32),
                              nullable=False),
                    sa.Column('constraint_value', sa.Integer(),
                              nullable=False),
                    sa.Column('derived_resource_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['allocation_id'],
                                            ['allocations.id']),
                    sa.Index('allocation_constraints_allocation_idx',
                             'allocation_id'),
                    **_TABLE_KWARGS)
    op.create_table('machines',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=255), nullable=False),
                    sa.Column('infrastructure_provider_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('instance_type_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('controller_machine_id', sa.String(length=255),
                              nullable=False),
                    sa.Column('controller_machine_type',
                              sa.String(length=255), nullable=True),
                    sa.Column('hw_sku_device_type', sa.String(length=255),
                              nullable=True),
                    sa.Column('vendor', sa.String(length=255), nullable=True),
                    sa.Column('product_name', sa.String(length=255),
                              nullable=True),
                    sa.Column('serial_number', sa.String(length=255),
                              nullable=True),
                    sa.Column('metadata', sa.Text(), nullable=True),
                    _flag('is_in_maintenance'),
                    sa.Column('maintenance_message', sa.Text(),
                              nullable=True),
                    _flag('is_network_degraded'),
                    sa.Column('network_health_message', sa.Text(),
                              nullable=True),
                    sa.Column('health', sa.Text(), nullable=True),
                    sa.Column('hostname', sa.String(length=255),
                              nullable=True),
                    sa.Column('default_mac_address', sa.String(length=32),
                              nullable=True),
                    sa.Column('labels', sa.Text(), nullable=True),
                    sa.Column('status', sa.String(length=32),
                              nullable=False),
                    _flag('is_assigned'),
                    _flag('is_missing_on_site'),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['infrastructure_provider_id'],
                                            ['infrastructure_providers.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['instance_type_id'],
                                            ['instance_types.id']),
                    sa.Index('machines_infrastructure_provider_idx',
                             'infrastructure_provider_id'),
                    sa.Index('machines_site_idx', 'site_id'),
                    sa.Index('machines_status_idx', 'status'),
                    **_TABLE_KWARGS)
    op.create_table('vpcs',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    sa.Index('vpcs_tenant_idx', 'tenant_id'),
                    **_TABLE_KWARGS)
    op.create_table('instances',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('allocation_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('allocation_constraint_id',
                              sa.String(length=36), nullable=True),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('infrastructure_provider_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('instance_type_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('vpc_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('machine_id', sa.String(length=255),
                              nullable=True),
                    sa.Column('controller_instance_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('hostname', sa.String(length=255),
                              nullable=True),
                    sa.Column('operating_system_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('network_security_group_id',
                              sa.String(length=255), nullable=True),
                    sa.Column('ipxe_script', sa.Text(), nullable=True),
                    _flag('always_boot_with_custom_ipxe'),
                    _flag('phone_home_enabled'),
                    sa.Column('user_data', sa.Text(), nullable=True),
                    sa.Column('labels', sa.Text(), nullable=True),
                    _flag('is_update_pending'),
                    sa.Column('tpm_ek_certificate', sa.Text(), nullable=True),
                    sa.Column('status', sa.String(length=32),
                              nullable=False),
                    sa.Column('power_status', sa.String(length=32),
                              nullable=True),
                    _flag('is_missing_on_site'),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['allocation_id'],
                                            ['allocations.id']),
                    sa.ForeignKeyConstraint(['allocation_constraint_id'],
                                            ['allocation_constraints.id']),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    sa.ForeignKeyConstraint(['infrastructure_provider_id'],
                                            ['infrastructure_providers.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['instance_type_id'],
                                            ['instance_types.id']),
                    sa.ForeignKeyConstraint(['vpc_id'], ['vpcs.id']),
                    sa.ForeignKeyConstraint(['machine_id'], ['machines.id']),
                    sa.Index('instances_tenant_idx', 'tenant_id'),
                    sa.Index('instances_site_idx', 'site_id'),
                    sa.Index('instances_machine_idx', 'machine_id'),
                    sa.Index('instances_status_idx', 'status'),
                    **_TABLE_KWARGS)
    op.create_table('infiniband_partitions',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('description', sa.Text(), nullable=True),
                    sa.Column('org', sa.String(length=255), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('controller_ib_partition_id',
                              sa.String(length=36), nullable=True),
                    sa.Column('partition_key', sa.String(length=32),
                              nullable=True),
                    sa.Column('partition_name', sa.String(length=255),
                              nullable=True),
                    sa.Column('service_level', sa.Integer(), nullable=True),
                    sa.Column('rate_limit', sa.Integer(), nullable=True),
                    sa.Column('mtu', sa.Integer(), nullable=True),
                    sa.Column('enable_sharp', sa.Boolean(), nullable=True),
                    sa.Column('labels', sa.Text(), nullable=True),
                    sa.Column('status', sa.String(length=32),
                              nullable=False),
                    _flag('is_missing_on_site'),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    sa.Index('infiniband_partitions_tenant_idx', 'tenant_id'),
                    sa.Index('infiniband_partitions_site_idx', 'site_id'),
                    **_TABLE_KWARGS)
    op.create_table('nvlink_logical_partitions',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    **_TABLE_KWARGS)
    op.create_table('nvlink_interfaces',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('instance_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('nvlink_logical_partition_id',
                              sa.String(length=36), nullable=False),
                    sa.Column('nvlink_domain_id', sa.String(length=36),
                              nullable=True),
                    sa.Column('device', sa.String(length=255), nullable=True),
                    sa.Column('device_instance', sa.Integer(),
                              nullable=False),
                    sa.Column('gpu_guid', sa.String(length=255),
                              nullable=True),
                    sa.Column('status', sa.String(length=32),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['instance_id'],
                                            ['instances.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['nvlink_logical_partition_id'],
                                            ['nvlink_logical_partitions.id']),
                    sa.Index('nvlink_interfaces_instance_idx', 'instance_id'),
                    sa.Index('nvlink_interfaces_partition_idx',
                             'nvlink_logical_partition_id'),
                    **_TABLE_KWARGS)
    op.create_table('ssh_key_groups',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('name', sa.String(length=255), nullable=False),
                    sa.Column('org', sa.String(length=255), nullable=False),
                    sa.Column('tenant_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['tenant_id'], ['tenants.id']),
                    **_TABLE_KWARGS)
    op.create_table('ssh_key_group_instance_associations',
                    *_timestamps(),
                    sa.Column('id', sa.String(length=36), nullable=False),
                    sa.Column('ssh_key_group_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('site_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('instance_id', sa.String(length=36),
                              nullable=False),
                    sa.Column('created_by', sa.String(length=36),
                              nullable=True),
                    sa.PrimaryKeyConstraint('id'),
                    sa.ForeignKeyConstraint(['ssh_key_group_id'],
                                            ['ssh_key_groups.id']),
                    sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
                    sa.ForeignKeyConstraint(['instance_id'],
                                            ['instances.id']),
                    sa.Index('ssh_key_group_instance_associations_group_idx',
                             'ssh_key_group_id'),
                    sa.Index(
                        'ssh_key_group_instance_associations_instance_idx',
                        'instance_id'),
                    **_TABLE_KWARGS)
