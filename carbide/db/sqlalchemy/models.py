# -*- encoding: utf-8 -*-
#
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

"""
SQLAlchemy models for bare metal infrastructure data.
"""

from os import path
from urllib import parse as urlparse

from oslo_db import options as db_options
from oslo_db.sqlalchemy import models
from oslo_db.sqlalchemy import types as db_types
from oslo_utils import timeutils
from sqlalchemy import Boolean, Column, DateTime, event, false, Index
from sqlalchemy import ForeignKey, Integer
from sqlalchemy import String, Text
from sqlalchemy import orm
from sqlalchemy.orm import declarative_base

from carbide.conf import CONF

_DEFAULT_SQL_CONNECTION = 'sqlite:///' + path.join('$state_path',
                                                   'carbide.sqlite')


db_options.set_defaults(CONF, connection=_DEFAULT_SQL_CONNECTION)


def table_args():
    engine_name = urlparse.urlparse(CONF.database.connection).scheme
    if engine_name == 'mysql':
        return {'mysql_engine': CONF.database.mysql_engine,
                'mysql_charset': "utf8"}
    return None


class CarbideBase(models.TimestampMixin,
                  models.ModelBase):

    metadata = None

    # A non-NULL value marks the row as deleted. Such rows stay in the
    # table but are hidden from every read of the DB API.
    deleted_at = Column(DateTime, nullable=True)

    def as_dict(self):
        d = {}
        for attr in orm.object_mapper(self).column_attrs:
            d[attr.key] = self[attr.key]
        return d


Base = declarative_base(cls=CarbideBase)


@event.listens_for(Base, 'before_insert', propagate=True)
def _stamp_new_row(mapper, connection, target):
    now = timeutils.utcnow()
    if target.created_at is None:
        target.created_at = now
    target.updated_at = target.created_at


@event.listens_for(Base, 'before_update', propagate=True)
def _stamp_changed_row(mapper, connection, target):
    target.updated_at = timeutils.utcnow()


def _uuid_fk(target, nullable=True):
    return Column(String(36), ForeignKey(target), nullable=nullable)


class InfrastructureProvider(Base):
    """Represents an organization offering bare metal capacity."""

    __tablename__ = 'infrastructure_providers'
    __table_args__ = (
        Index('infrastructure_providers_org_idx', 'org'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    display_name = Column(String(255), nullable=True)
    org = Column(String(255), nullable=False)
    org_display_name = Column(String(255), nullable=True)
    created_by = Column(String(36), nullable=True)


class Tenant(Base):
    """Represents an organization consuming bare metal capacity."""

    __tablename__ = 'tenants'
    __table_args__ = (
        Index('tenants_org_idx', 'org'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    org = Column(String(255), nullable=False)
    org_display_name = Column(String(255), nullable=True)
    created_by = Column(String(36), nullable=True)


class Site(Base):
    """Represents a data center location of an infrastructure provider."""

    __tablename__ = 'sites'
    __table_args__ = (
        Index('sites_infrastructure_provider_idx',
              'infrastructure_provider_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    infrastructure_provider_id = _uuid_fk('infrastructure_providers.id',
                                          nullable=False)
    status = Column(String(32), nullable=True)
    created_by = Column(String(36), nullable=True)


class InstanceType(Base):
    """Represents a class of machines that can be allocated to tenants."""

    __tablename__ = 'instance_types'
    __table_args__ = (
        Index('instance_types_site_idx', 'site_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    infrastructure_provider_id = _uuid_fk('infrastructure_providers.id',
                                          nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    created_by = Column(String(36), nullable=True)


class Allocation(Base):
    """Represents a share of a site's capacity granted to a tenant."""

    __tablename__ = 'allocations'
    __table_args__ = (
        Index('allocations_tenant_idx', 'tenant_id'),
        Index('allocations_site_idx', 'site_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    infrastructure_provider_id = _uuid_fk('infrastructure_providers.id',
                                          nullable=False)
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    status = Column(String(32), nullable=False)
    created_by = Column(String(36), nullable=True)

    infrastructure_provider = orm.relationship(
        'InfrastructureProvider', lazy='raise')
    tenant = orm.relationship('Tenant', lazy='raise')
    site = orm.relationship('Site', lazy='raise')
    constraints = orm.relationship(
        'AllocationConstraint',
        primaryjoin='and_(Allocation.id == AllocationConstraint.allocation_id,'
                    ' AllocationConstraint.deleted_at.is_(None))',
        viewonly=True,
        lazy='raise')


class AllocationConstraint(Base):
    """Represents the amount of one resource type held by an allocation."""

    __tablename__ = 'allocation_constraints'
    __table_args__ = (
        Index('allocation_constraints_allocation_idx', 'allocation_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    allocation_id = _uuid_fk('allocations.id', nullable=False)
    resource_type = Column(String(32), nullable=False)
    resource_type_id = Column(String(36), nullable=False)
    constraint_type = Column(String(32), nullable=False)
    constraint_value = Column(Integer, nullable=False)
    derived_resource_id = Column(String(36), nullable=True)
    created_by = Column(String(36), nullable=True)


class Machine(Base):
    """Represents a physical bare metal machine discovered on a site."""

    __tablename__ = 'machines'
    __table_args__ = (
        Index('machines_infrastructure_provider_idx',
              'infrastructure_provider_id'),
        Index('machines_site_idx', 'site_id'),
        Index('machines_status_idx', 'status'),
        table_args())
    # Identifier assigned by the site controller, not generated here.
    id = Column(String(255), primary_key=True)
    infrastructure_provider_id = _uuid_fk('infrastructure_providers.id',
                                          nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    instance_type_id = _uuid_fk('instance_types.id')
    controller_machine_id = Column(String(255), nullable=False)
    controller_machine_type = Column(String(255), nullable=True)
    hw_sku_device_type = Column(String(255), nullable=True)
    vendor = Column(String(255), nullable=True)
    product_name = Column(String(255), nullable=True)
    serial_number = Column(String(255), nullable=True)
    machine_metadata = Column('metadata', db_types.JsonEncodedDict)
    is_in_maintenance = Column(Boolean, nullable=False, default=False,
                               server_default=false())
    maintenance_message = Column(Text, nullable=True)
    is_network_degraded = Column(Boolean, nullable=False, default=False,
                                 server_default=false())
    network_health_message = Column(Text, nullable=True)
    health = Column(db_types.JsonEncodedDict)
    hostname = Column(String(255), nullable=True)
    default_mac_address = Column(String(32), nullable=True)
    labels = Column(db_types.JsonEncodedDict)
    status = Column(String(32), nullable=False)
    is_assigned = Column(Boolean, nullable=False, default=False,
                         server_default=false())
    is_missing_on_site = Column(Boolean, nullable=False, default=False,
                                server_default=false())

    infrastructure_provider = orm.relationship(
        'InfrastructureProvider', lazy='raise')
    site = orm.relationship('Site', lazy='raise')
    instance_type = orm.relationship('InstanceType', lazy='raise')


class Vpc(Base):
    """Represents a tenant virtual private cloud on a site."""

    __tablename__ = 'vpcs'
    __table_args__ = (
        Index('vpcs_tenant_idx', 'tenant_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    created_by = Column(String(36), nullable=True)


class Instance(Base):
    """Represents a machine provisioned for a tenant."""

    __tablename__ = 'instances'
    __table_args__ = (
        Index('instances_tenant_idx', 'tenant_id'),
        Index('instances_site_idx', 'site_id'),
        Index('instances_machine_idx', 'machine_id'),
        Index('instances_status_idx', 'status'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    allocation_id = _uuid_fk('allocations.id')
    allocation_constraint_id = _uuid_fk('allocation_constraints.id')
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    infrastructure_provider_id = _uuid_fk('infrastructure_providers.id',
                                          nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    instance_type_id = _uuid_fk('instance_types.id')
    vpc_id = _uuid_fk('vpcs.id', nullable=False)
    machine_id = Column(String(255), ForeignKey('machines.id'),
                        nullable=True)
    controller_instance_id = Column(String(36), nullable=True)
    hostname = Column(String(255), nullable=True)
    operating_system_id = Column(String(36), nullable=True)
    network_security_group_id = Column(String(255), nullable=True)
    ipxe_script = Column(Text, nullable=True)
    always_boot_with_custom_ipxe = Column(Boolean, nullable=False,
                                          default=False,
                                          server_default=false())
    phone_home_enabled = Column(Boolean, nullable=False, default=False,
                                server_default=false())
    user_data = Column(Text, nullable=True)
    labels = Column(db_types.JsonEncodedDict)
    is_update_pending = Column(Boolean, nullable=False, default=False,
                               server_default=false())
    tpm_ek_certificate = Column(Text, nullable=True)
    status = Column(String(32), nullable=False)
    power_status = Column(String(32), nullable=True)
    is_missing_on_site = Column(Boolean, nullable=False, default=False,
                                server_default=false())
    created_by = Column(String(36), nullable=True)

    allocation = orm.relationship('Allocation', lazy='raise')
    tenant = orm.relationship('Tenant', lazy='raise')
    infrastructure_provider = orm.relationship(
        'InfrastructureProvider', lazy='raise')
    site = orm.relationship('Site', lazy='raise')
    instance_type = orm.relationship('InstanceType', lazy='raise')
    vpc = orm.relationship('Vpc', lazy='raise')
    machine = orm.relationship('Machine', lazy='raise')


class InfiniBandPartition(Base):
    """Represents an InfiniBand partition owned by a tenant."""

    __tablename__ = 'infiniband_partitions'
    __table_args__ = (
        Index('infiniband_partitions_tenant_idx', 'tenant_id'),
        Index('infiniband_partitions_site_idx', 'site_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    org = Column(String(255), nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    controller_ib_partition_id = Column(String(36), nullable=True)
    partition_key = Column(String(32), nullable=True)
    partition_name = Column(String(255), nullable=True)
    service_level = Column(Integer, nullable=True)
    rate_limit = Column(Integer, nullable=True)
    mtu = Column(Integer, nullable=True)
    enable_sharp = Column(Boolean, nullable=True)
    labels = Column(db_types.JsonEncodedDict)
    status = Column(String(32), nullable=False)
    is_missing_on_site = Column(Boolean, nullable=False, default=False,
                                server_default=false())
    created_by = Column(String(36), nullable=True)

    site = orm.relationship('Site', lazy='raise')
    tenant = orm.relationship('Tenant', lazy='raise')


class NVLinkLogicalPartition(Base):
    """Represents an NVLink logical partition owned by a tenant."""

    __tablename__ = 'nvlink_logical_partitions'
    __table_args__ = (table_args(),)
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    created_by = Column(String(36), nullable=True)


class NVLinkInterface(Base):
    """Represents a GPU of an instance attached to an NVLink partition."""

    __tablename__ = 'nvlink_interfaces'
    __table_args__ = (
        Index('nvlink_interfaces_instance_idx', 'instance_id'),
        Index('nvlink_interfaces_partition_idx',
              'nvlink_logical_partition_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    instance_id = _uuid_fk('instances.id', nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    nvlink_logical_partition_id = _uuid_fk('nvlink_logical_partitions.id',
                                           nullable=False)
    nvlink_domain_id = Column(String(36), nullable=True)
    device = Column(String(255), nullable=True)
    device_instance = Column(Integer, nullable=False)
    gpu_guid = Column(String(255), nullable=True)
    status = Column(String(32), nullable=False)
    created_by = Column(String(36), nullable=True)

    instance = orm.relationship('Instance', lazy='raise')
    site = orm.relationship('Site', lazy='raise')
    nvlink_logical_partition = orm.relationship('NVLinkLogicalPartition',
                                                lazy='raise')


class SSHKeyGroup(Base):
    """Represents a named set of SSH keys owned by a tenant."""

    __tablename__ = 'ssh_key_groups'
    __table_args__ = (table_args(),)
    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    org = Column(String(255), nullable=False)
    tenant_id = _uuid_fk('tenants.id', nullable=False)
    created_by = Column(String(36), nullable=True)


class SSHKeyGroupInstanceAssociation(Base):
    """Represents an SSH key group made available to an instance."""

    __tablename__ = 'ssh_key_group_instance_associations'
    __table_args__ = (
        Index('ssh_key_group_instance_associations_group_idx',
              'ssh_key_group_id'),
        Index('ssh_key_group_instance_associations_instance_idx',
              'instance_id'),
        table_args())
    id = Column(String(36), primary_key=True)
    ssh_key_group_id = _uuid_fk('ssh_key_groups.id', nullable=False)
    site_id = _uuid_fk('sites.id', nullable=False)
    instance_id = _uuid_fk('instances.id', nullable=False)
    created_by = Column(String(36), nullable=True)

    ssh_key_group = orm.relationship('SSHKeyGroup', lazy='raise')
    site = orm.relationship('Site', lazy='raise')
    instance = orm.relationship('Instance', lazy='raise')
