# -*- encoding: utf-8 -*-
#
# Copyright 2013 Hewlett-Packard Development Company, L.P.
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
"""
Base classes for storage engines

Every record type follows the same contract:

* ``create_<x>(values)`` and ``create_multiple_<xs>(values_list)`` insert
  rows. IDs are generated unless the record type takes them from the caller.
* ``get_<x>_by_id(id, relations)`` returns one live row or raises the
  record type's ``NotFound`` exception.
* ``get_<x>_list(filters, offset, limit, sort_keys, sort_dirs, relations)``
  returns a ``(rows, total)`` tuple. ``total`` counts every row matching
  the filters, regardless of the page.
* ``get_<x>_count(filters)`` returns the same ``total`` without rows.
* ``update_<x>(id, values)`` and ``update_multiple_<xs>(values_list)``
  change only the fields present in ``values``. ``None`` is not accepted
  as a value.
* ``clear_<x>(id, fields)`` sets the named optional fields to NULL.
* ``destroy_<x>(id)`` marks the row as deleted. Missing and already deleted
  rows are ignored.

Filters whose value is ``None`` are ignored. A filter whose value is an
empty list matches no row, in list and count calls alike.
"""

import abc

from oslo_config import cfg
from oslo_db import api as db_api


_BACKEND_MAPPING = {'sqlalchemy': 'carbide.db.sqlalchemy.api'}
IMPL = db_api.DBAPI.from_config(cfg.CONF, backend_mapping=_BACKEND_MAPPING,
                                lazy=True)

# Names of the relations that may be loaded along with a record.
INFRASTRUCTURE_PROVIDER_RELATION = 'InfrastructureProvider'
TENANT_RELATION = 'Tenant'
SITE_RELATION = 'Site'
INSTANCE_TYPE_RELATION = 'InstanceType'
ALLOCATION_RELATION = 'Allocation'
VPC_RELATION = 'Vpc'
MACHINE_RELATION = 'Machine'
INSTANCE_RELATION = 'Instance'
SSH_KEY_GROUP_RELATION = 'SSHKeyGroup'
NVLINK_LOGICAL_PARTITION_RELATION = 'NVLinkLogicalPartition'

# Resource types an allocation constraint may hold.
RESOURCE_TYPE_INSTANCE_TYPE = 'InstanceType'
RESOURCE_TYPE_IP_BLOCK = 'IPBlock'


def get_instance():
    """Return a DB API instance."""
    return IMPL


class Connection(object, metaclass=abc.ABCMeta):
    """Base class for storage system connections."""

    @abc.abstractmethod
    def __init__(self):
        """Constructor."""

    @abc.abstractmethod
    def create_infrastructure_provider(self, values):
        """Create a new infrastructure provider.

        :param values: A dict of values to create the provider with. For
                       example:

                       ::

                        {
                         'name': 'provider-1',
                         'org': 'acme',
                         'display_name': 'Acme Inc.',
                        }
        :returns: An infrastructure provider.
        """

    @abc.abstractmethod
    def create_multiple_infrastructure_providers(self, values_list):
        """Create several infrastructure providers in one statement.

        :param values_list: A list of dicts, as for
                            :meth:`create_infrastructure_provider`.
        :returns: A list of infrastructure providers, in input order.
        :raises: BatchSizeExceeded
        """

    @abc.abstractmethod
    def get_infrastructure_provider_by_id(self, provider_id,
                                          relations=None):
        """Return an infrastructure provider.

        :param provider_id: The id of a provider.
        :param relations: Names of relations to load. Providers have none.
        :returns: An infrastructure provider.
        :raises: InfrastructureProviderNotFound
        """

    @abc.abstractmethod
    def get_infrastructure_provider_list(self, filters=None, offset=None,
                                         limit=None, sort_keys=None,
                                         sort_dirs=None, relations=None):
        """Return a page of infrastructure providers.

        :param filters: Filters to apply. Defaults to None.

                        :infrastructure_provider_ids: list of ids
                        :names: list of names
                        :org: organization name
                        :search_query: free text matched against name,
                                       display name and organization
        :param offset: Number of rows to skip. Defaults to 0.
        :param limit: Maximum number of rows to return.
        :param sort_keys: Keys to sort by: name, created, updated.
        :param sort_dirs: Directions (asc, desc) matching sort_keys.
        :param relations: Names of relations to load.
        :returns: A tuple of the list of providers and the total count.
        """

    @abc.abstractmethod
    def get_infrastructure_provider_list_by_org(self, org, relations=None):
        """Return every infrastructure provider of an organization.

        :param org: The organization name.
        :param relations: Names of relations to load.
        :returns: A list of infrastructure providers, oldest first.
        """

    @abc.abstractmethod
    def get_infrastructure_provider_count(self, filters=None):
        """Return the number of infrastructure providers matching filters.

        :param filters: Filters, as for
                        :meth:`get_infrastructure_provider_list`.
        :returns: An integer.
        """

    @abc.abstractmethod
    def update_infrastructure_provider(self, provider_id, values):
        """Update properties of an infrastructure provider.

        :param provider_id: The id of a provider.
        :param values: Dict of values to update.
        :returns: An infrastructure provider.
        :raises: InfrastructureProviderNotFound
        :raises: InvalidParameterValue
        """

    @abc.abstractmethod
    def update_multiple_infrastructure_providers(self, values_list):
        """Update several infrastructure providers in one statement.

        :param values_list: A list of dicts, each with the 'id' of the
                            provider and the values to update.
        :returns: A list of infrastructure providers, in input order.
        :raises: BatchSizeExceeded
        :raises: InfrastructureProviderNotFound
        """

    @abc.abstractmethod
    def clear_infrastructure_provider(self, provider_id, fields):
        """Set optional fields of an infrastructure provider to NULL.

        :param provider_id: The id of a provider.
        :param fields: Names of the fields to clear: display_name,
                       org_display_name.
        :returns: An infrastructure provider.
        :raises: InfrastructureProviderNotFound
        """

    @abc.abstractmethod
    def destroy_infrastructure_provider(self, provider_id):
        """Mark an infrastructure provider as deleted.

        :param provider_id: The id of a provider.
        """

    @abc.abstractmethod
    def create_allocation(self, values):
        """Create a new allocation.

        :param values: A dict describing the allocation. For example:

                       ::

                        {
                         'name': 'allocation-1',
                         'infrastructure_provider_id': provider.id,
                         'tenant_id': tenant.id,
                         'site_id': site.id,
                         'status': states.ALLOCATION_PENDING,
                        }
        :returns: An allocation.
        :raises: InvalidParameterValue if a field is unknown.
        :raises: oslo_db.exception.DBReferenceError if a referenced record
                 does not exist.
        """

    @abc.abstractmethod
    def create_multiple_allocations(self, values_list):
        """Create several allocations in one statement.

        :param values_list: A list of dicts, as for
                            :meth:`create_allocation`.
        :returns: A list of allocations, in input order.
        :raises: BatchSizeExceeded
        """

    @abc.abstractmethod
    def get_allocation_by_id(self, allocation_id, relations=None):
        """Return an allocation representation.

        :param allocation_id: The id of an allocation.
        :param relations: Names of relations to load: InfrastructureProvider,
                          Tenant, Site.
        :returns: An allocation.
        :raises: AllocationNotFound
        :raises: InvalidParameterValue for an unknown relation.
        """

    @abc.abstractmethod
    def get_allocation_list(self, filters=None, offset=None, limit=None,
                            sort_keys=None, sort_dirs=None, relations=None):
        """Return a page of allocations.

        :param filters: Filters to apply. Defaults to None.

                        :name: allocation name
                        :infrastructure_provider_id: provider id
                        :tenant_ids: list of tenant ids
                        :site_ids: list of site ids
                        :statuses: list of statuses
                        :allocation_ids: list of allocation ids
                        :resource_types: list of constraint resource types
                        :resource_type_ids: list of constraint resource ids
                        :constraint_types: list of constraint types
                        :constraint_values: list of constraint values
                        :search_query: free text matched against name,
                                       description and status
        :param offset: Number of rows to skip. Defaults to 0.
        :param limit: Maximum number of rows to return.
        :param sort_keys: Keys to sort by: name, status, created, updated,
                          site_name, tenant_org_display_name,
                          instance_type_name, constraint_value.
        :param sort_dirs: Directions (asc, desc) matching sort_keys.
        :param relations: Names of relations to load.
        :returns: A tuple of the list of allocations and the total count.
        :raises: InvalidParameterValue for an invalid page or sort.
        """

    @abc.abstractmethod
    def get_allocation_count(self, filters=None):
        """Return the number of allocations matching filters.

        :param filters: Filters, as for :meth:`get_allocation_list`.
        :returns: An integer.
        """

    @abc.abstractmethod
    def update_allocation(self, allocation_id, values):
        """Update properties of an allocation.

        :param allocation_id: Allocation ID
        :param values: Dict of values to update.
        :returns: An allocation.
        :raises: AllocationNotFound
        :raises: InvalidParameterValue
        """

    @abc.abstractmethod
    def update_multiple_allocations(self, values_list):
        """Update several allocations in one statement.

        :param values_list: A list of dicts, each with the 'id' of the
                            allocation and the values to update.
        :returns: A list of allocations, in input order.
        :raises: BatchSizeExceeded
        :raises: AllocationNotFound
        """

    @abc.abstractmethod
    def clear_allocation(self, allocation_id, fields):
        """Set optional fields of an allocation to NULL.

        :param allocation_id: Allocation ID
        :param fields: Names of the fields to clear: description.
        :returns: An allocation.
        :raises: AllocationNotFound
        """

    @abc.abstractmethod
    def destroy_allocation(self, allocation_id):
        """Mark an allocation as deleted.

        :param allocation_id: Allocation ID
        """

    @abc.abstractmethod
    def create_machine(self, values):
        """Create a new machine.

        :param values: A dict describing the machine. Unlike other records,
                       the 'id' of a machine is assigned by the site and
                       must be supplied.
        :returns: A machine.
        :raises: DuplicateEntity if the id is taken.
        """

    @abc.abstractmethod
    def create_multiple_machines(self, values_list):
        """Create several machines in one statement.

        :param values_list: A list of dicts, as for :meth:`create_machine`.
        :returns: A list of machines, in input order.
        :raises: BatchSizeExceeded
        """

    @abc.abstractmethod
    def get_machine_by_id(self, machine_id, relations=None):
        """Return a machine.

        :param machine_id: The id of a machine.
        :param relations: Names of relations to load: InfrastructureProvider,
                          Site, InstanceType.
        :returns: A machine.
        :raises: MachineNotFound
        """

    @abc.abstractmethod
    def get_machine_list(self, filters=None, offset=None, limit=None,
                         sort_keys=None, sort_dirs=None, relations=None):
        """Return a page of machines.

        :param filters: Filters to apply. Defaults to None.

                        :machine_ids: list of machine ids
                        :infrastructure_provider_ids: list of provider ids
                        :site_ids: list of site ids
                        :instance_type_ids: list of instance type ids
                        :controller_machine_ids: list of controller ids
                        :hostnames: list of hostnames
                        :statuses: list of statuses
                        :is_assigned: True | False
                        :is_in_maintenance: True | False
                        :is_missing_on_site: True | False
                        :search_query: free text
        :param offset: Number of rows to skip. Defaults to 0.
        :param limit: Maximum number of rows to return.
        :param sort_keys: Keys to sort by: id, hostname, status, created,
                          updated, instance_type_name.
        :param sort_dirs: Directions (asc, desc) matching sort_keys.
        :param relations: Names of relations to load.
        :returns: A tuple of the list of machines and the total count.
        """

    @abc.abstractmethod
    def get_machine_count(self, filters=None):
        """Return the number of machines matching filters."""

    @abc.abstractmethod
    def get_machine_count_by_status(self, filters=None):
        """Count machines per status.

        :param filters: Filters, as for :meth:`get_machine_list`.
        :returns: A dict mapping every machine status to its count, plus
                  the 'total' key.
        """

    @abc.abstractmethod
    def update_machine(self, machine_id, values):
        """Update properties of a machine.

        :raises: MachineNotFound
        """

    @abc.abstractmethod
    def update_multiple_machines(self, values_list):
        """Update several machines in one statement.

        :raises: BatchSizeExceeded
        :raises: MachineNotFound
        """

    @abc.abstractmethod
    def clear_machine(self, machine_id, fields):
        """Set optional fields of a machine to NULL.

        :raises: MachineNotFound
        """

    @abc.abstractmethod
    def destroy_machine(self, machine_id, purge=False):
        """Mark a machine as deleted.

        :param machine_id: Machine ID
        :param purge: Remove the row from the database instead, whether or
                      not it was already marked as deleted. Deleting a row
                      that is still referenced raises DBReferenceError.
        """

    @abc.abstractmethod
    def create_instance(self, values):
        """Create a new instance.

        :param values: A dict describing the instance.
        :returns: An instance.
        """

    @abc.abstractmethod
    def create_multiple_instances(self, values_list):
        """Create several instances in one statement.

        :raises: BatchSizeExceeded
        """

    @abc.abstractmethod
    def get_instance_by_id(self, instance_id, relations=None):
        """Return an instance.

        :param instance_id: The id of an instance.
        :param relations: Names of relations to load: Allocation, Tenant,
                          InfrastructureProvider, Site, InstanceType, Vpc,
                          Machine.
        :returns: An instance.
        :raises: InstanceNotFound
        """

    @abc.abstractmethod
    def get_instance_list(self, filters=None, offset=None, limit=None,
                          sort_keys=None, sort_dirs=None, relations=None):
        """Return a page of instances.

        :param filters: Filters to apply. Defaults to None.

                        :instance_ids: list of instance ids
                        :names: list of names
                        :allocation_ids: list of allocation ids
                        :allocation_constraint_ids: list of constraint ids
                        :tenant_ids: list of tenant ids
                        :infrastructure_provider_ids: list of provider ids
                        :site_ids: list of site ids
                        :instance_type_ids: list of instance type ids
                        :vpc_ids: list of VPC ids
                        :machine_ids: list of machine ids
                        :controller_instance_ids: list of controller ids
                        :operating_system_ids: list of OS ids
                        :network_security_group_ids: list of NSG ids
                        :statuses: list of statuses
                        :search_query: free text matched against name,
                                       description, status and labels
        :param sort_keys: Keys to sort by: name, status, created, updated,
                          machine_id, tenant_org_display_name,
                          instance_type_name.
        :returns: A tuple of the list of instances and the total count.
        """

    @abc.abstractmethod
    def get_instance_count(self, filters=None):
        """Return the number of instances matching filters."""

    @abc.abstractmethod
    def get_instance_count_by_status(self, filters=None):
        """Count instances per status.

        :returns: A dict mapping every instance status to its count, plus
                  the 'total' key.
        """

    @abc.abstractmethod
    def update_instance(self, instance_id, values):
        """Update properties of an instance.

        :raises: InstanceNotFound
        """

    @abc.abstractmethod
    def update_multiple_instances(self, values_list):
        """Update several instances in one statement."""

    @abc.abstractmethod
    def clear_instance(self, instance_id, fields):
        """Set optional fields of an instance to NULL."""

    @abc.abstractmethod
    def destroy_instance(self, instance_id):
        """Mark an instance as deleted."""

    @abc.abstractmethod
    def create_infiniband_partition(self, values):
        """Create a new InfiniBand partition.

        :param values: A dict describing the partition. The 'id' may be
                       supplied by the caller.
        :returns: An InfiniBand partition.
        """

    @abc.abstractmethod
    def create_multiple_infiniband_partitions(self, values_list):
        """Create several InfiniBand partitions in one statement."""

    @abc.abstractmethod
    def get_infiniband_partition_by_id(self, partition_id, relations=None):
        """Return an InfiniBand partition.

        :param relations: Names of relations to load: Site, Tenant.
        :raises: InfiniBandPartitionNotFound
        """

    @abc.abstractmethod
    def get_infiniband_partition_list(self, filters=None, offset=None,
                                      limit=None, sort_keys=None,
                                      sort_dirs=None, relations=None):
        """Return a page of InfiniBand partitions.

        :param filters: Filters to apply. Defaults to None.

                        :partition_ids: list of partition ids
                        :names: list of names
                        :site_ids: list of site ids
                        :tenant_ids: list of tenant ids
                        :controller_ib_partition_ids: list of controller ids
                        :partition_keys: list of partition keys
                        :partition_names: list of partition names
                        :statuses: list of statuses
                        :search_query: free text
        :param sort_keys: Keys to sort by: name, status, created, updated.
        :returns: A tuple of the list of partitions and the total count.
        """

    @abc.abstractmethod
    def get_infiniband_partition_count(self, filters=None):
        """Return the number of InfiniBand partitions matching filters."""

    @abc.abstractmethod
    def update_infiniband_partition(self, partition_id, values):
        """Update properties of an InfiniBand partition."""

    @abc.abstractmethod
    def update_multiple_infiniband_partitions(self, values_list):
        """Update several InfiniBand partitions in one statement."""

    @abc.abstractmethod
    def clear_infiniband_partition(self, partition_id, fields):
        """Set optional fields of an InfiniBand partition to NULL."""

    @abc.abstractmethod
    def destroy_infiniband_partition(self, partition_id):
        """Mark an InfiniBand partition as deleted."""

    @abc.abstractmethod
    def create_nvlink_interface(self, values):
        """Create a new NVLink interface."""

    @abc.abstractmethod
    def create_multiple_nvlink_interfaces(self, values_list):
        """Create several NVLink interfaces in one statement."""

    @abc.abstractmethod
    def get_nvlink_interface_by_id(self, interface_id, relations=None):
        """Return an NVLink interface.

        :param relations: Names of relations to load: Instance, Site,
                          NVLinkLogicalPartition.
        :raises: NVLinkInterfaceNotFound
        """

    @abc.abstractmethod
    def get_nvlink_interface_list(self, filters=None, offset=None,
                                  limit=None, sort_keys=None, sort_dirs=None,
                                  relations=None):
        """Return a page of NVLink interfaces.

        :param filters: Filters to apply. Defaults to None.

                        :nvlink_interface_ids: list of interface ids
                        :instance_ids: list of instance ids
                        :site_ids: list of site ids
                        :nvlink_logical_partition_ids: list of partition ids
                        :nvlink_domain_ids: list of domain ids
                        :devices: list of device names
                        :statuses: list of statuses
        :param sort_keys: Keys to sort by: status, created, updated.
        :returns: A tuple of the list of interfaces and the total count.
        """

    @abc.abstractmethod
    def get_nvlink_interface_count(self, filters=None):
        """Return the number of NVLink interfaces matching filters."""

    @abc.abstractmethod
    def update_nvlink_interface(self, interface_id, values):
        """Update properties of an NVLink interface."""

    @abc.abstractmethod
    def update_multiple_nvlink_interfaces(self, values_list):
        """Update several NVLink interfaces in one statement."""

    @abc.abstractmethod
    def clear_nvlink_interface(self, interface_id, fields):
        """Set optional fields of an NVLink interface to NULL."""

    @abc.abstractmethod
    def destroy_nvlink_interface(self, interface_id):
        """Mark an NVLink interface as deleted."""

    @abc.abstractmethod
    def create_ssh_key_group_instance_association(self, values):
        """Make an SSH key group available to an instance."""

    @abc.abstractmethod
    def create_multiple_ssh_key_group_instance_associations(self,
                                                            values_list):
        """Create several SSH key group associations in one statement."""

    @abc.abstractmethod
    def get_ssh_key_group_instance_association_by_id(self, association_id,
                                                     relations=None):
        """Return an SSH key group instance association.

        :param relations: Names of relations to load: SSHKeyGroup, Site,
                          Instance.
        :raises: SSHKeyGroupInstanceAssociationNotFound
        """

    @abc.abstractmethod
    def get_ssh_key_group_instance_association_list(self, filters=None,
                                                    offset=None, limit=None,
                                                    sort_keys=None,
                                                    sort_dirs=None,
                                                    relations=None):
        """Return a page of SSH key group instance associations.

        :param filters: Filters to apply. Defaults to None.

                        :ssh_key_group_ids: list of SSH key group ids
                        :site_ids: list of site ids
                        :instance_ids: list of instance ids
        :param sort_keys: Keys to sort by: created, updated.
        :returns: A tuple of the list of associations and the total count.
        """

    @abc.abstractmethod
    def get_ssh_key_group_instance_association_count(self, filters=None):
        """Return the number of associations matching filters."""

    @abc.abstractmethod
    def update_ssh_key_group_instance_association(self, association_id,
                                                  values):
        """Update properties of an SSH key group instance association."""

    @abc.abstractmethod
    def update_multiple_ssh_key_group_instance_associations(self,
                                                            values_list):
        """Update several associations in one statement."""

    @abc.abstractmethod
    def clear_ssh_key_group_instance_association(self, association_id,
                                                 fields):
        """Set optional fields of an association to NULL.

        Associations have no optional fields, so only an empty list of
        fields is accepted.
        """

    @abc.abstractmethod
    def destroy_ssh_key_group_instance_association(self, association_id):
        """Mark an SSH key group instance association as deleted."""

    @abc.abstractmethod
    def create_site(self, values):
        """Create a new site."""

    @abc.abstractmethod
    def get_site_by_id(self, site_id):
        """Return a site.

        :raises: SiteNotFound
        """

    @abc.abstractmethod
    def create_tenant(self, values):
        """Create a new tenant."""

    @abc.abstractmethod
    def get_tenant_by_id(self, tenant_id):
        """Return a tenant.

        :raises: TenantNotFound
        """

    @abc.abstractmethod
    def create_instance_type(self, values):
        """Create a new instance type."""

    @abc.abstractmethod
    def get_instance_type_by_id(self, instance_type_id):
        """Return an instance type.

        :raises: InstanceTypeNotFound
        """

    @abc.abstractmethod
    def create_allocation_constraint(self, values):
        """Create a new allocation constraint."""

    @abc.abstractmethod
    def get_allocation_constraint_by_id(self, constraint_id):
        """Return an allocation constraint.

        :raises: AllocationConstraintNotFound
        """

    @abc.abstractmethod
    def create_vpc(self, values):
        """Create a new VPC."""

    @abc.abstractmethod
    def get_vpc_by_id(self, vpc_id):
        """Return a VPC.

        :raises: VpcNotFound
        """

    @abc.abstractmethod
    def create_ssh_key_group(self, values):
        """Create a new SSH key group."""

    @abc.abstractmethod
    def get_ssh_key_group_by_id(self, group_id):
        """Return an SSH key group.

        :raises: SSHKeyGroupNotFound
        """

    @abc.abstractmethod
    def create_nvlink_logical_partition(self, values):
        """Create a new NVLink logical partition."""

    @abc.abstractmethod
    def get_nvlink_logical_partition_by_id(self, partition_id):
        """Return an NVLink logical partition.

        :raises: NVLinkLogicalPartitionNotFound
        """
