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

"""SQLAlchemy storage backend."""

import collections
import re
import threading

from oslo_db import api as oslo_db_api
from oslo_db import exception as db_exc
from oslo_db.sqlalchemy import enginefacade
from oslo_db.sqlalchemy import types as db_types
from oslo_log import log
from oslo_utils import timeutils
from oslo_utils import uuidutils
from osprofiler import sqlalchemy as osp_sqlalchemy
import sqlalchemy as sa
from sqlalchemy.exc import NoResultFound
from sqlalchemy.orm import contains_eager
from sqlalchemy.orm import selectinload

from carbide.common import exception
from carbide.common.i18n import _
from carbide.common import profiler
from carbide.common import states
from carbide.conf import CONF
from carbide.db import api
from carbide.db.sqlalchemy import models


LOG = log.getLogger(__name__)


_CONTEXT = threading.local()

_LIST_TYPES = (list, tuple, set, frozenset)

# Columns maintained by the database layer itself. Callers never set them.
_SERVER_COLUMNS = frozenset(['created_at', 'updated_at', 'deleted_at'])

_SORT_DIRS = {'asc': sa.asc, 'desc': sa.desc}

_SEARCH_TOKEN = re.compile(r'\w+')


def get_backend():
    """The backend is this module itself."""
    return Connection()


def _session_for_read():
    return _wrap_session(enginefacade.reader.using(_CONTEXT))


# Please add @oslo_db_api.retry_on_deadlock decorator to all methods using
# _session_for_write (as deadlocks happen on write), so that oslo_db is able
# to retry in case of deadlocks.
def _session_for_write():
    return _wrap_session(enginefacade.writer.using(_CONTEXT))


def _wrap_session(session):
    if CONF.profiler.enabled and CONF.profiler.trace_sqlalchemy:
        session = osp_sqlalchemy.wrap_session(sa, session)
    return session


def _is_postgresql():
    return enginefacade.reader.get_engine().dialect.name == 'postgresql'


def _match(column):
    """Build a predicate factory comparing ``column`` to a filter value.

    A list with a single element is compared with ``=``, a longer list with
    ``IN``; both select the same rows. Scalars are compared with ``=``.
    """
    def predicate(value):
        if isinstance(value, _LIST_TYPES):
            value = list(value)
            if len(value) == 1:
                return column == value[0]
            return column.in_(value)
        return column == value
    return predicate


def _constraint_match(column):
    # EXISTS over the allocation constraints keeps one row per allocation
    # no matter how many constraints match.
    match = _match(column)

    def predicate(value):
        return models.Allocation.constraints.any(match(value))
    return predicate


def _match_each(**columns):
    return {key: _match(column) for key, column in columns.items()}


def _searchable(column):
    if isinstance(column.type, db_types.JsonEncodedDict):
        return sa.cast(column, sa.Text)
    return column


def _search_clause(entity, search_query):
    """Build the free text search predicate for an entity.

    Rows match when the text search document made of the search columns
    matches the words of the query, or when any search column contains
    the query as a case insensitive substring. The text search half is
    only used on PostgreSQL.
    """
    columns = [_searchable(c) for c in entity.search_columns]
    clauses = [c.icontains(search_query, autoescape=True) for c in columns]
    tokens = _SEARCH_TOKEN.findall(search_query)
    if tokens and _is_postgresql():
        document = sa.func.coalesce(columns[0], ' ')
        for column in columns[1:]:
            document = document.concat(' ').concat(
                sa.func.coalesce(column, ' '))
        language = CONF.database.search_language
        matches = sa.func.to_tsvector(language, document).op('@@')(
            sa.func.to_tsquery(language, ' & '.join(tokens)))
        clauses.insert(0, matches)
    return sa.or_(*clauses)


def _validate_filters(entity, filters):
    if filters is None:
        return {}
    supported_filters = set(entity.filters)
    if entity.search_columns:
        supported_filters.add('search_query')
    unsupported_filters = set(filters).difference(supported_filters)
    if unsupported_filters:
        msg = _("SqlAlchemy API does not support "
                "filtering by %s") % ', '.join(sorted(unsupported_filters))
        raise ValueError(msg)
    return {k: v for k, v in filters.items() if v is not None}


def _matches_nothing(filters):
    # An empty list filter selects no rows. List and count calls agree on
    # this, so neither of them needs to reach the database.
    return any(isinstance(v, _LIST_TYPES) and not v for v in filters.values())


def _add_filters(entity, query, filters):
    for key, value in filters.items():
        if key == 'search_query':
            query = query.where(_search_clause(entity, value))
        else:
            query = query.where(entity.filters[key](value))
    return query


def _base_query(entity):
    return sa.select(entity.model).where(entity.model.deleted_at.is_(None))


def _validate_relations(entity, relations):
    relations = list(relations or [])
    unknown = set(relations).difference(entity.relations)
    if unknown:
        raise exception.InvalidParameterValue(
            _('Unknown relations %(relations)s requested for %(model)s. '
              'Supported relations are: %(supported)s') %
            {'relations': ', '.join(sorted(unknown)),
             'model': entity.model.__name__,
             'supported': ', '.join(sorted(entity.relations)) or '-'})
    return relations


def _validate_page(offset, limit):
    if offset is None:
        offset = 0
    if limit is None:
        limit = CONF.database.default_page_size
    if offset < 0:
        raise exception.InvalidParameterValue(
            _('The offset must not be negative, got %s') % offset)
    if limit < 0 or limit > CONF.database.max_page_size:
        raise exception.InvalidParameterValue(
            _('The limit must be between 0 and %(max)d, got %(limit)s') %
            {'max': CONF.database.max_page_size, 'limit': limit})
    return offset, limit


def _build_ordering(entity, sort_keys=None, sort_dirs=None):
    """Turn the requested sort keys into ORDER BY clauses.

    :param entity: the entity description.
    :param sort_keys: list of public sort key names, most significant
                      first.
    :param sort_dirs: list of directions ('asc' or 'desc') matching
                      ``sort_keys``. Missing directions default to 'asc'.
    :returns: a tuple of the list of ORDER BY clauses and the list of
              relation names that must be joined to compute them.
    :raises: InvalidParameterValue for an unknown key or direction.
    """
    sort_keys = list(sort_keys or [])
    sort_dirs = list(sort_dirs or [])
    if len(sort_dirs) > len(sort_keys):
        raise exception.InvalidParameterValue(
            _('Got %(dirs)d sort directions for %(keys)d sort keys') %
            {'dirs': len(sort_dirs), 'keys': len(sort_keys)})
    sort_dirs.extend(['asc'] * (len(sort_keys) - len(sort_dirs)))

    # Rows sharing the value of the primary key are ordered by the default
    # key and finally by id, so that pages never overlap or skip rows.
    if entity.default_sort not in sort_keys:
        sort_keys.append(entity.default_sort)
        sort_dirs.append('asc')

    clauses = []
    joins = []
    for key, direction in zip(sort_keys, sort_dirs):
        try:
            expression, relation = entity.sort_keys[key]
        except KeyError:
            raise exception.InvalidParameterValue(
                _('The sort_key value "%(key)s" is an invalid field for '
                  'sorting') % {'key': key})
        try:
            order = _SORT_DIRS[direction]
        except KeyError:
            raise exception.InvalidParameterValue(
                _('Invalid sort direction: %s. Acceptable values are '
                  '"asc" or "desc"') % direction)
        clauses.append(order(expression))
        if relation and relation not in joins:
            joins.append(relation)
    clauses.append(sa.asc(entity.model.id))
    return clauses, joins


def _check_batch_size(values_list):
    maximum = CONF.database.max_batch_items
    if len(values_list) > maximum:
        raise exception.BatchSizeExceeded(size=len(values_list),
                                          maximum=maximum)


def _in_input_order(entity, ids, refs):
    refs_by_id = {ref.id: ref for ref in refs}
    if len(refs_by_id) != len(ids):
        raise exception.CarbideException(
            _('Unexpected result count for %(model)s: expected %(expected)d '
              'rows, got %(actual)d') %
            {'model': entity.model.__name__, 'expected': len(ids),
             'actual': len(refs_by_id)})
    return [refs_by_id[ident] for ident in ids]


def _check_unique_ids(ids):
    seen = set()
    for ident in ids:
        if ident in seen:
            raise exception.InvalidParameterValue(
                _('ID %s appears more than once in the batch') % ident)
        seen.add(ident)


def _get_live_row(session, entity, ident, for_update=False):
    query = _base_query(entity).where(entity.model.id == ident)
    if for_update:
        query = query.with_for_update()
    try:
        return session.execute(query).scalar_one()
    except NoResultFound:
        raise entity.not_found(ident)


_Entity = collections.namedtuple(
    '_Entity',
    ['model',
     # Callable building the NotFound exception for an id.
     'not_found',
     # Filter name -> callable building a WHERE clause from a value.
     'filters',
     'search_columns',
     # Public relation name -> relationship attribute.
     'relations',
     # Public sort key -> (expression, public relation name or None).
     'sort_keys',
     'default_sort',
     # Optional columns that clear_*() may set to NULL.
     'clearable',
     'statuses',
     # 'generate': ids are always generated; 'optional': generated unless
     # supplied; 'required': the caller must supply it.
     'id_policy'])


def _timestamp_sort_keys(model):
    return {
        'created': (model.created_at, None),
        'updated': (model.updated_at, None),
    }


def _supporting_entity(model, not_found):
    return _Entity(model=model, not_found=not_found, filters={},
                   search_columns=(), relations={},
                   sort_keys=_timestamp_sort_keys(model),
                   default_sort='created', clearable=frozenset(),
                   statuses=None, id_policy='optional')


_INFRASTRUCTURE_PROVIDER = _Entity(
    model=models.InfrastructureProvider,
    not_found=lambda ident: exception.InfrastructureProviderNotFound(
        provider=ident),
    filters=_match_each(names=models.InfrastructureProvider.name,
                        org=models.InfrastructureProvider.org,
                        infrastructure_provider_ids=(
                            models.InfrastructureProvider.id)),
    search_columns=(models.InfrastructureProvider.name,
                    models.InfrastructureProvider.display_name,
                    models.InfrastructureProvider.org),
    relations={},
    sort_keys=dict(_timestamp_sort_keys(models.InfrastructureProvider),
                   name=(models.InfrastructureProvider.name, None)),
    default_sort='created',
    clearable=frozenset(['display_name', 'org_display_name']),
    statuses=None,
    id_policy='generate')


# Allocation sort keys computed from the allocation constraints. An
# allocation may hold several constraints, so the smallest value is used
# instead of joining the constraints table and multiplying rows.
_ALLOCATION_INSTANCE_TYPE_NAME = (
    sa.select(sa.func.min(models.InstanceType.name))
    .select_from(models.InstanceType)
    .join(models.AllocationConstraint,
          models.AllocationConstraint.resource_type_id ==
          models.InstanceType.id)
    .where(models.AllocationConstraint.allocation_id ==
           models.Allocation.id,
           models.AllocationConstraint.resource_type ==
           api.RESOURCE_TYPE_INSTANCE_TYPE,
           models.AllocationConstraint.deleted_at.is_(None))
    .correlate(models.Allocation)
    .scalar_subquery())

_ALLOCATION_CONSTRAINT_VALUE = (
    sa.select(sa.func.min(models.AllocationConstraint.constraint_value))
    .where(models.AllocationConstraint.allocation_id ==
           models.Allocation.id,
           models.AllocationConstraint.deleted_at.is_(None))
    .correlate(models.Allocation)
    .scalar_subquery())

_ALLOCATION = _Entity(
    model=models.Allocation,
    not_found=lambda ident: exception.AllocationNotFound(allocation=ident),
    filters=dict(
        _match_each(
            name=models.Allocation.name,
            infrastructure_provider_id=(
                models.Allocation.infrastructure_provider_id),
            tenant_ids=models.Allocation.tenant_id,
            site_ids=models.Allocation.site_id,
            statuses=models.Allocation.status,
            allocation_ids=models.Allocation.id),
        resource_types=_constraint_match(
            models.AllocationConstraint.resource_type),
        resource_type_ids=_constraint_match(
            models.AllocationConstraint.resource_type_id),
        constraint_types=_constraint_match(
            models.AllocationConstraint.constraint_type),
        constraint_values=_constraint_match(
            models.AllocationConstraint.constraint_value)),
    search_columns=(models.Allocation.name, models.Allocation.description,
                    models.Allocation.status),
    relations={
        api.INFRASTRUCTURE_PROVIDER_RELATION: (
            models.Allocation.infrastructure_provider),
        api.TENANT_RELATION: models.Allocation.tenant,
        api.SITE_RELATION: models.Allocation.site,
    },
    sort_keys=dict(
        _timestamp_sort_keys(models.Allocation),
        name=(models.Allocation.name, None),
        status=(models.Allocation.status, None),
        site_name=(models.Site.name, api.SITE_RELATION),
        tenant_org_display_name=(models.Tenant.org_display_name,
                                 api.TENANT_RELATION),
        instance_type_name=(_ALLOCATION_INSTANCE_TYPE_NAME, None),
        constraint_value=(_ALLOCATION_CONSTRAINT_VALUE, None)),
    default_sort='created',
    clearable=frozenset(['description']),
    statuses=states.ALLOCATION_STATES,
    id_policy='generate')


_MACHINE = _Entity(
    model=models.Machine,
    not_found=lambda ident: exception.MachineNotFound(machine=ident),
    filters=dict(
        _match_each(
            machine_ids=models.Machine.id,
            infrastructure_provider_ids=(
                models.Machine.infrastructure_provider_id),
            site_ids=models.Machine.site_id,
            instance_type_ids=models.Machine.instance_type_id,
            controller_machine_ids=models.Machine.controller_machine_id,
            hostnames=models.Machine.hostname,
            statuses=models.Machine.status,
            is_assigned=models.Machine.is_assigned,
            is_in_maintenance=models.Machine.is_in_maintenance,
            is_missing_on_site=models.Machine.is_missing_on_site)),
    search_columns=(models.Machine.id, models.Machine.hostname,
                    models.Machine.vendor, models.Machine.product_name,
                    models.Machine.serial_number, models.Machine.status,
                    models.Machine.labels),
    relations={
        api.INFRASTRUCTURE_PROVIDER_RELATION: (
            models.Machine.infrastructure_provider),
        api.SITE_RELATION: models.Machine.site,
        api.INSTANCE_TYPE_RELATION: models.Machine.instance_type,
    },
    sort_keys=dict(
        _timestamp_sort_keys(models.Machine),
        id=(models.Machine.id, None),
        hostname=(models.Machine.hostname, None),
        status=(models.Machine.status, None),
        instance_type_name=(models.InstanceType.name,
                            api.INSTANCE_TYPE_RELATION)),
    default_sort='created',
    clearable=frozenset(['instance_type_id', 'controller_machine_type',
                         'hw_sku_device_type', 'vendor', 'product_name',
                         'serial_number', 'machine_metadata',
                         'maintenance_message', 'network_health_message',
                         'health', 'hostname', 'default_mac_address',
                         'labels']),
    statuses=states.MACHINE_STATES,
    id_policy='required')


_INSTANCE = _Entity(
    model=models.Instance,
    not_found=lambda ident: exception.InstanceNotFound(instance=ident),
    filters=_match_each(
        instance_ids=models.Instance.id,
        names=models.Instance.name,
        allocation_ids=models.Instance.allocation_id,
        allocation_constraint_ids=models.Instance.allocation_constraint_id,
        tenant_ids=models.Instance.tenant_id,
        infrastructure_provider_ids=(
            models.Instance.infrastructure_provider_id),
        site_ids=models.Instance.site_id,
        instance_type_ids=models.Instance.instance_type_id,
        vpc_ids=models.Instance.vpc_id,
        machine_ids=models.Instance.machine_id,
        controller_instance_ids=models.Instance.controller_instance_id,
        operating_system_ids=models.Instance.operating_system_id,
        network_security_group_ids=(
            models.Instance.network_security_group_id),
        statuses=models.Instance.status),
    search_columns=(models.Instance.name, models.Instance.description,
                    models.Instance.status, models.Instance.labels),
    relations={
        api.ALLOCATION_RELATION: models.Instance.allocation,
        api.TENANT_RELATION: models.Instance.tenant,
        api.INFRASTRUCTURE_PROVIDER_RELATION: (
            models.Instance.infrastructure_provider),
        api.SITE_RELATION: models.Instance.site,
        api.INSTANCE_TYPE_RELATION: models.Instance.instance_type,
        api.VPC_RELATION: models.Instance.vpc,
        api.MACHINE_RELATION: models.Instance.machine,
    },
    sort_keys=dict(
        _timestamp_sort_keys(models.Instance),
        name=(models.Instance.name, None),
        status=(models.Instance.status, None),
        machine_id=(models.Instance.machine_id, None),
        tenant_org_display_name=(models.Tenant.org_display_name,
                                 api.TENANT_RELATION),
        instance_type_name=(models.InstanceType.name,
                            api.INSTANCE_TYPE_RELATION)),
    default_sort='created',
    clearable=frozenset(['description', 'allocation_id',
                         'allocation_constraint_id', 'instance_type_id',
                         'machine_id', 'controller_instance_id', 'hostname',
                         'operating_system_id', 'network_security_group_id',
                         'ipxe_script', 'user_data', 'labels',
                         'tpm_ek_certificate', 'power_status']),
    statuses=states.INSTANCE_STATES,
    id_policy='generate')


_INFINIBAND_PARTITION = _Entity(
    model=models.InfiniBandPartition,
    not_found=lambda ident: exception.InfiniBandPartitionNotFound(
        partition=ident),
    filters=_match_each(
        partition_ids=models.InfiniBandPartition.id,
        names=models.InfiniBandPartition.name,
        site_ids=models.InfiniBandPartition.site_id,
        tenant_ids=models.InfiniBandPartition.tenant_id,
        controller_ib_partition_ids=(
            models.InfiniBandPartition.controller_ib_partition_id),
        partition_keys=models.InfiniBandPartition.partition_key,
        partition_names=models.InfiniBandPartition.partition_name,
        statuses=models.InfiniBandPartition.status),
    search_columns=(models.InfiniBandPartition.name,
                    models.InfiniBandPartition.description,
                    models.InfiniBandPartition.status,
                    models.InfiniBandPartition.labels),
    relations={
        api.SITE_RELATION: models.InfiniBandPartition.site,
        api.TENANT_RELATION: models.InfiniBandPartition.tenant,
    },
    sort_keys=dict(
        _timestamp_sort_keys(models.InfiniBandPartition),
        name=(models.InfiniBandPartition.name, None),
        status=(models.InfiniBandPartition.status, None)),
    default_sort='created',
    clearable=frozenset(['description', 'controller_ib_partition_id',
                         'partition_key', 'partition_name', 'service_level',
                         'rate_limit', 'mtu', 'enable_sharp', 'labels']),
    statuses=states.IB_PARTITION_STATES,
    id_policy='optional')


_NVLINK_INTERFACE = _Entity(
    model=models.NVLinkInterface,
    not_found=lambda ident: exception.NVLinkInterfaceNotFound(
        interface=ident),
    filters=_match_each(
        nvlink_interface_ids=models.NVLinkInterface.id,
        instance_ids=models.NVLinkInterface.instance_id,
        site_ids=models.NVLinkInterface.site_id,
        nvlink_logical_partition_ids=(
            models.NVLinkInterface.nvlink_logical_partition_id),
        nvlink_domain_ids=models.NVLinkInterface.nvlink_domain_id,
        devices=models.NVLinkInterface.device,
        statuses=models.NVLinkInterface.status),
    search_columns=(),
    relations={
        api.INSTANCE_RELATION: models.NVLinkInterface.instance,
        api.SITE_RELATION: models.NVLinkInterface.site,
        api.NVLINK_LOGICAL_PARTITION_RELATION: (
            models.NVLinkInterface.nvlink_logical_partition),
    },
    sort_keys=dict(
        _timestamp_sort_keys(models.NVLinkInterface),
        status=(models.NVLinkInterface.status, None)),
    default_sort='created',
    clearable=frozenset(['nvlink_domain_id', 'device', 'gpu_guid']),
    statuses=states.NVLINK_INTERFACE_STATES,
    id_policy='generate')


_SSH_KEY_GROUP_INSTANCE_ASSOCIATION = _Entity(
    model=models.SSHKeyGroupInstanceAssociation,
    not_found=lambda ident: (
        exception.SSHKeyGroupInstanceAssociationNotFound(association=ident)),
    filters=_match_each(
        ssh_key_group_ids=models.SSHKeyGroupInstanceAssociation.
        ssh_key_group_id,
        site_ids=models.SSHKeyGroupInstanceAssociation.site_id,
        instance_ids=models.SSHKeyGroupInstanceAssociation.instance_id),
    search_columns=(),
    relations={
        api.SSH_KEY_GROUP_RELATION: (
            models.SSHKeyGroupInstanceAssociation.ssh_key_group),
        api.SITE_RELATION: models.SSHKeyGroupInstanceAssociation.site,
        api.INSTANCE_RELATION: models.SSHKeyGroupInstanceAssociation.instance,
    },
    sort_keys=_timestamp_sort_keys(models.SSHKeyGroupInstanceAssociation),
    default_sort='created',
    clearable=frozenset(),
    statuses=None,
    id_policy='generate')


_SITE = _supporting_entity(
    models.Site, lambda ident: exception.SiteNotFound(site=ident))
_TENANT = _supporting_entity(
    models.Tenant, lambda ident: exception.TenantNotFound(tenant=ident))
_INSTANCE_TYPE = _supporting_entity(
    models.InstanceType,
    lambda ident: exception.InstanceTypeNotFound(instance_type=ident))
_ALLOCATION_CONSTRAINT = _supporting_entity(
    models.AllocationConstraint,
    lambda ident: exception.AllocationConstraintNotFound(constraint=ident))
_VPC = _supporting_entity(
    models.Vpc, lambda ident: exception.VpcNotFound(vpc=ident))
_SSH_KEY_GROUP = _supporting_entity(
    models.SSHKeyGroup,
    lambda ident: exception.SSHKeyGroupNotFound(group=ident))
_NVLINK_LOGICAL_PARTITION = _supporting_entity(
    models.NVLinkLogicalPartition,
    lambda ident: exception.NVLinkLogicalPartitionNotFound(partition=ident))


def _writable_columns(entity):
    columns = {attr.key for attr in sa.inspect(entity.model).column_attrs}
    return columns - _SERVER_COLUMNS


def _prepare_new_row(entity, values):
    values = dict(values)
    unknown = set(values).difference(_writable_columns(entity))
    if unknown:
        raise exception.InvalidParameterValue(
            _('Unknown fields for %(model)s: %(fields)s') %
            {'model': entity.model.__name__,
             'fields': ', '.join(sorted(unknown))})
    if entity.id_policy == 'generate' and 'id' in values:
        raise exception.InvalidParameterValue(
            _('The ID of a new %s is generated and cannot be supplied.')
            % entity.model.__name__)
    if entity.id_policy == 'required' and not values.get('id'):
        raise exception.InvalidParameterValue(
            _('The ID of a new %s must be supplied.')
            % entity.model.__name__)
    if not values.get('id'):
        values['id'] = uuidutils.generate_uuid()
    ref = entity.model()
    ref.update(values)
    return ref


def _validate_update_values(entity, values):
    if 'id' in values:
        raise exception.InvalidParameterValue(
            _('Cannot overwrite ID for an existing %s.')
            % entity.model.__name__)
    unknown = set(values).difference(_writable_columns(entity))
    if unknown:
        raise exception.InvalidParameterValue(
            _('Unknown fields for %(model)s: %(fields)s') %
            {'model': entity.model.__name__,
             'fields': ', '.join(sorted(unknown))})
    nulled = sorted(k for k, v in values.items() if v is None)
    if nulled:
        raise exception.InvalidParameterValue(
            _('Cannot set %(fields)s of a %(model)s to None with an update, '
              'clear the fields instead.') %
            {'fields': ', '.join(nulled), 'model': entity.model.__name__})


def _duplicate_entity(entity, exc):
    return exception.DuplicateEntity(
        entity=entity.model.__name__,
        columns=', '.join(exc.columns or ['id']),
        value=exc.value)


@profiler.trace_cls("db_api")
class Connection(api.Connection):
    """SqlAlchemy connection."""

    def __init__(self):
        pass

    @oslo_db_api.retry_on_deadlock
    def _create(self, entity, values):
        ref = _prepare_new_row(entity, values)
        with _session_for_write() as session:
            try:
                session.add(ref)
                session.flush()
            except db_exc.DBDuplicateEntry as exc:
                raise _duplicate_entity(entity, exc)
            return _get_live_row(session, entity, ref.id)

    @oslo_db_api.retry_on_deadlock
    def _create_multiple(self, entity, values_list):
        _check_batch_size(values_list)
        if not values_list:
            return []
        refs = [_prepare_new_row(entity, values) for values in values_list]
        ids = [ref.id for ref in refs]
        _check_unique_ids(ids)
        LOG.debug('Creating %(count)d %(model)s rows',
                  {'count': len(refs), 'model': entity.model.__name__})
        with _session_for_write() as session:
            try:
                session.add_all(refs)
                session.flush()
            except db_exc.DBDuplicateEntry as exc:
                raise _duplicate_entity(entity, exc)
            query = _base_query(entity).where(entity.model.id.in_(ids))
            created = session.execute(query).scalars().all()
        return _in_input_order(entity, ids, created)

    def _get_by_id(self, entity, ident, relations=None):
        relations = _validate_relations(entity, relations)
        query = _base_query(entity).where(entity.model.id == ident)
        query = query.options(
            *[selectinload(entity.relations[name]) for name in relations])
        with _session_for_read() as session:
            try:
                return session.execute(query).scalar_one()
            except NoResultFound:
                raise entity.not_found(ident)

    def _get_list(self, entity, filters=None, offset=None, limit=None,
                  sort_keys=None, sort_dirs=None, relations=None):
        filters = _validate_filters(entity, filters)
        offset, limit = _validate_page(offset, limit)
        order_by, sort_relations = _build_ordering(entity, sort_keys,
                                                   sort_dirs)
        relations = _validate_relations(entity, relations)
        if _matches_nothing(filters):
            return [], 0

        query = _add_filters(entity, _base_query(entity), filters)
        count_query = sa.select(sa.func.count()).select_from(
            query.subquery())

        # Sorting on a column of a related row joins that row and loads the
        # relation from the join. These relations are all many-to-one, so
        # the join never adds rows.
        options = []
        for name in sort_relations:
            attr = entity.relations[name]
            query = query.outerjoin(attr)
            options.append(contains_eager(attr))
        for name in relations:
            if name not in sort_relations:
                options.append(selectinload(entity.relations[name]))
        query = (query.options(*options).order_by(*order_by)
                 .offset(offset).limit(limit))

        with _session_for_read() as session:
            total = session.execute(count_query).scalar()
            items = session.execute(query).scalars().all()
        return items, total

    def _get_count(self, entity, filters=None):
        filters = _validate_filters(entity, filters)
        if _matches_nothing(filters):
            return 0
        query = _add_filters(entity, _base_query(entity), filters)
        query = sa.select(sa.func.count()).select_from(query.subquery())
        with _session_for_read() as session:
            return session.execute(query).scalar()

    def _get_count_by_status(self, entity, filters=None):
        filters = _validate_filters(entity, filters)
        result = dict.fromkeys(entity.statuses, 0)
        result['total'] = 0
        if _matches_nothing(filters):
            return result
        query = _add_filters(
            entity,
            sa.select(entity.model.status, sa.func.count())
            .where(entity.model.deleted_at.is_(None)),
            filters).group_by(entity.model.status)
        with _session_for_read() as session:
            for status, count in session.execute(query):
                result[status] = count
                result['total'] += count
        return result

    @oslo_db_api.retry_on_deadlock
    def _update(self, entity, ident, values):
        _validate_update_values(entity, values)
        with _session_for_write() as session:
            ref = _get_live_row(session, entity, ident, for_update=True)
            if values:
                ref.update(values)
                session.flush()
            return ref

    @oslo_db_api.retry_on_deadlock
    def _update_multiple(self, entity, values_list):
        _check_batch_size(values_list)
        if not values_list:
            return []
        ids = []
        for values in values_list:
            if not values.get('id'):
                raise exception.InvalidParameterValue(
                    _('Every item of a batch update of %s must carry '
                      'an ID.') % entity.model.__name__)
            ids.append(values['id'])
            _validate_update_values(
                entity, {k: v for k, v in values.items() if k != 'id'})
        _check_unique_ids(ids)
        fields = set()
        for values in values_list:
            fields.update(values)
        fields.discard('id')

        with _session_for_write() as session:
            query = (_base_query(entity).where(entity.model.id.in_(ids))
                     .with_for_update())
            current = {ref.id: ref
                       for ref in session.execute(query).scalars()}
            for ident in ids:
                if ident not in current:
                    raise entity.not_found(ident)
            if fields:
                LOG.debug('Updating %(fields)s of %(count)d %(model)s rows',
                          {'fields': ', '.join(sorted(fields)),
                           'count': len(ids),
                           'model': entity.model.__name__})
                # One statement covers every row, so each row gets a value
                # for every field. Fields an item does not mention keep
                # their current value.
                now = timeutils.utcnow()
                params = []
                for values in values_list:
                    ref = current[values['id']]
                    row = {'id': values['id'], 'updated_at': now}
                    for field in fields:
                        row[field] = (values[field] if field in values
                                      else ref[field])
                    params.append(row)
                session.execute(sa.update(entity.model), params)
            query = (_base_query(entity).where(entity.model.id.in_(ids))
                     .execution_options(populate_existing=True))
            updated = session.execute(query).scalars().all()
        return _in_input_order(entity, ids, updated)

    @oslo_db_api.retry_on_deadlock
    def _clear(self, entity, ident, fields):
        fields = list(fields or [])
        invalid = set(fields).difference(entity.clearable)
        if invalid:
            raise exception.InvalidParameterValue(
                _('Fields %(fields)s of a %(model)s cannot be cleared') %
                {'fields': ', '.join(sorted(invalid)),
                 'model': entity.model.__name__})
        with _session_for_write() as session:
            ref = _get_live_row(session, entity, ident, for_update=True)
            if fields:
                for field in fields:
                    ref[field] = None
                session.flush()
            return ref

    @oslo_db_api.retry_on_deadlock
    def _destroy(self, entity, ident, purge=False):
        with _session_for_write() as session:
            if purge:
                # Removes the row whether or not it was soft deleted.
                query = (sa.delete(entity.model)
                         .where(entity.model.id == ident)
                         .execution_options(synchronize_session=False))
            else:
                now = timeutils.utcnow()
                query = (sa.update(entity.model)
                         .where(entity.model.id == ident,
                                entity.model.deleted_at.is_(None))
                         .values(deleted_at=now, updated_at=now)
                         .execution_options(synchronize_session=False))
            count = session.execute(query).rowcount
        if count == 0:
            LOG.debug('%(model)s %(id)s does not exist or is already '
                      'deleted', {'model': entity.model.__name__,
                                  'id': ident})
        elif purge:
            LOG.info('Purged %(model)s %(id)s',
                     {'model': entity.model.__name__, 'id': ident})

    # Infrastructure providers

    def create_infrastructure_provider(self, values):
        return self._create(_INFRASTRUCTURE_PROVIDER, values)

    def create_multiple_infrastructure_providers(self, values_list):
        return self._create_multiple(_INFRASTRUCTURE_PROVIDER, values_list)

    def get_infrastructure_provider_by_id(self, provider_id,
                                          relations=None):
        return self._get_by_id(_INFRASTRUCTURE_PROVIDER, provider_id,
                               relations)

    def get_infrastructure_provider_list(self, filters=None, offset=None,
                                         limit=None, sort_keys=None,
                                         sort_dirs=None, relations=None):
        return self._get_list(_INFRASTRUCTURE_PROVIDER, filters, offset,
                              limit, sort_keys, sort_dirs, relations)

    def get_infrastructure_provider_list_by_org(self, org, relations=None):
        relations = _validate_relations(_INFRASTRUCTURE_PROVIDER, relations)
        query = (_base_query(_INFRASTRUCTURE_PROVIDER)
                 .where(models.InfrastructureProvider.org == org)
                 .order_by(*_build_ordering(_INFRASTRUCTURE_PROVIDER)[0])
                 .options(*[selectinload(
                     _INFRASTRUCTURE_PROVIDER.relations[name])
                     for name in relations]))
        with _session_for_read() as session:
            return session.execute(query).scalars().all()

    def get_infrastructure_provider_count(self, filters=None):
        return self._get_count(_INFRASTRUCTURE_PROVIDER, filters)

    def update_infrastructure_provider(self, provider_id, values):
        return self._update(_INFRASTRUCTURE_PROVIDER, provider_id, values)

    def update_multiple_infrastructure_providers(self, values_list):
        return self._update_multiple(_INFRASTRUCTURE_PROVIDER, values_list)

    def clear_infrastructure_provider(self, provider_id, fields):
        return self._clear(_INFRASTRUCTURE_PROVIDER, provider_id, fields)

    def destroy_infrastructure_provider(self, provider_id):
        self._destroy(_INFRASTRUCTURE_PROVIDER, provider_id)

    # Allocations

    def create_allocation(self, values):
        return self._create(_ALLOCATION, values)

    def create_multiple_allocations(self, values_list):
        return self._create_multiple(_ALLOCATION, values_list)

    def get_allocation_by_id(self, allocation_id, relations=None):
        return self._get_by_id(_ALLOCATION, allocation_id, relations)

    def get_allocation_list(self, filters=None, offset=None, limit=None,
                            sort_keys=None, sort_dirs=None, relations=None):
        return self._get_list(_ALLOCATION, filters, offset, limit,
                              sort_keys, sort_dirs, relations)

    def get_allocation_count(self, filters=None):
        return self._get_count(_ALLOCATION, filters)

    def update_allocation(self, allocation_id, values):
        return self._update(_ALLOCATION, allocation_id, values)

    def update_multiple_allocations(self, values_list):
        return self._update_multiple(_ALLOCATION, values_list)

    def clear_allocation(self, allocation_id, fields):
        return self._clear(_ALLOCATION, allocation_id, fields)

    def destroy_allocation(self, allocation_id):
        self._destroy(_ALLOCATION, allocation_id)

    # Machines

    def create_machine(self, values):
        return self._create(_MACHINE, values)

    def create_multiple_machines(self, values_list):
        return self._create_multiple(_MACHINE, values_list)

    def get_machine_by_id(self, machine_id, relations=None):
        return self._get_by_id(_MACHINE, machine_id, relations)

    def get_machine_list(self, filters=None, offset=None, limit=None,
                         sort_keys=None, sort_dirs=None, relations=None):
        return self._get_list(_MACHINE, filters, offset, limit,
                              sort_keys, sort_dirs, relations)

    def get_machine_count(self, filters=None):
        return self._get_count(_MACHINE, filters)

    def get_machine_count_by_status(self, filters=None):
        return self._get_count_by_status(_MACHINE, filters)

    def update_machine(self, machine_id, values):
        return self._update(_MACHINE, machine_id, values)

    def update_multiple_machines(self, values_list):
        return self._update_multiple(_MACHINE, values_list)

    def clear_machine(self, machine_id, fields):
        return self._clear(_MACHINE, machine_id, fields)

    def destroy_machine(self, machine_id, purge=False):
        self._destroy(_MACHINE, machine_id, purge=purge)

    # Instances

    def create_instance(self, values):
        return self._create(_INSTANCE, values)

    def create_multiple_instances(self, values_list):
        return self._create_multiple(_INSTANCE, values_list)

    def get_instance_by_id(self, instance_id, relations=None):
        return self._get_by_id(_INSTANCE, instance_id, relations)

    def get_instance_list(self, filters=None, offset=None, limit=None,
                          sort_keys=None, sort_dirs=None, relations=None):
        return self._get_list(_INSTANCE, filters, offset, limit,
                              sort_keys, sort_dirs, relations)

    def get_instance_count(self, filters=None):
        return self._get_count(_INSTANCE, filters)

    def get_instance_count_by_status(self, filters=None):
        return self._get_count_by_status(_INSTANCE, filters)

    def update_instance(self, instance_id, values):
        return self._update(_INSTANCE, instance_id, values)

    def update_multiple_instances(self, values_list):
        return self._update_multiple(_INSTANCE, values_list)

    def clear_instance(self, instance_id, fields):
        return self._clear(_INSTANCE, instance_id, fields)

    def destroy_instance(self, instance_id):
        self._destroy(_INSTANCE, instance_id)

    # InfiniBand partitions

    def create_infiniband_partition(self, values):
        return self._create(_INFINIBAND_PARTITION, values)

    def create_multiple_infiniband_partitions(self, values_list):
        return self._create_multiple(_INFINIBAND_PARTITION, values_list)

    def get_infiniband_partition_by_id(self, partition_id, relations=None):
        return self._get_by_id(_INFINIBAND_PARTITION, partition_id,
                               relations)

    def get_infiniband_partition_list(self, filters=None, offset=None,
                                      limit=None, sort_keys=None,
                                      sort_dirs=None, relations=None):
        return self._get_list(_INFINIBAND_PARTITION, filters, offset, limit,
                              sort_keys, sort_dirs, relations)

    def get_infiniband_partition_count(self, filters=None):
        return self._get_count(_INFINIBAND_PARTITION, filters)

    def update_infiniband_partition(self, partition_id, values):
        return self._update(_INFINIBAND_PARTITION, partition_id, values)

    def update_multiple_infiniband_partitions(self, values_list):
        return self._update_multiple(_INFINIBAND_PARTITION, values_list)

    def clear_infiniband_partition(self, partition_id, fields):
        return self._clear(_INFINIBAND_PARTITION, partition_id, fields)

    def destroy_infiniband_partition(self, partition_id):
        self._destroy(_INFINIBAND_PARTITION, partition_id)

    # NVLink interfaces

    def create_nvlink_interface(self, values):
        return self._create(_NVLINK_INTERFACE, values)

    def create_multiple_nvlink_interfaces(self, values_list):
        return self._create_multiple(_NVLINK_INTERFACE, values_list)

    def get_nvlink_interface_by_id(self, interface_id, relations=None):
        return self._get_by_id(_NVLINK_INTERFACE, interface_id, relations)

    def get_nvlink_interface_list(self, filters=None, offset=None,
                                  limit=None, sort_keys=None, sort_dirs=None,
                                  relations=None):
        return self._get_list(_NVLINK_INTERFACE, filters, offset, limit,
                              sort_keys, sort_dirs, relations)

    def get_nvlink_interface_count(self, filters=None):
        return self._get_count(_NVLINK_INTERFACE, filters)

    def update_nvlink_interface(self, interface_id, values):
        return self._update(_NVLINK_INTERFACE, interface_id, values)

    def update_multiple_nvlink_interfaces(self, values_list):
        return self._update_multiple(_NVLINK_INTERFACE, values_list)

    def clear_nvlink_interface(self, interface_id, fields):
        return self._clear(_NVLINK_INTERFACE, interface_id, fields)

    def destroy_nvlink_interface(self, interface_id):
        self._destroy(_NVLINK_INTERFACE, interface_id)

    # SSH key group instance associations

    def create_ssh_key_group_instance_association(self, values):
        return self._create(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION, values)

    def create_multiple_ssh_key_group_instance_associations(self,
                                                            values_list):
        return self._create_multiple(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION,
                                     values_list)

    def get_ssh_key_group_instance_association_by_id(self, association_id,
                                                     relations=None):
        return self._get_by_id(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION,
                               association_id, relations)

    def get_ssh_key_group_instance_association_list(self, filters=None,
                                                    offset=None, limit=None,
                                                    sort_keys=None,
                                                    sort_dirs=None,
                                                    relations=None):
        return self._get_list(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION, filters,
                              offset, limit, sort_keys, sort_dirs, relations)

    def get_ssh_key_group_instance_association_count(self, filters=None):
        return self._get_count(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION, filters)

    def update_ssh_key_group_instance_association(self, association_id,
                                                  values):
        return self._update(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION,
                            association_id, values)

    def update_multiple_ssh_key_group_instance_associations(self,
                                                            values_list):
        return self._update_multiple(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION,
                                     values_list)

    def clear_ssh_key_group_instance_association(self, association_id,
                                                 fields):
        return self._clear(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION,
                           association_id, fields)

    def destroy_ssh_key_group_instance_association(self, association_id):
        self._destroy(_SSH_KEY_GROUP_INSTANCE_ASSOCIATION, association_id)

    # Supporting records

    def create_site(self, values):
        return self._create(_SITE, values)

    def get_site_by_id(self, site_id):
        return self._get_by_id(_SITE, site_id)

    def create_tenant(self, values):
        return self._create(_TENANT, values)

    def get_tenant_by_id(self, tenant_id):
        return self._get_by_id(_TENANT, tenant_id)

    def create_instance_type(self, values):
        return self._create(_INSTANCE_TYPE, values)

    def get_instance_type_by_id(self, instance_type_id):
        return self._get_by_id(_INSTANCE_TYPE, instance_type_id)

    def create_allocation_constraint(self, values):
        return self._create(_ALLOCATION_CONSTRAINT, values)

    def get_allocation_constraint_by_id(self, constraint_id):
        return self._get_by_id(_ALLOCATION_CONSTRAINT, constraint_id)

    def create_vpc(self, values):
        return self._create(_VPC, values)

    def get_vpc_by_id(self, vpc_id):
        return self._get_by_id(_VPC, vpc_id)

    def create_ssh_key_group(self, values):
        return self._create(_SSH_KEY_GROUP, values)

    def get_ssh_key_group_by_id(self, group_id):
        return self._get_by_id(_SSH_KEY_GROUP, group_id)

    def create_nvlink_logical_partition(self, values):
        return self._create(_NVLINK_LOGICAL_PARTITION, values)

    def get_nvlink_logical_partition_by_id(self, partition_id):
        return self._get_by_id(_NVLINK_LOGICAL_PARTITION, partition_id)
