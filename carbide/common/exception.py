# Copyright 2010 United States Government as represented by the
# Administrator of the National Aeronautics and Space Administration.
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

"""Carbide specific exceptions list.

Storage errors raised by oslo.db (``DBReferenceError`` for a foreign key
that points nowhere, ``DBError`` for everything else) are not wrapped and
reach the caller as they are. The classes below cover the cases the data
access layer decides on by itself.
"""

from http import client as http_client

from oslo_log import log as logging

from carbide.common.i18n import _

LOG = logging.getLogger(__name__)


class CarbideException(Exception):
    """Base Carbide Exception

    To correctly use this class, inherit from it and define
    a '_msg_fmt' property. That _msg_fmt will get printf'd
    with the keyword arguments provided to the constructor.

    If you need to access the message from an exception you should use
    str(exc)

    """

    _msg_fmt = _("An unknown exception occurred.")
    code = http_client.INTERNAL_SERVER_ERROR

    def __init__(self, message=None, **kwargs):
        self.kwargs = kwargs

        if 'code' not in self.kwargs:
            self.kwargs['code'] = self.code
        else:
            self.code = int(kwargs['code'])

        if not message:
            try:
                message = self._msg_fmt % kwargs
            except (KeyError, TypeError, ValueError):
                # kwargs doesn't match a variable in the message
                # log the issue and the kwargs
                prs = ', '.join('%s=%s' % pair for pair in kwargs.items())
                LOG.exception('Exception in string format operation '
                              '(arguments %s)', prs)
                message = self._msg_fmt

        super(CarbideException, self).__init__(message)


class Invalid(CarbideException):
    _msg_fmt = _("Unacceptable parameters.")
    code = http_client.BAD_REQUEST


class InvalidParameterValue(Invalid):
    _msg_fmt = "%(err)s"


class BatchSizeExceeded(Invalid):
    _msg_fmt = _("Batch size %(size)d exceeds maximum allowed %(maximum)d")


class Conflict(CarbideException):
    _msg_fmt = _('Conflict.')
    code = http_client.CONFLICT


class DuplicateEntity(Conflict):
    _msg_fmt = _("A %(entity)s with %(columns)s %(value)s already exists.")


class NotFound(CarbideException):
    _msg_fmt = _("Resource could not be found.")
    code = http_client.NOT_FOUND


class InfrastructureProviderNotFound(NotFound):
    _msg_fmt = _("Infrastructure provider %(provider)s could not be found.")


class SiteNotFound(NotFound):
    _msg_fmt = _("Site %(site)s could not be found.")


class TenantNotFound(NotFound):
    _msg_fmt = _("Tenant %(tenant)s could not be found.")


class InstanceTypeNotFound(NotFound):
    _msg_fmt = _("Instance type %(instance_type)s could not be found.")


class AllocationNotFound(NotFound):
    _msg_fmt = _("Allocation %(allocation)s could not be found.")


class AllocationConstraintNotFound(NotFound):
    _msg_fmt = _("Allocation constraint %(constraint)s could not be found.")


class MachineNotFound(NotFound):
    _msg_fmt = _("Machine %(machine)s could not be found.")


class VpcNotFound(NotFound):
    _msg_fmt = _("VPC %(vpc)s could not be found.")


class InstanceNotFound(NotFound):
    _msg_fmt = _("Instance %(instance)s could not be found.")


class InfiniBandPartitionNotFound(NotFound):
    _msg_fmt = _("InfiniBand partition %(partition)s could not be found.")


class NVLinkLogicalPartitionNotFound(NotFound):
    _msg_fmt = _("NVLink logical partition %(partition)s could not be "
                 "found.")


class NVLinkInterfaceNotFound(NotFound):
    _msg_fmt = _("NVLink interface %(interface)s could not be found.")


class SSHKeyGroupNotFound(NotFound):
    _msg_fmt = _("SSH key group %(group)s could not be found.")


class SSHKeyGroupInstanceAssociationNotFound(NotFound):
    _msg_fmt = _("SSH key group instance association %(association)s "
                 "could not be found.")
