# Copyright (c) 2012 NTT DOCOMO, INC.
# Copyright 2010 OpenStack Foundation
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

"""
Status values of the records kept by the data access layer.

Each record type with a ``status`` column draws it from one of the closed
sets below. The database layer stores whatever it is given: checking that a
value belongs to the right set, and that a transition from one status to
another makes sense, is up to the caller. The ``*_STATES`` sets are exported
so that callers can do that validation.
"""

###################
# Allocation states
###################

ALLOCATION_PENDING = 'Pending'
ALLOCATION_REGISTERED = 'Registered'
ALLOCATION_ERROR = 'Error'
ALLOCATION_DELETING = 'Deleting'

ALLOCATION_STATES = frozenset([ALLOCATION_PENDING, ALLOCATION_REGISTERED,
                               ALLOCATION_ERROR, ALLOCATION_DELETING])

################
# Machine states
################

MACHINE_INITIALIZING = 'Initializing'
MACHINE_READY = 'Ready'
MACHINE_IN_USE = 'InUse'
MACHINE_DECOMMISSIONED = 'Decommissioned'
MACHINE_ERROR = 'Error'
MACHINE_RESET = 'Reset'
MACHINE_MAINTENANCE = 'Maintenance'
MACHINE_UNKNOWN = 'Unknown'

MACHINE_STATES = frozenset([MACHINE_INITIALIZING, MACHINE_READY,
                            MACHINE_IN_USE, MACHINE_DECOMMISSIONED,
                            MACHINE_ERROR, MACHINE_RESET,
                            MACHINE_MAINTENANCE, MACHINE_UNKNOWN])

#################
# Instance states
#################

INSTANCE_PENDING = 'Pending'
INSTANCE_PROVISIONING = 'Provisioning'
INSTANCE_CONFIGURING = 'Configuring'
INSTANCE_READY = 'Ready'
INSTANCE_UPDATING = 'Updating'
INSTANCE_ERROR = 'Error'
INSTANCE_TERMINATING = 'Terminating'
INSTANCE_TERMINATED = 'Terminated'
INSTANCE_UNKNOWN = 'Unknown'

INSTANCE_STATES = frozenset([INSTANCE_PENDING, INSTANCE_PROVISIONING,
                             INSTANCE_CONFIGURING, INSTANCE_READY,
                             INSTANCE_UPDATING, INSTANCE_ERROR,
                             INSTANCE_TERMINATING, INSTANCE_TERMINATED,
                             INSTANCE_UNKNOWN])

# Power status of an instance, reported separately from its status.
POWER_BOOT_COMPLETED = 'BootCompleted'
POWER_REBOOTING = 'Rebooting'
POWER_ERROR = 'Error'

INSTANCE_POWER_STATES = frozenset([POWER_BOOT_COMPLETED, POWER_REBOOTING,
                                   POWER_ERROR])

#############################
# InfiniBand partition states
#############################

IB_PARTITION_PENDING = 'Pending'
IB_PARTITION_PROVISIONING = 'Provisioning'
IB_PARTITION_READY = 'Ready'
IB_PARTITION_CONFIGURING = 'Configuring'
IB_PARTITION_ERROR = 'Error'
IB_PARTITION_DELETING = 'Deleting'

IB_PARTITION_STATES = frozenset([IB_PARTITION_PENDING,
                                 IB_PARTITION_PROVISIONING,
                                 IB_PARTITION_READY,
                                 IB_PARTITION_CONFIGURING,
                                 IB_PARTITION_ERROR,
                                 IB_PARTITION_DELETING])

##########################
# NVLink interface states
##########################

NVLINK_INTERFACE_PENDING = 'Pending'
NVLINK_INTERFACE_PROVISIONING = 'Provisioning'
NVLINK_INTERFACE_READY = 'Ready'
NVLINK_INTERFACE_ERROR = 'Error'
NVLINK_INTERFACE_DELETING = 'Deleting'

NVLINK_INTERFACE_STATES = frozenset([NVLINK_INTERFACE_PENDING,
                                     NVLINK_INTERFACE_PROVISIONING,
                                     NVLINK_INTERFACE_READY,
                                     NVLINK_INTERFACE_ERROR,
                                     NVLINK_INTERFACE_DELETING])
