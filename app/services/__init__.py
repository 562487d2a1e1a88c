"""
Service Organization
====================
Services live in ``application/`` and are singletons managed by
``ServiceContainer``, one instance per application:

- PickupScheduleService: resolution and maintenance of pickup data
- StudentAccessService: who may see or change which student
- IdentityService: session principal to staff member and supervised groups
"""

from .application.access_service import StudentAccessService
from .application.identity_service import CallerContext, IdentityService
from .application.pickup_schedule_service import PickupScheduleService

__all__ = [
    "CallerContext",
    "IdentityService",
    "PickupScheduleService",
    "StudentAccessService",
]
