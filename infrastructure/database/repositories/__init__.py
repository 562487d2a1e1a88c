"""Repository facades exposing typed accessors over low-level mixins.

Domain contracts live in ``app.domain.pickup.repository``; the classes here
satisfy them structurally::

    from infrastructure.database.repositories import PickupScheduleRepository
"""

from infrastructure.database.repositories.pickup import PickupScheduleRepository
from infrastructure.database.repositories.students import StaffRepository, StudentRepository

__all__ = [
    "PickupScheduleRepository",
    "StaffRepository",
    "StudentRepository",
]
