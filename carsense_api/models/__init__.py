"""
Import all models here so that:
1. Alembic can auto-detect them when generating migrations
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from carsense_api.models.user import User, UserRole
from carsense_api.models.vehicle import Vehicle
from carsense_api.models.ownership_transfer import OwnershipTransfer
from carsense_api.models.diagnostic import Diagnostic
from carsense_api.models.sensor_snapshot import SensorSnapshot, SensorReading, SensorSource
from carsense_api.models.dtc_library import DTCLibrary, DTCSeverity
from carsense_api.models.dtc_instance import DTCInstance
from carsense_api.models.location import Location
from carsense_api.models.service_workshop import ServiceWorkshop
from carsense_api.models.maintenance_log import MaintenanceLog, ServiceType

__all__ = [
    "User",
    "UserRole",
    "Vehicle",
    "OwnershipTransfer",
    "Diagnostic",
    "SensorSnapshot",
    "SensorReading",
    "SensorSource",
    "DTCLibrary",
    "DTCSeverity",
    "DTCInstance",
    "Location",
    "ServiceWorkshop",
    "MaintenanceLog",
    "ServiceType",
]
