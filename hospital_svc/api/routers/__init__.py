"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from api.routers.health import router as health_router
from api.routers.meta import router as meta_router
from api.routers.users import router as users_router
from api.routers.doctors import router as doctors_router
from api.routers.inventory import router as inventory_router
from api.routers.lab_inventory import router as lab_inventory_router
from api.routers.lab_tests import router as lab_tests_router
from api.routers.leaves import router as leaves_router
from api.routers.appointments import router as appointments_router
from api.routers.prescriptions import router as prescriptions_router
from api.routers.notifications import router as notifications_router

ALL_ROUTERS = [
    health_router,
    meta_router,
    users_router,
    doctors_router,
    inventory_router,
    lab_inventory_router,
    lab_tests_router,
    leaves_router,
    appointments_router,
    prescriptions_router,
    notifications_router,
]

__all__ = [
    "ALL_ROUTERS",
    "health_router",
    "meta_router",
    "users_router",
    "doctors_router",
    "inventory_router",
    "lab_inventory_router",
    "lab_tests_router",
    "leaves_router",
    "appointments_router",
    "prescriptions_router",
    "notifications_router",
]
