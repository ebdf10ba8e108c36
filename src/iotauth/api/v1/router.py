from fastapi import APIRouter

from src.iotauth.api.v1 import auth, mqtt, tenants, users
from src.iotauth.core.config import get_settings

api_router = APIRouter(prefix=get_settings().api_prefix)
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(tenants.router)
api_router.include_router(mqtt.hooks_router)
api_router.include_router(mqtt.router)
