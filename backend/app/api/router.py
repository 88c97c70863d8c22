from fastapi import APIRouter

from app.api.balances import balances_router
from app.api.configs import configs_router
from app.api.leaves import leaves_router
from app.api.reports import reports_router
from app.api.users import users_router

api_router = APIRouter()
api_router.include_router(configs_router)
api_router.include_router(leaves_router)
api_router.include_router(balances_router)
api_router.include_router(users_router)
api_router.include_router(reports_router)
