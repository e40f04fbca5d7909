"""Main v1 router aggregator"""
from fastapi import APIRouter

from splitledger.api.v1 import balances, expenses, settlements

api_router = APIRouter()

api_router.include_router(expenses.router)
api_router.include_router(balances.router)
api_router.include_router(settlements.router)
