# salesdesk/api/api.py

from fastapi import APIRouter

from salesdesk.api.endpoints import branches, customers, products, sales

api_router = APIRouter()

api_router.include_router(sales.router, prefix="/sales", tags=["Sales"])
api_router.include_router(customers.router, prefix="/customers", tags=["Customers"])
api_router.include_router(branches.router, prefix="/branches", tags=["Branches"])
api_router.include_router(products.router, prefix="/products", tags=["Products"])
