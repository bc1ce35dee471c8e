from salesdesk.repositories.base_repository import BaseRepository
from salesdesk.repositories.branch_repository import BranchRepository
from salesdesk.repositories.customer_repository import CustomerRepository
from salesdesk.repositories.product_repository import ProductRepository
from salesdesk.repositories.sale_repository import SaleRepository, SaleItemRepository

__all__ = [
    "BaseRepository",
    "BranchRepository",
    "CustomerRepository",
    "ProductRepository",
    "SaleRepository",
    "SaleItemRepository",
]
