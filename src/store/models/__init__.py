# src/store/models/__init__.py
from .user import User
from .catalog.category_info import CategoryInfo, SubcategoryInfo, SubSubcategoryInfo
from .catalog.product_info import ProductInfo
from .ops.banner_info import BannerInfo
from .ops.offer_info import OfferInfo
from .ops.order_info import OrderInfo, OrderStatus
from .ops.pending_upload import PendingUpload
from .ops.store_setting import StoreSetting

__all__ = [
    "User",
    "CategoryInfo",
    "SubcategoryInfo",
    "SubSubcategoryInfo",
    "ProductInfo",
    "BannerInfo",
    "OfferInfo",
    "OrderInfo",
    "OrderStatus",
    "PendingUpload",
    "StoreSetting",
]
