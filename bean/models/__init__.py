"""Models package initialization"""

from .base import Base, register_model, model_registry
from .user import User, UserRole, RevokedToken
from .customer import Customer
from .store_sale import StoreSale
from .activity import Activity, ActivityType
from .referral import ReferralCredit
from .reward import Reward, Redemption, REWARD_CATEGORIES
from .flash_drop import FlashDrop, FlashDropClaim, FLASH_DROP_STATUSES

# Register all models under their entity names
register_model(User)
register_model(RevokedToken)
register_model(Customer)
register_model(StoreSale)
register_model(Activity)
register_model(ReferralCredit)
register_model(Reward)
register_model(Redemption)
register_model(FlashDrop)
register_model(FlashDropClaim)

__all__ = [
    "Base",
    "model_registry",
    "User",
    "UserRole",
    "RevokedToken",
    "Customer",
    "StoreSale",
    "Activity",
    "ActivityType",
    "ReferralCredit",
    "Reward",
    "Redemption",
    "REWARD_CATEGORIES",
    "FlashDrop",
    "FlashDropClaim",
    "FLASH_DROP_STATUSES",
]
