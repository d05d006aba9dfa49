from app.models.user import User
from app.models.product import Product
from app.models.address import Address
from app.models.cart import CartItem, CartOffer
from app.models.offer import Offer, OfferRedemption, DiscountType
from app.models.charges import (
    ChargeType,
    DeliveryFeeRule,
    DeliveryTimeRule,
    GstTax,
    HandlingCharge,
)
from app.models.general_settings import MinCartAmount, PaymentMethod, SiteStatus, SystemStatus
from app.models.order_item import OrderItem
from app.models.order import Order
from app.models.pickup import PickupItemType, PickupJob
from app.models.order_event import OrderStatusEvent, PickupStatusEvent

# add ALL models here
