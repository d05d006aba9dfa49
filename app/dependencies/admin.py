from fastapi import Depends, HTTPException
from app.constants.order_status import ActorRole
from app.models.user import User
from app.utils.token import get_current_user


def require_admin(current_user: User = Depends(get_current_user)):
    if current_user.role != ActorRole.admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return current_user


def require_role(*roles: ActorRole):
    def checker(current_user: User = Depends(get_current_user)):
        if current_user.role not in roles:
            raise HTTPException(
                status_code=403,
                detail=f"{', '.join(r.value for r in roles)} access required",
            )
        return current_user
    return checker


require_customer = require_role(ActorRole.customer)
require_restaurant = require_role(ActorRole.restaurant)
require_delivery = require_role(ActorRole.delivery)
