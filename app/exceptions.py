# app/exceptions.py
from typing import Any, Dict, Optional


class EngineError(Exception):
    """Base for business-rule failures surfaced to the caller.

    Each subclass maps to one HTTP status and a stable machine ``code`` so the
    client can pick the right corrective action instead of a generic failure.
    """

    status_code: int = 400
    code: str = "engine_error"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


# ---------- VALIDATION ----------

class EmptyCart(EngineError):
    code = "empty_cart"

    def __init__(self):
        super().__init__("Cart is empty")


class AddressMissingDistance(EngineError):
    code = "address_missing_distance"

    def __init__(self, address_id: Optional[int]):
        super().__init__(
            "This address is missing distance data. Please add a new address.",
            address_id=address_id,
        )


class BelowMinimumCart(EngineError):
    code = "below_minimum_cart"

    def __init__(self, minimum, subtotal):
        super().__init__(
            f"Minimum cart amount is ₹{minimum}. Please add more items to proceed.",
            minimum=str(minimum),
            subtotal=str(subtotal),
        )


class ItemUnavailable(EngineError):
    code = "item_unavailable"

    def __init__(self, product_ids):
        super().__init__(
            "Some items in your cart are no longer available",
            product_ids=list(product_ids),
        )


class OfferError(EngineError):
    code = "offer_invalid"

    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    NOT_STARTED = "not_started"
    EXPIRED = "expired"
    BELOW_MIN_ORDER = "below_min_order"
    USAGE_EXHAUSTED = "usage_exhausted"
    CUSTOMER_LIMIT_REACHED = "customer_limit_reached"

    def __init__(self, reason: str, message: str):
        super().__init__(message, reason=reason)
        self.reason = reason


class PaymentMethodUnavailable(EngineError):
    code = "payment_method_unavailable"

    def __init__(self, method_code: str):
        super().__init__(
            f"Payment method '{method_code}' is not available",
            payment_method=method_code,
        )


class UnknownStatus(EngineError):
    code = "unknown_status"

    def __init__(self, raw: str):
        super().__init__(f"Unknown status '{raw}'", status=raw)


class ReviewNotAllowed(EngineError):
    code = "review_not_allowed"


class RuleOverlap(EngineError):
    status_code = 409
    code = "rule_overlap"

    def __init__(self, rule_id: int):
        super().__init__(
            f"Band overlaps active rule #{rule_id}",
            conflicting_rule_id=rule_id,
        )


# ---------- AUTHORIZATION ----------

class NotAuthorized(EngineError):
    status_code = 403
    code = "not_authorized"


# ---------- STATE CONFLICT ----------

class IllegalTransition(EngineError):
    status_code = 409
    code = "illegal_transition"

    def __init__(self, current: str, attempted: str):
        super().__init__(
            f"Invalid status change from {current} → {attempted}",
            current=current,
            attempted=attempted,
        )
        self.current = current
        self.attempted = attempted


class StateConflict(EngineError):
    status_code = 409
    code = "state_conflict"


# ---------- SERVICE UNAVAILABILITY ----------

class SiteUnavailable(EngineError):
    status_code = 503
    code = "site_unavailable"

    def __init__(self, status: str, message: str = ""):
        super().__init__(
            message or "Maintenance in progress. Please try again soon.",
            site_status=status,
        )


# ---------- LOOKUP ----------

class NotFound(EngineError):
    status_code = 404
    code = "not_found"
