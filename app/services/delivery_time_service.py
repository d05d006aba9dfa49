# app/services/delivery_time_service.py
from typing import List, Optional

from sqlmodel import Session

from app.models.charges import DeliveryTimeRule
from app.schemas.checkout_schemas import DeliveryEstimate
from app.services.rule_store import load_delivery_time_rules


def match_time_rule(rules: List[DeliveryTimeRule], distance_km: Optional[float]) -> Optional[DeliveryTimeRule]:
    if distance_km is None:
        return None
    for rule in sorted(rules, key=lambda r: (r.min_distance, r.id or 0)):
        if rule.is_active and rule.min_distance <= distance_km <= rule.max_distance:
            return rule
    return None


def estimate_from_rules(rules: List[DeliveryTimeRule], distance_km: Optional[float]) -> DeliveryEstimate:
    rule = match_time_rule(rules, distance_km)
    if rule is None:
        return DeliveryEstimate(unavailable=True)
    return DeliveryEstimate(
        title=rule.title,
        min_time=rule.min_time,
        max_time=rule.max_time,
    )


def get_delivery_estimate(session: Session, distance_km: Optional[float]) -> DeliveryEstimate:
    """Never raises: a distance outside every band just has no estimate."""
    return estimate_from_rules(load_delivery_time_rules(session), distance_km)
