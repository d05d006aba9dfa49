from app.models.charges import DeliveryTimeRule
from app.services.delivery_time_service import estimate_from_rules, get_delivery_estimate, match_time_rule


def rule(rule_id, low, high, min_time, max_time, active=True):
    return DeliveryTimeRule(
        id=rule_id,
        title=f"{low}-{high} km",
        min_distance=low,
        max_distance=high,
        min_time=min_time,
        max_time=max_time,
        is_active=active,
    )


RULES = [rule(1, 0, 3, 20, 30), rule(2, 3.01, 8, 30, 45), rule(3, 8.01, 15, 45, 60, active=False)]


def test_distance_inside_a_band():
    estimate = estimate_from_rules(RULES, 5.5)

    assert estimate.unavailable is False
    assert (estimate.min_time, estimate.max_time) == (30, 45)


def test_band_bounds_are_inclusive():
    assert match_time_rule(RULES, 0).id == 1
    assert match_time_rule(RULES, 3).id == 1
    assert match_time_rule(RULES, 8).id == 2


def test_inactive_band_is_ignored():
    assert estimate_from_rules(RULES, 10).unavailable is True


def test_missing_distance_has_no_estimate():
    estimate = estimate_from_rules(RULES, None)

    assert estimate.unavailable is True
    assert estimate.min_time is None


def test_estimate_from_stored_rules(session, pricing_rules):
    assert get_delivery_estimate(session, 4.0).max_time == 35
    assert get_delivery_estimate(session, 40.0).unavailable is True


def test_estimate_route(client, pricing_rules):
    response = client.get("/delivery/estimate", params={"distance_km": 2})

    assert response.status_code == 200
    assert response.json() == {"unavailable": False, "title": "Nearby", "min_time": 25, "max_time": 35}

    far = client.get("/delivery/estimate", params={"distance_km": 99}).json()
    assert far["unavailable"] is True
