# tests/test_status.py
import pytest
from stockpile.services.status import classify, ResourceStatus

TIER_ORDER = [ResourceStatus.CRITICAL, ResourceStatus.BELOW_TARGET,
              ResourceStatus.AT_TARGET, ResourceStatus.ABOVE_TARGET]

@pytest.mark.parametrize("target", [None, 0, -5])
def test_no_target_is_neutral(target):
    for q in (0, 1, 10_000):
        assert classify(q, target) is ResourceStatus.AT_TARGET

@pytest.mark.parametrize("quantity,expected", [
    (0, ResourceStatus.CRITICAL),
    (49, ResourceStatus.CRITICAL),
    (50, ResourceStatus.BELOW_TARGET),
    (99, ResourceStatus.BELOW_TARGET),
    (100, ResourceStatus.AT_TARGET),
    (149, ResourceStatus.AT_TARGET),
    (150, ResourceStatus.ABOVE_TARGET),
    (1000, ResourceStatus.ABOVE_TARGET),
])
def test_boundaries_belong_to_higher_tier(quantity, expected):
    assert classify(quantity, 100) is expected

def test_monotonic_in_quantity():
    for target in (1, 3, 7, 100):
        ranks = [TIER_ORDER.index(classify(q, target)) for q in range(0, target * 2 + 2)]
        assert ranks == sorted(ranks)

def test_status_values_are_wire_strings():
    assert classify(40, 100).value == "critical"
