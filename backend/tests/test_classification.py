"""Test stay-length classification of duration labels."""
import pytest

from app.models.enums import ResidentType
from app.services.reconciler import classify_duration


@pytest.mark.parametrize("label", [
    "2 days",
    "1 Day",
    "DAYS",
    "10 day stay",
    "short",
    "Short stay",
    "short-term",
    "Short-Term",
])
def test_short_stay_labels(label):
    assert classify_duration(label) == ResidentType.TOURIST


@pytest.mark.parametrize("label", [
    "45 weeks",
    "51 weeks",
    "custom",
    "Academic year",
    "shortlist",
    "",
    "   ",
    None,
])
def test_long_stay_labels(label):
    assert classify_duration(label) == ResidentType.STUDENT


def test_no_day_count_threshold():
    """Only the text matters: a long stay written in days is still short-stay."""
    assert classify_duration("365 days") == ResidentType.TOURIST
    assert classify_duration("1 week") == ResidentType.STUDENT
