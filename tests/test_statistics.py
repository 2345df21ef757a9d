"""
Tests for the statistic functions.
"""

from decimal import Decimal
from types import SimpleNamespace

import pytest

from reptile_api.models import EnclosureType, ReptileStatus
from reptile_api.schemas import (
    CleaningStatistics,
    EnclosureStatistics,
    FeedingStatistics,
    PoopStatistics,
    ReptileStatistics,
    SheddingStatistics,
    WeightStatistics,
)
from reptile_api.services.statistics import (
    cleaning_statistics,
    enclosure_statistics,
    feeding_statistics,
    percentage,
    poop_statistics,
    reptile_statistics,
    shedding_statistics,
    weight_statistics,
)


@pytest.mark.parametrize(
    "function,empty",
    [
        (reptile_statistics, ReptileStatistics()),
        (feeding_statistics, FeedingStatistics()),
        (shedding_statistics, SheddingStatistics()),
        (cleaning_statistics, CleaningStatistics()),
        (poop_statistics, PoopStatistics()),
        (weight_statistics, WeightStatistics()),
    ],
)
def test_empty_input_yields_zeros(function, empty):
    assert function([]) == empty


def test_empty_enclosures_yield_zero_rates():
    stats = enclosure_statistics([], set())
    assert stats == EnclosureStatistics()
    assert stats.occupancy_rate == 0.0


def test_percentage():
    assert percentage(1, 4) == 25.0
    assert percentage(0, 0) == 0.0
    assert percentage(3, 3) == 100.0


def test_enclosure_statistics_counts_types_and_occupancy():
    enclosures = [
        SimpleNamespace(id=1, type=EnclosureType.TERRARIUM),
        SimpleNamespace(id=2, type=EnclosureType.TERRARIUM),
        SimpleNamespace(id=3, type=EnclosureType.VIVARIUM),
        SimpleNamespace(id=4, type=EnclosureType.PALUDARIUM),
    ]

    stats = enclosure_statistics(enclosures, {1, 3, 99})

    assert stats.total == 4
    assert stats.terrariums == 2
    assert stats.vivariums == 1
    assert stats.occupied == 2
    assert stats.empty == 2
    assert stats.occupancy_rate == 50.0


def test_reptile_statistics_counts_statuses():
    reptiles = [
        SimpleNamespace(status=ReptileStatus.ACTIVE),
        SimpleNamespace(status=ReptileStatus.ACTIVE),
        SimpleNamespace(status=ReptileStatus.QUARANTINE),
        SimpleNamespace(status=ReptileStatus.SOLD),
    ]

    assert reptile_statistics(reptiles) == ReptileStatistics(
        total=4, active=2, quarantine=1, deceased=0
    )


def test_feeding_success_rate():
    feedings = [SimpleNamespace(ate=True)] * 3 + [SimpleNamespace(ate=False)]

    stats = feeding_statistics(feedings)

    assert stats.missed_feedings == 1
    assert stats.feeding_success_rate == 75.0


def test_shedding_counts_only_confirmed_ate_shed():
    sheddings = [
        SimpleNamespace(ate_shed=True),
        SimpleNamespace(ate_shed=None),
        SimpleNamespace(ate_shed=False),
        SimpleNamespace(ate_shed=True),
    ]

    stats = shedding_statistics(sheddings)

    assert stats.ate_shed_count == 2
    assert stats.ate_shed_percentage == 50.0


def test_cleaning_rates():
    cleanings = [
        SimpleNamespace(disinfected=True, substrate_changed=True),
        SimpleNamespace(disinfected=True, substrate_changed=False),
        SimpleNamespace(disinfected=False, substrate_changed=False),
        SimpleNamespace(disinfected=False, substrate_changed=False),
    ]

    stats = cleaning_statistics(cleanings)

    assert stats.disinfections == 2
    assert stats.substrate_changes == 1
    assert stats.disinfection_rate == 50.0
    assert stats.substrate_change_rate == 25.0


def test_poop_parasite_rate():
    logs = [SimpleNamespace(parasites_present=True)] + [SimpleNamespace(parasites_present=False)] * 4
    assert poop_statistics(logs).parasite_rate == 20.0


def test_weight_gain_from_first_to_last_measurement():
    stats = weight_statistics([Decimal("250.00"), Decimal("262.50"), Decimal("270.25")])

    assert stats.initial_weight == Decimal("250.00")
    assert stats.current_weight == Decimal("270.25")
    assert stats.weight_gain == Decimal("20.25")
    assert stats.measurement_count == 3


def test_weight_loss_is_negative_gain():
    assert weight_statistics([Decimal("300"), Decimal("280")]).weight_gain == Decimal("-20")
