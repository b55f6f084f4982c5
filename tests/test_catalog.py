import re

import pytest

from territory_access.errors import DataAccessError
from territory_access.models.domain import AvailabilityStats, LocationOption

PUNE = {"country": "India", "state": "Maharashtra", "city": "Pune"}


def _hold(users, admin_id: str, zipcode: str, **location) -> None:
    users.add(
        id=admin_id,
        full_name=f"Admin {admin_id}",
        email=f"{admin_id}@example.com",
        role="admin",
        admin_assigned_location={**(location or PUNE), "zipcode": zipcode},
    )


def test_list_countries_counts_only_registered_users(users, services) -> None:
    users.add_population(3, country="India")
    users.add(country=" India ")
    users.add(country="Nepal")
    users.add(country="Bhutan", full_name=None)
    users.add(country="")

    options = services.catalog.list_countries()

    assert options == [LocationOption.of("India", 4), LocationOption.of("Nepal", 1)]
    assert options[0].label == "India (4 users)"


def test_list_states_and_cities_are_scoped(users, services) -> None:
    users.add_population(2, **PUNE)
    users.add(country="India", state="Maharashtra", city="Mumbai")
    users.add(country="India", state="Karnataka", city="Bengaluru")
    users.add(country="Nepal", state="Bagmati", city="Kathmandu")

    states = [option.value for option in services.catalog.list_states("India")]
    cities = [option.value for option in services.catalog.list_cities("India", "Maharashtra")]

    assert states == ["Karnataka", "Maharashtra"]
    assert cities == ["Mumbai", "Pune"]
    assert services.catalog.list_states("") == []


def test_synthetic_zipcodes_when_city_has_no_postal_data(users, services) -> None:
    users.add_population(23, **PUNE)

    options = services.catalog.list_zipcodes("India", "Pune")

    assert [option.value for option in options] == ["PUN001", "PUN002", "PUN003", "PUN004", "PUN005"]
    assert [option.count for option in options] == [5, 5, 5, 5, 3]
    assert all(re.match(r"^[A-Z]{3}\d{3}$", option.value) for option in options)


def test_synthetic_listing_is_capped(users, services) -> None:
    users.add_population(60, **PUNE)

    options = services.catalog.list_zipcodes("India", "Pune")

    assert len(options) == 5
    assert {option.count for option in options} == {6}


def test_claimed_synthetic_zipcode_is_hidden_except_from_its_holder(users, services) -> None:
    users.add_population(23, **PUNE)
    _hold(users, "a1", "PUN002")

    listed = [option.value for option in services.catalog.list_zipcodes("India", "Pune")]
    editing = [option.value for option in services.catalog.list_zipcodes("India", "Pune", excluding_admin_id="a1")]
    other = [option.value for option in services.catalog.list_zipcodes("India", "Pune", excluding_admin_id="a2")]

    assert listed == ["PUN001", "PUN003", "PUN004", "PUN005"]
    assert "PUN002" in editing
    assert "PUN002" not in other


def test_real_zipcodes_are_listed_and_filtered(users, services) -> None:
    users.add_population(3, zipcode="411001", **PUNE)
    users.add_population(2, postal_code="411038", **PUNE)
    users.add(zipcode="PUN009", **PUNE)
    users.add(zipcode="4", **PUNE)
    _hold(users, "a1", "411001")

    options = services.catalog.list_zipcodes("India", "Pune")

    assert options == [LocationOption.of("411038", 2)]


def test_no_synthesis_when_every_real_zipcode_is_taken(users, services) -> None:
    users.add_population(3, zipcode="411001", **PUNE)
    _hold(users, "a1", "411001")

    assert services.catalog.list_zipcodes("India", "Pune") == []


def test_empty_city_has_no_zipcodes(users, services) -> None:
    users.add_population(2, **PUNE)

    assert services.catalog.list_zipcodes("India", "Nagpur") == []


def test_availability_stats(users, services) -> None:
    users.add_population(3, zipcode="411001", **PUNE)
    users.add_population(2, zipcode="411002", **PUNE)
    _hold(users, "a1", "411001")

    stats = services.catalog.availability_stats("India", "Pune")

    assert stats == AvailabilityStats(total=2, available=1, assigned=1)
    assert services.catalog.availability_stats("India", "Pune", excluding_admin_id="a1").assigned == 0


def test_synthetic_availability_stats(users, services) -> None:
    users.add_population(12, **PUNE)
    _hold(users, "a1", "PUN001")

    assert services.catalog.availability_stats("India", "Pune") == AvailabilityStats(total=3, available=2, assigned=1)


def test_read_failures_degrade_to_empty(users, services) -> None:
    users.add_population(5, **PUNE)
    users.fail_reads = True

    assert services.catalog.list_countries() == []
    assert services.catalog.list_zipcodes("India", "Pune") == []
    assert services.catalog.availability_stats("India", "Pune") == AvailabilityStats()
    assert services.catalog.user_count("India") == 0
    with pytest.raises(DataAccessError):
        services.catalog.scan_values("country")


def test_user_count(users, services) -> None:
    users.add_population(4, **PUNE)
    users.add(country="India", state="Karnataka", city="Bengaluru")

    assert services.catalog.user_count("India") == 5
    assert services.catalog.user_count("India", "Maharashtra", "Pune") == 4
    assert services.catalog.user_count("Nepal") == 0


def test_suggest(users, services) -> None:
    users.add_population(2, zipcode="411001", **PUNE)
    users.add(country="India", state="Punjab", city="Amritsar", zipcode="143001")
    users.add(country="Nepal", state="Bagmati", city="Kathmandu")

    assert [option.value for option in services.catalog.suggest("city", "pu", country="India")] == ["Pune"]
    assert [option.value for option in services.catalog.suggest("country", "ind")] == ["India"]
    assert [option.value for option in services.catalog.suggest("zipcode", "4110", "India", "Pune")] == ["411001"]
    assert services.catalog.suggest("city", "p") == []


def test_hierarchy(users, services) -> None:
    users.add_population(6, **PUNE)

    partial = services.catalog.hierarchy(country="India")
    full = services.catalog.hierarchy(country="India", state="Maharashtra", city="Pune")

    assert [option.value for option in partial.countries] == ["India"]
    assert [option.value for option in partial.cities] == ["Pune"]
    assert partial.zipcodes == []
    assert [option.value for option in full.zipcodes] == ["PUN001", "PUN002"]


def test_zipcode_holder(users, services) -> None:
    _hold(users, "a1", "411001")

    holder = services.catalog.zipcode_holder("411001")

    assert holder.admin_id == "a1"
    assert holder.admin_email == "a1@example.com"
    assert services.catalog.zipcode_holder("411002") is None


def test_synthetic_codes_without_users_are_dropped(users, services) -> None:
    users.add_population(51, **PUNE)

    shares = services.catalog.synthetic_shares("Pune", 51)

    assert list(shares.values()) == [6, 6, 6, 6, 6, 6, 6, 6, 3]
    assert services.catalog.availability_stats("India", "Pune") == AvailabilityStats(total=9, available=9, assigned=0)


def test_synthetic_counts_follow_sequence_when_a_code_is_claimed(users, services) -> None:
    users.add_population(23, **PUNE)
    _hold(users, "a1", "PUN002")

    options = services.catalog.list_zipcodes("India", "Pune")

    assert [(option.value, option.count) for option in options] == [
        ("PUN001", 5),
        ("PUN003", 5),
        ("PUN004", 5),
        ("PUN005", 3),
    ]


def test_zipcode_source_names_the_column_it_was_read_from(users, services) -> None:
    users.add_population(2, zipcode="411038", **PUNE)
    users.add_population(3, pincode="411001", **PUNE)

    assert services.catalog.zipcode_source("India", "Pune", "411001") == "pincode"
    assert services.catalog.zipcode_source("India", "Pune", "411038") == "zipcode"
    assert services.catalog.zipcode_source("India", "Pune", "999999") is None
