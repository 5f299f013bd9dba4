import json

import pytest

from wanderlust.core.store import SCHEMA_VERSION, TripStore, identity_key, new_trip_record
from wanderlust.utils.storage import MemoryKeyValueStorage, StorageFullError, TripStoreCorruptError


def _record(destination="Paris", day="2025-06-01", itinerary="Day 1\nArrive", asset=None):
    form = {"destination": destination, "travel_date": day}
    return new_trip_record(form, {"itinerary": itinerary}, asset)


def test_load_absent_key_is_empty(store):
    assert store.load() == []


def test_same_identity_overwrites_in_place(store):
    first = store.save(_record(itinerary="first"))[0]
    trips = store.save(_record(itinerary="second"))
    assert len(trips) == 1
    assert trips[0]["id"] == first["id"]
    assert trips[0]["plan"]["itinerary"] == "second"
    assert trips[0]["timestamp"] >= first["timestamp"]


def test_different_identity_appends(store):
    store.save(_record(destination="Paris"))
    trips = store.save(_record(destination="Rome"))
    assert [t["destination"] for t in trips] == ["Paris", "Rome"]
    assert trips[0]["id"] != trips[1]["id"]
    assert len(store.save(_record(destination="Rome", day="2025-07-01"))) == 3


def test_resave_without_asset_keeps_previous_asset(store):
    store.save(_record(asset="data:image/png;base64,AAA"))
    trips = store.save(_record())
    assert trips[0]["offline_map_asset"] == "data:image/png;base64,AAA"

    trips = store.save(_record(), clear_offline_map=True)
    assert "offline_map_asset" not in trips[0]


def test_resave_with_new_asset_replaces_it(store):
    store.save(_record(asset="old"))
    assert store.save(_record(asset="new"))[0]["offline_map_asset"] == "new"


def test_delete_unknown_id_is_noop(store, storage):
    store.save(_record())
    before = storage.get(store.key)
    trips = store.delete("missing")
    assert len(trips) == 1
    assert storage.get(store.key) == before


def test_delete_removes_and_persists(store, storage):
    trip_id = store.save(_record())[0]["id"]
    assert store.delete(trip_id) == []
    assert TripStore(storage).load() == []


def test_mutations_are_flushed_with_schema_envelope(store, storage):
    store.save(_record())
    payload = json.loads(storage.get(store.key))
    assert payload["schema_version"] == SCHEMA_VERSION
    assert payload["trips"][0]["destination"] == "Paris"
    assert TripStore(storage).load() == store.trips


def test_legacy_bare_array_loads(storage):
    storage.put("wanderlust_trips", json.dumps([{"id": "1", "destination": "Oslo", "travel_date_key": "2024-01-01"}]))
    assert TripStore(storage).load()[0]["destination"] == "Oslo"


@pytest.mark.parametrize("raw", [
    "{not json",
    json.dumps({"schema_version": SCHEMA_VERSION + 1, "trips": []}),
    json.dumps({"trips": []}),
    json.dumps("a string"),
    json.dumps([{"destination": "no id"}]),
])
def test_corrupt_content_raises_on_load(storage, raw):
    storage.put("wanderlust_trips", raw)
    with pytest.raises(TripStoreCorruptError):
        TripStore(storage).load()


def test_storage_full_blocks_save_and_keeps_mirror():
    storage = MemoryKeyValueStorage(quota_bytes=400)
    store = TripStore(storage)
    store.load()
    store.save(_record(itinerary="short"))
    with pytest.raises(StorageFullError):
        store.save(_record(destination="Rome", itinerary="x" * 500))
    assert [t["destination"] for t in store.trips] == ["Paris"]
    assert len(TripStore(storage).load()) == 1


def test_trips_property_is_a_copy(store):
    store.save(_record())
    store.trips.clear()
    assert len(store.trips) == 1


def test_identity_key_and_new_record():
    record = _record(destination="Kyoto", day="2025-04-02", asset="a")
    assert identity_key(record) == ("Kyoto", "2025-04-02")
    assert record["offline_map_asset"] == "a"
    assert "offline_map_asset" not in _record()


def test_legacy_camel_case_records_are_migrated(storage):
    legacy = {
        "id": 1700000000000,
        "timestamp": 1700000000000,
        "destination": "Paris, France",
        "formData": {"destination": "Paris, France", "travelDate": "2024-05-01", "hotelPreferences": "4-star"},
        "plan": {
            "itinerary": "Day 1\nArrive",
            "budgetBreakdown": [{"category": "Hotels", "amount": 900, "currency": "EUR"}],
            "recommendedHotels": [{"name": "Lumiere", "stars": 4, "pricePerNight": 200, "locationVibe": "Quiet"}],
            "dosAndDonts": "Say bonjour.",
            "groundingChunks": [{"maps": {"uri": "http://louvre", "title": "Louvre"}}],
        },
        "offlineMapDataUrl": "data:image/png;base64,AAA",
    }
    storage.put("wanderlust_trips", json.dumps([legacy]))
    store = TripStore(storage)
    trip = store.load()[0]

    assert trip["id"] == "1700000000000"
    assert trip["travel_date_key"] == "2024-05-01"
    assert trip["form_data"]["travel_date"] == "2024-05-01"
    assert trip["form_data"]["hotel_preferences"] == "4-star"
    assert trip["offline_map_asset"] == "data:image/png;base64,AAA"
    assert trip["plan"]["budget_breakdown"][0]["amount"] == 900
    assert trip["plan"]["dos_and_donts"] == "Say bonjour."
    assert trip["plan"]["recommended_hotels"][0]["price_per_night"] == 200
    assert trip["plan"]["grounding_references"][0]["uri"] == "http://louvre"
    assert "formData" not in trip and "offlineMapDataUrl" not in trip

    # Same destination, different date: the legacy trip is not overwritten
    trips = store.save(_record(destination="Paris, France", day=""))
    assert len(trips) == 2
    trips = store.save(_record(destination="Paris, France", day="2024-05-01"))
    assert len(trips) == 2
    assert trips[0]["id"] == "1700000000000"
    assert trips[0]["offline_map_asset"] == "data:image/png;base64,AAA"


def test_saved_snapshot_is_independent_of_the_caller(store):
    plan = {"itinerary": "Day 1", "budget_breakdown": [{"category": "Food", "amount": 10, "currency": "USD"}]}
    form = {"destination": "Rome", "travel_date": "2025-01-01", "interests": ["Food & Dining"]}
    store.save(new_trip_record(form, plan))
    plan["budget_breakdown"].append({"category": "Late", "amount": 1, "currency": "USD"})
    form["interests"].append("Shopping")

    saved = store.trips[0]
    assert len(saved["plan"]["budget_breakdown"]) == 1
    assert saved["form_data"]["interests"] == ["Food & Dining"]
