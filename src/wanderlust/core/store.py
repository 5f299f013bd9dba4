"""Saved-trip persistence with merge-by-destination-and-date semantics."""

import copy
import json
import logging
import re
import time
import uuid
from typing import List, Optional, Tuple

from ..config.settings import TRIPS_STORAGE_KEY
from ..utils.storage import KeyValueStorage, TripStoreCorruptError
from .nodes import normalize_grounding_chunks, normalize_hotels, normalize_weather
from .state import SavedTripRecord, TripFormData, TripPlan

SCHEMA_VERSION = 1

_CAMEL_BOUNDARY_RE = re.compile(r"(?<!^)(?=[A-Z])")


def identity_key(record: SavedTripRecord) -> Tuple[str, str]:
    """The (destination, travel date) pair that decides update versus append."""
    return (record.get("destination", ""), record.get("travel_date_key", ""))


def new_trip_record(form_data: TripFormData, plan: TripPlan, offline_map_asset: Optional[str] = None) -> SavedTripRecord:
    """Builds an unsaved record from a form snapshot and a decoded plan."""
    record: SavedTripRecord = {
        "destination": form_data.get("destination", ""),
        "travel_date_key": form_data.get("travel_date", ""),
        "form_data": copy.deepcopy(dict(form_data)),
        "plan": copy.deepcopy(dict(plan)),
    }
    if offline_map_asset is not None:
        record["offline_map_asset"] = offline_map_asset
    return record


def _now_ms() -> int:
    return int(time.time() * 1000)


def _snake_keys(data) -> dict:
    if not isinstance(data, dict):
        return {}
    return {_CAMEL_BOUNDARY_RE.sub("_", key).lower(): value for key, value in data.items()}


def migrate_legacy_record(record: dict) -> SavedTripRecord:
    """Converts a version 0 record (camelCase, no date key) to the current layout.

    Keys already in snake_case are kept as they are. The travel date key comes
    from the form snapshot when the record has none.
    """
    form_data = _snake_keys(record.get("form_data") or record.get("formData"))

    plan = _snake_keys(record.get("plan"))
    if "grounding_chunks" in plan:
        plan.setdefault("grounding_references", normalize_grounding_chunks(plan.pop("grounding_chunks")))
    for key, normalize in (("recommended_hotels", normalize_hotels), ("weather_forecast", normalize_weather)):
        plan[key] = normalize(plan[key]) if isinstance(plan.get(key), list) else []

    migrated: SavedTripRecord = {
        "id": str(record["id"]),
        "timestamp": record.get("timestamp", 0),
        "destination": record.get("destination") or form_data.get("destination", ""),
        "travel_date_key": record.get("travel_date_key") or form_data.get("travel_date", ""),
        "form_data": form_data,
        "plan": plan,
    }
    asset = record.get("offline_map_asset") or record.get("offlineMapDataUrl")
    if asset:
        migrated["offline_map_asset"] = asset
    return migrated


class TripStore:
    """In-memory mirror of saved trips, flushed to durable storage on every mutation.

    The mirror is the source of truth for reads once `load` has run. There is
    no locking: two processes sharing the same storage overwrite each other,
    last writer wins.
    """

    def __init__(self, storage: KeyValueStorage, key: str = TRIPS_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._trips: List[SavedTripRecord] = []

    @property
    def trips(self) -> List[SavedTripRecord]:
        return list(self._trips)

    def load(self) -> List[SavedTripRecord]:
        """Reads the full collection; corrupt content raises TripStoreCorruptError."""
        raw = self.storage.get(self.key)
        if raw is None:
            self._trips = []
            return self.trips

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as e:
            raise TripStoreCorruptError(f"Saved trips under '{self.key}' are not valid JSON: {e}") from e

        self._trips = self._decode_payload(payload)
        logging.info(f"Loaded {len(self._trips)} saved trips from '{self.key}'.")
        return self.trips

    def _decode_payload(self, payload) -> List[SavedTripRecord]:
        # Version 0 is the bare array written before the envelope existed
        if isinstance(payload, list):
            trips = payload
        elif isinstance(payload, dict):
            version = payload.get("schema_version")
            if not isinstance(version, int) or version > SCHEMA_VERSION:
                raise TripStoreCorruptError(f"Unsupported saved-trips schema version: {version!r}")
            trips = payload.get("trips")
        else:
            trips = None

        if not isinstance(trips, list) or not all(isinstance(t, dict) and t.get("id") for t in trips):
            raise TripStoreCorruptError(f"Saved trips under '{self.key}' have an unexpected shape.")
        if isinstance(payload, list):
            logging.info(f"Migrating {len(trips)} saved trips from the legacy layout.")
            return [migrate_legacy_record(t) for t in trips]
        return trips

    def _flush(self, trips: List[SavedTripRecord]) -> None:
        self.storage.put(self.key, json.dumps({"schema_version": SCHEMA_VERSION, "trips": trips}))
        self._trips = trips

    def save(self, record: SavedTripRecord, clear_offline_map: bool = False) -> List[SavedTripRecord]:
        """Overwrites the record sharing the identity key, or appends a new one.

        An overwrite keeps the existing id and keeps the previous offline map
        asset when the new record has none, unless `clear_offline_map` is set.
        On StorageFullError the mirror is left unchanged.
        """
        key = identity_key(record)
        trips = list(self._trips)
        updated = dict(record)
        updated["timestamp"] = _now_ms()

        for index, existing in enumerate(trips):
            if identity_key(existing) == key:
                updated["id"] = existing["id"]
                if clear_offline_map:
                    updated.pop("offline_map_asset", None)
                elif updated.get("offline_map_asset") is None and existing.get("offline_map_asset") is not None:
                    updated["offline_map_asset"] = existing["offline_map_asset"]
                trips[index] = updated
                logging.info(f"Updating saved trip {updated['id']} for {key[0]} on {key[1]}.")
                break
        else:
            updated["id"] = uuid.uuid4().hex
            if clear_offline_map:
                updated.pop("offline_map_asset", None)
            trips.append(updated)
            logging.info(f"Saving new trip {updated['id']} for {key[0]} on {key[1]}.")

        self._flush(trips)
        return self.trips

    def delete(self, trip_id: str) -> List[SavedTripRecord]:
        """Removes a record by id; an unknown id leaves everything untouched."""
        trips = [t for t in self._trips if t.get("id") != trip_id]
        if len(trips) == len(self._trips):
            logging.info(f"No saved trip with id {trip_id}; nothing to delete.")
            return self.trips

        self._flush(trips)
        return self.trips

    def get(self, trip_id: str) -> Optional[SavedTripRecord]:
        return next((t for t in self._trips if t.get("id") == trip_id), None)
