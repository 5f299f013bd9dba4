"""
Application controller owning the planner's state and commands.
"""

import logging
from typing import Any, Callable, List, Optional

from ..utils.storage import StorageFullError
from .graph import run_generation
from .nodes import PlanGenerationError
from .state import DEFAULT_FORM_DATA, SavedTripRecord, TripFormData, TripPlan, ViewState
from .store import TripStore, new_trip_record

PlanGenerator = Callable[[TripFormData], TripPlan]


class TravelPlanner:
    """Owns the current view, form, active plan and saved trips.

    Every mutation goes through a command method. Generation requests are
    tagged with an increasing id; a result arriving after the id moved on
    (newer request or cancel) is dropped without touching the state.
    """

    def __init__(self, store: TripStore, generator: Optional[PlanGenerator] = None, llm: Optional[Any] = None):
        self.store = store
        self.generator = generator or (lambda form_data: run_generation(form_data, llm))
        self.view = ViewState.FORM
        self.form_data: TripFormData = dict(DEFAULT_FORM_DATA)
        self.active_plan: Optional[TripPlan] = None
        self.error_message = ""
        self.notice = ""
        self.current_request_id = 0

    @property
    def saved_trips(self) -> List[SavedTripRecord]:
        return self.store.trips

    def load_saved_trips(self) -> List[SavedTripRecord]:
        return self.store.load()

    def begin_request(self) -> int:
        self.current_request_id += 1
        return self.current_request_id

    def is_current(self, request_id: int) -> bool:
        return request_id == self.current_request_id

    def cancel_request(self) -> None:
        self.current_request_id += 1
        self.view = ViewState.FORM

    def generate_plan(self, form_data: TripFormData) -> Optional[TripPlan]:
        """Runs one generation request; returns the plan, or None on error or staleness."""
        if not (form_data.get("destination") or "").strip():
            self.error_message = "Destination is required."
            return None

        request_id = self.begin_request()
        self.form_data = dict(form_data)
        self.view = ViewState.LOADING
        self.error_message = ""

        try:
            plan = self.generator(form_data)
        except PlanGenerationError as e:
            if not self.is_current(request_id):
                logging.info(f"Discarding failure of stale request {request_id}.")
                return None
            self.error_message = str(e) or "Something went wrong generating the plan."
            self.view = ViewState.ERROR
            return None

        if not self.is_current(request_id):
            logging.info(f"Discarding stale response for request {request_id}.")
            return None

        self.set_active_plan(plan)
        return plan

    def set_active_plan(self, plan: Optional[TripPlan]) -> None:
        self.active_plan = plan
        self.view = ViewState.RESULT if plan is not None else ViewState.FORM

    def save_active_trip(self, offline_map_asset: Optional[str] = None, clear_offline_map: bool = False) -> bool:
        """Saves the active plan; a full store leaves a notice instead of raising."""
        if self.active_plan is None:
            return False

        record = new_trip_record(self.form_data, self.active_plan, offline_map_asset)
        try:
            self.store.save(record, clear_offline_map=clear_offline_map)
        except StorageFullError as e:
            logging.warning(f"Could not save trip: {e}")
            self.notice = f"Could not save this trip: {e}"
            return False

        self.notice = "Trip saved."
        return True

    def delete_trip(self, trip_id: str) -> List[SavedTripRecord]:
        return self.store.delete(trip_id)

    def show_saved_trips(self) -> List[SavedTripRecord]:
        self.view = ViewState.SAVED_LIST
        return sorted(self.store.trips, key=lambda t: t.get("timestamp", 0), reverse=True)

    def open_saved_trip(self, trip_id: str) -> Optional[SavedTripRecord]:
        record = self.store.get(trip_id)
        if record is None:
            return None
        self.form_data = dict(record.get("form_data") or {})
        self.set_active_plan(record.get("plan"))
        return record
