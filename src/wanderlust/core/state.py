"""State and record definitions for the trip planning pipeline."""

from enum import Enum
from typing import TypedDict, Optional, List, Dict, Any


class SectionName(str, Enum):
    """Section names recognized in the model's delimited response."""
    ITINERARY = "ITINERARY"
    BUDGET = "BUDGET"
    HOTELS = "HOTELS"
    WEATHER = "WEATHER"
    PACKING = "PACKING"
    TRANSPORT = "TRANSPORT"
    SECURITY = "SECURITY"
    NIGHTLIFE = "NIGHTLIFE"
    DOS_AND_DONTS = "DOS_AND_DONTS"


class ViewState(str, Enum):
    FORM = "FORM"
    LOADING = "LOADING"
    RESULT = "RESULT"
    ERROR = "ERROR"
    SAVED_LIST = "SAVED_LIST"


class ReviewSnippet(TypedDict):
    text: str
    author: str


class GroundingReference(TypedDict, total=False):
    """A citation returned alongside the model text (web page or map place)."""
    title: str
    uri: str
    kind: str  # "web" | "place"
    place_id: Optional[str]
    review_snippets: List[ReviewSnippet]


class RawModelResponse(TypedDict):
    text: str
    grounding_references: List[GroundingReference]


class DayBlock(TypedDict, total=False):
    title: str
    body: str
    ordinal: Optional[int]


class ItinerarySegments(TypedDict):
    # When days is empty the preamble holds the whole itinerary as flat text
    preamble: str
    days: List[DayBlock]


class RenderedBlock(TypedDict, total=False):
    kind: str  # "flat" | "preamble" | "day"
    title: str
    ordinal: Optional[int]
    html: str


class BudgetItem(TypedDict):
    category: str
    amount: float
    currency: str


class PackingCategory(TypedDict):
    category: str
    items: List[str]


class WeatherDay(TypedDict):
    date: str
    condition: str
    temp_high: Optional[float]
    temp_low: Optional[float]
    icon: str


class RecommendedHotel(TypedDict):
    name: str
    stars: int
    price_per_night: float
    amenities: List[str]
    description: str
    location_vibe: str


class TripFormData(TypedDict, total=False):
    destination: str
    duration: int
    travel_date: str  # YYYY-MM-DD
    travelers: str
    budget: str
    budget_amount: str
    currency: str
    hotel_preferences: str
    transport_mode: str
    flight_class: str
    airport_transfer: str
    car_rental: bool
    interests: List[str]
    notes: str
    airline: str
    flight_number: str
    departure_time: str
    arrival_time: str
    car_rental_company: str
    pickup_location: str
    dropoff_location: str
    insurance_provider: str
    insurance_plan: str
    train_number: str
    departure_station: str
    arrival_station: str
    bus_company: str
    bus_stop: str


class TripPlan(TypedDict):
    """Fully decoded generation result.

    The itinerary stays as the model's markdown-like text; day segmentation
    and entity linking happen at render time.
    """
    itinerary: str
    budget_breakdown: List[BudgetItem]
    packing_list: List[PackingCategory]
    weather_forecast: List[WeatherDay]
    recommended_hotels: List[RecommendedHotel]
    security_tips: str
    advisories: str
    nightlife: str
    dos_and_donts: str
    transport_info: str
    raw_response: str
    grounding_references: List[GroundingReference]


class SavedTripRecord(TypedDict, total=False):
    id: str
    timestamp: int  # milliseconds since the epoch
    destination: str
    travel_date_key: str
    form_data: TripFormData
    plan: TripPlan
    offline_map_asset: Optional[str]


class TripGenerationState(TypedDict, total=False):
    """State carried through the generation workflow."""
    form_data: TripFormData

    # Filled in by the generation node
    raw_response: Optional[RawModelResponse]

    # Filled in by the parse node
    plan: Optional[TripPlan]

    # Error tracking for the current request
    error_message: Optional[str]


DEFAULT_FORM_DATA: Dict[str, Any] = {
    "destination": "Paris, France",
    "duration": 5,
    "travelers": "Couple",
    "budget": "Moderate",
    "budget_amount": "",
    "currency": "USD",
    "hotel_preferences": "4-star, near city center",
    "transport_mode": "Flight",
    "flight_class": "Not Specified",
    "airport_transfer": "Taxi",
    "car_rental": False,
    "interests": ["Sightseeing & History", "Food & Dining"],
    "notes": "",
}
