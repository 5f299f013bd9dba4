import pytest
from langchain_core.messages import AIMessage

from wanderlust.core.store import TripStore
from wanderlust.utils.storage import MemoryKeyValueStorage

SAMPLE_RESPONSE = """Here is your plan!
---SECTION: ITINERARY---
Arrive rested and ready.
**Day 1: Arrival**
Check in and stroll to the Louvre.
**Day 2 - Montmartre**
Morning at Sacré-Cœur.
---SECTION: BUDGET---
```json
[{"category": "Hotels", "amount": 1200, "currency": "EUR"}, {"category": "Food", "amount": "450", "currency": "EUR"}]
```
---SECTION: HOTELS---
[{"name": "Hotel Lumiere", "stars": 4, "pricePerNight": 210, "amenities": ["WiFi"], "description": "Boutique.", "locationVibe": "Quiet"}]
---SECTION: WEATHER---
[{"date": "2025-06-01", "condition": "Sunny", "tempHigh": 26, "tempLow": 17, "icon": "sun"}]
---SECTION: PACKING---
[{"category": "Clothing", "items": ["Rain jacket"]}]
---SECTION: TRANSPORT---
RER B from the airport.
---SECTION: SECURITY---
Watch for pickpockets.
---SECTION: NIGHTLIFE---
Jazz in Saint-Germain.
---SECTION: DOS_AND_DONTS---
Do say bonjour.
"""


class FakeChatModel:
    """Stands in for ChatGoogleGenerativeAI in workflow tests."""

    def __init__(self, text="", grounding_chunks=None, error=None):
        self.text = text
        self.grounding_chunks = grounding_chunks or []
        self.error = error
        self.bound_tools = None
        self.calls = []

    def bind_tools(self, tools):
        self.bound_tools = tools
        return self

    def invoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return AIMessage(
            content=self.text,
            response_metadata={"grounding_metadata": {"grounding_chunks": self.grounding_chunks}},
        )


@pytest.fixture
def sample_response():
    return SAMPLE_RESPONSE


@pytest.fixture
def storage():
    return MemoryKeyValueStorage(quota_bytes=1024 * 1024)


@pytest.fixture
def store(storage):
    trip_store = TripStore(storage)
    trip_store.load()
    return trip_store


@pytest.fixture
def form_data():
    return {
        "destination": "Paris, France",
        "duration": 2,
        "travel_date": "2025-06-01",
        "travelers": "Couple",
        "budget": "Moderate",
        "currency": "EUR",
        "hotel_preferences": "4-star",
        "transport_mode": "Train",
        "train_number": "TGV 6201",
        "interests": ["Art & Culture"],
        "notes": "",
    }


@pytest.fixture
def make_llm():
    return FakeChatModel
