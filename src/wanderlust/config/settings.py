"""
Configuration settings and constants for the trip planning pipeline.
"""

import os
import logging
from langchain_google_genai import HarmBlockThreshold, HarmCategory

# API Keys
GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
MAPS_API_KEY = os.environ.get("MAPS_API_KEY")

# Local storage
STORAGE_DIR = os.environ.get(
    "WANDERLUST_STORAGE_DIR",
    os.path.join(os.path.expanduser("~"), ".wanderlust")
)
TRIPS_STORAGE_KEY = "wanderlust_trips"
# Browsers cap local storage at roughly 5 MiB per origin; keep the same ceiling.
STORAGE_QUOTA_BYTES = int(os.environ.get("WANDERLUST_STORAGE_QUOTA_BYTES", 5 * 1024 * 1024))

# Offline map asset
OFFLINE_MAP_ZOOM = int(os.environ.get("WANDERLUST_OFFLINE_MAP_ZOOM", 12))
OFFLINE_MAP_SIZE = (640, 400)

# System Prompt
SYSTEM_PROMPT = """You are "WanderLust", an elite AI travel designer. Your goal is to create high-integrity travel plans that are practical, safe, and easily bookable.

**Core Mission:**

1.  **Specificity:** For every hotel and restaurant, you MUST provide a specific name.
2.  **Map Integrity:** Use the search tool to verify every location you recommend.
3.  **Platform Awareness:** Mention platforms like Booking.com, TripAdvisor, Expedia, etc.
4.  **Format:** Use the exact delimiters below for parsing. Never rename or translate them.

**Response Format:**

---SECTION: ITINERARY---
(Day by day plan. Use Markdown. Start every day on its own line with "Day N".)

---SECTION: BUDGET---
(A strict JSON array ONLY.)
Example: [{"category": "Hotels", "amount": 1200, "currency": "USD"}]

---SECTION: HOTELS---
(A strict JSON array ONLY, up to three options.)
Example: [{"name": "Hotel Lumiere", "stars": 4, "pricePerNight": 210, "amenities": ["WiFi", "Breakfast"], "description": "Boutique rooms near the river.", "locationVibe": "Quiet, central"}]

---SECTION: WEATHER---
(A strict JSON array ONLY, one entry per travel day.)
Example: [{"date": "2025-06-01", "condition": "Sunny", "tempHigh": 26, "tempLow": 17, "icon": "sun"}]

---SECTION: PACKING---
(A strict JSON array of objects with 'category' and 'items' list. Tailor to duration, weather for the travel date, and activities.)
Example: [{"category": "Clothing", "items": ["5x Shirts", "Rain jacket"]}, {"category": "Essentials", "items": ["Passport", "Universal Adapter"]}]

---SECTION: TRANSPORT---
(Detailed logistics. Airport transfers, local transport.)

---SECTION: SECURITY---
(Safety status, neighborhood avoidances, emergency numbers.)

---SECTION: NIGHTLIFE---
(Evening experiences appropriate for the traveler type.)

---SECTION: DOS_AND_DONTS---
(Tipping, cultural etiquette, essential packing items, "Do NOT" behaviors.)
"""

# Logging Configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - [%(levelname)s] - %(message)s'
)

def validate_api_keys() -> bool:
    """Validate that the required API keys are present."""
    if not MAPS_API_KEY:
        logging.warning("MAPS_API_KEY not found. Offline map assets will not be fetched.")

    if not GEMINI_API_KEY:
        logging.error("GEMINI_API_KEY not found. Trip generation will not function.")
        return False

    return True

# --- LLM Configuration ---
GEMINI_MODEL_CONFIG = {
    "model": "gemini-2.5-flash",
    "temperature": 0.6,
    "safety_settings": {
        HarmCategory.HARM_CATEGORY_HARASSMENT: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_HATE_SPEECH: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_SEXUALLY_EXPLICIT: HarmBlockThreshold.BLOCK_NONE,
        HarmCategory.HARM_CATEGORY_DANGEROUS_CONTENT: HarmBlockThreshold.BLOCK_NONE,
    }
}
