"""Node definitions for the trip generation workflow."""

import math
from typing import Dict, Any, List, Optional
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config.settings import (
    SYSTEM_PROMPT,
    GEMINI_API_KEY,
    GEMINI_MODEL_CONFIG,
    logging,
)
from google.api_core import exceptions as google_exceptions
from ..utils.sections import split_sections, decode_json_section
from .state import (
    BudgetItem,
    GroundingReference,
    PackingCategory,
    RawModelResponse,
    RecommendedHotel,
    SectionName,
    TripFormData,
    TripGenerationState,
    TripPlan,
    WeatherDay,
)

DEFAULT_CURRENCY = "USD"

DEFAULT_PACKING_LIST = [
    {"category": "Clothing", "items": ["Daily outfits", "Comfortable shoes"]},
    {"category": "Toiletries", "items": ["Toothbrush", "Sunscreen"]},
    {"category": "Electronics", "items": ["Phone charger", "Power bank"]},
]

# Optional form fields forwarded to the prompt when filled in
TRANSPORT_DETAIL_FIELDS = [
    ("flight_class", "Flight class"),
    ("airline", "Airline"),
    ("flight_number", "Flight number"),
    ("departure_time", "Departure time"),
    ("arrival_time", "Arrival time"),
    ("train_number", "Train number"),
    ("departure_station", "Departure station"),
    ("arrival_station", "Arrival station"),
    ("bus_company", "Bus company"),
    ("bus_stop", "Bus stop"),
    ("car_rental_company", "Car rental company"),
    ("pickup_location", "Car pickup"),
    ("dropoff_location", "Car drop-off"),
    ("insurance_provider", "Insurance provider"),
    ("insurance_plan", "Insurance plan"),
]


class PlanGenerationError(Exception):
    """Raised when the generative model call fails or returns nothing usable."""


_llm = None


def get_llm() -> ChatGoogleGenerativeAI:
    """Returns the shared Gemini chat model, creating it on first use."""
    global _llm
    if _llm is None:
        if not GEMINI_API_KEY:
            raise PlanGenerationError("Gemini API key is not configured. Set GEMINI_API_KEY and try again.")
        _llm = ChatGoogleGenerativeAI(google_api_key=GEMINI_API_KEY, **GEMINI_MODEL_CONFIG)
        logging.info("ChatGoogleGenerativeAI model initialized successfully.")
    return _llm


def build_trip_prompt(form_data: TripFormData) -> str:
    """Renders the user prompt for one trip request."""
    budget = form_data.get("budget", "")
    if form_data.get("budget_amount"):
        budget = f"{budget}, about {form_data['budget_amount']}"

    lines = [
        f"Please design a high-integrity travel plan for {form_data.get('destination', '')}.",
        "",
        "TRAVEL CONTEXT:",
        f"- Dates: {form_data.get('travel_date', 'flexible')} ({form_data.get('duration', '')} days)",
        f"- Group: {form_data.get('travelers', '')}",
        f"- Budget: {budget} ({form_data.get('currency', DEFAULT_CURRENCY)})",
        f"- Accommodation Goals: {form_data.get('hotel_preferences', '')}",
        f"- Transport: {form_data.get('transport_mode', '')}, airport transfer by {form_data.get('airport_transfer', 'any')}",
    ]
    if form_data.get("car_rental"):
        lines.append("- Car rental: yes")
    for field, label in TRANSPORT_DETAIL_FIELDS:
        value = form_data.get(field)
        if value and value != "Not Specified":
            lines.append(f"- {label}: {value}")
    lines.append(f"- Interests: {', '.join(form_data.get('interests') or [])}")
    lines.append(f"- Extra Details: {form_data.get('notes', '')}")
    lines.append("")
    lines.append("Provide a complete guide with verified locations and a tailored packing checklist.")
    return "\n".join(lines)


def _message_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for item in content:
            if isinstance(item, str):
                parts.append(item)
            elif isinstance(item, dict) and isinstance(item.get("text"), str):
                parts.append(item["text"])
        return "".join(parts)
    return ""


def normalize_grounding_chunks(chunks: Optional[List[Dict[str, Any]]]) -> List[GroundingReference]:
    """Converts raw grounding chunks (camelCase or snake_case) into references.

    A chunk carrying both a map place and a web page is treated as the place.
    """
    references: List[GroundingReference] = []
    for chunk in chunks or []:
        if not isinstance(chunk, dict):
            continue
        maps = chunk.get("maps")
        web = chunk.get("web")
        if isinstance(maps, dict):
            sources = maps.get("placeAnswerSources") or maps.get("place_answer_sources") or {}
            snippets = sources.get("reviewSnippets") or sources.get("review_snippets") or []
            references.append({
                "title": maps.get("title") or "",
                "uri": maps.get("uri") or "",
                "kind": "place",
                "place_id": maps.get("placeId") or maps.get("place_id"),
                "review_snippets": [
                    {
                        "text": s.get("reviewText") or s.get("review_text") or s.get("text") or "",
                        "author": s.get("author") or "",
                    }
                    for s in snippets if isinstance(s, dict)
                ],
            })
        elif isinstance(web, dict):
            references.append({
                "title": web.get("title") or "",
                "uri": web.get("uri") or "",
                "kind": "web",
                "place_id": None,
                "review_snippets": [],
            })
    return references


def _pick(item: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if item.get(key) is not None:
            return item[key]
    return None


def _as_number(value: Any) -> Optional[float]:
    """Reads a finite number; NaN and infinities count as missing."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value.replace(",", "").strip())
        except ValueError:
            return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return value
    return None


def _as_text(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_text_list(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def budget_fallback(currency: str) -> List[BudgetItem]:
    return [{"category": "Estimated Total", "amount": 0, "currency": currency}]


def normalize_budget(items: List[Any], currency: str = DEFAULT_CURRENCY) -> List[BudgetItem]:
    result: List[BudgetItem] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        amount = _as_number(item.get("amount"))
        result.append({
            "category": _as_text(item.get("category"), "Other") or "Other",
            "amount": max(amount, 0) if amount is not None else 0,
            "currency": _as_text(item.get("currency"), currency) or currency,
        })
    return result


def normalize_packing(items: List[Any]) -> List[PackingCategory]:
    return [
        {
            "category": _as_text(item.get("category"), "General") or "General",
            "items": _as_text_list(item.get("items")),
        }
        for item in items if isinstance(item, dict)
    ]


def normalize_weather(items: List[Any]) -> List[WeatherDay]:
    return [
        {
            "date": _as_text(item.get("date")),
            "condition": _as_text(item.get("condition")),
            "temp_high": _as_number(_pick(item, "temp_high", "tempHigh")),
            "temp_low": _as_number(_pick(item, "temp_low", "tempLow")),
            "icon": _as_text(item.get("icon")),
        }
        for item in items if isinstance(item, dict)
    ]


def normalize_hotels(items: List[Any]) -> List[RecommendedHotel]:
    hotels: List[RecommendedHotel] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        stars = _as_number(item.get("stars"))
        price = _as_number(_pick(item, "price_per_night", "pricePerNight"))
        hotels.append({
            "name": _as_text(item.get("name")),
            # Unrated hotels show as mid-range rather than one star
            "stars": min(max(int(round(stars)), 1), 5) if stars is not None else 3,
            "price_per_night": max(price, 0) if price is not None else 0,
            "amenities": _as_text_list(item.get("amenities")),
            "description": _as_text(item.get("description")),
            "location_vibe": _as_text(_pick(item, "location_vibe", "locationVibe")),
        })
    return hotels


def parse_trip_plan(raw: RawModelResponse, currency: str = DEFAULT_CURRENCY) -> TripPlan:
    """Decodes a complete model response into a TripPlan without ever raising."""
    text = raw.get("text") or ""
    sections = split_sections(text)

    budget = decode_json_section(sections[SectionName.BUDGET], budget_fallback(currency))
    packing = decode_json_section(sections[SectionName.PACKING], DEFAULT_PACKING_LIST)
    weather = decode_json_section(sections[SectionName.WEATHER], [])
    hotels = decode_json_section(sections[SectionName.HOTELS], [])

    return {
        "itinerary": sections[SectionName.ITINERARY],
        "budget_breakdown": normalize_budget(budget, currency),
        "packing_list": normalize_packing(packing),
        "weather_forecast": normalize_weather(weather),
        "recommended_hotels": normalize_hotels(hotels),
        "security_tips": sections[SectionName.SECURITY],
        "advisories": "",
        "nightlife": sections[SectionName.NIGHTLIFE],
        "dos_and_donts": sections[SectionName.DOS_AND_DONTS],
        "transport_info": sections[SectionName.TRANSPORT],
        "raw_response": text,
        "grounding_references": list(raw.get("grounding_references") or []),
    }


def generate_plan_node(state: TripGenerationState, llm: Optional[Any] = None) -> Dict[str, Any]:
    """Calls the model for the trip in the state and captures text plus grounding."""
    logging.info("--- Running Node: generate_plan_node ---")
    form_data = state.get("form_data") or {}

    try:
        model = llm if llm is not None else get_llm()
        model_with_search = model.bind_tools([{"google_search": {}}])
        ai_response = model_with_search.invoke([
            SystemMessage(content=SYSTEM_PROMPT),
            HumanMessage(content=build_trip_prompt(form_data)),
        ])
    except PlanGenerationError as e:
        return {"raw_response": None, "error_message": str(e)}
    except google_exceptions.ResourceExhausted as e:
        logging.error(f"LLM API quota exceeded: {e}")
        return {"raw_response": None, "error_message": "The planning service is over its quota. Please try again later."}
    except Exception as e:
        logging.error(f"LLM invocation failed: {e}", exc_info=True)
        return {"raw_response": None, "error_message": f"Something went wrong generating the plan: {e}"}

    text = _message_text(ai_response.content)
    if not text.strip():
        logging.error("LLM returned an empty response.")
        return {"raw_response": None, "error_message": "The planning service returned no text. Please try again."}

    metadata = getattr(ai_response, "response_metadata", None) or {}
    grounding = metadata.get("grounding_metadata") or metadata.get("groundingMetadata") or {}
    chunks = grounding.get("grounding_chunks") or grounding.get("groundingChunks") or []
    logging.info(f"LLM Response content snippet: {text[:200]}...")

    return {
        "raw_response": {"text": text, "grounding_references": normalize_grounding_chunks(chunks)},
        "error_message": None,
    }


def parse_plan_node(state: TripGenerationState) -> Dict[str, Any]:
    """Runs the parsing pipeline over the raw response in the state."""
    logging.info("--- Running Node: parse_plan_node ---")
    raw = state.get("raw_response")
    if not raw:
        return {"plan": None}

    currency = (state.get("form_data") or {}).get("currency") or DEFAULT_CURRENCY
    plan = parse_trip_plan(raw, currency)
    logging.info(
        f"Parsed plan: {len(plan['budget_breakdown'])} budget items, "
        f"{len(plan['packing_list'])} packing categories, {len(plan['recommended_hotels'])} hotels."
    )
    return {"plan": plan}
