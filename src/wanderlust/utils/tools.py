"""
External map tools for saved trips.
"""

import base64
import logging
from typing import Optional
import googlemaps
from googlemaps.maps import StaticMapMarker

from ..config.settings import MAPS_API_KEY, OFFLINE_MAP_SIZE, OFFLINE_MAP_ZOOM

_gmaps = None

def get_maps_client() -> Optional[googlemaps.Client]:
    """Returns the Google Maps client, or None when Maps is not configured."""
    global _gmaps
    if _gmaps is not None:
        return _gmaps
    if not MAPS_API_KEY:
        return None
    try:
        _gmaps = googlemaps.Client(key=MAPS_API_KEY)
        logging.info("Google Maps client initialized successfully.")
    except Exception as e:
        logging.error(f"Failed to initialize Google Maps client: {e}")
        return None
    return _gmaps

def fetch_offline_map(destination: str, zoom: int = OFFLINE_MAP_ZOOM, client: Optional[googlemaps.Client] = None) -> Optional[str]:
    """Fetches a static map image of the destination as a PNG data URL.

    Returns None when Maps is unavailable or the fetch fails; a missing map
    never blocks saving a trip.
    """
    logging.info(f"TOOL CALLED: fetch_offline_map(destination='{destination}', zoom={zoom})")
    if not destination:
        return None

    gmaps = client or get_maps_client()
    if gmaps is None:
        logging.warning("Maps service unavailable. Skipping offline map.")
        return None

    try:
        chunks = gmaps.static_map(
            size=OFFLINE_MAP_SIZE,
            center=destination,
            zoom=zoom,
            format="png",
            markers=[StaticMapMarker(locations=[destination])],
        )
        image = b"".join(chunk for chunk in chunks if chunk)
    except Exception as e:
        logging.error(f"Error fetching offline map for {destination}: {e}")
        return None

    if not image:
        return None
    return "data:image/png;base64," + base64.b64encode(image).decode("ascii")
