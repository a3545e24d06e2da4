"""
Trip distance and travel-time estimates for Istanbul transfers.

Distances are great-circle (Haversine) distances between approximate district
centres, so they are a lower bound of the real driving distance.
"""
import math
from typing import Dict, Optional, Tuple

EARTH_RADIUS_KM = 6371

# (lat, lng) of approximate centre points
LOCATION_COORDINATES: Dict[str, Tuple[float, float]] = {
    # Airports
    "ist": (41.2606, 28.7427),
    "saw": (40.8983, 29.3080),

    # European side
    "adalar": (40.8739, 29.0897),
    "arnavutkoy": (41.1843, 28.7403),
    "avcilar": (40.9795, 28.7214),
    "bagcilar": (41.0398, 28.8627),
    "bahcelievler": (41.0001, 28.8724),
    "bakirkoy": (40.9797, 28.8772),
    "basaksehir": (41.0928, 28.8027),
    "bayrampasa": (41.0461, 28.9117),
    "besiktas": (41.0429, 29.0083),
    "beylikduzu": (40.9825, 28.6283),
    "beyoglu": (41.0361, 28.9795),
    "buyukcekmece": (41.0209, 28.5950),
    "catalca": (41.1435, 28.4564),
    "esenler": (41.0437, 28.8769),
    "esenyurt": (41.0291, 28.6735),
    "eyupsultan": (41.0550, 28.9341),
    "fatih": (41.0082, 28.9393),
    "gaziosmanpasa": (41.0636, 28.9092),
    "gungoren": (41.0198, 28.8846),
    "kagithane": (41.0871, 28.9700),
    "kucukcekmece": (41.0015, 28.7787),
    "sariyer": (41.1672, 29.0536),
    "silivri": (41.0736, 28.2459),
    "sultanahmet": (41.0054, 28.9768),
    "sultangazi": (41.1066, 28.8674),
    "sisli": (41.0602, 28.9877),
    "taksim": (41.0369, 28.9833),
    "zeytinburnu": (40.9947, 28.9139),

    # Asian side
    "atasehir": (40.9761, 29.1175),
    "beykoz": (41.1479, 29.0818),
    "cekmekoy": (41.0333, 29.1823),
    "kadikoy": (40.9927, 29.0257),
    "kartal": (40.8891, 29.1857),
    "maltepe": (40.9342, 29.1361),
    "pendik": (40.8774, 29.2518),
    "sancaktepe": (41.0013, 29.2209),
    "sile": (41.1759, 29.6115),
    "sultanbeyli": (40.9655, 29.2674),
    "tuzla": (40.8156, 29.3007),
    "umraniye": (41.0161, 29.1211),
    "uskudar": (41.0233, 29.0151),

    # Cities
    "istanbul": (41.0082, 28.9784),
    "ankara": (39.9334, 32.8597),
    "izmir": (38.4237, 27.1428),
    "bursa": (40.1885, 29.0610),
    "antalya": (36.8969, 30.7133),
}

# Used when one of the locations has no coordinates
DEFAULT_DISTANCES_KM = {
    "airport": 40,
    "intercity": 200,
    "city": 15,
}
FALLBACK_DISTANCE_KM = 20

# Upper bounds (exclusive), first match wins
TRAVEL_TIME_BUCKETS = (
    (10, "15-25 min"),
    (25, "25-40 min"),
    (40, "40-55 min"),
    (60, "45-60 min"),
    (80, "60-75 min"),
    (100, "70-90 min"),
    (150, "90-120 min"),
    (300, "2-3 hours"),
)
LONGEST_TRAVEL_TIME = "3+ hours"


def round_half_up(value: float, digits: int = 1) -> float:
    """Rounds .5 away from zero for positive values. Built-in round() goes to the even digit."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in km between two (lat, lon) points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return round_half_up(EARTH_RADIUS_KM * c)


def real_distance(from_id: str, to_id: str) -> Optional[float]:
    """Distance between two known location ids, or None if either is unknown."""
    origin = LOCATION_COORDINATES.get(from_id)
    destination = LOCATION_COORDINATES.get(to_id)
    if origin is None or destination is None:
        return None
    return haversine_distance(origin[0], origin[1], destination[0], destination[1])


def default_distance(transfer_type: str) -> int:
    return DEFAULT_DISTANCES_KM.get(transfer_type, FALLBACK_DISTANCE_KM)


def estimated_time(distance_km: float) -> str:
    for upper_bound, label in TRAVEL_TIME_BUCKETS:
        if distance_km < upper_bound:
            return label
    return LONGEST_TRAVEL_TIME
