"""
Blue carbon reference data.
Fixed at build time; not user-configurable at runtime.
"""

# Blue Carbon Initiative literature means
# Sequestration rates in tCO2 per hectare per year
SEQUESTRATION_FACTORS: dict[str, float] = {
    "mangrove":    10.15,
    "seagrass":    8.7,
    "salt_marsh":  6.8,
    "kelp_forest": 12.3,
}

# Conservative discount percentages applied to gross absorption
DEFAULT_BUFFERS: dict[str, float] = {
    "uncertainty":  10.0,  # measurement uncertainty
    "mortality":    15.0,  # ecosystem mortality risk
    "verification": 5.0,   # third-party verification overhead
}

# Impact equivalences per ton CO2
IMPACT_EQUIVALENCES: dict[str, float] = {
    "cars_removed_per_year":  0.45,  # cars removed from road per year
    "homes_powered_per_year": 0.12,  # homes powered for a year
    "trees_planted":          16,    # tree seedlings grown for 10 years, applied to cumulative
}

SQUARE_METERS_PER_HECTARE = 10_000
DEFAULT_HORIZON_YEARS = 20

# Anomaly rules: threshold and credibility penalty, in evaluation order
THEORETICAL_MAX_MULTIPLIER = 1.5
ANOMALY_RULES: dict[str, dict] = {
    "area_growth": {
        "max_growth_rate": 1.0,
        "penalty": 25,
        "flag": "Unrealistic area expansion detected",
    },
    "theoretical_max": {
        "multiplier": THEORETICAL_MAX_MULTIPLIER,
        "penalty": 30,
        "flag": "Carbon sequestration estimates exceed theoretical maximum",
    },
    "minimum_area": {
        "min_area_m2": 1000,  # 0.1 ha
        "penalty": 10,
        "flag": "Project area unusually small for ecosystem restoration",
    },
}

CREDIBILITY_MIN = 0
CREDIBILITY_MAX = 100

# Demo hotspots for the map; coordinates are (longitude, latitude)
DEMO_HOTSPOTS: list[dict] = [
    {
        "id": "mumbai",
        "name": "Mumbai Mangrove Belt",
        "coordinates": (72.8777, 19.0760),
        "ecosystem": "mangrove",
        "description": "Critical mangrove ecosystem protecting Mumbai coastline",
        "area_m2": 45_600_000,
    },
    {
        "id": "chennai",
        "name": "Chennai Seagrass Meadows",
        "coordinates": (80.2707, 13.0827),
        "ecosystem": "seagrass",
        "description": "Vital seagrass habitats in Tamil Nadu coastal waters",
        "area_m2": 23_400_000,
    },
    {
        "id": "sundarbans",
        "name": "Sundarbans Delta",
        "coordinates": (89.0000, 22.0000),
        "ecosystem": "mangrove",
        "description": "World's largest mangrove forest system",
        "area_m2": 267_000_000,
    },
    {
        "id": "goa",
        "name": "Goa Salt Marshes",
        "coordinates": (74.1240, 15.2993),
        "ecosystem": "salt_marsh",
        "description": "Protected salt marsh ecosystems along Goa coast",
        "area_m2": 12_800_000,
    },
]
