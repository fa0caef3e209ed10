"""
Constants for dpe_matcher package.

Centralizes magic numbers and configuration defaults.
"""

# ADEME data-fair API
ADEME_BASE_URL = "https://data.ademe.fr/data-fair/api/v1/datasets"
ADEME_DATASET = "dpe-v2-logements-existants"  # Used by the exactness classifier
ADEME_PROXIMITY_DATASET = "dpe03existant"  # Used by postal-code proximity search
DEFAULT_USER_AGENT = "dpe_matcher (contact: dev@example.com)"

# Request sizing
STRATEGY_RESULT_SIZE = 50  # Per-strategy cap on candidate acquisition
PROXIMITY_RESULT_SIZE = 10000  # One postal code rarely exceeds this
CERTIFICATE_LOOKUP_SIZE = 10

# Network
REQUEST_TIMEOUT = 10.0  # seconds, per upstream call
DEFAULT_WORKERS = 4  # Strategies are few; one thread each is plenty

# Exactness scoring weights (heuristic, uncalibrated against real data)
WEIGHT_DEPARTMENT = 40
WEIGHT_COMMUNE = 40
WEIGHT_SECTION = 10
WEIGHT_NUMERO = 10
WEIGHT_STREET_NUMBER = 5
WEIGHT_RECENCY = 5

# Exact match requires both hard gates plus at least two soft bonuses
EXACT_MATCH_THRESHOLD = 90
RECENCY_YEARS = 3
MAX_SCORE = 100

# Geometry
EARTH_RADIUS_M = 6_371_000.0

# Disqualification reasons
DISQUALIFIED_WRONG_DEPARTMENT = "wrong_department"
DISQUALIFIED_WRONG_COMMUNE = "wrong_commune"
DISQUALIFIED_NO_COMMUNE = "no_commune_data"

# Proximity exclusion reason
EXCLUDED_NO_COORDINATES = "no_coordinates"
