"""
hotspots/constants.py
---------------------
Shared constants used across the analytical core and the processing
scripts. Import from here rather than defining locally in a script.

Distances are in raw coordinate degrees throughout. At Boston's
latitude 0.001° is treated as roughly 100 metres; that conversion is
only used for labelling, never for computing densities.
"""

# ── Boston bounding box (exclusive bounds) ────────────────────────
BOSTON_LON_RANGE = (-72.0, -70.0)
BOSTON_LAT_RANGE = (42.0, 43.0)

# ── Study area ────────────────────────────────────────────────────
# Street keyword (upper case) → zone label. Matched as a substring of
# the normalised STREET value, so 'CAUSEWAY ST' and 'CAUSEWAY STREET'
# both resolve to Causeway.
TARGET_STREETS = {
    "CAUSEWAY": "Causeway",
    "CANAL":    "Canal",
    "NASHUA":   "Nashua",
}

ZONES = ("Causeway", "Canal", "Nashua", "Other")

# Anchor (lat, lon) used when an incident's coordinates have to be
# re-placed. 'Other' sits on the arena between the three streets.
ZONE_ANCHORS = {
    "Causeway": (42.3664, -71.0608),
    "Canal":    (42.3632, -71.0593),
    "Nashua":   (42.3681, -71.0640),
    "Other":    (42.3662, -71.0621),
}

JITTER_DEGREES = 0.0005

OFFENSE_KEYWORD = "ASSAULT"
YEAR_RANGE      = (2019, 2022)

# ── Date parsing ──────────────────────────────────────────────────
# Tried in order, after any trailing UTC offset has been dropped. The
# first format that parses more than DATE_PARSE_THRESHOLD of the rows wins.
DATE_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %I:%M:%S %p",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d",
]
DATE_PARSE_THRESHOLD = 0.90
SYNTHETIC_DATE_START = "2019-01-01"

# ── Input schema ──────────────────────────────────────────────────
# Boston open data headers after standardise_columns() lower-cases them.
COLUMN_RENAME = {
    "lat":  "latitude",
    "long": "longitude",
    "lon":  "longitude",
    "lng":  "longitude",
}

REQUIRED_COLUMNS = [
    "occurred_on_date",
    "street",
    "offense_description",
    "latitude",
    "longitude",
    "month",
    "year",
]

# ── Temporal features ─────────────────────────────────────────────
SEASON_BY_MONTH = {
    12: "Winter", 1: "Winter",  2: "Winter",
    3:  "Spring", 4: "Spring",  5: "Spring",
    6:  "Summer", 7: "Summer",  8: "Summer",
    9:  "Fall",   10: "Fall",   11: "Fall",
}
SEASONS = ("Winter", "Spring", "Summer", "Fall")

# Right-closed bins: (-1, 4] is Late Night, (4, 11] Morning and so on.
HOUR_BINS   = [-1, 4, 11, 16, 22, 24]
HOUR_LABELS = ["Late Night", "Morning", "Afternoon", "Evening", "Night"]

WEEKEND_DAYS = ("Saturday", "Sunday")
UNKNOWN      = "Unknown"

# ── Density ───────────────────────────────────────────────────────
CANDIDATE_RADII = (0.001, 0.002, 0.003, 0.004)

# Fixed by manual calibration (~200 m), not selected by a fit metric.
DENSITY_RADIUS = 0.002

METRES_PER_DEGREE = 100_000

# ── Modelling ─────────────────────────────────────────────────────
RANDOM_STATE = 42
TEST_SIZE    = 0.20
KNN_NEIGHBOURS = 5
CV_FOLDS       = 5

ENSEMBLE_WEIGHTS = (0.7, 0.3)  # (kNN, polynomial)

SPATIAL_FEATURES = ["longitude", "latitude"]
MODEL_FEATURES   = ["longitude", "latitude", "hour"]
TARGET           = "density"

# ── Hotspots ──────────────────────────────────────────────────────
HOTSPOT_QUANTILE = 0.75
