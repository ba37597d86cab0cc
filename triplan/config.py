import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

DATA_DIR = Path(os.getenv("TRIPLAN_DATA_DIR", "data"))
DEFAULT_OWNER_ID = os.getenv("TRIPLAN_DEFAULT_OWNER", "local")
LOG_LEVEL = os.getenv("TRIPLAN_LOG_LEVEL", "INFO")
API_URL = os.getenv("TRIPLAN_API_URL", "http://127.0.0.1:8000")
HTTP_TIMEOUT = float(os.getenv("TRIPLAN_HTTP_TIMEOUT", "30"))
HOST = os.getenv("TRIPLAN_HOST", "127.0.0.1")
PORT = int(os.getenv("TRIPLAN_PORT", "8000"))

SPORT_TYPES = ("Swim", "Bike", "Run")

# Physiological order of intensity zones, easiest first.
ZONE_ORDER = (
    "Recovery",
    "Zone 2",
    "Tempo",
    "Sweet Spot",
    "Threshold",
    "VO2 Max",
    "Anaerobic",
    "Sprints",
)
UNLABELED_NAME = "Unlabeled"
UNLABELED_COLOR = "#FFFFFF"
NO_LABEL_KEY = "no-label"

DEFAULT_LABELS = (
    {"name": "Recovery", "color": "#9CA3AF"},
    {"name": "Zone 2", "color": "#3B82F6"},
    {"name": "Tempo", "color": "#10B981"},
    {"name": "Sweet Spot", "color": "#84CC16"},
    {"name": "Threshold", "color": "#FBBF24"},
    {"name": "VO2 Max", "color": "#EF4444"},
    {"name": "Anaerobic", "color": "#DC2626"},
    {"name": "Sprints", "color": "#991B1B"},
)

SPORT_BAR_COLORS = {
    "swim": "#00CED1",
    "bike": "#1E90FF",
    "run": "#E63946",
}
