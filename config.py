import os
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


def _optional_int(name: str):
    value = os.getenv(name, "").strip()
    return int(value) if value else None


# Bot Information
APP_VERSION = "1.0.0"

# Discord Configuration
BOT_TOKEN = os.getenv("BOT_TOKEN", "")

# Channels the trackers post into
MATCH_CHANNEL_ID = _optional_int("MATCH_CHANNEL_ID")
MMR_CHANNEL_ID = _optional_int("MMR_CHANNEL_ID")

# Leaderboard message to keep editing across restarts (optional)
LEADERBOARD_MESSAGE_ID = _optional_int("LEADERBOARD_MESSAGE_ID")

# Henrik API Configuration
HENRIK_API_KEY = os.getenv("HENRIK_API_KEY", "")
HENRIK_BASE_URL = "https://api.henrikdev.xyz/valorant"
HENRIK_REGION = os.getenv("HENRIK_REGION", "na")

# Polling
CHECK_INTERVAL_SECONDS = int(os.getenv("CHECK_INTERVAL_SECONDS", "60"))

# File Paths
DATA_DIR = os.getenv("DATA_DIR", "data")
ROSTER_FILE = os.getenv("ROSTER_FILE", os.path.join(DATA_DIR, "roster.json"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE", "match_notifier.log")

# Leaderboard placeholder shown until the first ratings arrive
LEADERBOARD_PLACEHOLDER = "Fetching ranks..."
