import os
from dotenv import load_dotenv

load_dotenv()

USER_FILE = os.getenv("CF_USER_FILE", "users.txt")
API_BASE = os.getenv("CF_API_BASE", "https://codeforces.com/api")

SUBMISSION_COUNT = int(os.getenv("CF_SUBMISSION_COUNT", "500"))
REQUEST_TIMEOUT = float(os.getenv("CF_REQUEST_TIMEOUT", "15"))

# pause between users to stay under the API rate limit
USER_DELAY = float(os.getenv("CF_USER_DELAY", "0.3"))
RETRY_ATTEMPTS = int(os.getenv("CF_RETRY_ATTEMPTS", "3"))
RETRY_DELAY = float(os.getenv("CF_RETRY_DELAY", "1.0"))

CACHE_TTL = float(os.getenv("CF_CACHE_TTL", "600"))

UTC_OFFSET_HOURS = 6
WEEK_DAYS = 7
WEEKLY_WINNER_MIN_DAYS = 5
MAX_DAY_OFFSET = 7
STANDINGS_CONTEST_COUNT = 3

LOG_LEVEL = os.getenv("CF_LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
PORT = int(os.getenv("PORT", "3000"))
