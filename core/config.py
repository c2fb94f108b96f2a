import os

def env(key: str, default: str | None = None) -> str | None:
    v = os.getenv(key)
    if v is None or v.strip() == "":
        return default
    return v.strip()

# --- Service ---
SERVICE_NAME = env("SERVICE_NAME", "sos-chatbot-tools")
VERSION = env("VERSION", "1.0.0")
CORS_ORIGINS = [o.strip() for o in (env("CORS_ORIGINS", "*") or "*").split(",") if o.strip()]

# --- Logging ---
LOG_LEVEL = env("LOG_LEVEL", "INFO")
LOG_FILE = env("LOG_FILE")  # tom = kun stdout

# --- HTTP ---
HTTP_TIMEOUT_SEC = float(env("HTTP_TIMEOUT_SEC", "15"))
USER_AGENT = env("USER_AGENT", "sos-chatbot-tools/1.0")

# --- Upstream endpoints ---
NEWS_API_ENDPOINT = "https://newsapi.org/v2"
DUCKDUCKGO_ENDPOINT = "https://api.duckduckgo.com/"
GEOCODING_ENDPOINT = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_ENDPOINT = "https://api.open-meteo.com/v1/forecast"
EXCHANGE_RATE_ENDPOINT = "https://open.er-api.com/v6/latest"
WIKIPEDIA_ENDPOINT = "https://en.wikipedia.org/w/api.php"
GOOGLE_BOOKS_ENDPOINT = "https://www.googleapis.com/books/v1/volumes"

# --- Defaults ---
DEFAULT_LANGUAGE = "en"
DEFAULT_COUNTRY = "us"
DEFAULT_NEWS_SORT = "publishedAt"
DEFAULT_RESULTS_LIMIT = 5


# Secrets leses ved kall, ikke ved import, slik at env kan endres uten restart.
def news_api_key() -> str | None:
    return env("NEWS_API_KEY")


def wxflows_endpoint() -> str | None:
    return env("WXFLOWS_ENDPOINT")


def wxflows_apikey() -> str | None:
    return env("WXFLOWS_APIKEY")
