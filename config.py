import os

# CONFIG
GRAPHQL_ENDPOINT = os.environ.get(
    "RANDOMUSER_GRAPHQL_ENDPOINT",
    "https://nextjs-randomuser-graphql.vercel.app/api/graphql",
)
REQUEST_TIMEOUT = float(os.environ.get("RANDOMUSER_REQUEST_TIMEOUT", "30"))

# Seconds of quiet input before a fetch is attempted
DEBOUNCE_SECONDS = float(os.environ.get("STATS_DEBOUNCE_SECONDS", "0.5"))
# How often the dashboard re-reads controller state while a cycle is pending
POLL_INTERVAL_SECONDS = 1.0

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

MIN_USER_COUNT = 1
MAX_USER_COUNT = 5000
DEFAULT_USER_COUNT = 200
DEFAULT_REGION = "US"
TOP_REGION_LIMIT = 10

# Nationality codes accepted by the random user service
REGIONS = [
    "AU",
    "BR",
    "CA",
    "CH",
    "DE",
    "DK",
    "ES",
    "FI",
    "FR",
    "GB",
    "IE",
    "IN",
    "IR",
    "MX",
    "NL",
    "NO",
    "NZ",
    "RS",
    "TR",
    "UA",
    "US",
]
