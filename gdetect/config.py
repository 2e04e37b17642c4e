import os

# Service endpoint and credentials (set via environment variables)
GDETECT_URL = os.getenv("GDETECT_URL")
GDETECT_TOKEN = os.getenv("GDETECT_TOKEN")

# Skip TLS certificate verification for self-hosted appliances
GDETECT_INSECURE = os.getenv("GDETECT_INSECURE", "false").lower() in {"1", "true", "yes"}

# Seconds between two result polls while waiting for an analysis
DEFAULT_PULL_TIME = float(os.getenv("GDETECT_PULL_TIME", "1"))

# Overall deadline for submit + wait, in seconds
DEFAULT_WAIT_TIMEOUT = float(os.getenv("GDETECT_TIMEOUT", "180"))

# Per-request timeout applied to the default transport
REQUEST_TIMEOUT = float(os.getenv("GDETECT_REQUEST_TIMEOUT", "30"))

API_PREFIX = "/api/lite/v2"
TOKEN_HEADER = "X-Auth-Token"
