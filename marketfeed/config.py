"""Configuration: env vars, transport policy, cache TTLs, movers filter."""

import os
from dotenv import load_dotenv

load_dotenv()

# ---------------------------------------------------------------------------
# brapi.dev
# ---------------------------------------------------------------------------
BRAPI_BASE_URL: str = os.getenv("BRAPI_BASE_URL", "https://brapi.dev/api")
BRAPI_API_TOKEN: str = os.getenv("BRAPI_API_TOKEN", "")

HTTP_TIMEOUT_SECONDS: float = float(os.getenv("HTTP_TIMEOUT_SECONDS", "15"))

# ---------------------------------------------------------------------------
# Transport retry policy
# ---------------------------------------------------------------------------
TRANSPORT_CONFIG: dict[str, object] = {
    "max_retries": 3,              # retries after the first attempt
    "base_delay_seconds": 0.5,     # wait before retry n = base * n
    "retry_statuses": (429,),      # plus every status >= 500
}

# ---------------------------------------------------------------------------
# Symbol directory cache
# ---------------------------------------------------------------------------
DIRECTORY_CACHE_TTL_SECONDS: float = float(
    os.getenv("DIRECTORY_CACHE_TTL_SECONDS", "300")
)
SEARCH_RESULT_LIMIT: int = 50

# Background warm-up of the directory (APScheduler interval job)
DIRECTORY_REFRESH_ENABLED: bool = (
    os.getenv("DIRECTORY_REFRESH_ENABLED", "true").lower() in ("1", "true", "yes")
)
DIRECTORY_REFRESH_MINUTES: int = int(os.getenv("DIRECTORY_REFRESH_MINUTES", "5"))

# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------
# brapi rejects very long comma-joined ticker paths; chunk batch requests.
QUOTE_BATCH_SIZE: int = int(os.getenv("QUOTE_BATCH_SIZE", "20"))

# ---------------------------------------------------------------------------
# Top movers
# ---------------------------------------------------------------------------
MOVERS_CONFIG: dict[str, object] = {
    "limit": 15,
    # B3 equities: four letters + share-class suffix (ON, PN, PNA, PNB, unit)
    "ticker_pattern": r"^[A-Z]{4}(3|4|5|6|11)$",
    # Word-prefix markers for funds, ETFs and depositary receipts (FIIS, FUNDOS, ETFS too)
    "excluded_name_markers": (
        "FII",
        "FUNDO",
        "FDO",
        "ETF",
        "INDEX",
        "BDR",
        "DRN",
        "DR1",
        "DR2",
        "DR3",
    ),
}
