from datetime import timedelta
from pathlib import Path

from decouple import config

from .base import BASE_DIR, REDIS_HOST, REDIS_PORT

SESSION_REDIS_DB = config("SESSION_REDIS_DB", default=2, cast=int)
SESSION_REDIS_URL = config("SESSION_REDIS_URL", default=f"redis://{REDIS_HOST}:{REDIS_PORT}/{SESSION_REDIS_DB}")
LOGIN_SESSION_EXPIRY = timedelta(days=config("LOGIN_SESSION_EXPIRY_DAYS", default=7, cast=int))

# Seconds a verified bearer token is trusted by this process before the registry is asked again.
VERIFIED_TOKEN_CACHE_SECONDS = config("VERIFIED_TOKEN_CACHE_SECONDS", default=30, cast=int)

IP2LOCATION_DB_PATH = Path(
    config("IP2LOCATION_DB_PATH", default=str(BASE_DIR / "geo" / "data" / "IP2LOCATION-LITE-DB11.BIN"))
)

CACHE_REDIS_URL = config("CACHE_REDIS_URL", default="")

CACHES = {
    "default": (
        {"BACKEND": "django.core.cache.backends.redis.RedisCache", "LOCATION": CACHE_REDIS_URL}
        if CACHE_REDIS_URL
        else {"BACKEND": "django.core.cache.backends.locmem.LocMemCache", "LOCATION": "default"}
    ),
    "verified_tokens": {
        "BACKEND": "django.core.cache.backends.locmem.LocMemCache",
        "LOCATION": "verified-tokens",
        "TIMEOUT": VERIFIED_TOKEN_CACHE_SECONDS,
        "OPTIONS": {"MAX_ENTRIES": 10000},
    },
}

# Seconds the organizer dashboard figures are served from the default cache.
DASHBOARD_CACHE_SECONDS = config("DASHBOARD_CACHE_SECONDS", default=60, cast=int)
UPCOMING_EVENTS_ON_DASHBOARD = config("UPCOMING_EVENTS_ON_DASHBOARD", default=5, cast=int)
