from datetime import timedelta

from decouple import config

from .base import SECRET_KEY

JWT_ALGORITHM = config("JWT_ALGORITHM", default="HS256")
JWT_AUDIENCE = config("JWT_AUDIENCE", default="boxoffice")
JWT_ISSUER = config("JWT_ISSUER", default="boxoffice-api")
JWT_SIGNING_KEY = config("JWT_SIGNING_KEY", default=SECRET_KEY)
JWT_REFRESH_SIGNING_KEY = config("JWT_REFRESH_SIGNING_KEY", default=f"{SECRET_KEY}-refresh")

ACCESS_TOKEN_LIFETIME = timedelta(days=config("ACCESS_TOKEN_LIFETIME_DAYS", default=7, cast=int))
REFRESH_TOKEN_LIFETIME = timedelta(days=config("REFRESH_TOKEN_LIFETIME_DAYS", default=7, cast=int))

OTP_LENGTH = config("OTP_LENGTH", default=6, cast=int)
OTP_LIFETIME = timedelta(minutes=config("OTP_LIFETIME_MINUTES", default=5, cast=int))

NINJA_EXTRA = {
    "THROTTLE_RATES": {
        "user": "1000/day",
        "anon": "250/day",
    },
    "NUM_PROXIES": None,
}
