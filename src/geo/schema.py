from pydantic import BaseModel

UNKNOWN = "Unknown"


class GeoLocation(BaseModel):
    """Coarse location derived from a client IP."""

    city: str = UNKNOWN
    region: str = UNKNOWN
    country: str = UNKNOWN
    timezone: str = UNKNOWN
