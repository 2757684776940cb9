import structlog
from IP2Location import IP2Location

from geo import conf
from geo.schema import UNKNOWN, GeoLocation

logger = structlog.get_logger(__name__)

_DB: IP2Location | None = None
_DB_MTIME: float | None = None

_IPV4_MAPPED_PREFIX = "::ffff:"


def get_ip2location() -> IP2Location:
    """Initializes and returns the IP2Location database object.

    Uses file modification time to detect when a new database has been downloaded
    and automatically reloads it.
    """
    global _DB, _DB_MTIME

    current_mtime = conf.IP2LOCATION_DB_PATH.stat().st_mtime

    if _DB is None or _DB_MTIME is None or current_mtime != _DB_MTIME:
        _DB = IP2Location(str(conf.IP2LOCATION_DB_PATH))
        _DB_MTIME = current_mtime

    return _DB


def _clean(value: str | None) -> str:
    if not value or value == "-":
        return UNKNOWN
    return value


def resolve_ip_to_location(ip: str) -> GeoLocation:
    """Resolves an IP address to a coarse location; unresolvable IPs map to ``Unknown`` fields."""
    ip = ip.removeprefix(_IPV4_MAPPED_PREFIX)
    if not ip or ip == UNKNOWN:
        return GeoLocation()
    try:
        record = get_ip2location().get_all(ip)
    except (OSError, ValueError):
        logger.debug("ip_lookup_failed", ip_address=ip)
        return GeoLocation()
    if record is None:
        return GeoLocation()
    return GeoLocation(
        city=_clean(getattr(record, "city", None)),
        region=_clean(getattr(record, "region", None)),
        country=_clean(getattr(record, "country_short", None)),
        timezone=_clean(getattr(record, "timezone", None)),
    )
