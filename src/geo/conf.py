from pathlib import Path

from django.conf import settings

IP2LOCATION_DB_PATH: Path = settings.IP2LOCATION_DB_PATH
