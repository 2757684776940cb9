import typing as t

from django.http import HttpRequest


def get_client_ip(request: HttpRequest) -> str:
    """Best-effort client IP, honouring the usual proxy headers."""
    xff = request.META.get("HTTP_X_FORWARDED_FOR")
    if xff:
        return t.cast(str, xff.split(",")[0].strip())
    real_ip = request.META.get("HTTP_X_REAL_IP")
    if real_ip:
        return t.cast(str, real_ip.strip())
    return t.cast(str, request.META.get("REMOTE_ADDR") or "Unknown")
