from django.apps import AppConfig


class CommonConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "common"

    def ready(self) -> None:
        """Start tracing once the app registry is loaded."""
        from common.observability import init_tracing

        init_tracing()
