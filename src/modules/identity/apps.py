from django.apps import AppConfig


class IdentityConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.identity"
    label = "identity"

    def ready(self) -> None:
        from modules.identity import signals  # noqa: F401
