from django.apps import AppConfig


class CoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'bizpanel.core'

    def ready(self):
        """Import signals when app is ready"""
        import bizpanel.core.cache_signals  # noqa: F401
