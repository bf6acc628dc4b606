from django.apps import AppConfig

class BuyTogetherConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "buytogether"
    verbose_name = "Buy together"
