from django.apps import AppConfig


class MinistriesConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.ministries'
    verbose_name = 'Ministries'
