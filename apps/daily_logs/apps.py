from django.apps import AppConfig

class DailyLogsConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.daily_logs'
    label = 'daily_logs'
