from django.apps import AppConfig


class JournalConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'drive_journal.apps.journal'
    label = 'journal'
    verbose_name = 'Drive Journal'
