from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.core.adapters.factory import build_record_store
from apps.core.domain.dates import day_key, today_key
from apps.core.domain.errors import StoreError
from apps.core.domain.retry import RetryPolicy
from apps.daily_logs.application.use_cases import (
    DailyLogUnavailable,
    ToggleDailyLogInput,
    ToggleDailyLogUseCase,
)
from apps.daily_logs.domain.services import DailyLogCreator, DailyLogMutator, DailyLogProber


class Command(BaseCommand):
    help = 'Przełącza wykonanie zadania cyklicznego w danym dniu'

    def add_arguments(self, parser):
        parser.add_argument('--user', required=True, help='ID użytkownika')
        parser.add_argument('--task', required=True, help='ID zadania')
        parser.add_argument('--date', help='Dzień YYYY-MM-DD (domyślnie dzisiaj)')
        parser.add_argument('--value', type=float, help='Wartość dla zadań mierzalnych')

    def handle(self, *args, **options):
        user_id = str(options['user'])
        try:
            day = day_key(options['date']) if options.get('date') else today_key(settings.TRACKER_TIME_ZONE)
        except ValueError as exc:
            raise CommandError(f"Invalid date: {exc}")

        # Manual Dependency Injection
        store = build_record_store(acting_user_id=user_id)
        prober = DailyLogProber(store, policy=RetryPolicy.from_settings('probe'))
        creator = DailyLogCreator(store, prober=prober, race_policy=RetryPolicy.from_settings('race'))
        use_case = ToggleDailyLogUseCase(creator, DailyLogMutator(store),
                                         reload_policy=RetryPolicy.from_settings('reload'))

        try:
            log = use_case.execute(ToggleDailyLogInput(
                user_id=user_id,
                task_id=str(options['task']),
                day=day,
                number_value=options.get('value'),
            ))
        except (StoreError, DailyLogUnavailable) as exc:
            raise CommandError(str(exc))

        state = 'wykonane' if log.is_completed else 'niewykonane'
        self.stdout.write(self.style.SUCCESS(f"{log.task_id} ({log.day}): {state}"))
        if log.value_number is not None:
            self.stdout.write(f"- wartość: {log.value_number}")
