from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.core.adapters.factory import build_record_store
from apps.core.domain.dates import day_key, today_key
from apps.core.domain.errors import StoreError
from apps.core.domain.retry import RetryPolicy
from apps.daily_logs.domain.services import DailyLogCreator, DailyLogProber, DailyLogReconciler
from apps.tasks.adapters.store_repositories import StoreTaskRepository
from apps.tasks.domain.entities import TaskType


class Command(BaseCommand):
    help = 'Tworzy brakujące logi dzienne dla zadań cyklicznych użytkownika'

    def add_arguments(self, parser):
        parser.add_argument('--user', required=True, help='ID użytkownika')
        parser.add_argument('--date', help='Dzień YYYY-MM-DD (domyślnie dzisiaj)')

    def handle(self, *args, **options):
        user_id = str(options['user'])
        try:
            day = day_key(options['date']) if options.get('date') else today_key(settings.TRACKER_TIME_ZONE)
        except ValueError as exc:
            raise CommandError(f"Invalid date: {exc}")

        store = build_record_store(acting_user_id=user_id)
        prober = DailyLogProber(store, policy=RetryPolicy.from_settings('probe'),
                                page_size=settings.TRACKER_QUERY_PAGE_SIZE)
        creator = DailyLogCreator(store, prober=prober, race_policy=RetryPolicy.from_settings('race'))
        reconciler = DailyLogReconciler(store, prober=prober, creator=creator)

        try:
            tasks = StoreTaskRepository(store, page_size=settings.TRACKER_QUERY_PAGE_SIZE).list_for_user(
                user_id, TaskType.RECURRING
            )
            report = reconciler.reconcile(user_id, tasks, day)
        except StoreError as exc:
            raise CommandError(str(exc))

        self.stdout.write(self.style.SUCCESS(
            f'{day}: {len(report.created)} utworzonych, {len(report.existing)} istniejących, '
            f'{len(report.recovered)} odzyskanych po wyścigu.'
        ))
        for task_id in report.inconclusive:
            self.stdout.write(self.style.WARNING(f"- {task_id}: log istnieje, ale nie udało się go pobrać"))
        for task_id, message in report.failed.items():
            self.stdout.write(self.style.ERROR(f"- {task_id}: {message}"))
