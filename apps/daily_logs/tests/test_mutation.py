import pytest

from apps.core.domain.errors import PermissionDenied, RecordNotFound
from apps.daily_logs.domain.entities import DailyLogChanges


class TestDailyLogChanges:
    def test_only_given_fields_are_sent(self):
        assert DailyLogChanges(value_bool=True).to_fields() == {'value_bool': True}

    def test_false_and_zero_are_real_values(self):
        assert DailyLogChanges(value_bool=False, value_number=0.0).to_fields() == {
            'value_bool': False,
            'value_number': 0.0,
        }

    def test_empty_note_is_not_sent(self):
        assert DailyLogChanges(note='').to_fields() == {}
        assert DailyLogChanges(note='ciężki dzień').to_fields() == {'note': 'ciężki dzień'}


class TestDailyLogMutator:
    def test_updates_only_given_fields(self, mutator, seed_log):
        seeded = seed_log('t1', value_bool=False, value_number=5.0, note='rano')

        log = mutator.apply(seeded['id'], DailyLogChanges(value_bool=True))

        assert log.is_completed
        assert log.value_number == 5.0
        assert log.note == 'rano'
        assert log.day == '2024-01-15'

    def test_missing_log(self, mutator):
        with pytest.raises(RecordNotFound):
            mutator.apply('missing', DailyLogChanges(value_bool=True))

    def test_permission_error_is_distinct(self, store, mutator, seed_log):
        seeded = seed_log('t1')
        store.fail('update', PermissionDenied('rule', status=403))

        with pytest.raises(PermissionDenied) as exc_info:
            mutator.apply(seeded['id'], DailyLogChanges(value_bool=True))

        assert not isinstance(exc_info.value, RecordNotFound)
        assert exc_info.value.status == 403
        assert 'access rules' in exc_info.value.message

    def test_checking_log_created_by_reconcile(self, store, reconciler, mutator, make_task):
        reconciler.reconcile('u1', [make_task('t1')], '2024-01-15')
        (record,) = store.records('daily_logs')

        log = mutator.apply(record['id'], DailyLogChanges(value_bool=True))

        assert log.value_bool is True
        assert log.value_number is None
        assert len(store.records('daily_logs')) == 1
