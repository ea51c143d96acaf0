"""
Tests for PostRunner Batch Runner

Tests sequential execution including:
- Single request lookup by collection id and global id
- Bulk runs that never stop on a failed request
- Token updates observed mid-run
- Filtering by global id
"""

import logging

import pytest
from unittest.mock import Mock
import requests

from postrunner.collection.store import CollectionStore
from postrunner.common.errors import (
    CollectionNotFoundError,
    InvalidCollectionError,
    RequestNotFoundError,
)
from postrunner.runner.batch import BatchRunner, BatchSummary, BatchTarget
from postrunner.runner.executor import ERROR_STATUS, RequestExecutor


def mock_response(status_code=200, json_data=None):
    response = Mock()
    response.status_code = status_code
    response.json.return_value = json_data if json_data is not None else {}
    response.text = ''
    return response


@pytest.fixture
def three_request_collection():
    return {
        'info': {'name': 'Three'},
        'item': [
            {'name': f'Request {n}', 'request': {'method': 'GET', 'url': f'https://api.example.com/{n}'}}
            for n in (1, 2, 3)
        ]
    }


@pytest.fixture
def session():
    session = Mock()
    session.request.return_value = mock_response(200, {'ok': True})
    return session


@pytest.fixture
def store(users_collection, orders_collection):
    store = CollectionStore()
    store.register_batch([users_collection, orders_collection])
    return store


@pytest.fixture
def runner(store, session):
    return BatchRunner(store, executor=RequestExecutor(session=session))


class TestRunSingle:
    """Test BatchRunner.run_single()."""

    def test_executes_addressed_item(self, runner, session):
        record = runner.run_single(1, '/Users/Admin/Create user')

        assert record.status == 200
        assert record.api_name == 'Create user'
        assert record.collection_name == 'Users API'
        assert record.method == 'post'

        call_kwargs = session.request.call_args.kwargs
        assert call_kwargs['url'] == 'https://api.example.com/users'
        assert call_kwargs['json'] == {'name': 'Jane'}
        assert call_kwargs['headers']['Authorization'] == 'Bearer second-token'
        assert call_kwargs['timeout'] == 30

    def test_collection_variables_applied(self, runner, session):
        runner.run_single(1, '/Users/List users')

        assert session.request.call_args.kwargs['url'] == 'https://api.example.com/users'

    def test_unknown_collection(self, runner):
        with pytest.raises(CollectionNotFoundError):
            runner.run_single(42, '/Health')

    def test_unknown_item(self, runner):
        with pytest.raises(RequestNotFoundError):
            runner.run_single(1, '/Nope')

    def test_collection_without_items(self, session):
        store = CollectionStore()
        store.register_batch([{'info': {'name': 'Raw'}}])
        runner = BatchRunner(store, executor=RequestExecutor(session=session))

        with pytest.raises(InvalidCollectionError):
            runner.run_single(1, '/anything')

    def test_uses_current_token(self, runner, store, session):
        store.update_token(2, 'rotated')

        runner.run_single(2, '/List orders')

        assert session.request.call_args.kwargs['headers']['Authorization'] == 'Bearer rotated'


class TestRunBatch:
    """Test bulk execution."""

    def test_failure_does_not_stop_the_run(self, session, three_request_collection):
        """Test request 2 failing still runs request 3, in order."""
        session.request.side_effect = [
            mock_response(200),
            requests.exceptions.ConnectionError('Connection refused'),
            mock_response(201),
        ]
        store = CollectionStore()
        store.register_batch([three_request_collection])
        runner = BatchRunner(store, executor=RequestExecutor(session=session))

        records = runner.run_all([1])

        assert len(records) == 3
        assert [r.api_name for r in records] == ['Request 1', 'Request 2', 'Request 3']
        assert [r.status for r in records] == [200, ERROR_STATUS, 201]

    def test_runs_collections_in_given_order(self, runner, session):
        records = runner.run_all([2, 1])

        assert [r.collection_name for r in records] == ['Orders API', 'Users API', 'Users API', 'Users API']
        assert session.request.call_count == 4

    def test_bulk_requests_have_no_timeout(self, runner, session):
        runner.run_all([2])

        assert session.request.call_args.kwargs['timeout'] is None

    def test_unknown_collection_fails_before_any_request(self, runner, session):
        with pytest.raises(CollectionNotFoundError):
            runner.run_all([1, 99])

        session.request.assert_not_called()

    def test_filter_by_global_ids(self, runner):
        records = runner.run_batch([BatchTarget(collection_id=1, global_ids=['/Health', '/Users/List users'])])

        # Stored order, not filter order
        assert [r.api_name for r in records] == ['List users', 'Health']

    def test_unbuildable_requests_do_not_stop_the_run(self, session):
        """Test requests that fail while being built still yield records and the run continues."""
        store = CollectionStore()
        store.register_batch([{
            'info': {'name': 'Odd'},
            'item': [
                {'name': 'Numeric header', 'request': {
                    'method': 'GET',
                    'url': 'https://api.example.com/a',
                    'header': [{'key': 5, 'value': 'x'}],
                    'auth': {'type': 'bearer', 'bearer': {'token': 'abc'}}
                }},
                {'name': 'Bad body', 'request': {
                    'method': 'POST',
                    'url': 'https://api.example.com/b',
                    'body': {'mode': 'raw', 'raw': 'x\ud800'}
                }},
                {'name': 'Fine', 'request': {'method': 'GET', 'url': 'https://api.example.com/c'}}
            ]
        }])
        runner = BatchRunner(store, executor=RequestExecutor(session=session))

        records = runner.run_all([1])

        assert [r.api_name for r in records] == ['Numeric header', 'Bad body', 'Fine']
        assert [r.status for r in records] == [200, ERROR_STATUS, 200]
        urls = [c.kwargs['url'] for c in session.request.call_args_list]
        assert urls == ['https://api.example.com/a', 'https://api.example.com/c']

    def test_unmatched_global_ids_are_logged(self, runner, caplog):
        with caplog.at_level(logging.WARNING, logger='postrunner.batch'):
            records = runner.run_batch([BatchTarget(collection_id=1, global_ids=['/Health', '/Nope'])])

        assert [r.api_name for r in records] == ['Health']
        assert '/Nope' in caplog.text
        assert '/Health' not in caplog.text

    def test_token_update_mid_run_applies_to_remaining_requests(self, runner, store, session):
        """Test a token change between requests is seen by later requests."""
        iterator = runner.iter_batch([BatchTarget(collection_id=1)])

        next(iterator)
        store.update_token(1, 'rotated')
        list(iterator)

        auth_headers = [c.kwargs['headers'].get('Authorization') for c in session.request.call_args_list]
        assert auth_headers == ['Bearer second-token', 'Bearer rotated', 'Bearer rotated']

    def test_collection_without_items_is_skipped(self, session, orders_collection):
        store = CollectionStore()
        store.register_batch([{'info': {'name': 'Raw'}}, orders_collection])
        runner = BatchRunner(store, executor=RequestExecutor(session=session))

        records = runner.run_all([1, 2])

        assert [r.collection_name for r in records] == ['Orders API']

    def test_malformed_item_reported_in_place(self, session):
        store = CollectionStore()
        store.register_batch([{
            'info': {'name': 'Mixed'},
            'item': [
                {'name': 'Broken', 'request': {'method': 'GET'}},
                {'name': 'Fine', 'request': {'method': 'GET', 'url': 'https://api.example.com'}}
            ]
        }])
        runner = BatchRunner(store, executor=RequestExecutor(session=session))

        records = runner.run_all([1])

        assert [r.outcome for r in records] == ['invalid_request', 'success']


class TestBatchSummary:
    """Test BatchSummary."""

    def test_counts(self, runner, session):
        session.request.side_effect = [mock_response(200), mock_response(500), mock_response(200)]

        summary = BatchSummary.from_records(runner.run_all([1]))

        assert summary.total == 3
        assert summary.succeeded == 2
        assert summary.failed == 1
        assert round(summary.success_rate, 1) == 66.7

    def test_empty(self):
        assert BatchSummary.from_records([]).success_rate == 0.0
