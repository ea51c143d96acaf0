"""Shared fixtures: sample Postman collection documents."""

import copy

import pytest


@pytest.fixture
def users_collection():
    """Collection with nested folders, bearer auth and a raw JSON body."""
    return {
        'info': {
            'name': 'Users API',
            'schema': 'https://schema.getpostman.com/json/collection/v2.1.0/collection.json'
        },
        'variable': [
            {'key': 'baseUrl', 'value': 'https://api.example.com'}
        ],
        'item': [
            {
                'name': 'Users',
                'item': [
                    {
                        'name': 'List users',
                        'request': {
                            'method': 'GET',
                            'url': {'raw': '{{baseUrl}}/users'},
                            'header': [{'key': 'Accept', 'value': 'application/json'}],
                            'auth': {'type': 'bearer', 'bearer': {'token': 'first-token'}}
                        }
                    },
                    {
                        'name': 'Admin',
                        'item': [
                            {
                                'name': 'Create user',
                                'request': {
                                    'method': 'post',
                                    'url': {'raw': 'https://api.example.com/users'},
                                    'header': [{'key': 'Content-Type', 'value': 'application/json'}],
                                    'body': {'mode': 'raw', 'raw': '{"name": "Jane"}'},
                                    'auth': {
                                        'type': 'bearer',
                                        'bearer': [{'key': 'token', 'value': 'second-token', 'type': 'string'}]
                                    }
                                }
                            }
                        ]
                    }
                ]
            },
            {
                'name': 'Health',
                'request': {
                    'method': 'GET',
                    'url': 'https://api.example.com/health'
                }
            }
        ]
    }


@pytest.fixture
def orders_collection():
    """Flat collection with a single bearer-auth request."""
    return {
        'info': {'name': 'Orders API'},
        'item': [
            {
                'name': 'List orders',
                'request': {
                    'method': 'GET',
                    'url': {'raw': 'https://orders.example.com/orders'},
                    'auth': {'type': 'bearer', 'bearer': {'token': 'orders-token'}}
                }
            }
        ]
    }


@pytest.fixture
def clone():
    """Deep-copy helper for comparing against untouched input."""
    return copy.deepcopy
