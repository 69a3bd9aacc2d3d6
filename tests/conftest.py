"""Pytest configuration and fixtures."""
from datetime import date
from typing import Any, Dict, List

import pytest

from pmo_scheduling.cpm.models import SchedulableItem


@pytest.fixture
def abc_items() -> List[SchedulableItem]:
    """
    Small task network.

    A (4d) feeds B (4d) and C (8d); D is unrelated. C is the driving
    branch, so the critical path is A -> C and B carries 4 days of slack.
    """
    return [
        SchedulableItem(id='A', name='Design', start_date=date(2024, 1, 1), end_date=date(2024, 1, 5)),
        SchedulableItem(id='B', name='Procure', start_date=date(2024, 1, 5), end_date=date(2024, 1, 9),
                        dependencies=('A',)),
        SchedulableItem(id='C', name='Build', start_date=date(2024, 1, 3), end_date=date(2024, 1, 11),
                        dependencies=('A',)),
        SchedulableItem(id='D', name='Permits', start_date=date(2024, 1, 2), end_date=date(2024, 1, 4)),
    ]


@pytest.fixture
def cyclic_items() -> List[SchedulableItem]:
    """Three items forming X -> Y -> Z -> X, plus an independent W."""
    return [
        SchedulableItem(id='X', start_date=date(2024, 1, 1), end_date=date(2024, 1, 3), dependencies=('Z',)),
        SchedulableItem(id='Y', start_date=date(2024, 1, 1), end_date=date(2024, 1, 3), dependencies=('X',)),
        SchedulableItem(id='Z', start_date=date(2024, 1, 1), end_date=date(2024, 1, 3), dependencies=('Y',)),
        SchedulableItem(id='W', start_date=date(2024, 1, 1), end_date=date(2024, 1, 2)),
    ]


@pytest.fixture
def portfolio_projects() -> List[SchedulableItem]:
    """
    Four projects.

    P1 and P2 are linked by timeline (P2 starts 3 days after P1 ends), P1
    and P3 share resource R1, P4 is completed and drops out of the
    portfolio filter.
    """
    return [
        SchedulableItem(id='P1', name='Platform', start_date=date(2024, 1, 1), end_date=date(2024, 1, 31),
                        resource_requirements=('R1', 'R2'), status='active'),
        SchedulableItem(id='P2', name='Mobile', start_date=date(2024, 2, 3), end_date=date(2024, 2, 28),
                        status='active'),
        SchedulableItem(id='P3', name='Analytics', start_date=date(2024, 6, 1), end_date=date(2024, 6, 30),
                        resource_requirements=('R1',), status='planning'),
        SchedulableItem(id='P4', name='Legacy', start_date=date(2024, 1, 2), end_date=date(2024, 1, 20),
                        resource_requirements=('R1',), status='completed'),
    ]


@pytest.fixture
def item_records() -> List[Dict[str, Any]]:
    """Raw records as supplied by the store layer (camelCase keys)."""
    return [
        {
            'id': 'T1',
            'name': 'Kickoff',
            'startDate': '2024-01-01T00:00:00.000Z',
            'endDate': '2024-01-03',
            'progress': 100,
            'priority': 'P0',
            'dependencies': [],
            'status': 'completed',
        },
        {
            'id': 'T2',
            'name': 'Requirements',
            'startDate': '2024-01-03',
            'endDate': '2024-01-10',
            'progress': 40,
            'dependencies': ['T1'],
            'resourceRequirements': [{'resourceId': 'R1', 'allocation': 50}],
            'status': 'active',
        },
    ]
