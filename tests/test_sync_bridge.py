import json
import os

import pytest
import requests

from tvsaude.services.sync_bridge import AnnouncementSyncBridge
from tests.fakes import FakeResponse, FakeSession

BASE = 'http://api.test/api'
ACTIVE_URL = f'{BASE}/announcements/active'


def announcement(id, type='informativo', priority=1):
    return {'id': id, 'title': f'Aviso {id}', 'type': type, 'priority': priority}


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def bridge(tmp_path, session, timers):
    return AnnouncementSyncBridge(
        base_url=BASE,
        cache_dir=str(tmp_path / 'cache-avisos'),
        interval=30,
        urgent_interval=5,
        session=session,
        timers=timers
    )


def read(path):
    with open(path, encoding='utf-8') as fh:
        return json.load(fh)


def test_sync_all_replaces_cache_with_api_response(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(1), announcement(2), announcement(3)]})
    assert bridge.sync_all()

    current = [announcement(2), announcement(4, type='urgencia')]
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': current})
    assert bridge.sync_all()

    cache = read(bridge.cache_file)
    assert cache['announcements'] == current
    assert cache['total'] == 2
    assert cache['timestamp'] == '2024-05-14T15:00:00'

    status = read(bridge.status_file)
    assert status == {
        'lastSync': '2024-05-14T15:00:00',
        'totalCount': 2,
        'urgentCount': 1,
        'serverUp': True
    }


def test_no_temporary_files_left_behind(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(1)]})
    bridge.sync_all()

    assert sorted(os.listdir(bridge.cache_dir)) == ['avisos-tv.json', 'status.json']


def test_fetch_failure_is_swallowed_and_cache_kept(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(1)]})
    bridge.sync_all()

    session.routes[ACTIVE_URL] = requests.ConnectionError('servidor fora do ar')
    assert bridge.sync_all() is False

    assert read(bridge.cache_file)['announcements'] == [announcement(1)]
    status = read(bridge.status_file)
    assert status['serverUp'] is False
    assert status['totalCount'] == 1
    assert bridge.status()['server_up'] is False


def test_malformed_response_is_swallowed(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'unexpected': True})
    assert bridge.sync_all() is False
    assert not os.path.exists(bridge.cache_file)

    session.routes[ACTIVE_URL] = FakeResponse(status_code=500)
    assert bridge.sync_all() is False


def test_urgent_only_writes_urgent_subset(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [
        announcement(1),
        announcement(2, type='urgencia'),
        announcement(3, priority=4),
        announcement(4, priority=3),
    ]})

    assert bridge.sync_urgent_only()

    assert [a['id'] for a in read(bridge.cache_file)['announcements']] == [2, 3]
    assert read(bridge.status_file)['urgentCount'] == 2


def test_urgent_only_without_urgent_does_not_touch_cache(bridge, session):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(1)]})
    bridge.sync_all()
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(5)]})

    assert bridge.sync_urgent_only() is False
    assert read(bridge.cache_file)['announcements'] == [announcement(1)]


def test_sync_one_pushes_single_announcement(bridge, session):
    session.routes[f'{BASE}/announcements/7'] = FakeResponse({'announcement': announcement(7, type='urgencia')})

    assert bridge.sync_one(7)
    assert read(bridge.cache_file)['announcements'] == [announcement(7, type='urgencia')]


def test_sync_one_missing_announcement(bridge, session):
    session.routes[f'{BASE}/announcements/8'] = FakeResponse({'error': 'not found'}, status_code=404)
    assert bridge.sync_one(8) is False


def test_start_runs_initial_sync_and_both_loops(bridge, session, timers):
    session.routes[ACTIVE_URL] = FakeResponse({'announcements': [announcement(1, type='urgencia')]})

    bridge.start()
    assert session.urls().count(ACTIVE_URL) == 1
    assert bridge.status()['active_loops'] == ['sync', 'urgent']

    timers.advance(30)
    # 1 inicial + 1 completo + 6 de urgentes
    assert session.urls().count(ACTIVE_URL) == 8

    bridge.stop()
    timers.advance(60)
    assert session.urls().count(ACTIVE_URL) == 8
    assert not bridge.running


def test_failing_ticks_never_raise(bridge, session, timers):
    session.routes[ACTIVE_URL] = requests.Timeout('timeout')

    bridge.start()
    timers.advance(120)

    assert bridge.last_sync is None
    assert bridge.running
