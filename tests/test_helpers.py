import threading
from datetime import date, datetime, time

import pytest

from tvsaude.utils.helpers import (
    format_clock, get_client_ip, parse_date_bound, parse_time_of_day, parse_weekdays
)
from tvsaude.utils.timers import ThreadingTimers


def test_date_only_bounds_cover_whole_day():
    assert parse_date_bound('2024-05-10') == datetime(2024, 5, 10, 0, 0)
    assert parse_date_bound('2024-05-10', end=True) == datetime(2024, 5, 10, 23, 59, 59, 999999)
    assert parse_date_bound(date(2024, 5, 10), end=True).time() == time.max
    assert parse_date_bound('2024-05-10T08:30:00') == datetime(2024, 5, 10, 8, 30)
    assert parse_date_bound('') is None


def test_invalid_date_bound():
    with pytest.raises(ValueError):
        parse_date_bound('10/05/2024')


def test_time_of_day():
    assert parse_time_of_day('07:00') == time(7, 0)
    assert parse_time_of_day('16:30:15') == time(16, 30, 15)
    assert parse_time_of_day(None) is None
    with pytest.raises(ValueError):
        parse_time_of_day('7h')


def test_weekdays_parsing():
    assert parse_weekdays('1,2,3') == {1, 2, 3}
    assert parse_weekdays([0, 6]) == {0, 6}
    assert parse_weekdays([]) == set()
    with pytest.raises(ValueError):
        parse_weekdays([7])


def test_clock_in_portuguese():
    assert format_clock(datetime(2024, 5, 19, 9, 5)) == {
        'time': '09:05',
        'date': 'domingo, 19 de maio de 2024'
    }


@pytest.mark.parametrize('path, headers, expected', [
    ('/?clientIp=10.0.50.10', {'X-Forwarded-For': '1.1.1.1'}, '10.0.50.10'),
    ('/', {'X-Forwarded-For': '10.0.50.11, 172.16.0.1'}, '10.0.50.11'),
    ('/', {'X-Real-IP': '10.0.50.12'}, '10.0.50.12'),
    ('/', {}, '127.0.0.1'),
])
def test_client_ip_priority(app, path, headers, expected):
    with app.test_request_context(path, headers=headers, environ_base={'REMOTE_ADDR': '127.0.0.1'}):
        assert get_client_ip() == expected


def test_threading_timers_fire_and_cancel():
    timers = ThreadingTimers()
    fired = threading.Event()
    cancelled = []

    timers.call_later(0.01, fired.set)
    handle = timers.call_later(0.01, cancelled.append, 'não deveria rodar')
    handle.cancel()

    assert fired.wait(2)
    timers.stop()
    assert cancelled == []


def test_threading_timers_periodic_until_stop():
    timers = ThreadingTimers()
    ticks = []
    done = threading.Event()

    def tick():
        ticks.append(1)
        if len(ticks) >= 3:
            done.set()

    timers.every(0.01, tick, name='tick')

    assert done.wait(2)
    timers.stop()


def test_unserialized_callback_runs_while_lock_is_held():
    timers = ThreadingTimers()
    unlocked = threading.Event()
    locked = threading.Event()

    with timers.lock:
        timers.call_later(0, unlocked.set, serialized=False)
        timers.call_later(0, locked.set)
        assert unlocked.wait(2)
        assert not locked.wait(0.2)

    assert locked.wait(2)
    timers.stop()
