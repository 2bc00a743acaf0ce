from datetime import datetime, time

import pytest

from tvsaude.models import Announcement, AnnouncementType
from tvsaude.models.announcement import js_weekday

TUESDAY_15H = datetime(2024, 5, 14, 15, 0)
TUESDAY_10H = datetime(2024, 5, 14, 10, 0)
SATURDAY_15H = datetime(2024, 5, 18, 15, 0)
SUNDAY_15H = datetime(2024, 5, 19, 15, 0)


def build(**kwargs):
    weekdays = kwargs.pop('weekdays', None)
    kwargs.setdefault('is_active', True)
    kwargs.setdefault('type', 'consulta')
    announcement = Announcement(title='Aviso', message='Texto', **kwargs)
    if weekdays is not None:
        announcement.weekdays = weekdays
    return announcement


def test_js_weekday_starts_on_sunday():
    assert js_weekday(SUNDAY_15H) == 0
    assert js_weekday(TUESDAY_15H) == 2
    assert js_weekday(SATURDAY_15H) == 6


def test_clinic_hours_example():
    announcement = build(start_time=time(14, 0), end_time=time(16, 0), weekdays={1, 2, 3, 4, 5})

    assert announcement.is_eligible(TUESDAY_15H)
    assert not announcement.is_eligible(SATURDAY_15H)
    assert not announcement.is_eligible(TUESDAY_10H)


@pytest.mark.parametrize('moment', [TUESDAY_10H, TUESDAY_15H, SATURDAY_15H, SUNDAY_15H])
def test_eligibility_is_conjunction_of_predicates(moment):
    candidates = [
        build(),
        build(is_active=False),
        build(start_date=datetime(2024, 5, 15), end_date=datetime(2024, 5, 20, 23, 59)),
        build(start_time=time(9, 0), end_time=time(11, 0)),
        build(weekdays={0, 6}),
        build(start_time=time(22, 0), end_time=time(6, 0)),
    ]
    for a in candidates:
        expected = bool(a.is_active and a.within_date_range(moment)
                        and a.within_time_range(moment) and a.weekday_allowed(moment))
        assert a.is_eligible(moment) == expected


def test_open_bounds_are_unrestricted():
    assert build().is_eligible(TUESDAY_15H)


def test_inactive_is_never_eligible():
    assert not build(is_active=False).is_eligible(TUESDAY_15H)


def test_date_range_is_inclusive():
    announcement = build(start_date=datetime(2024, 5, 14, 0, 0), end_date=datetime(2024, 5, 14, 23, 59, 59, 999999))
    assert announcement.is_eligible(datetime(2024, 5, 14, 0, 0))
    assert announcement.is_eligible(datetime(2024, 5, 14, 23, 59, 59))
    assert not announcement.is_eligible(datetime(2024, 5, 15, 0, 0))


def test_end_time_includes_whole_minute():
    announcement = build(start_time=time(14, 0), end_time=time(16, 0))
    assert announcement.is_eligible(datetime(2024, 5, 14, 16, 0, 45))
    assert not announcement.is_eligible(datetime(2024, 5, 14, 16, 1))


def test_overnight_window_wraps_midnight():
    announcement = build(start_time=time(22, 0), end_time=time(6, 0))
    assert announcement.is_eligible(datetime(2024, 5, 14, 23, 30))
    assert announcement.is_eligible(datetime(2024, 5, 14, 5, 59))
    assert not announcement.is_eligible(TUESDAY_15H)


def test_sunday_is_day_zero():
    announcement = build(weekdays={0})
    assert announcement.is_eligible(SUNDAY_15H)
    assert not announcement.is_eligible(SATURDAY_15H)


def test_weekdays_roundtrip_through_column():
    announcement = build(weekdays=[5, 1, 3])
    assert announcement.weekdays_raw == '1,3,5'
    assert announcement.weekdays == {1, 3, 5}

    announcement.weekdays = []
    assert announcement.weekdays_raw is None
    assert announcement.weekday_allowed(SUNDAY_15H)


def test_to_dict_carries_type_display_metadata():
    announcement = build(type='urgencia', start_time=time(7, 0))
    data = announcement.to_dict(TUESDAY_15H)

    assert data['duration_ms'] == 60000
    assert data['start_time'] == '07:00'
    assert data['is_eligible'] is True
    assert data['type_label'] == AnnouncementType.get_label('urgencia')


def test_type_durations():
    expected = {
        'consulta': 30000, 'medicacao': 25000, 'campanha': 35000, 'urgencia': 60000,
        'informativo': 20000, 'horario': 15000, 'evento': 30000,
    }
    for tipo, duration in expected.items():
        assert AnnouncementType.get_display(tipo)['duration_ms'] == duration
