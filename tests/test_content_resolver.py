import pytest
from sqlalchemy.exc import OperationalError

from tvsaude.models import Video
from tvsaude.services.content_resolver import ContentResolver, ContentUnavailableError
from tests.factories import make_image, make_locality, make_playlist, make_video


@pytest.fixture
def resolver(app):
    return ContentResolver()


def titles(content):
    return [v['title'] for v in content.videos]


def test_ubs_centro_scenario(resolver):
    vacinacao = make_video('Vacinação')
    geral = make_video('Higiene', order=1)
    make_playlist('Geral', [geral], active=True)
    make_locality('UBS Centro', ips=['10.0.50.10'], videos=[vacinacao])

    matched = resolver.resolve('10.0.50.10')
    assert matched.locality['name'] == 'UBS Centro'
    assert titles(matched) == ['Vacinação']
    assert matched.source == 'locality'

    unmatched = resolver.resolve('10.0.99.99')
    assert unmatched.locality is None
    assert titles(unmatched) == ['Higiene']
    assert unmatched.source == 'active_playlist'


def test_falls_back_to_all_active_videos(resolver):
    make_video('B', order=2)
    make_video('A', order=1)
    make_video('Inativo', active=False)

    content = resolver.resolve('192.168.0.9')

    assert titles(content) == ['A', 'B']
    assert content.source == 'all_videos'


def test_no_content_anywhere_is_empty_not_error(resolver):
    content = resolver.resolve('192.168.0.9')
    assert content.videos == []
    assert content.to_dict()['total'] == 0


def test_locality_merges_direct_and_playlist_videos(resolver):
    a = make_video('A', order=3)
    b = make_video('B', order=1)
    c = make_video('C', order=2)
    d = make_video('D', order=0, active=False)
    playlist = make_playlist('Local', [b, c, d])
    make_locality(ips=['10.0.50.10'], videos=[(a, 5), (b, 1)], playlists=[(playlist, 2)])

    content = resolver.resolve('10.0.50.10')

    # B aparece uma vez, com a maior prioridade (playlist 2 > vínculo direto 1)
    assert titles(content) == ['A', 'B', 'C']
    assert [v['priority'] for v in content.videos] == [5, 2, 2]
    assert content.playlist['name'] == 'Local'


def test_locality_without_videos_uses_global_content(resolver):
    geral = make_video('Geral')
    make_playlist('Global', [geral], active=True)
    make_locality('UBS Vazia', ips=['10.0.60.5'])

    content = resolver.resolve('10.0.60.5')

    assert titles(content) == ['Geral']
    assert content.locality['name'] == 'UBS Vazia'


def test_inactive_locality_is_ignored(resolver):
    video = make_video('Local')
    make_locality(ips=['10.0.50.10'], videos=[video], active=False)

    assert resolver.find_locality('10.0.50.10') is None


@pytest.mark.parametrize('client_ip', ['10.0.50.77', '::ffff:10.0.50.77'])
def test_cidr_range_and_mapped_ipv6(resolver, client_ip):
    locality = make_locality(ranges=['10.0.50.0/24'])
    assert resolver.find_locality(client_ip).id == locality.id


def test_dash_range(resolver):
    locality = make_locality(ranges=['10.0.50.10-10.0.50.20'])
    assert resolver.find_locality('10.0.50.15').id == locality.id
    assert resolver.find_locality('10.0.50.21') is None


def test_exact_ip_wins_over_range(resolver):
    make_locality('Rede', ranges=['10.0.50.0/24'])
    exact = make_locality('Recepção', ips=['10.0.50.10'])

    assert resolver.find_locality('10.0.50.10').id == exact.id


def test_invalid_ip_has_no_locality(resolver):
    make_locality(ranges=['10.0.50.0/24'])
    assert resolver.find_locality('not-an-ip') is None
    assert resolver.find_locality(None) is None


def test_database_error_in_locality_lookup_falls_back(resolver, monkeypatch):
    geral = make_video('Geral')
    make_playlist('Global', [geral], active=True)

    def broken(client_ip):
        raise OperationalError('SELECT', {}, Exception('database is locked'))

    monkeypatch.setattr(resolver, 'find_locality', broken)

    content = resolver.resolve('10.0.50.10')
    assert titles(content) == ['Geral']


class BrokenQuery:
    def filter_by(self, **kwargs):
        raise OperationalError('SELECT', {}, Exception('disk I/O error'))


def test_every_path_failing_raises(resolver, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError('SELECT', {}, Exception('disk I/O error'))

    monkeypatch.setattr(resolver, 'find_locality', broken)
    monkeypatch.setattr(resolver, 'active_playlist_content', broken)
    monkeypatch.setattr(Video, 'query', BrokenQuery())

    with pytest.raises(ContentUnavailableError):
        resolver.resolve('10.0.50.10')


def test_images_by_locality_then_global(resolver):
    global_image = make_image('Global', order=0)
    local_low = make_image('Baixa', order=0)
    local_high = make_image('Alta', order=5)
    make_locality(ips=['10.0.50.10'], images=[(local_low, 1), (local_high, 3)])

    assert [i['title'] for i in resolver.resolve_images('10.0.50.10')] == ['Alta', 'Baixa']
    assert [i['id'] for i in resolver.resolve_images('10.9.9.9')] == [
        global_image.id, local_low.id, local_high.id
    ]
