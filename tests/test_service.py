"""Test the playlist link service"""

from unittest.mock import patch

import pytest
import requests
from spotipy import SpotifyException

from spot_linker.core.exceptions import SpotifyError
from spot_linker.service import PlaylistLinkService


@pytest.fixture
def three_track_page():
    return {
        'items': [
            {'track': {'name': 'One (Live)', 'artists': [{'name': 'Band'}]}},
            {'track': {'name': 'Two', 'artists': [{'name': 'Band'}, {'name': 'Guest'}]}},
            {'track': {'name': 'Three - 2011 Remaster', 'artists': [{'name': 'Other'}]}},
        ],
        'next': None,
    }


@pytest.fixture
def connected(spotify_client):
    """Patch token acquisition to hand out the mocked client"""
    with patch('spot_linker.service.SpotifyClient.connect', return_value=spotify_client) as connect:
        yield connect


class TestHandleRequest:
    """Test PlaylistLinkService.handle_request"""

    @pytest.mark.parametrize('payload', [
        None,
        [],
        {},
        {'playlistUrl': ''},
        {'playlistUrl': '   '},
        {'playlistUrl': 42},
    ])
    def test_missing_url(self, test_config, mock_session, payload):
        """Test requests without a playlist URL are rejected"""
        service = PlaylistLinkService(test_config, session=mock_session)
        assert service.handle_request(payload) == ({'error': 'playlistUrl required'}, 400)

    def test_invalid_country(self, test_config, mock_session):
        """Test a malformed storefront is a caller error"""
        service = PlaylistLinkService(test_config, session=mock_session)
        body, status = service.handle_request({'playlistUrl': 'spotify:playlist:ABC', 'country': 'GBR'})
        assert status == 400
        assert 'two-letter' in body['error']

    def test_all_lookups_fail(
        self, test_config, mock_session, mock_spotify, connected, three_track_page
    ):
        """Test a playlist whose every store lookup fails still returns all rows"""
        mock_spotify.playlist_items.return_value = three_track_page
        mock_session.get.side_effect = requests.ConnectionError('offline')

        service = PlaylistLinkService(test_config, session=mock_session)
        body, status = service.handle_request({'playlistUrl': 'spotify:playlist:ABC123'})

        assert status == 200
        assert [row['title'] for row in body['results']] == [
            'One (Live)', 'Two', 'Three - 2011 Remaster'
        ]
        assert body['results'][1]['artist'] == 'Band, Guest'
        for row in body['results']:
            assert row['links']['bandcampSearch']
            assert row['links']['bandcamp'] is None
            assert row['links']['appleStoreCandidates'] == []
            assert row['links']['appleWeb'] is None
        assert body['results'][0]['links']['bandcampSearch'] == (
            'https://bandcamp.com/search?q=Band%20One&item_type=t'
        )
        mock_spotify.playlist_items.assert_called_once_with(
            'ABC123', limit=100, additional_types=('track',)
        )

    def test_country_upper_cased(
        self, test_config, mock_session, mock_spotify, connected, three_track_page, make_response
    ):
        """Test the storefront reaches iTunes upper-cased"""
        mock_spotify.playlist_items.return_value = three_track_page
        mock_session.get.return_value = make_response(status_code=503)

        service = PlaylistLinkService(test_config, session=mock_session)
        _, status = service.handle_request({'playlistUrl': 'spotify:playlist:ABC123', 'country': 'gb'})

        assert status == 200
        countries = {
            c.kwargs['params']['country']
            for c in mock_session.get.call_args_list if 'params' in c.kwargs
        }
        assert countries == {'GB'}

    def test_default_country(
        self, test_config, mock_session, mock_spotify, connected, three_track_page, make_response
    ):
        """Test the configured storefront is used when none is sent"""
        mock_spotify.playlist_items.return_value = three_track_page
        mock_session.get.return_value = make_response(status_code=503)

        PlaylistLinkService(test_config, session=mock_session).handle_request(
            {'playlistUrl': 'spotify:playlist:ABC123'}
        )

        countries = {
            c.kwargs['params']['country']
            for c in mock_session.get.call_args_list if 'params' in c.kwargs
        }
        assert countries == {'US'}

    def test_empty_country_uses_default(
        self, test_config, mock_session, mock_spotify, connected, three_track_page, make_response
    ):
        """Test an empty storefront field falls back to the configured one"""
        mock_spotify.playlist_items.return_value = three_track_page
        mock_session.get.return_value = make_response(status_code=503)

        service = PlaylistLinkService(test_config, session=mock_session)
        _, status = service.handle_request({'playlistUrl': 'spotify:playlist:ABC123', 'country': ''})

        assert status == 200
        countries = {
            c.kwargs['params']['country']
            for c in mock_session.get.call_args_list if 'params' in c.kwargs
        }
        assert countries == {'US'}

    def test_token_failure(self, test_config, mock_session):
        """Test a credential failure aborts with 500"""
        error = SpotifyError('Failed to get Spotify token: invalid_client', is_auth_error=True)
        with patch('spot_linker.service.SpotifyClient.connect', side_effect=error):
            body, status = PlaylistLinkService(test_config, session=mock_session).handle_request(
                {'playlistUrl': 'spotify:playlist:ABC123'}
            )

        assert status == 500
        assert body == {'error': 'Failed to get Spotify token: invalid_client'}

    def test_unresolvable_link(self, test_config, mock_session, connected):
        """Test an unparseable reference aborts with 500"""
        body, status = PlaylistLinkService(test_config, session=mock_session).handle_request(
            {'playlistUrl': 'definitely not a playlist'}
        )
        assert status == 500
        assert body == {'error': 'Could not parse playlist ID'}

    def test_track_listing_failure(self, test_config, mock_session, mock_spotify, connected):
        """Test a failing track listing aborts with 500 and no partial results"""
        mock_spotify.playlist_items.side_effect = SpotifyException(404, -1, 'Not found')

        body, status = PlaylistLinkService(test_config, session=mock_session).handle_request(
            {'playlistUrl': 'https://open.spotify.com/playlist/ABC123'}
        )

        assert status == 500
        assert body == {'error': 'Failed to fetch Spotify tracks: Not found'}
        mock_session.get.assert_not_called()

    def test_unexpected_error(self, test_config, mock_session):
        """Test unexpected exceptions still produce an error body"""
        with patch('spot_linker.service.SpotifyClient.connect', side_effect=RuntimeError('kaboom')):
            body, status = PlaylistLinkService(test_config, session=mock_session).handle_request(
                {'playlistUrl': 'spotify:playlist:ABC123'}
            )
        assert (body, status) == ({'error': 'kaboom'}, 500)


class TestSessionLifetime:
    """Test session ownership"""

    def test_owned_session_closed(self, test_config):
        """Test a service-created session is closed on exit"""
        with patch('spot_linker.service.requests.Session') as session_cls:
            with PlaylistLinkService(test_config):
                pass
        session_cls.return_value.close.assert_called_once()

    def test_supplied_session_left_open(self, test_config, mock_session):
        """Test a caller-supplied session is not closed"""
        with PlaylistLinkService(test_config, session=mock_session):
            pass
        mock_session.close.assert_not_called()
