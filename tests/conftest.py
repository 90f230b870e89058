"""Test configuration and fixtures"""

import pytest
import tempfile
from pathlib import Path
from unittest.mock import Mock

from spot_linker.core.config import Config, LookupConfig, OutputConfig, SpotifyConfig
from spot_linker.spotify.client import SpotifyClient


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def make_response():
    """Factory for fake requests.Response objects"""
    def _make(status_code=200, text='', json_data=None, headers=None):
        response = Mock()
        response.status_code = status_code
        response.text = text
        response.headers = headers or {}
        if isinstance(json_data, Exception):
            response.json.side_effect = json_data
        else:
            response.json.return_value = json_data
        return response
    return _make


@pytest.fixture
def mock_session():
    """requests.Session stand-in; tests configure get/head per case"""
    session = Mock()
    session.get = Mock()
    session.head = Mock()
    return session


@pytest.fixture
def test_config():
    """Fully populated configuration"""
    return Config(
        spotify=SpotifyConfig(client_id='test_id', client_secret='test_secret'),
        lookup=LookupConfig(threads=2, timeout=5.0, country='US'),
        output=OutputConfig(directory=None)
    )


def spotify_item(name, *artists):
    """One playlist item as returned by the playlist items endpoint"""
    return {
        'track': {
            'id': f'id_{name}',
            'name': name,
            'artists': [{'id': f'artist_{a}', 'name': a} for a in artists],
        }
    }


@pytest.fixture
def sample_pages():
    """Two pages of playlist items including a removed and a local track"""
    page2 = {
        'items': [
            spotify_item('Third Song', 'Band C'),
            {'track': {'id': None, 'name': 'Local File', 'artists': []}},
        ],
        'next': None,
        'total': 5,
    }
    page1 = {
        'items': [
            spotify_item('First Song', 'Band A'),
            {'track': None},
            spotify_item('Second Song', 'Band B', 'Guest'),
        ],
        'next': 'https://api.spotify.com/v1/playlists/ABC123/tracks?offset=100&limit=100',
        'total': 5,
    }
    return page1, page2


@pytest.fixture
def mock_spotify():
    """spotipy.Spotify stand-in"""
    return Mock()


@pytest.fixture
def spotify_client(mock_spotify):
    """SpotifyClient wrapping the mocked spotipy instance"""
    return SpotifyClient(mock_spotify)
