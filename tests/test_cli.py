"""Test the command-line interface"""

import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from spot_linker import __version__
from spot_linker.cli import cli
from spot_linker.core.exceptions import (
    ConfigError,
    SpotifyError,
    StoreLookupError,
    UnresolvableLinkError,
)
from spot_linker.spotify.models import Track
from spot_linker.stores.models import AppleLinks, BandcampLinks, MatchResult


TRACKS = [Track('Song', 'Band'), Track('Other', 'Nobody')]

RESULTS = [
    MatchResult(
        track=TRACKS[0],
        apple=AppleLinks(web='https://music.apple.com/us/album/x?i=1', confident=True),
        bandcamp=BandcampLinks(
            search='https://bandcamp.com/search?q=Band%20Song&item_type=t',
            direct='https://band.bandcamp.com/track/song',
            score=8
        )
    ),
    MatchResult(
        track=TRACKS[1],
        apple=AppleLinks.empty(),
        bandcamp=BandcampLinks.fallback('https://bandcamp.com/search?q=Nobody%20Other&item_type=t')
    ),
]


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def service():
    """Patch the service and progress bar used by the CLI"""
    instance = MagicMock()
    instance.fetch_tracks.return_value = TRACKS
    instance.match.return_value = RESULTS

    service_cls = MagicMock()
    service_cls.return_value.__enter__.return_value = instance

    with patch('spot_linker.cli.PlaylistLinkService', service_cls), \
            patch('spot_linker.cli.LookupProgressBar', MagicMock()):
        yield instance


@pytest.fixture
def configured(test_config):
    with patch('spot_linker.cli.load_config', return_value=test_config) as load:
        yield load


class TestCli:
    """Test cli command"""

    def test_version(self, runner):
        """Test --version prints the version"""
        result = runner.invoke(cli, ['--version'])
        assert result.exit_code == 0
        assert f'spot-linker {__version__}' in result.output

    def test_no_url_shows_help(self, runner):
        """Test running without --url prints help"""
        result = runner.invoke(cli, [])
        assert result.exit_code == 0
        assert '--url' in result.output

    def test_success(self, runner, configured, service):
        """Test one block per track is printed"""
        result = runner.invoke(cli, ['--url', 'spotify:playlist:ABC123', '--country', 'gb'])

        assert result.exit_code == 0
        assert 'https://band.bandcamp.com/track/song' in result.output
        assert 'https://bandcamp.com/search?q=Nobody%20Other&item_type=t' in result.output
        service.fetch_tracks.assert_called_once_with('spotify:playlist:ABC123')
        assert service.match.call_args.args[:2] == (TRACKS, 'GB')

    def test_threads_override(self, runner, configured, service):
        """Test --threads replaces the configured pool size"""
        with patch('spot_linker.cli.PlaylistLinkService') as service_cls:
            service_cls.return_value.__enter__.return_value = service
            result = runner.invoke(cli, ['--url', 'spotify:playlist:ABC123', '--threads', '16'])

        assert result.exit_code == 0
        config = service_cls.call_args.args[0]
        assert config.lookup.threads == 16

    def test_exports(self, runner, configured, service, temp_dir):
        """Test --csv and --json write files"""
        csv_path = temp_dir / 'links.csv'
        json_path = temp_dir / 'links.json'

        result = runner.invoke(cli, [
            '--url', 'spotify:playlist:ABC123',
            '--csv', str(csv_path),
            '--json', str(json_path),
        ])

        assert result.exit_code == 0
        assert csv_path.read_text(encoding='utf-8').splitlines()[1].startswith('Song,Band,US,')
        assert len(json.loads(json_path.read_text(encoding='utf-8'))['results']) == 2

    def test_empty_playlist(self, runner, configured, service):
        """Test an empty playlist skips matching"""
        service.fetch_tracks.return_value = []
        result = runner.invoke(cli, ['--url', 'spotify:playlist:ABC123'])
        assert result.exit_code == 0
        service.match.assert_not_called()

    def test_invalid_threads(self, runner):
        """Test --threads must be positive"""
        result = runner.invoke(cli, ['--url', 'x', '--threads', '0'])
        assert result.exit_code == 2

    def test_missing_config_file(self, runner, temp_dir):
        """Test a missing explicit config exits with 1"""
        result = runner.invoke(cli, ['--url', 'x', '--config', str(temp_dir / 'nope.yaml')])
        assert result.exit_code == 1
        assert 'Configuration error' in result.output

    def test_invalid_country(self, runner, configured, service):
        """Test a malformed storefront is a configuration error"""
        result = runner.invoke(cli, ['--url', 'x', '--country', 'GBR'])
        assert result.exit_code == 1

    @pytest.mark.parametrize('error, exit_code', [
        (ConfigError('bad config'), 1),
        (UnresolvableLinkError('Could not parse playlist ID'), 2),
        (SpotifyError('Failed to get Spotify token', is_auth_error=True), 3),
        (StoreLookupError('store down', store='itunes'), 4),
        (KeyboardInterrupt(), 130),
        (RuntimeError('surprise'), 1),
    ])
    def test_exit_codes(self, runner, configured, service, error, exit_code):
        """Test each failure class maps to its exit code"""
        service.fetch_tracks.side_effect = error
        result = runner.invoke(cli, ['--url', 'spotify:playlist:ABC123'])
        assert result.exit_code == exit_code
