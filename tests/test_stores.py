"""Test Bandcamp and iTunes lookups"""

import pytest
import requests

from spot_linker.stores.bandcamp import (
    REQUEST_HEADERS,
    BandcampSearcher,
    build_search_url,
    extract_track_urls,
)
from spot_linker.stores.itunes import (
    ITUNES_SEARCH_URL,
    ITunesSearcher,
    build_store_candidates,
)
from spot_linker.stores.models import AppleLinks


BANDCAMP_PAGE = '''
<ul class="result-items">
  <li><a href="https://other.bandcamp.com/track/something-else?from=search">x</a></li>
  <li><a href="https://band.bandcamp.com/track/song?from=search">y</a></li>
  <li><a href="https://band.bandcamp.com/album/record">z</a></li>
  <li><a href="https://band.bandcamp.com/track/song?from=search">again</a></li>
</ul>
'''


class TestBandcampHelpers:
    """Test Bandcamp URL helpers"""

    def test_search_url_encoding(self):
        """Test queries are encoded like encodeURIComponent"""
        assert build_search_url('Band Song') == 'https://bandcamp.com/search?q=Band%20Song&item_type=t'
        assert build_search_url('AC/DC T.N.T.') == 'https://bandcamp.com/search?q=AC%2FDC%20T.N.T.&item_type=t'
        assert build_search_url("Guns N' Roses") == "https://bandcamp.com/search?q=Guns%20N'%20Roses&item_type=t"

    def test_extract_dedupes_in_order(self):
        """Test track URLs are deduplicated preserving first appearance"""
        assert extract_track_urls(BANDCAMP_PAGE) == [
            'https://other.bandcamp.com/track/something-else',
            'https://band.bandcamp.com/track/song',
        ]


class TestBandcampSearcher:
    """Test BandcampSearcher.lookup"""

    def test_direct_match(self, mock_session, make_response):
        """Test the best candidate above threshold becomes the direct link"""
        mock_session.get.return_value = make_response(text=BANDCAMP_PAGE)
        searcher = BandcampSearcher(mock_session, timeout=4.0)

        links = searcher.lookup('Song (Live) - 2019 Remaster', 'Band')

        expected_search = 'https://bandcamp.com/search?q=Band%20Song&item_type=t'
        assert links.direct == 'https://band.bandcamp.com/track/song'
        assert links.search == expected_search
        assert links.score == 8
        mock_session.get.assert_called_once_with(
            expected_search, headers=REQUEST_HEADERS, timeout=4.0
        )

    def test_below_threshold(self, mock_session, make_response):
        """Test weak candidates only yield the search link"""
        mock_session.get.return_value = make_response(
            text='<a href="https://other.bandcamp.com/track/something-else">x</a>'
        )
        links = BandcampSearcher(mock_session).lookup('Song', 'Band')

        assert links.direct is None
        assert links.score == 4
        assert links.search.startswith('https://bandcamp.com/search?q=')

    def test_tie_keeps_first(self, mock_session, make_response):
        """Test the earlier of two equal scores wins"""
        mock_session.get.return_value = make_response(
            text='https://band.bandcamp.com/track/song-a https://band.bandcamp.com/track/song-b'
        )
        links = BandcampSearcher(mock_session).lookup('Song', 'Band')
        assert links.direct == 'https://band.bandcamp.com/track/song-a'

    def test_no_candidates(self, mock_session, make_response):
        """Test an empty results page"""
        mock_session.get.return_value = make_response(text='<html></html>')
        links = BandcampSearcher(mock_session).lookup('Song', 'Band')
        assert links.direct is None
        assert links.score is None

    def test_http_error(self, mock_session, make_response):
        """Test non-200 responses fall back to the search link"""
        mock_session.get.return_value = make_response(status_code=503, text=BANDCAMP_PAGE)
        links = BandcampSearcher(mock_session).lookup('Song', 'Band')
        assert links.direct is None
        assert links.search == 'https://bandcamp.com/search?q=Band%20Song&item_type=t'

    def test_network_error(self, mock_session):
        """Test network failures never raise"""
        mock_session.get.side_effect = requests.ConnectionError('down')
        links = BandcampSearcher(mock_session).lookup('Song', 'Band')
        assert links.direct is None
        assert links.search == 'https://bandcamp.com/search?q=Band%20Song&item_type=t'


class TestBuildStoreCandidates:
    """Test iTunes deep link construction"""

    def test_track_and_collection(self):
        """Test three deep links, most specific first"""
        assert build_store_candidates(111, 222) == (
            'itms://itunes.apple.com/WebObjects/MZStore.woa/wa/viewAlbum?i=111&id=222&uo=4&app=itunes',
            'itms://itunes.apple.com/album/id222?i=111&uo=4&app=itunes',
            'itms://itunes.apple.com/WebObjects/MZStore.woa/wa/viewSong?i=111&uo=4&app=itunes',
        )

    def test_collection_only(self):
        """Test album link only"""
        assert build_store_candidates(None, 222) == (
            'itms://itunes.apple.com/album/id222?uo=4&app=itunes',
        )

    @pytest.mark.parametrize('track_id, collection_id', [(111, None), (None, None)])
    def test_no_collection(self, track_id, collection_id):
        """Test no links without a collection"""
        assert build_store_candidates(track_id, collection_id) == ()


class TestITunesSearcher:
    """Test ITunesSearcher.lookup"""

    RESULTS = {
        'resultCount': 2,
        'results': [
            {
                'artistName': 'Someone Else', 'trackName': 'Song',
                'trackId': 1, 'collectionId': 2,
                'trackViewUrl': 'https://music.apple.com/us/album/x?i=1',
            },
            {
                'artistName': 'The Band', 'trackName': 'Song (Remastered)',
                'trackId': 11, 'collectionId': 22,
                'trackViewUrl': 'https://music.apple.com/gb/album/y?i=11',
            },
        ],
    }

    def test_request_parameters(self, mock_session, make_response):
        """Test the search term uses the cleaned title first"""
        mock_session.get.return_value = make_response(json_data={'results': []})

        ITunesSearcher(mock_session, timeout=3.0).lookup('Song - 2019 Remaster', 'Band', 'GB')

        mock_session.get.assert_called_once_with(
            ITUNES_SEARCH_URL,
            params={
                'term': 'Song Band',
                'media': 'music',
                'entity': 'song',
                'limit': '5',
                'country': 'GB',
            },
            timeout=3.0
        )

    def test_prefers_containing_result(self, mock_session, make_response):
        """Test the first result containing artist and title wins"""
        mock_session.get.return_value = make_response(json_data=self.RESULTS)

        links = ITunesSearcher(mock_session).lookup('Song', 'Band', 'GB')

        assert links.confident
        assert links.web == 'https://music.apple.com/gb/album/y?i=11'
        assert links.store_candidates == build_store_candidates(11, 22)

    def test_falls_back_to_first_result(self, mock_session, make_response):
        """Test the first result is used when none contains both"""
        mock_session.get.return_value = make_response(json_data=self.RESULTS)

        links = ITunesSearcher(mock_session).lookup('Different', 'Nobody')

        assert not links.confident
        assert links.web == 'https://music.apple.com/us/album/x?i=1'

    def test_collection_view_url(self, mock_session, make_response):
        """Test the album page is used when there is no track page"""
        mock_session.get.return_value = make_response(json_data={'results': [{
            'artistName': 'Band', 'trackName': 'Song', 'collectionId': 5,
            'collectionViewUrl': 'https://music.apple.com/us/album/z',
        }]})

        links = ITunesSearcher(mock_session).lookup('Song', 'Band')

        assert links.web == 'https://music.apple.com/us/album/z'
        assert links.store_candidates == ('itms://itunes.apple.com/album/id5?uo=4&app=itunes',)

    def test_default_country(self, mock_session, make_response):
        """Test the US storefront is used when none is given"""
        mock_session.get.return_value = make_response(json_data={'results': []})
        ITunesSearcher(mock_session).lookup('Song', 'Band', None)
        assert mock_session.get.call_args.kwargs['params']['country'] == 'US'

    @pytest.mark.parametrize('response_kwargs', [
        {'json_data': {'results': []}},
        {'json_data': {'unexpected': True}},
        {'status_code': 500, 'json_data': {'results': []}},
        {'json_data': ValueError('no json')},
    ])
    def test_no_usable_result(self, mock_session, make_response, response_kwargs):
        """Test empty, malformed and failed responses give empty links"""
        mock_session.get.return_value = make_response(**response_kwargs)
        assert ITunesSearcher(mock_session).lookup('Song', 'Band') == AppleLinks.empty()

    def test_network_error(self, mock_session):
        """Test network failures never raise"""
        mock_session.get.side_effect = requests.Timeout('slow')
        assert ITunesSearcher(mock_session).lookup('Song', 'Band') == AppleLinks.empty()
