"""
Test Group E: URL and rounding helpers
"""
from django.test import SimpleTestCase

from seo.retirement.utils import (
    get_parent_url,
    get_path,
    get_path_segments,
    get_topic,
    has_query_string,
    parse_url,
    round_half_up,
    tokenize,
)


class TestUrlHelpers(SimpleTestCase):

    def test_parse_rejects_relative_and_broken(self):
        assert parse_url('/blog/post/') is None
        assert parse_url('') is None
        assert parse_url('https://example.com:port/') is None
        assert parse_url('https://example.com/blog/') is not None

    def test_path_segments(self):
        assert get_path_segments('https://example.com/service-area/event-planner/brooklyn/') == [
            'service-area',
            'event-planner',
            'brooklyn',
        ]
        assert get_path_segments('https://example.com') == []
        assert get_path_segments('no-host') is None

    def test_parent_url(self):
        assert get_parent_url('https://example.com/blog/2019/old-post/') == 'https://example.com/blog/2019/'
        assert get_parent_url('https://example.com/old-post') == 'https://example.com/'
        assert get_parent_url('https://example.com/') == 'https://example.com/'
        assert get_parent_url('old-post') is None

    def test_path_and_query(self):
        assert get_path('https://example.com/a/b?x=1') == '/a/b'
        assert get_path('not a url') == 'not a url'
        assert has_query_string('https://example.com/a?x=1') is True
        assert has_query_string('https://example.com/a') is False

    def test_topic(self):
        assert get_topic('https://example.com/blog/best-dance-shoes/') == 'best dance shoes'
        assert get_topic('https://example.com/') == 'content'

    def test_tokenize(self):
        assert tokenize('Dance  shoes\nDANCE') == {'dance', 'shoes'}
        assert tokenize(None) == set()


class TestRounding(SimpleTestCase):

    def test_halves_round_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(12.5) == 13
        assert round_half_up(0.5) == 1
        assert round_half_up(2.4) == 2
        assert round_half_up(0) == 0
