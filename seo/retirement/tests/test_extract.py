"""
Test Group H: HTML content extraction
"""
from django.test import SimpleTestCase

from seo.retirement.extract import document_from_html

PAGE = """
<html>
<head>
  <title>Best Dance Shoes</title>
  <meta name="description" content=" Picking shoes for every style. ">
  <style>body { color: red; }</style>
</head>
<body>
  <nav>Home Blog Contact</nav>
  <h1>Best Dance Shoes</h1>
  <p>Ballroom shoes need suede soles.</p>
  <h2>Sizing <em>Guide</em></h2>
  <p>Go half a size down.</p>
  <script>track();</script>
  <footer>Copyright</footer>
</body>
</html>
"""


class TestDocumentFromHtml(SimpleTestCase):

    def test_extracts_fields(self):
        doc = document_from_html('https://example.com/shoes', PAGE)

        assert doc.url == 'https://example.com/shoes'
        assert doc.title == 'Best Dance Shoes'
        assert doc.meta_description == 'Picking shoes for every style.'
        assert doc.headings == ('Best Dance Shoes', 'Sizing Guide')

    def test_body_drops_non_content(self):
        body = document_from_html('https://example.com/shoes', PAGE).body

        assert 'Ballroom shoes need suede soles.' in body
        assert 'Go half a size down.' in body
        assert 'track()' not in body
        assert 'Home Blog Contact' not in body
        assert 'Copyright' not in body
        assert 'color: red' not in body

    def test_explicit_fields_win(self):
        doc = document_from_html('https://example.com/shoes', PAGE, title='Shoes', headings=['Intro'])

        assert doc.title == 'Shoes'
        assert doc.headings == ('Intro',)

    def test_fragment_uses_first_h1_as_title(self):
        doc = document_from_html('https://example.com/x', '<h1>Tango Heels</h1><p>Short post.</p>')

        assert doc.title == 'Tango Heels'
        assert doc.body == 'Tango Heels Short post.'
        assert doc.meta_description is None

    def test_empty_html(self):
        doc = document_from_html('https://example.com/x', '', title='Kept')

        assert doc.title == 'Kept'
        assert doc.body == ''
