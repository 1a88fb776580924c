import unittest

from bs4 import BeautifulSoup

from racecard_parser.utils import make_soup, remove_honeypot_links


class TestUtils(unittest.TestCase):

    def test_hidden_anchors_are_removed(self):
        soup = BeautifulSoup(
            '<a href="/race-1">R1</a>'
            '<a href="/race-2" style="display:none">R2</a>'
            '<a href="/race-3" style="color: red; visibility: hidden">R3</a>'
            '<a href="/race-4" style="display: none">R4</a>',
            "html.parser",
        )

        with self.assertLogs(level="INFO"):
            result = remove_honeypot_links(soup)

        self.assertIs(result, soup)
        self.assertEqual([a["href"] for a in soup.find_all("a")], ["/race-1"])

    def test_make_soup_passes_parsed_documents_through(self):
        soup = make_soup("<p>x</p>")
        self.assertIs(make_soup(soup), soup)
        self.assertEqual(make_soup(None).get_text(), "")


if __name__ == '__main__':
    unittest.main()
