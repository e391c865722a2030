"""Tests for Link header parsing and PageResult."""

from ospo_crawler.github import PageResult, TransportResponse, next_page_url, parse_link_header
from tests.fixtures import URL_HOST, make_link_header, make_page


class TestParseLinkHeader:
    """Tests for parse_link_header."""

    def test_all_relations(self):
        header = (
            '<https://api.github.com/x?page=1>; rel="first", '
            '<https://api.github.com/x?page=2>; rel="prev", '
            '<https://api.github.com/x?page=4>; rel="next", '
            '<https://api.github.com/x?page=9>; rel="last"'
        )

        links = parse_link_header(header)

        assert links == {
            "first": "https://api.github.com/x?page=1",
            "prev": "https://api.github.com/x?page=2",
            "next": "https://api.github.com/x?page=4",
            "last": "https://api.github.com/x?page=9",
        }

    def test_empty_header(self):
        assert parse_link_header(None) == {}
        assert parse_link_header("") == {}

    def test_unquoted_and_uppercase_rel(self):
        assert parse_link_header("<https://a/b?page=2>; REL=Next") == {
            "next": "https://a/b?page=2"
        }

    def test_multiple_relations_in_one_segment(self):
        links = parse_link_header('<https://a/b?page=3>; rel="next last"')
        assert links == {"next": "https://a/b?page=3", "last": "https://a/b?page=3"}

    def test_segment_without_rel_ignored(self):
        links = parse_link_header('<https://a/b>; title="x", <https://a/c>; rel="next"')
        assert links == {"next": "https://a/c"}

    def test_next_page_url(self):
        headers = {"link": make_link_header("paged", previous=1, next_page=3, last=5)}
        assert next_page_url(headers) == f"{URL_HOST}/paged?page=3"

    def test_next_page_url_missing(self):
        assert next_page_url({"link": make_link_header("paged", previous=1, last=2)}) is None
        assert next_page_url({}) is None


class TestPageResult:
    """Tests for PageResult.from_response."""

    def test_from_paged_response(self):
        response = make_page("paged", [{"page": 1}], next_page=2, last=3, remaining=42)

        page = PageResult.from_response(f"{URL_HOST}/paged", response)

        assert page.body == [{"page": 1}]
        assert page.items == [{"page": 1}]
        assert page.next_url == f"{URL_HOST}/paged?page=2"
        assert page.rate_remaining == 42
        assert page.links["last"] == f"{URL_HOST}/paged?page=3"

    def test_last_page_with_object_body(self):
        response = TransportResponse(status_code=200, body={"id": 1})

        page = PageResult.from_response("u", response)

        assert page.next_url is None
        assert page.items == [{"id": 1}]
        assert page.rate_remaining is None

    def test_transport_response_lowercases_headers(self):
        response = TransportResponse(status_code=200, headers={"Link": "<u>; rel=\"next\""})

        assert response.headers == {"link": '<u>; rel="next"'}
        assert response.is_success
