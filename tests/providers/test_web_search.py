"""Tests for JinaWebSearch."""

import httpx
import pytest

from askdata.providers.web_search import JinaWebSearch


def _web(requests, status_code=200):
    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text="page text")
    return JinaWebSearch(transport=httpx.MockTransport(handler))


class TestJinaWebSearch:
    """Tests for JinaWebSearch."""

    class TestSearch:
        """SUT: JinaWebSearch.search"""

        async def test_query_is_one_path_segment(self):
            requests = []

            text = await _web(requests).search("sales 2024? q#4 a/b")

            assert text == "page text"
            (request,) = requests
            assert request.url.host == "s.jina.ai"
            assert request.url.raw_path == b"/sales%202024%3F%20q%234%20a%2Fb"
            assert request.url.query == b""

        async def test_error_status_raises(self):
            with pytest.raises(httpx.HTTPStatusError):
                await _web([], status_code=500).search("duckdb")

    class TestRead:
        """SUT: JinaWebSearch.read"""

        async def test_url_appended_to_reader(self):
            requests = []

            text = await _web(requests).read("https://example.com/docs")

            assert text == "page text"
            assert requests[0].url.host == "r.jina.ai"
            assert requests[0].url.path == "/https://example.com/docs"
