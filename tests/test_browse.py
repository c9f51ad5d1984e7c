"""
Tests for the browse tool.
"""

import httpx
import pytest

from job_agent.tools.browse import fetch_page, page_to_markdown

PAGE = """
<html>
  <head><title>Senior Python Engineer</title><style>body {}</style></head>
  <body>
    <nav><a href="/">Home</a></nav>
    <div class="ads">Buy now</div>
    <main>
      <h1>Senior Python Engineer</h1>
      <p>Join our   platform team.</p>
      <h2>Requirements</h2>
      <ul><li>Python</li><li>FastAPI</li></ul>
      <pre>pip install job-agent</pre>
    </main>
    <script>track()</script>
    <footer>Copyright</footer>
  </body>
</html>
"""


class TestPageToMarkdown:
    """Test HTML cleanup and rendering."""

    def test_front_matter(self):
        md = page_to_markdown(PAGE)
        assert md.startswith("---\ntitle: 'Senior Python Engineer'\n---\n\n")

    def test_main_content(self):
        md = page_to_markdown(PAGE)
        assert "# Senior Python Engineer" in md
        assert "Join our platform team." in md
        assert "## Requirements" in md
        assert "- Python" in md
        assert "```\npip install job-agent\n```" in md

    def test_noise_removed(self):
        md = page_to_markdown(PAGE)
        for noise in ("Home", "Buy now", "track()", "Copyright"):
            assert noise not in md

    def test_title_from_h1(self):
        md = page_to_markdown("<body><h1>Only Heading</h1><p>text</p></body>")
        assert "title: 'Only Heading'" in md


class TestFetchPage:
    """Test fetching with a mocked transport."""

    @pytest.mark.asyncio
    async def test_success(self):
        def handler(request):
            assert "Mozilla" in request.headers["User-Agent"]
            return httpx.Response(200, text=PAGE)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            md = await fetch_page("https://jobs.example.com/1", client=client)
        assert "Join our platform team." in md

    @pytest.mark.asyncio
    async def test_http_error_returns_text(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(404))
        async with httpx.AsyncClient(transport=transport) as client:
            result = await fetch_page("https://jobs.example.com/missing", client=client)
        assert result == "Error retrieving website: 404 Not Found"

    @pytest.mark.asyncio
    async def test_network_error_returns_text(self):
        def handler(request):
            raise httpx.ConnectError("no route", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            result = await fetch_page("https://jobs.example.com/1", client=client)
        assert result.startswith("Error browsing website:")

    @pytest.mark.asyncio
    async def test_malformed_url_returns_text(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=PAGE))
        async with httpx.AsyncClient(transport=transport) as client:
            result = await fetch_page("http://[::1", client=client)
        assert result.startswith("Error browsing website:")
