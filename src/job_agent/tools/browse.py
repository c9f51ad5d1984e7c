"""
Browse Web Tool
===============

Fetches a page and returns a markdown rendition of its main content,
prefixed with a small front-matter block carrying the page title.
"""

import logging
from typing import List, Optional

import httpx
from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/114.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

NOISE_SELECTORS = "script, style, nav, footer, iframe, .ads, .advertisement, .banner"
MAIN_SELECTORS = "article, main, .content, #content, .post, .job-description, .job-details"
BLOCK_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6", "p", "li", "pre", "blockquote"]

BROWSE_WEB_TOOL = {
    "name": "browseWeb",
    "description": (
        "Visit a URL and return a markdown version of the browsed page content. "
        "Useful for extracting job details from job posting pages."
    ),
    "parameters": {
        "type": "object",
        "properties": {
            "url": {
                "type": "string",
                "description": "The URL of the web page to browse and return as markdown.",
            }
        },
        "required": ["url"],
    },
}


def _render_block(block: Tag) -> str:
    name = block.name
    if name == "pre":
        return f"```\n{block.get_text().rstrip()}\n```"
    text = " ".join(block.get_text(" ", strip=True).split())
    if not text:
        return ""
    if name.startswith("h") and len(name) == 2:
        return f"{'#' * int(name[1])} {text}"
    if name == "li":
        return f"- {text}"
    if name == "blockquote":
        return f"> {text}"
    return text


def html_to_markdown(root: Tag) -> str:
    """Render headings, paragraphs, list items and code blocks as markdown."""
    lines: List[str] = []
    for block in root.find_all(BLOCK_TAGS):
        # Nested blocks are rendered by their outermost block
        if block.find_parent(BLOCK_TAGS) is not None:
            continue
        rendered = _render_block(block)
        if rendered:
            lines.append(rendered)

    if not lines:
        return root.get_text("\n", strip=True)
    return "\n\n".join(lines)


def page_to_markdown(html: str) -> str:
    """Strip page chrome and convert the main content container."""
    soup = BeautifulSoup(html, "html.parser")
    for node in soup.select(NOISE_SELECTORS):
        node.decompose()

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(strip=True) if h1 else ""

    main = soup.select_one(MAIN_SELECTORS) or soup.body or soup
    content = html_to_markdown(main)
    return f"---\ntitle: '{title}'\n---\n\n{content}"


async def fetch_page(url: str, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Fetch ``url`` and return its markdown rendition.

    Errors are returned as text so the LLM can read them.
    """
    logger.info(f"Browsing web: {url}")
    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    try:
        response = await client.get(url, headers=BROWSER_HEADERS)
        if not response.is_success:
            logger.warning(f"HTTP Error: {response.status_code} {response.reason_phrase}")
            return f"Error retrieving website: {response.status_code} {response.reason_phrase}"

        result = page_to_markdown(response.text)
        logger.info(f"Successfully browsed {url} ({len(result)} characters)")
        return result
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.error(f"Error browsing {url}: {e}")
        return f"Error browsing website: {e}"
    finally:
        if owns_client:
            await client.aclose()
