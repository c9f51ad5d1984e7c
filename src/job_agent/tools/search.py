"""
Search Tools
============

Google search and job search through SerpAPI.

The job search turns organic search results into job records with a
small set of heuristics (extract_job_fields). It drives a TodoList plan
while it works and asks the LLM judge whether the goal was met.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import httpx

from ..providers import ConfigurationError, FallbackDispatcher
from .judge import check_goal_done
from .todo_list import TodoList

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search.json"
DEFAULT_LOCATION = "Philadelphia, PA"

EXCLUDED_SITES = [
    r"reddit\.com", r"quora\.com", r"stackoverflow\.com/questions",
    r"github\.com/.*/issues", r"youtube\.com", r"medium\.com",
    r"facebook\.com", r"twitter\.com", r"instagram\.com",
]
EXCLUDED_CONTENT = [
    r"what\s+is\s+it\s+like", r"how\s+do\s+you\s+get\s+jobs", r"salary\s+stats",
    r"job\s+market\s+for", r"career\s+advice", r"interview\s+tips", r"resume\s+help",
]
JOB_POSTING_URLS = [
    r"/jobs/\d+", r"/viewjob\?jk=", r"/job/", r"/careers/", r"/position/",
    r"/role/", r"/en/jobs/", r"/jobs/[a-zA-Z0-9-]+$",
]
JOB_SITES = {
    "indeed.com", "linkedin.com", "glassdoor.com", "monster.com",
    "careerbuilder.com", "ziprecruiter.com", "simplyhired.com", "dice.com",
    "builtinsf.com", "angel.co", "stackoverflow.com", "github.com",
    "amazon.jobs", "arbeitnow.com", "stepstone.de", "wellfound.com",
}
TECHNOLOGIES = [
    "Python", "Java", "JavaScript", "TypeScript", "Go", "Rust", "C++", "C#",
    "Ruby", "PHP", "Kotlin", "Swift", "Scala", "SQL", "React", "Node.js",
    "Django", "Flask", "AWS", "Azure", "GCP", "Docker", "Kubernetes",
]

SALARY_RE = re.compile(
    r"\$\s?\d[\d,]*(?:\.\d+)?\s?[kK]?(?:\s?(?:-|–|to)\s?\$?\s?\d[\d,]*(?:\.\d+)?\s?[kK]?)?"
    r"(?:\s?(?:per|/|an?)\s?(?:year|yr|hour|hr))?"
)
POSTED_RE = re.compile(r"\b(\d+\s+(?:minute|hour|day|week|month)s?\s+ago|today|yesterday)\b", re.I)
AT_COMPANY_RE = re.compile(r"\bat\s+([A-Z][\w&.'-]*(?:\s+[A-Z][\w&.'-]*)*)")

SEARCH_GOOGLE_TOOL = {
    "name": "searchGoogle",
    "description": "Run a search query against google for information from the web.",
    "parameters": {
        "type": "object",
        "properties": {
            "query": {
                "type": "string",
                "description": "The search query to send to google.",
            }
        },
        "required": ["query"],
    },
}

SEARCH_JOBS_TOOL = {
    "name": "searchJobs",
    "description": "Search for jobs using SerpAPI and extract detailed information.",
    "parameters": {
        "type": "object",
        "properties": {
            "query": {"type": "string", "description": "The job title or keywords to search for"},
            "location": {"type": "string", "description": "The location to search for jobs in"},
            "remote": {"type": "boolean", "description": "Whether to search for remote jobs"},
            "count": {"type": "number", "description": "Number of jobs to search for (default: 50)"},
        },
        "required": ["query", "location", "remote"],
    },
}


def is_actual_job_posting(url: str, title: str, snippet: str = "") -> bool:
    """True for individual postings and job-board pages with job content."""
    if not url or not title:
        return False

    if any(re.search(p, url, re.I) for p in EXCLUDED_SITES):
        return False

    full_text = f"{title} {snippet or ''}".lower()
    if any(re.search(p, full_text, re.I) for p in EXCLUDED_CONTENT):
        return False

    if any(re.search(p, url, re.I) for p in JOB_POSTING_URLS):
        return True

    hostname = (urlparse(url).hostname or "").removeprefix("www.")
    if hostname in JOB_SITES:
        return re.search(r"jobs?|careers?|positions?|hiring|apply|openings?", full_text, re.I) is not None

    return False


def _split_title(title: str) -> List[str]:
    return [part.strip() for part in re.split(r"\s+[-|–]\s+", title) if part.strip()]


def extract_job_fields(
    result: Dict[str, Any],
    query: str,
    location: str,
    remote: bool = False,
) -> Dict[str, Any]:
    """
    Build a job record from one organic search result.

    Fields that cannot be found fall back to "N/A" or the search inputs.
    """
    title = result.get("title") or ""
    snippet = result.get("snippet") or ""
    url = result.get("link") or ""
    text = f"{title} {snippet}"
    parts = _split_title(title)

    company = "N/A"
    match = AT_COMPANY_RE.search(title)
    if match:
        company = match.group(1).strip()
    elif len(parts) >= 2:
        company = parts[1]

    job_title = parts[0] if parts else query
    job_title = AT_COMPANY_RE.sub("", job_title).strip() or query

    lowered = text.lower()
    if "hybrid" in lowered:
        work_type = "Hybrid"
    elif "remote" in lowered or remote:
        work_type = "Remote"
    else:
        work_type = "On-site"

    salary = SALARY_RE.search(snippet)
    posted = POSTED_RE.search(snippet)
    technologies = [t for t in TECHNOLOGIES if re.search(rf"(?<![\w+#]){re.escape(t)}(?![\w+#])", text)]

    job_location = location
    if location and location.split(",")[0].lower() not in lowered and "remote" in lowered:
        job_location = "Remote"

    return {
        "jobTitle": job_title,
        "company": company,
        "location": job_location,
        "companyAddress": job_location or "Location not specified",
        "url": url,
        "snippet": snippet or "Job description not available",
        "source": urlparse(url).hostname or "",
        "postedDate": posted.group(1) if posted else "N/A",
        "remoteOnsite": work_type,
        "salary": salary.group(0).strip() if salary else "N/A",
        "requirements": "N/A",
        "languageRequirements": ", ".join(technologies) if technologies else "N/A",
        "benefits": "N/A",
    }


class SearchTool:
    """
    SerpAPI-backed search.

    Example:
        tool = SearchTool(api_key=os.environ["SERPAPI_API_KEY"])
        results = await tool.search_google("hoodie stores Times Square")
    """

    def __init__(
        self,
        api_key: str = "",
        todo_list: Optional[TodoList] = None,
        dispatcher: Optional[FallbackDispatcher] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.todo_list = todo_list or TodoList()
        self.dispatcher = dispatcher
        self._client = client

    def update_api_key(self, api_key: str) -> None:
        self.api_key = api_key

    async def _serp(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise ConfigurationError(
                "SerpAPI key not configured. Please set it in the settings.",
                provider="serpapi",
            )
        query = {"engine": "google", "api_key": self.api_key, **params}
        if self._client is not None:
            response = await self._client.get(SERPAPI_URL, params=query)
        else:
            async with httpx.AsyncClient(timeout=30.0) as client:
                response = await client.get(SERPAPI_URL, params=query)
        response.raise_for_status()
        return response.json()

    async def search_google(self, query: str, location: str = DEFAULT_LOCATION) -> str:
        """Top five organic results as a JSON list of ``{title, url}``."""
        logger.info(f"Searching Google[{location}]: {query}")
        data = await self._serp({"q": query, "location": location})
        results = [
            {"title": r.get("title"), "url": r.get("link")}
            for r in (data.get("organic_results") or [])[:5]
        ]
        return json.dumps(results)

    async def search_jobs(
        self,
        query: str,
        location: str,
        remote: bool = False,
        count: int = 50,
    ) -> List[Dict[str, Any]]:
        """
        Search several phrasings of ``query`` and collect job records.

        Returns:
            Up to ``count`` job records
        """
        logger.info(f"Job Search: {query} in {location}, Remote: {remote}, Count: {count}")

        plan = [
            f"Research {query} job market in {location}",
            "Search for individual job postings using SerpAPI",
            "Extract detailed job information from actual job pages",
            "Compile comprehensive job report",
        ]
        self.todo_list.add_todos(plan)
        self.todo_list.mark_todo_done(plan[0])

        search_queries = [
            f'"{query}" job {location}',
            f'"{query}" position {location}',
            f'"{query}" role {location}',
            f'"{query}" hiring {location}',
            f'"{query}" career {location}',
        ]

        jobs: List[Dict[str, Any]] = []
        self.todo_list.mark_todo_done(plan[1])

        for search_query in search_queries:
            if len(jobs) >= count:
                break
            try:
                data = await self._serp({"q": search_query, "location": location, "num": 10})
            except ConfigurationError:
                raise
            except (httpx.HTTPError, ValueError) as e:
                logger.warning(f"Search failed for {search_query}: {e}")
                continue

            for result in data.get("organic_results") or []:
                if len(jobs) >= count:
                    break
                if not is_actual_job_posting(result.get("link", ""), result.get("title", ""), result.get("snippet", "")):
                    logger.debug(f"Skipping non-job page: {result.get('title', '')[:50]}")
                    continue
                job = extract_job_fields(result, query, location, remote)
                jobs.append(job)
                logger.info(f"Job {len(jobs)}: {job['company']} - {job['jobTitle']}")

        self.todo_list.mark_todo_done(plan[2])
        self.todo_list.mark_todo_done(plan[3])
        logger.info(f"Job search completed: {len(jobs)} jobs found")

        verdict = await check_goal_done(
            goal=f"Find {count} {query} jobs in {location}",
            answer=f"Successfully found {len(jobs)} {query} jobs in {location} with detailed information.",
            dispatcher=self.dispatcher,
        )
        logger.info(f"Goal completion check: {verdict}")
        return jobs
