"""
External job board links.

Search results are complemented with links that run the same query on
the large public job boards.  No request is made; the links are built
from each board's search URL.
"""

from __future__ import annotations

from typing import Dict, List, Optional
from urllib.parse import quote

# (name, url template, description, relevance)
JOB_SITES = [
    ("LinkedIn", "https://www.linkedin.com/jobs/search/?keywords={q}", "Search for jobs on LinkedIn", "high"),
    ("Indeed", "https://www.indeed.com/jobs?q={q}", "Find jobs on Indeed", "high"),
    ("Glassdoor", "https://www.glassdoor.com/Job/jobs.htm?sc.keyword={q}", "Job search on Glassdoor", "high"),
    ("Monster", "https://www.monster.com/jobs/search/?q={q}", "Job opportunities on Monster", "medium"),
    ("ZipRecruiter", "https://www.ziprecruiter.com/jobs-search?search={q}", "Job listings on ZipRecruiter", "medium"),
]


def external_links(query: Optional[str], max_results: int = 5) -> List[Dict[str, str]]:
    if not query or not query.strip():
        return []
    encoded = quote(query.strip(), safe="-_.!~*'()")
    return [
        {
            "title": f"{query.strip()} - {name}",
            "url": template.format(q=encoded),
            "description": description,
            "source": name,
            "relevance": relevance,
        }
        for name, template, description, relevance in JOB_SITES[: max(max_results, 0)]
    ]
