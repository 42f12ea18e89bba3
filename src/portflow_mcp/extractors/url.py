"""Link extraction — fetch the page, then pattern-match title and metadata.

The fetch is best-effort: CORS-style refusals, timeouts and policy
rejections leave the fetched fields empty and the platform heuristic
(hostname and path segments) carries the summary alone.
"""

from __future__ import annotations

import html
import logging
import re
from urllib.parse import urlparse

import httpx

from ..detector import DEFAULT_PLATFORM, detect_platform
from ..models.analysis import PageContent
from ..text import collapse_whitespace, humanize
from ..url_policy import UrlPolicyError, fetch_checked

logger = logging.getLogger(__name__)

SNIPPET_LIMIT = 500
URL_TEXT_LIMIT = 4000
MAX_PAGE_BYTES = 2 * 1024 * 1024

_TITLE_RE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_META_DESCRIPTION_RES = (
    re.compile(r"""<meta[^>]*name=["']description["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]*content=["']([^"']+)["'][^>]*name=["']description["']""", re.IGNORECASE),
    re.compile(r"""<meta[^>]*property=["']og:description["'][^>]*content=["']([^"']+)["']""", re.IGNORECASE),
)
_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")

# Fixed title/description per platform label; GitHub and generic sites are
# derived from the URL path instead.
PLATFORM_SUMMARIES: dict[str, tuple[str, str]] = {
    "Figma": (
        "Figma Design Project",
        "Interactive design project created in Figma. Features collaborative design work, "
        "prototypes, and professional UI/UX design systems.",
    ),
    "Behance": (
        "Behance Portfolio Project",
        "Creative portfolio project showcased on Adobe Behance. Professional creative work "
        "demonstrating design skills and artistic expertise.",
    ),
    "Dribbble": (
        "Dribbble Design Shot",
        "Creative design work shared on Dribbble. Professional design showcase demonstrating "
        "visual design skills and creative thinking.",
    ),
    "CodePen": (
        "CodePen Demo",
        "Interactive code demonstration on CodePen. Features frontend development skills, "
        "creative coding, and web technology expertise.",
    ),
    "CodeSandbox": (
        "CodeSandbox Project",
        "Interactive development project on CodeSandbox. Demonstrates modern web development "
        "skills and JavaScript expertise.",
    ),
    "Deployed App": (
        "Live Web Application",
        "Deployed web application demonstrating full-stack development skills, modern "
        "frameworks, and production-ready code.",
    ),
    "YouTube": (
        "Video Content",
        "Video content showcasing work, tutorials, or project demonstrations. Creative or "
        "educational content delivery.",
    ),
    "Vimeo": (
        "Professional Video Content",
        "High-quality video content on Vimeo. Professional video production, creative "
        "storytelling, or project documentation.",
    ),
    "Loom": (
        "Screen Recording",
        "Screen recording or video walkthrough created with Loom. Demonstrates product "
        "features, tutorials, or project presentations.",
    ),
}


def path_segments(url: str) -> list[str]:
    return [s for s in urlparse(url).path.split("/") if s]


def github_owner_repo(url: str) -> tuple[str, str]:
    """Return ``(owner, repo)`` from a GitHub URL; missing parts are empty."""
    segments = path_segments(url) + ["", ""]
    return segments[0], segments[1]


def analyze_url(url: str) -> tuple[str, str, str]:
    """Platform heuristic for a link: ``(platform, title, description)``.

    Examples:
        >>> analyze_url("https://github.com/acme/widget")[1]
        'Widget'
    """
    try:
        parsed = urlparse(url)
        hostname = (parsed.hostname or "").lower()
    except ValueError:
        hostname = ""
    if not hostname:
        return (
            DEFAULT_PLATFORM,
            "Web Project",
            "Professional web-based project demonstrating digital expertise and technical skills.",
        )

    platform = detect_platform(url)
    if platform == "GitHub":
        owner, repo = github_owner_repo(url)
        title = humanize(repo) if repo else "GitHub Repository"
        created_by = f" Created by {owner}." if owner else ""
        description = (
            f"Open source code repository on GitHub.{created_by} Features source code, "
            "documentation, and collaborative development work."
        )
        return platform, title, description

    if platform in PLATFORM_SUMMARIES:
        title, description = PLATFORM_SUMMARIES[platform]
        return platform, title, description

    segments = path_segments(url)
    if segments:
        title = humanize(segments[-1]) or "Web Project"
    else:
        bare_host = hostname[4:] if hostname.startswith("www.") else hostname
        title = humanize(bare_host) or "Website Project"
    description = (
        f"Professional web project at {hostname}. Demonstrates web development skills, "
        "design expertise, and digital project execution."
    )
    return platform, title, description


def parse_html(page: str) -> dict[str, str]:
    """Pull title, meta description and a cleaned text snippet from HTML."""
    title_match = _TITLE_RE.search(page)
    title = collapse_whitespace(html.unescape(title_match.group(1))) if title_match else ""

    meta_description = ""
    for pattern in _META_DESCRIPTION_RES:
        match = pattern.search(page)
        if match:
            meta_description = collapse_whitespace(html.unescape(match.group(1)))
            break

    body = _STYLE_RE.sub("", _SCRIPT_RE.sub("", page))
    body = collapse_whitespace(html.unescape(_TAG_RE.sub(" ", body)))
    return {
        "title": title,
        "meta_description": meta_description,
        "body_snippet": body[:SNIPPET_LIMIT],
    }


async def fetch_page(url: str, timeout: float) -> str:
    """Download a page body as text, applying the URL policy."""
    body = await fetch_checked(url, max_bytes=MAX_PAGE_BYTES, timeout=timeout)
    return body.decode("utf-8", errors="replace")


def _summary(platform: str, title: str, description: str, snippet: str) -> str:
    summary = f"Platform: {platform}\nTitle: {title}\nDescription: {description}"
    if snippet:
        summary += f"\nContent: {snippet}"
    return summary[:URL_TEXT_LIMIT]


async def extract_url(url: str, *, fetch: bool = True, timeout: float = 10.0) -> PageContent:
    """Summarise a link, fetching the page when allowed."""
    platform, heuristic_title, heuristic_description = analyze_url(url)

    parsed: dict[str, str] = {}
    if fetch:
        try:
            parsed = parse_html(await fetch_page(url, timeout))
        except (httpx.HTTPError, UrlPolicyError) as exc:
            logger.info("Direct fetch failed for %s (%s), using URL pattern analysis", url, exc)

    return PageContent(
        platform=platform,
        title=parsed.get("title", ""),
        meta_description=parsed.get("meta_description", ""),
        body_snippet=parsed.get("body_snippet", ""),
        heuristic_title=heuristic_title,
        heuristic_description=heuristic_description,
        summary=_summary(
            platform,
            parsed.get("title") or heuristic_title,
            parsed.get("meta_description") or heuristic_description,
            parsed.get("body_snippet", ""),
        ),
    )
