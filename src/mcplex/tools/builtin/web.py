"""Tools backed by public HTTP APIs.

Each tool is built by a factory that closes over a shared ``httpx.AsyncClient``
so that handlers keep the fixed ``(arguments) -> content`` signature. HTTP and
parsing failures are raised as ToolExecutionError and reported to the model
by the execution layer.
"""

import logging
import xml.etree.ElementTree as ElementTree
from typing import Any
from urllib.parse import quote

import httpx

from mcplex.errors import ToolExecutionError
from mcplex.models.tools import TextContent, text
from mcplex.tools.registry import ToolHandler, ToolRegistry
from mcplex.tools.schema import Param

logger = logging.getLogger(__name__)

GOOGLE_NEWS_RSS_URL = "https://news.google.com/rss/search"
WIKIPEDIA_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary/{query}"
GITHUB_REPO_URL = "https://api.github.com/repos/{owner}/{repo}"
OMDB_URL = "https://www.omdbapi.com/"
DICTIONARY_URL = "https://api.dictionaryapi.dev/api/v2/entries/en/{word}"

MAX_HEADLINES = 5


async def _get(client: httpx.AsyncClient, url: str, **kwargs: Any) -> httpx.Response:
    try:
        return await client.get(url, **kwargs)
    except httpx.HTTPError as e:
        raise ToolExecutionError(f"Request to {url} failed: {e}") from e


def make_news_by_topic(client: httpx.AsyncClient) -> ToolHandler:
    async def news_by_topic(args: dict[str, Any]) -> list[TextContent]:
        topic = args["topic"]
        response = await _get(client, GOOGLE_NEWS_RSS_URL, params={"q": topic})
        if response.status_code != 200:
            raise ToolExecutionError(
                f"Google News returned {response.status_code} for topic '{topic}'"
            )

        try:
            root = ElementTree.fromstring(response.text)
        except ElementTree.ParseError as e:
            raise ToolExecutionError(f"Could not parse news feed: {e}") from e

        items = root.findall("./channel/item")[:MAX_HEADLINES]
        if not items:
            return [text(f'No recent news found for topic: "{topic}".')]

        headlines = []
        for index, item in enumerate(items, start=1):
            title = item.findtext("title", default="(untitled)")
            link = item.findtext("link", default="")
            headlines.append(f"[{index}] {title} - {link}")

        return [text(f'Top News for "{topic}":\n\n' + "\n".join(headlines))]

    return news_by_topic


def make_wikipedia_search(client: httpx.AsyncClient) -> ToolHandler:
    async def wikipedia_search(args: dict[str, Any]) -> list[TextContent]:
        query = args["query"]
        logger.info(f"Searching Wikipedia for: {query}")
        url = WIKIPEDIA_SUMMARY_URL.format(query=quote(query, safe=""))
        response = await _get(client, url, follow_redirects=True)
        if response.status_code == 404:
            return [text(f'No Wikipedia article found for "{query}".')]
        if response.status_code != 200:
            raise ToolExecutionError(
                f"Failed to fetch Wikipedia summary for \"{query}\" "
                f"({response.status_code})"
            )

        data = response.json()
        page_url = (
            data.get("content_urls", {}).get("desktop", {}).get("page", "")
        )
        summary = f"{data.get('title', query)}\n\n{data.get('extract', '')}"
        if page_url:
            summary += f"\n\nRead more on Wikipedia: {page_url}"
        return [text(summary)]

    return wikipedia_search


def make_github_repo_info(client: httpx.AsyncClient) -> ToolHandler:
    async def github_repo_info(args: dict[str, Any]) -> list[TextContent]:
        owner, repo = args["owner"], args["repo"]
        url = GITHUB_REPO_URL.format(owner=quote(owner, safe=""), repo=quote(repo, safe=""))
        response = await _get(
            client, url, headers={"Accept": "application/vnd.github+json"}
        )
        if response.status_code != 200:
            raise ToolExecutionError(
                f"Failed to fetch repository info for {owner}/{repo} "
                f"(GitHub API error: {response.status_code} {response.reason_phrase})"
            )

        data = response.json()
        lines = [
            f"Repository Name: {data.get('full_name')}",
            "",
            f"Description: {data.get('description') or 'No description'}",
            f"Stars: {data.get('stargazers_count')}",
            f"Forks: {data.get('forks_count')}",
            f"Open Issues: {data.get('open_issues_count')}",
            f"Repository Link: {data.get('html_url')}",
        ]
        return [text("\n".join(lines))]

    return github_repo_info


def make_movie_ratings(client: httpx.AsyncClient, api_key: str | None) -> ToolHandler:
    async def movie_ratings(args: dict[str, Any]) -> list[TextContent]:
        if not api_key:
            raise ToolExecutionError(
                "OMDb API key is not configured (set MCPLEX_OMDB_API_KEY)"
            )

        title = args["title"]
        year = args.get("year")
        params: dict[str, Any] = {
            "apikey": api_key,
            "t": title,
            "plot": args.get("plot", "short"),
        }
        if year:
            params["y"] = year

        response = await _get(client, OMDB_URL, params=params)
        if response.status_code != 200:
            raise ToolExecutionError(
                f"OMDb API error: {response.status_code} {response.reason_phrase}"
            )

        data = response.json()
        if data.get("Response") == "False":
            suffix = f" ({year})" if year else ""
            return [text(f"Sorry, couldn't find information for \"{title}\"{suffix}.")]

        lines = [
            f"{data.get('Title')} ({data.get('Year')})",
            "",
            f"Genre: {data.get('Genre')}",
            f"Director: {data.get('Director')}",
            f"Starring: {data.get('Actors')}",
            f"Runtime: {data.get('Runtime')}",
            "",
            "RATINGS",
        ]
        if data.get("imdbRating") and data["imdbRating"] != "N/A":
            lines.append(
                f"IMDB: {data['imdbRating']}/10 ({data.get('imdbVotes')} votes)"
            )
        for rating in data.get("Ratings") or []:
            if rating.get("Source") != "Internet Movie Database":
                lines.append(f"{rating.get('Source')}: {rating.get('Value')}")

        lines += ["", f"PLOT: {data.get('Plot')}", "", "ADDITIONAL INFO"]
        for label, key in (
            ("Rated", "Rated"),
            ("Released", "Released"),
            ("Awards", "Awards"),
            ("Box Office", "BoxOffice"),
        ):
            value = data.get(key)
            if value and value != "N/A":
                lines.append(f"{label}: {value}")

        if data.get("imdbID"):
            lines += ["", f"View on IMDB: https://www.imdb.com/title/{data['imdbID']}"]

        return [text("\n".join(lines))]

    return movie_ratings


def make_define_word(client: httpx.AsyncClient) -> ToolHandler:
    async def define_word(args: dict[str, Any]) -> list[TextContent]:
        word = args["word"]
        url = DICTIONARY_URL.format(word=quote(word, safe=""))
        response = await _get(client, url)
        if response.status_code != 200:
            return [text(f'No definition found for "{word}".')]

        entries = response.json()
        definition = "No definition available."
        example = "No example provided."
        if entries and entries[0].get("meanings"):
            definitions = entries[0]["meanings"][0].get("definitions") or [{}]
            definition = definitions[0].get("definition", definition)
            example = definitions[0].get("example", example)

        return [
            text(f"Definition of {word}: {definition}"),
            text(f"Example: {example}"),
        ]

    return define_word


def register_web_tools(
    registry: ToolRegistry,
    client: httpx.AsyncClient,
    omdb_api_key: str | None = None,
) -> None:
    """Register the HTTP-backed tools on a registry."""
    registry.tool(
        "news-by-topic",
        "Fetches recent news headlines for a given topic using Google News",
        Param("topic", "string", "The topic to search news for (e.g., AI, economy, cricket)"),
    )(make_news_by_topic(client))

    registry.tool(
        "wikipedia-search",
        "Search Wikipedia and return the summary of the top result",
        Param("query", "string", "The search term for Wikipedia"),
    )(make_wikipedia_search(client))

    registry.tool(
        "github-repo-info",
        "Fetch information about a public GitHub repository",
        Param("owner", "string", "GitHub username or organization"),
        Param("repo", "string", "Repository name"),
    )(make_github_repo_info(client))

    registry.tool(
        "movie-ratings",
        "Get ratings and information for movies or TV shows from various sources",
        Param("title", "string", "The title of the movie or TV show to search for"),
        Param(
            "year",
            "integer",
            "Optional: Release year to narrow down search results",
            required=False,
        ),
        Param(
            "plot",
            "string",
            "Optional: Length of plot summary (short or full)",
            default="short",
            enum=("short", "full"),
        ),
    )(make_movie_ratings(client, omdb_api_key))

    registry.tool(
        "define_word",
        "Get the definition and example usage of a word",
        Param("word", "string", "Word to define"),
    )(make_define_word(client))
