"""Thin asynchronous GitHub REST client used by the !github command.

Wraps only the commit listing endpoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import aiohttp

from ..constants import GITHUB_API_URL, HTTP_REQUEST_TIMEOUT_SECONDS
from ..errors.handling import handle_retryable_error
from ..errors.internal import ParsingError


@dataclass(frozen=True, slots=True)
class Commit:
    sha: str
    message: str
    author: str
    url: str


def _commit_from_json(entry: Any) -> Commit:
    try:
        commit = entry["commit"]
        return Commit(
            sha=str(entry["sha"])[:7],
            message=str(commit["message"]).splitlines()[0] if commit["message"] else "",
            author=str(commit["author"]["name"]),
            url=str(entry["html_url"]),
        )
    except (KeyError, TypeError) as e:
        raise ParsingError(f"Unexpected commit payload: {e}") from e


class GitHubAPI:
    """Asynchronous client for the GitHub commits endpoint.

    Args:
        session: The aiohttp session to use for requests.
        token: Optional API token (raises the anonymous rate limit).
    """

    BASE_URL = GITHUB_API_URL

    def __init__(self, session: aiohttp.ClientSession, token: str | None = None):
        if not session:
            raise ValueError("aiohttp session required")
        self._session = session
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        timeout = aiohttp.ClientTimeout(total=HTTP_REQUEST_TIMEOUT_SECONDS)
        async with self._session.get(
            f"{self.BASE_URL}{path}", params=params, headers=self._headers(), timeout=timeout
        ) as resp:
            resp.raise_for_status()
            return await resp.json()

    async def fetch_commits(self, repo: str, count: int) -> list[Commit]:
        """Return the latest ``count`` commits of ``owner/name``.

        Raises:
            InternalError: The request kept failing or the payload was invalid.
        """

        async def operation() -> Any:
            return await self._get_json(f"/repos/{repo}/commits", {"per_page": count})

        data = await handle_retryable_error(operation, f"GitHub commits {repo}")
        if not isinstance(data, list):
            raise ParsingError("GitHub commits response is not a list")
        return [_commit_from_json(entry) for entry in data[:count]]
