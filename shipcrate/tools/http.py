"""Downloading release assets.

`HttpClient` is the seam: `install_cargo_release` takes any object with a
`download(url, dest)` method, `RealHttpClient` in the CLI and
`MockHttpClient` in tests.
"""

from __future__ import annotations

import shutil
import ssl
import urllib.error
import urllib.request
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from shipcrate import __version__
from shipcrate.core.result import Err, Ok, Result

__all__ = [
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
]

_GITHUB_HOSTS = ("https://github.com/", "https://api.github.com/")


@dataclass(frozen=True, slots=True)
class HttpError:
    """A failed download.

    Attributes:
        url: Requested URL.
        status: HTTP status, 0 when no response was received.
        message: Reason phrase or transport error.
    """

    url: str
    status: int
    message: str

    def __str__(self) -> str:
        where = f"({self.url})"
        if self.status:
            return f"HTTP {self.status}: {self.message} {where}"
        return f"{self.message} {where}"


@runtime_checkable
class HttpClient(Protocol):
    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        """Fetch `url` into `dest`, creating parent directories."""
        ...


class RealHttpClient:
    """urllib client with system certificates.

    Release asset URLs redirect to a CDN, which urllib follows. A
    `github_token` is sent to github.com hosts only.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = f"shipcrate/{__version__}",
        github_token: str | None = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent
        self.github_token = github_token
        self._ssl_context = ssl.create_default_context()

    @classmethod
    def from_env(cls, env: Mapping[str, str], *, timeout: float = 30.0) -> RealHttpClient:
        return cls(timeout=timeout, github_token=env.get("GITHUB_TOKEN") or None)

    def _headers(self, url: str) -> dict[str, str]:
        headers = {"User-Agent": self.user_agent}
        if self.github_token and url.startswith(_GITHUB_HOSTS):
            headers["Authorization"] = f"Bearer {self.github_token}"
        return headers

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        # Written to <dest>.part, renamed on success.
        partial = dest.with_name(dest.name + ".part")
        try:
            req = urllib.request.Request(url, headers=self._headers(url))
            with urllib.request.urlopen(
                req, timeout=self.timeout, context=self._ssl_context
            ) as response:
                dest.parent.mkdir(parents=True, exist_ok=True)
                with partial.open("wb") as out:
                    shutil.copyfileobj(response, out, length=64 * 1024)
            partial.replace(dest)
        except urllib.error.HTTPError as e:
            return Err(HttpError(url=url, status=e.code, message=str(e.reason)))
        except urllib.error.URLError as e:
            return Err(HttpError(url=url, status=0, message=str(e.reason)))
        except TimeoutError:
            return Err(HttpError(url=url, status=0, message="Download timed out"))
        except (ValueError, OSError) as e:
            return Err(HttpError(url=url, status=0, message=str(e)))
        finally:
            partial.unlink(missing_ok=True)
        return Ok(dest)


class MockHttpClient:
    """Serves canned bytes (or errors) per URL and records requests."""

    def __init__(self) -> None:
        self._responses: dict[str, bytes | HttpError] = {}
        self.calls: list[str] = []

    def set_download(self, url: str, response: bytes | HttpError) -> None:
        self._responses[url] = response

    def download(self, url: str, dest: Path) -> Result[Path, HttpError]:
        self.calls.append(url)
        response = self._responses.get(url)
        if response is None:
            return Err(HttpError(url=url, status=404, message="Not found (mock)"))
        if isinstance(response, HttpError):
            return Err(response)

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(response)
        return Ok(dest)
