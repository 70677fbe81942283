"""Webhook client that publishes propagation reports."""

from __future__ import annotations

from typing import Any

import httpx

from tag_propagator import __version__
from tag_propagator.client.errors import NotificationError
from tag_propagator.config.constants import DEFAULT_TIMEOUT
from tag_propagator.models.result import PropagationReport


class Notifier:
    """POSTs the JSON summary of a run to a monitoring webhook."""

    def __init__(self, url: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.url = url
        self._client = httpx.Client(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "User-Agent": f"tag-propagator/{__version__}",
            },
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Notifier:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def send(self, report: PropagationReport) -> httpx.Response:
        try:
            response = self._client.post(self.url, json=report.summary())
        except httpx.ConnectError as exc:
            raise NotificationError(f"Cannot connect to {self.url}: {exc}") from exc
        except httpx.TimeoutException as exc:
            raise NotificationError(f"Notification to {self.url} timed out: {exc}") from exc
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise NotificationError(f"Invalid notify URL {self.url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise NotificationError(f"Notification to {self.url} failed: {exc}") from exc
        if not response.is_success:
            raise NotificationError(
                f"Webhook returned {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return response
