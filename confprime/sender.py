from __future__ import annotations

import time

from typing import Any, Callable, Optional

import requests

import confprime as cp


class DeliveryExhausted(Exception):
    def __init__(self, attempts: int):
        super().__init__(f'too many retries ({attempts} attempts failed)')
        self.attempts = attempts


class BadStatusError(Exception):
    def __init__(self, status: int):
        super().__init__(f'didn\'t get 200 Success (got {status})')
        self.status = status


class Sender:
    """Posts data to the save endpoint, retrying on failure.

    Each call to save_data() makes up to max_attempts POST requests,
    pausing for retry_delay_ms after every failed one. Delivery is
    at-least-once: if a request succeeds server-side but the response
    is lost, the retry appends the same data a second time.
    """

    url: str
    max_attempts: int
    retry_delay_ms: int
    timeout_secs: Optional[float]

    def __init__(self, url: str, max_attempts: int = 3,
                 retry_delay_ms: int = 250,
                 timeout_secs: Optional[float] = None,
                 http: Optional[requests.Session] = None,
                 sleep: Callable[[float], Any] = time.sleep):
        self.url = url
        self.max_attempts = max_attempts
        self.retry_delay_ms = retry_delay_ms
        self.timeout_secs = timeout_secs
        self.http = http or requests.Session()
        self._sleep = sleep

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self):
        self.http.close()

    @classmethod
    def from_cfg(cls, cfg: dict[str, Any], **kwargs: Any):
        return cls(cfg['save_url'],
                   max_attempts=cfg['save_max_attempts'],
                   retry_delay_ms=cfg['save_retry_delay_ms'],
                   timeout_secs=cfg.get('save_timeout_secs'),
                   **kwargs)

    def fetch_with_retry(self, url: str, **kwargs: Any) -> requests.Response:
        count = 0
        while count < self.max_attempts:
            try:
                resp = self.http.post(url, **kwargs)
                if resp.status_code != 200:
                    raise BadStatusError(resp.status_code)
                return resp
            except (requests.RequestException, BadStatusError) as exc:
                cp.log.warning(
                    f'POST to {url} failed (attempt {count + 1}'
                    f'/{self.max_attempts}): {exc}')
            count += 1
            self._sleep(self.retry_delay_ms/1000)
        raise DeliveryExhausted(self.max_attempts)

    def save_data(self, name: str, data: str):
        """Append data (as text) to the file with the given name."""
        self.fetch_with_retry(
            self.url,
            json={'filename': name, 'filedata': data},
            headers={'Content-Type': 'application/json'},
            timeout=self.timeout_secs)
