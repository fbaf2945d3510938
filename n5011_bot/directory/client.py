from __future__ import annotations

import asyncio
import logging
from typing import Any, List

import aiohttp

from n5011_bot.core.errors import FetchError
from n5011_bot.core.models import DirectoryRecord

logger = logging.getLogger(__name__)


def parse_records(payload: Any) -> List[DirectoryRecord]:
    """
    Decode the directory service answer: a JSON array of
    {address, display_name, owner_user_id, telegram_name?, telegram_login?}.
    """
    if not isinstance(payload, list):
        raise FetchError(f"expected a JSON array, got {type(payload).__name__}")

    records: List[DirectoryRecord] = []
    for item in payload:
        if not isinstance(item, dict):
            raise FetchError(f"expected a JSON object, got {type(item).__name__}")
        try:
            records.append(
                DirectoryRecord(
                    address=str(item["address"]),
                    display_name=str(item["display_name"]),
                    owner_user_id=int(item["owner_user_id"]),
                    telegram_name=item.get("telegram_name"),
                    telegram_login=item.get("telegram_login"),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            raise FetchError(f"malformed directory record {item!r}: {e}") from e
    return records


class DirectoryClient:
    def __init__(self, *, url_template: str, timeout_sec: float = 10.0) -> None:
        self._url_template = url_template
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)

    def url_for(self, user_id: int) -> str:
        return self._url_template.format(user_id=user_id)

    async def fetch(self, user_id: int) -> List[DirectoryRecord]:
        url = self.url_for(user_id)
        try:
            async with aiohttp.ClientSession(timeout=self._timeout) as session:
                async with session.get(url, headers={"Accept": "application/json"}) as resp:
                    resp.raise_for_status()
                    payload = await resp.json(content_type=None)
        except asyncio.TimeoutError as e:
            raise FetchError(f"directory request timed out: {url}") from e
        except aiohttp.ClientError as e:
            raise FetchError(f"directory request failed: {url}: {e}") from e
        except ValueError as e:
            raise FetchError(f"directory answer is not JSON: {url}: {e}") from e

        records = parse_records(payload)
        logger.debug("Directory lookup user=%s returned %s records", user_id, len(records))
        return records
