"""Country catalog: the in-memory set of playable countries.

The catalog always starts from the bundled fallback set so it is usable
immediately, then refreshes once in the background from the REST Countries API
(with retries) or a local JSON file. Each load produces a new immutable
``CatalogSnapshot`` which replaces the previous one in a single assignment, so
readers see either the old or the new set, never a mix.
"""
from __future__ import annotations

import asyncio
import json
import logging
import random
from datetime import datetime, UTC
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

import httpx
from pydantic import ValidationError

from countryquiz.config import Settings, get_settings
from countryquiz.data.fallback_countries import FALLBACK_COUNTRIES
from countryquiz.schemas.country import CountryRecord
from countryquiz.utils.exceptions import (
    CatalogEmptyError,
    CountryNotFoundError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

SOURCE_FALLBACK = "fallback"
SOURCE_REMOTE = "remote"
SOURCE_LOCAL_FILE = "local_file"


def parse_countries(items: Iterable[Any]) -> list[CountryRecord]:
    """Parse REST Countries items, skipping unusable ones and duplicate codes."""
    records: list[CountryRecord] = []
    seen_codes: set[str] = set()
    for item in items:
        try:
            record = CountryRecord.from_rest_countries(item)
        except ValidationError as exc:
            logger.warning(f"Skipping invalid country item: {exc.error_count()} validation error(s)")
            continue
        if record is None:
            continue
        code = record.code.upper()
        if code in seen_codes:
            continue
        seen_codes.add(code)
        records.append(record)
    return records


class CatalogSnapshot:
    """Immutable view of the catalog at one point in time."""

    __slots__ = ("records", "source", "loaded_at", "_by_code")

    def __init__(self, records: Sequence[CountryRecord], source: str):
        self.records: tuple[CountryRecord, ...] = tuple(records)
        self.source = source
        self.loaded_at = datetime.now(UTC)
        self._by_code = {record.code.upper(): record for record in self.records}

    def __len__(self) -> int:
        return len(self.records)

    def get(self, code: str) -> Optional[CountryRecord]:
        return self._by_code.get(code.strip().upper())


class CountryCatalog:
    """Provides question material for rounds."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        fallback: Iterable[Any] = FALLBACK_COUNTRIES,
        rng: random.Random | None = None,
    ):
        """Load the fallback snapshot.

        Args:
            settings: Application settings (defaults to cached settings)
            http_client: Client for the remote source; created lazily when omitted
            fallback: REST Countries shaped items used until a refresh succeeds
            rng: Random source, injectable for deterministic tests

        Raises:
            CatalogEmptyError: If the fallback data has no usable countries
        """
        self.settings = settings or get_settings()
        self._client = http_client
        self._owns_client = http_client is None
        self._client_lock = asyncio.Lock()
        self._random = rng or random.Random()
        self._refresh_task: asyncio.Task | None = None

        records = parse_countries(fallback)
        if not records:
            logger.critical("Fallback country data is empty; the quiz cannot start")
            raise CatalogEmptyError("Fallback country data is empty")

        self._snapshot = CatalogSnapshot(records, SOURCE_FALLBACK)
        logger.info(f"Loaded {len(records)} fallback countries for immediate use")

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    @property
    def source(self) -> str:
        return self._snapshot.source

    def count(self) -> int:
        return len(self._snapshot)

    def all_countries(self) -> list[CountryRecord]:
        return list(self._snapshot.records)

    def random_country(self) -> CountryRecord:
        """Pick one country uniformly at random.

        Raises:
            CatalogEmptyError: If the current snapshot has no countries
        """
        records = self._snapshot.records
        if not records:
            logger.critical("Country catalog is empty; fallback data is missing or corrupt")
            raise CatalogEmptyError()
        return self._random.choice(records)

    def find_by_code(self, code: str) -> Optional[CountryRecord]:
        """Case-insensitive exact lookup by country code."""
        if not code:
            return None
        return self._snapshot.get(code)

    def get_by_code(self, code: str) -> CountryRecord:
        country = self.find_by_code(code)
        if country is None:
            logger.debug(f"Country not found for code {code!r}")
            raise CountryNotFoundError(f"No country with code {code!r}")
        return country

    def find_by_name(self, name: str) -> Optional[CountryRecord]:
        """Case-insensitive exact lookup by display name."""
        wanted = name.strip().casefold()
        for record in self._snapshot.records:
            if record.name.casefold() == wanted:
                return record
        return None

    def search(self, query: str, limit: int = 10) -> list[CountryRecord]:
        """Countries whose name contains ``query`` (case-insensitive)."""
        needle = query.strip().casefold()
        if not needle or limit <= 0:
            return []
        matches = [record for record in self._snapshot.records if needle in record.name.casefold()]
        return matches[:limit]

    def distractors(self, correct: CountryRecord, count: int) -> list[CountryRecord]:
        """Pick up to ``count`` other countries, without replacement, in random order.

        Returns fewer than ``count`` records when the catalog is too small.
        """
        if count <= 0:
            return []
        correct_code = correct.code.upper()
        eligible = [record for record in self._snapshot.records if record.code.upper() != correct_code]
        return self._random.sample(eligible, k=min(count, len(eligible)))

    def game_options(self, correct: CountryRecord, options_count: int | None = None) -> list[CountryRecord]:
        """Answer options for a question: distractors plus the correct country, shuffled."""
        if options_count is None:
            options_count = self.settings.options_count
        options = self.distractors(correct, options_count - 1)
        options.append(correct)
        self._random.shuffle(options)
        return options

    # ------------------------------------------------------------------
    # Refresh
    # ------------------------------------------------------------------

    def start_background_refresh(self) -> asyncio.Task:
        """Kick off the one-shot refresh without blocking the caller."""
        if self._refresh_task is not None and not self._refresh_task.done():
            return self._refresh_task
        self._refresh_task = asyncio.create_task(self._run_refresh(), name="country-catalog-refresh")
        return self._refresh_task

    async def _run_refresh(self) -> bool:
        try:
            return await self.refresh()
        except Exception as e:
            logger.error(f"Unexpected error refreshing country catalog: {e}", exc_info=True)
            return False

    async def refresh(self) -> bool:
        """Replace the snapshot from the API, falling back to the local file.

        Returns:
            True if the snapshot was replaced, False if the current one was kept
        """
        logger.info("Attempting to load countries from API...")
        try:
            records = await self._load_with_retry()
            source = SOURCE_REMOTE
        except UpstreamUnavailableError as api_error:
            logger.warning(f"API failed ({api_error}), trying local file...")
            try:
                records = await self._load_from_local_file()
                source = SOURCE_LOCAL_FILE
            except UpstreamUnavailableError as file_error:
                logger.error(
                    f"Local file also failed ({file_error}), keeping {len(self._snapshot)} "
                    f"{self._snapshot.source} countries"
                )
                return False

        self._snapshot = CatalogSnapshot(records, source)
        logger.info(f"Country catalog replaced: {len(records)} countries from {source}")
        return True

    async def _load_with_retry(self) -> list[CountryRecord]:
        max_retries = self.settings.catalog_max_retries
        delay = self.settings.catalog_retry_delay_seconds
        last_error: Exception | None = None

        for attempt in range(1, max_retries + 1):
            try:
                logger.info(f"Loading from API (attempt {attempt}/{max_retries})")
                records = await self._load_from_api()
                logger.info(f"Successfully loaded countries from API on attempt {attempt}")
                return records
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code < 500:
                    raise UpstreamUnavailableError(
                        f"API rejected request with status {exc.response.status_code}"
                    ) from exc
                last_error = exc
            except httpx.TransportError as exc:
                last_error = exc
            except httpx.HTTPError as exc:
                # Redirect loops, undecodable bodies and the like do not improve on retry
                raise UpstreamUnavailableError(f"API request failed: {exc!r}") from exc

            logger.warning(f"Attempt {attempt}/{max_retries} failed: {last_error}")
            if attempt < max_retries:
                logger.info(f"Waiting {delay}s before retry...")
                await asyncio.sleep(delay)

        logger.error(f"Failed to load from API after {max_retries} attempts")
        raise UpstreamUnavailableError(f"API loading failed after {max_retries} attempts") from last_error

    async def _load_from_api(self) -> list[CountryRecord]:
        client = await self._ensure_client()
        url = self.settings.countries_api_url
        logger.info(f"Requesting API: {url}")

        response = await client.get(url)
        response.raise_for_status()
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError("API returned invalid JSON") from exc
        return self._parse_payload(payload, "API")

    async def _load_from_local_file(self) -> list[CountryRecord]:
        path = Path(self.settings.countries_local_file)
        logger.info(f"Loading countries from local file: {path}")
        if not path.is_file():
            raise UpstreamUnavailableError(f"Local file {path} not found")

        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            payload = json.loads(text)
        except (OSError, ValueError) as exc:
            raise UpstreamUnavailableError(f"Error reading local file {path}: {exc}") from exc
        return self._parse_payload(payload, f"local file {path}")

    @staticmethod
    def _parse_payload(payload: Any, origin: str) -> list[CountryRecord]:
        if not isinstance(payload, list):
            raise UpstreamUnavailableError(f"Unexpected country payload from {origin}: {type(payload).__name__}")

        logger.info(f"Parsed {len(payload)} countries from {origin}")
        records = parse_countries(payload)
        if not records:
            raise UpstreamUnavailableError(f"No valid countries parsed from {origin}")
        return records

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                timeout = httpx.Timeout(
                    self.settings.catalog_read_timeout_seconds,
                    connect=self.settings.catalog_connect_timeout_seconds,
                )
                self._client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)
                self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        """Stop a running refresh and close the HTTP client this catalog created."""
        task = self._refresh_task
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                logger.info("Country catalog refresh cancelled on shutdown")
        self._refresh_task = None

        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
