"""
Compound List View-Model

Holds the dashboard's list state and replaces it wholesale on every
transition. Listeners (the chart renderer, a UI) are told about each new
state object.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Callable, Iterable, List, Optional, Tuple

from devhub.client.api import DevHubClient
from devhub.client.cache import LocalCache
from devhub.client.config import client_settings
from devhub.client.debounce import Debouncer
from devhub.models.compound import SEED_COMPOUND_NAME
from devhub.schemas.compound import CompoundForm, CompoundRead
from devhub.services.error_handler import NetworkError

logger = logging.getLogger(__name__)

Alert = Callable[[str], None]
Listener = Callable[["CompoundListState"], None]


@dataclass(frozen=True)
class CompoundListState:
    compounds: Tuple[CompoundRead, ...] = ()
    search: str = ""
    pka_filter: str = ""
    loading: bool = False
    # None until the first load finishes
    has_seed: Optional[bool] = None


def parse_threshold(pka_filter: str) -> Optional[float]:
    """An empty filter means no threshold; anything unparsable matches nothing."""
    if not pka_filter.strip():
        return None
    try:
        return float(pka_filter)
    except ValueError:
        return float("nan")


def filter_compounds(
    compounds: Iterable[CompoundRead],
    search: str = "",
    pka_filter: str = "",
) -> Tuple[CompoundRead, ...]:
    """Apply the name search and the minimum pKa threshold."""
    term = search.lower()
    threshold = parse_threshold(pka_filter)

    result = []
    for compound in compounds:
        if term and term not in compound.name.lower():
            continue
        if threshold is not None:
            pka = compound.pka
            if pka is None or not pka >= threshold:
                continue
        result.append(compound)
    return tuple(result)


def has_seed_record(compounds: Iterable[CompoundRead]) -> bool:
    """Checked against the filtered list, so an active filter can hide the seed."""
    return any(compound.name == SEED_COMPOUND_NAME for compound in compounds)


def seed_panel_label(state: CompoundListState) -> str:
    if state.has_seed is None:
        return "Checking…"
    return "Present" if state.has_seed else "Not found. Click to insert:"


def default_alert(message: str) -> None:
    logger.warning(message)


class CompoundListViewModel:
    """Loads, filters and caches the compound list for a signed-in user."""

    def __init__(
        self,
        client: DevHubClient,
        cache: Optional[LocalCache] = None,
        alert: Alert = default_alert,
        debounce_seconds: Optional[float] = None,
    ):
        self.client = client
        self.cache = cache
        self.alert = alert
        self.session_active = False
        self._listeners: List[Listener] = []

        cached = cache.read() if cache else []
        self.state = CompoundListState(compounds=tuple(cached))

        delay = client_settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self.search_debouncer = Debouncer(delay, self._apply_search)
        self.pka_debouncer = Debouncer(delay, self._apply_pka_filter)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a state listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_session_active(self, active: bool) -> None:
        self.session_active = active
        if active:
            await self.load()

    async def load(self) -> None:
        """
        Fetch the full list and filter it locally.

        Filters are captured when the request starts. Overlapping loads are
        not cancelled; whichever response arrives last wins.
        """
        search, pka_filter = self.state.search, self.state.pka_filter
        self._transition(loading=True)

        try:
            loop = asyncio.get_event_loop()
            compounds = await loop.run_in_executor(None, self.client.fetch_compounds)
        except (NetworkError, ValueError) as e:
            logger.error(f"Error loading compounds: {e}")
            self._transition(loading=False)
            self.alert("Failed to load compounds")
            return

        filtered = filter_compounds(compounds, search, pka_filter)
        self._transition(
            compounds=filtered,
            has_seed=has_seed_record(filtered),
            loading=False,
        )
        if self.cache:
            self.cache.write(filtered)

    def set_search(self, term: str) -> None:
        self.search_debouncer(term)

    def set_pka_filter(self, value: str) -> None:
        self.pka_debouncer(value)

    async def save(self, form: CompoundForm) -> Optional[CompoundRead]:
        """Submit the add/update form, then reload on success."""
        return await self._write(self.client.save_compound, form)

    async def insert_seed(self) -> Optional[CompoundRead]:
        return await self._write(self.client.insert_seed)

    def close(self) -> None:
        self.search_debouncer.cancel()
        self.pka_debouncer.cancel()
        self._listeners.clear()

    async def _write(self, call: Callable, *args) -> Optional[CompoundRead]:
        self._transition(loading=True)
        try:
            loop = asyncio.get_event_loop()
            saved = await loop.run_in_executor(None, call, *args)
        except (NetworkError, ValueError) as e:
            self._transition(loading=False)
            self.alert(f"Error: {e}")
            return None

        self._transition(loading=False)
        await self.load()
        return saved

    async def _apply_search(self, term: str) -> None:
        self._transition(search=term)
        if self.session_active:
            await self.load()

    async def _apply_pka_filter(self, value: str) -> None:
        self._transition(pka_filter=value)
        if self.session_active:
            await self.load()

    def _transition(self, **changes) -> None:
        self.state = replace(self.state, **changes)
        for listener in list(self._listeners):
            listener(self.state)
