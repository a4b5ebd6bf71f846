import time
from typing import Callable, Iterable

from grocery_pricing.config import settings
from grocery_pricing.logging import get_logger
from grocery_pricing.services.pricing.errors import EquivalenceRefreshFailure
from grocery_pricing.services.pricing.records import GRAM, Equivalence
from grocery_pricing.services.pricing.text import normalize_text

logger = get_logger(__name__)

EquivalenceLoader = Callable[[], Iterable[Equivalence]]


class EquivalenceCache:
    """Ingredient name -> grams for one item, loaded from an authoritative source.

    The mapping is rebuilt wholesale once the TTL has elapsed. A failed reload keeps
    serving the previous mapping; stale weights beat no weights.
    Concurrent refreshes are not serialized: the last writer wins.
    """

    def __init__(
        self,
        loader: EquivalenceLoader,
        ttl_s: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_s = settings.equivalence_cache_ttl_s if ttl_s is None else ttl_s
        self._clock = clock
        self._grams: dict[str, float] = {}
        self._loaded_at: float | None = None

    @property
    def size(self) -> int:
        return len(self._grams)

    def is_stale(self) -> bool:
        """Past the TTL, or nothing usable loaded yet."""
        if self._loaded_at is None or not self._grams:
            return True
        return self._clock() - self._loaded_at >= self._ttl_s

    def refresh(self, force: bool = False) -> bool:
        """Reload when stale (or forced). Returns True if a new mapping was swapped in."""
        if not force and not self.is_stale():
            return False
        try:
            grams = self._load()
        except EquivalenceRefreshFailure as exc:
            logger.warning("equivalences.refresh_failed kept=%s error=%s", len(self._grams), exc)
            return False
        self._grams = grams
        self._loaded_at = self._clock()
        logger.info("equivalences.loaded count=%s", len(grams))
        return True

    def _load(self) -> dict[str, float]:
        try:
            records = list(self._loader())
        except Exception as exc:
            raise EquivalenceRefreshFailure(str(exc)) from exc
        grams: dict[str, float] = {}
        for record in records:
            if record.to_quantity is None or normalize_text(record.to_unit) != GRAM:
                continue
            key = normalize_text(record.ingredient_name)
            if key:
                grams[key] = float(record.to_quantity)
        return grams

    def resolve(self, ingredient_name: str) -> float | None:
        """Exact normalized name first, then the first key containing or contained in it."""
        name = normalize_text(ingredient_name)
        if not name:
            return None
        grams = self._grams
        if name in grams:
            return grams[name]
        for key, value in grams.items():
            if key in name or name in key:
                return value
        return None
