"""In-memory beer catalog."""

import threading

from .models import Beer
from .observability.metrics import get_metrics


DEMO_BEERS = (
    Beer(id=1, name="Luzerner Bier", brewery="Brauerei Luzern AG"),
    Beer(id=2, name="Lozärner Bier", brewery="Lozärner Bier AG"),
    Beer(id=3, name="Urbräu", brewery="Tavolago AG"),
)


class BeerCatalog:
    """Append-only, copy-on-write list of beers.

    Writers build a new tuple under a lock and swap the reference, so readers
    always see a complete snapshot without locking.
    """

    def __init__(self):
        self._beers: tuple[Beer, ...] = ()
        self._write_lock = threading.Lock()

    @classmethod
    def with_demo_data(cls) -> "BeerCatalog":
        catalog = cls()
        for beer in DEMO_BEERS:
            catalog.append(beer)
        return catalog

    def append(self, beer: Beer) -> None:
        with self._write_lock:
            self._beers = self._beers + (beer,)
            size = len(self._beers)
        get_metrics().catalog_size.set(size)

    def list(self) -> tuple[Beer, ...]:
        return self._beers

    def __len__(self) -> int:
        return len(self._beers)
