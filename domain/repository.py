from datetime import datetime
from typing import Callable

from domain.models import JournalEntry, Mood, format_date


SEED_SHOPPING_LIST = ("1 tbsp olive oil", "2 cloves garlic", "1 can diced tomatoes")
SEED_JOURNAL_FOOD = "A warm bowl of tomato soup and grilled cheese."


class ShoppingList:
    """Newest first. Duplicates allowed."""

    def __init__(self, items: list[str] | None = None) -> None:
        self._items: list[str] = [] if items is None else list(items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(self._items)

    @property
    def items(self) -> tuple[str, ...]:
        return tuple(self._items)

    def add(self, item: str) -> None:
        self._items.insert(0, item)

    def add_all(self, items: list[str]) -> None:
        for item in items:
            self.add(item)

    def remove(self, item: str) -> int:
        """Remove every entry with exactly this text. Returns how many went."""
        before = len(self._items)
        self._items = [i for i in self._items if i != item]
        return before - len(self._items)

    def clear(self) -> None:
        self._items = []


class FoodJournal:
    """Newest first."""

    def __init__(
        self,
        entries: list[JournalEntry] | None = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._entries: list[JournalEntry] = [] if entries is None else list(entries)
        self.clock = clock
        self._last_id = max((e.id for e in self._entries), default=0)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> tuple[JournalEntry, ...]:
        return tuple(self._entries)

    def _next_id(self, now: datetime) -> int:
        # Millisecond timestamp, bumped so two entries in the same ms stay unique.
        self._last_id = max(int(now.timestamp() * 1000), self._last_id + 1)
        return self._last_id

    def add(self, *, mood: Mood, food: str) -> JournalEntry:
        now = self.clock()
        entry = JournalEntry(
            id=self._next_id(now), date=format_date(now.date()), mood=mood, food=food
        )
        self._entries.insert(0, entry)
        return entry

    def mood_counts(self) -> dict[Mood, int]:
        counts: dict[Mood, int] = {}
        for entry in self._entries:
            counts[entry.mood] = counts.get(entry.mood, 0) + 1
        return counts


class Kitchen:
    def __init__(self, shopping_list: ShoppingList, journal: FoodJournal) -> None:
        self.shopping_list = shopping_list
        self.journal = journal


class KitchenRepository:
    """Per-account shopping list and journal, kept in process memory only."""

    def __init__(self, *, clock: Callable[[], datetime] = datetime.now) -> None:
        self.clock = clock
        self._kitchens: dict[str, Kitchen] = {}

    def _seed(self) -> Kitchen:
        journal = FoodJournal(clock=self.clock)
        journal.add(mood=Mood.comforted, food=SEED_JOURNAL_FOOD)
        return Kitchen(ShoppingList(list(SEED_SHOPPING_LIST)), journal)

    def get(self, uid: str) -> Kitchen:
        if uid not in self._kitchens:
            self._kitchens[uid] = self._seed()
        return self._kitchens[uid]
