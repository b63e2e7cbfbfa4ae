"""In-memory category cache owned by a classifier instance."""
from typing import Dict, Iterable, Optional

from catalog_classifier.models import CategoryRecord


class CategoryCache:
    """Mapping of category id -> display name.

    Iteration order is load order, followed by categories added through
    the materializer. Strategies only read a snapshot(); writes go
    through replace_all() (refresh) and put() (materialization).
    """

    def __init__(self, records: Iterable[CategoryRecord] = ()):
        self._names: Dict[str, str] = {}
        self.replace_all(records)

    def replace_all(self, records: Iterable[CategoryRecord]) -> None:
        """Drop the current contents and load the given records."""
        self._names = {record.id: record.name for record in records}

    def put(self, record: CategoryRecord) -> None:
        self._names[record.id] = record.name

    def get(self, category_id: str) -> Optional[str]:
        return self._names.get(category_id)

    def snapshot(self) -> Dict[str, str]:
        """Copy of the current contents for a single classification."""
        return dict(self._names)

    def __contains__(self, category_id: object) -> bool:
        return category_id in self._names

    def __len__(self) -> int:
        return len(self._names)
