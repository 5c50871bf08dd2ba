from typing import Dict, Generic, Iterable, Optional, Type, TypeVar
from django.db import models

T = TypeVar('T', bound=models.Model)

class GenericRepository(Generic[T]):
    """Per-table create/read/update/delete calls.

    Every method is a single statement against one table and commits on its own
    (the project runs in autocommit mode). Multi-row workflows compose these calls
    and track their own progress instead of relying on a surrounding transaction.
    """

    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, **filters) -> Optional[T]:
        return self.model.objects.filter(**filters).first()

    def list(self, **filters) -> Iterable[T]:
        return self.model.objects.filter(**filters)

    def exists(self, **filters) -> bool:
        return self.model.objects.filter(**filters).exists()

    def in_bulk(self, ids: Iterable[int]) -> Dict[int, T]:
        return self.model.objects.in_bulk(list(ids))

    def create(self, **data) -> T:
        return self.model.objects.create(**data)

    def update_where(self, filters: Dict[str, object], **changes) -> int:
        """Conditional UPDATE; returns the number of rows that matched ``filters``.

        Used as a compare-and-set: a return value of 0 means another writer moved
        the row first.
        """
        return self.model.objects.filter(**filters).update(**changes)

    def delete(self, obj: T):
        obj.delete()
