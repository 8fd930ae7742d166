from __future__ import annotations

from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from fantasy_relay.db.base import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    def __init__(self, session: Session, model: type[ModelT]) -> None:
        self.session = session
        self.model = model

    def add(self, obj: ModelT, *, flush: bool = True) -> ModelT:
        self.session.add(obj)
        if flush:
            self.session.flush()
        return obj

    def get(self, id_: Any) -> ModelT | None:
        return self.session.get(self.model, id_)

    def delete_by_id(self, id_: Any, *, flush: bool = True) -> bool:
        obj = self.get(id_)
        if obj is None:
            return False
        self.session.delete(obj)
        if flush:
            self.session.flush()
        return True
