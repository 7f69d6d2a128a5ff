# ---
# File: app/backend/base.py
# Purpose: Data-access interface injected into the routes. Each resource is
#          exposed as an attribute with find/create/update/delete methods,
#          returning parsed canonical models and None for missing records.
# ---

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from app.core.events import Update

M = TypeVar("M", bound=BaseModel)


class Resource(Generic[M]):
    name: str
    model: type

    async def find_many(self) -> List[M]:
        raise NotImplementedError

    async def find_unique(self, id: str) -> Optional[M]:
        raise NotImplementedError

    async def create(self, item: M) -> M:
        raise NotImplementedError

    async def update(self, id: str, data: dict) -> Optional[M]:
        raise NotImplementedError

    async def delete(self, id: str) -> bool:
        raise NotImplementedError


class EventResource(Resource[M]):
    # Persist one appended update; returns the parent event as stored
    async def append_update(self, id: str, update: Update) -> Optional[M]:
        raise NotImplementedError


class StatusBackend:
    service: Resource
    group: Resource
    incident: EventResource
    maintenance: EventResource

    async def connect(self) -> None:
        pass

    async def disconnect(self) -> None:
        pass

    def is_connected(self) -> bool:
        return True

    async def ping(self) -> bool:
        raise NotImplementedError
