# ---
# File: app/backend/http.py
# Purpose: REST implementation of the data-access layer. Talks to the backend
#          collaborator over httpx and parses every response strictly.
# ---

from typing import Optional
import logging

from fastapi.encoders import jsonable_encoder
import httpx

from app.backend.base import EventResource, StatusBackend
from app.backend.schema import parse_item, parse_list
from app.core.errors import BackendError, BackendSchemaError
from app.incidents.models import Incident
from app.maintenance.models import MaintenanceEvent
from app.services.models import Service, ServiceGroup

logger = logging.getLogger(__name__)

# Keep request logs out of the INFO stream
logging.getLogger("httpx").setLevel(logging.WARNING)


class HttpResource(EventResource):
    def __init__(self, backend: "HttpStatusBackend", path: str, model: type):
        self.backend = backend
        self.path = path
        self.name = path
        self.model = model

    async def find_many(self):
        payload = await self.backend.request("GET", f"/{self.path}")
        return parse_list(self.model, payload, self.name)

    async def find_unique(self, id: str):
        payload = await self.backend.request("GET", f"/{self.path}/{id}", allow_not_found=True)
        if payload is None:
            return None
        return parse_item(self.model, payload, self.name)

    async def create(self, item):
        payload = await self.backend.request("POST", f"/{self.path}", json=item.model_dump(mode="json"))
        return parse_item(self.model, payload, self.name)

    async def update(self, id: str, data: dict):
        payload = await self.backend.request(
            "PATCH", f"/{self.path}/{id}", json=jsonable_encoder(data), allow_not_found=True
        )
        if payload is None:
            return None
        return parse_item(self.model, payload, self.name)

    async def delete(self, id: str) -> bool:
        found = await self.backend.request(
            "DELETE", f"/{self.path}/{id}", allow_not_found=True, expect_body=False
        )
        return found is not None

    async def append_update(self, id: str, update):
        payload = await self.backend.request(
            "POST", f"/{self.path}/{id}/updates", json=update.model_dump(mode="json"), allow_not_found=True
        )
        if payload is None:
            return None
        return parse_item(self.model, payload, self.name)


class HttpStatusBackend(StatusBackend):
    """
    Backend collaborator reached over REST.

    Resources map to `/services`, `/service-groups`, `/incidents` and
    `/maintenance` under `base_url`. A `transport` can be passed to route
    requests somewhere other than the network (tests use httpx.MockTransport).
    """

    def __init__(self, base_url: str, timeout: float = 10, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

        self.service = HttpResource(self, "services", Service)
        self.group = HttpResource(self, "service-groups", ServiceGroup)
        self.incident = HttpResource(self, "incidents", Incident)
        self.maintenance = HttpResource(self, "maintenance", MaintenanceEvent)

    async def connect(self) -> None:
        if self.client is None:
            self.client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)
            logger.info(f"[BACKEND] Using REST backend at {self.base_url}")

    async def disconnect(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    def is_connected(self) -> bool:
        return self.client is not None

    async def ping(self) -> bool:
        await self.request("GET", "/services")
        return True

    # ---
    # Send one request and return the decoded JSON body.
    # Transport failures and non-2xx answers raise BackendError; a 404 returns
    # None when the caller asked for it. With expect_body=False a successful
    # call returns True instead of a body.
    # ---
    async def request(self, method: str, path: str, json=None, allow_not_found: bool = False, expect_body: bool = True):
        if self.client is None:
            await self.connect()
        try:
            response = await self.client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.error(f"[BACKEND] {method} {path} failed: {exc}")
            raise BackendError(f"Backend request {method} {path} failed: {exc}") from exc

        if response.status_code == 404 and allow_not_found:
            return None
        if response.is_error:
            logger.warning(f"[BACKEND] {method} {path} -> {response.status_code}")
            raise BackendError(
                f"Backend returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
            )
        if not expect_body:
            return True
        try:
            return response.json()
        except ValueError as exc:
            raise BackendSchemaError(f"Backend returned a non-JSON body for {method} {path}") from exc
