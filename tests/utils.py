"""Test utilities and helper functions for VectorHub tests."""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from aiohttp import web
from aiohttp.test_utils import TestServer

from vectorhub.config.settings import Settings
from vectorhub.core.exceptions import ProviderConnectionError, ProviderModelError
from vectorhub.models.provider import EmbeddingResult, ModelInfo, ProviderConfig

FAKE_PROVIDER_TYPE = "fake"
FAKE_MODEL = "fake-embed"

# Base URLs containing this marker make the fake provider's listing fail
UNREACHABLE_MARKER = "unreachable"

# Markers that slow down listing or closing, for interleaving tests
SLOW_LIST_MARKER = "slowlist"
SLOW_CLOSE_MARKER = "slowclose"
SLOW_DELAY = 0.05


def text_vector(text: str, dimensions: int = 3) -> List[float]:
    """Deterministic, non-zero vector derived from a text."""
    values = [float(len(text)), float(sum(map(ord, text)) % 97 + 1), 1.0]
    return (values * dimensions)[:dimensions]


class FakeEmbeddingProvider:
    """In-memory provider adapter satisfying the EmbeddingProvider protocol.

    ``vectors`` maps texts to fixed embeddings; other texts get
    :func:`text_vector`. Texts listed in ``failing_texts`` raise a model error.
    """

    instances: List["FakeEmbeddingProvider"] = []

    def __init__(
        self,
        config: Optional[ProviderConfig] = None,
        settings: Optional[Settings] = None,
        vectors: Optional[Dict[str, Sequence[float]]] = None,
        models: Iterable[str] = (FAKE_MODEL,),
        failing_texts: Iterable[str] = (),
        dimensions: int = 3,
        delay: float = 0.0,
    ):
        self.config = config or ProviderConfig(type=FAKE_PROVIDER_TYPE, base_url="http://fake.test")
        self.default_model = self.config.default_model or FAKE_MODEL
        self.vectors = {text: list(vector) for text, vector in (vectors or {}).items()}
        self.models = list(models)
        self.failing_texts = set(failing_texts)
        self.dimensions = dimensions
        self.delay = delay
        self.calls: List[Tuple[str, str]] = []
        self.closed = False
        FakeEmbeddingProvider.instances.append(self)

    @property
    def provider_name(self) -> str:
        return self.config.type

    @property
    def reachable(self) -> bool:
        return UNREACHABLE_MARKER not in (self.config.base_url or "")

    async def generate_embedding(self, text: str, model_name: Optional[str] = None) -> EmbeddingResult:
        model = model_name or self.default_model
        self.calls.append((text, model))
        if self.delay:
            await asyncio.sleep(self.delay)
        if not self.reachable:
            raise ProviderConnectionError(self.provider_name, "Connection refused", model)
        if text in self.failing_texts:
            raise ProviderModelError(self.provider_name, f"Model rejected input: {text}", model)

        embedding = self.vectors.get(text) or text_vector(text, self.dimensions)
        return EmbeddingResult(
            embedding=embedding,
            model=model,
            provider=self.provider_name,
            dimensions=len(embedding),
        )

    async def list_models(self) -> List[ModelInfo]:
        if SLOW_LIST_MARKER in (self.config.base_url or ""):
            await asyncio.sleep(SLOW_DELAY)
        if not self.reachable:
            raise ProviderConnectionError(self.provider_name, "Connection refused")
        return [
            ModelInfo(name=name, provider=self.provider_name, dimensions=self.dimensions)
            for name in self.models
        ]

    async def is_model_available(self, model_name: str) -> bool:
        return await self.get_model_info(model_name) is not None

    async def get_model_info(self, model_name: str) -> Optional[ModelInfo]:
        if not self.reachable:
            return None
        for model in await self.list_models():
            if model.name == model_name:
                return model
        return None

    async def close(self) -> None:
        if SLOW_CLOSE_MARKER in (self.config.base_url or ""):
            await asyncio.sleep(SLOW_DELAY * 2)
        self.closed = True


class FakeProviderApi:
    """In-process HTTP backend answering canned JSON per (method, path).

    Every request is recorded with its headers and JSON body.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.requests: List[Dict[str, Any]] = []
        self.server: Optional[TestServer] = None

    def respond(
        self,
        method: str,
        path: str,
        payload: Any = None,
        status: int = 200,
        text: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
        delay: float = 0.0,
    ) -> None:
        self.routes[(method, path)] = {
            "payload": payload,
            "status": status,
            "text": text,
            "headers": headers or {},
            "delay": delay,
        }

    async def _handle(self, request: web.Request) -> web.Response:
        body = await request.json() if request.can_read_body else None
        self.requests.append(
            {
                "method": request.method,
                "path": request.path,
                "json": body,
                "headers": request.headers.copy(),
            }
        )

        route = self.routes.get((request.method, request.path))
        if route is None:
            return web.json_response({"error": "not found"}, status=404)
        if route["delay"]:
            await asyncio.sleep(route["delay"])
        if route["text"] is not None:
            return web.Response(status=route["status"], text=route["text"], headers=route["headers"])
        return web.json_response(route["payload"], status=route["status"], headers=route["headers"])

    async def start(self) -> None:
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._handle)
        self.server = TestServer(app)
        await self.server.start_server()

    @property
    def base_url(self) -> str:
        return str(self.server.make_url("/")).rstrip("/")

    async def close(self) -> None:
        if self.server is not None:
            await self.server.close()


def connection_data(name: str = "local", /, **overrides) -> Dict[str, Any]:
    """Payload for creating a connection backed by the fake provider."""
    data = {
        "name": name,
        "type": FAKE_PROVIDER_TYPE,
        "base_url": f"http://{name}.fake.test",
        "api_key": f"secret-{name}",
        "default_model": FAKE_MODEL,
    }
    data.update(overrides)
    return data
