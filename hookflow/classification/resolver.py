"""Type-resolution collaborator contract.

A resolver answers "what is the static type of ``name`` at this position?".
The analyzer works without one; with one, classification accuracy improves.

The HTTP implementation talks to a language-service sidecar::

    POST /resolve-type   TypeQuery            -> ResolvedType | null
    POST /resolve-types  BatchTypeRequest     -> BatchTypeResponse
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hookflow.exceptions import TypeResolutionError
from hookflow.logging_config import get_logger

logger = get_logger(__name__)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class TypeQuery(_WireModel):
    """One variable/position lookup."""
    file_path: str = Field(alias="filePath")
    variable_name: str = Field(alias="variableName")
    line: Optional[int] = None
    column: Optional[int] = None


class ResolvedType(_WireModel):
    type_string: str = Field(alias="typeString")
    is_function: bool = Field(default=False, alias="isFunction")


class BatchTypeRequest(_WireModel):
    requests: List[TypeQuery]


class BatchTypeResponse(_WireModel):
    """Resolved type strings keyed by variable name; unresolved names are absent."""
    types: Dict[str, str] = Field(default_factory=dict)


class TypeResolver(ABC):
    """Resolve static types of variables at source positions.

    Implementations raise :class:`~hookflow.exceptions.TypeResolutionError`
    when the backend fails; callers degrade to naming heuristics.
    """

    #: Whether :meth:`resolve_types` is answered in one round-trip
    supports_batch: bool = False

    @abstractmethod
    def resolve_type(
        self,
        file_path: str,
        variable_name: str,
        line: Optional[int] = None,
        column: Optional[int] = None,
    ) -> Optional[ResolvedType]:
        """Resolve one variable; None when the type is unknown."""
        pass

    def resolve_types(self, queries: List[TypeQuery]) -> Dict[str, str]:
        """Resolve several variables. The default issues one query per variable."""
        resolved = {}
        for query in queries:
            result = self.resolve_type(query.file_path, query.variable_name, query.line, query.column)
            if result is not None and result.type_string:
                resolved[query.variable_name] = result.type_string
        return resolved


class HttpTypeResolver(TypeResolver):
    """Resolver backed by an HTTP language-service sidecar.

    Args:
        endpoint: Base URL, e.g. ``http://127.0.0.1:7421``
        timeout: Per-request timeout in seconds
        client: Optional preconfigured client (tests pass one with a mock transport)
    """

    supports_batch = True

    def __init__(self, endpoint: str, timeout: float = 2.0, client: Optional[httpx.Client] = None):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None or self._client.is_closed:
            self._client = httpx.Client(timeout=httpx.Timeout(self.timeout))
            logger.debug(f"Initialized type resolver client for {self.endpoint}")
        return self._client

    def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            self._client.close()

    def __enter__(self) -> "HttpTypeResolver":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _post(self, path: str, payload: BaseModel) -> httpx.Response:
        try:
            response = self.client.post(
                f"{self.endpoint}{path}",
                json=payload.model_dump(by_alias=True, exclude_none=True),
            )
            response.raise_for_status()
            return response
        except httpx.HTTPError as e:
            raise TypeResolutionError(f"POST {path} failed: {e}") from e

    def resolve_type(self, file_path, variable_name, line=None, column=None) -> Optional[ResolvedType]:
        query = TypeQuery(file_path=file_path, variable_name=variable_name, line=line, column=column)
        response = self._post("/resolve-type", query)
        try:
            body = response.json()
            if body is None:
                return None
            return ResolvedType.model_validate(body)
        except (ValueError, ValidationError) as e:
            raise TypeResolutionError(f"Invalid /resolve-type response for {variable_name}: {e}") from e

    def resolve_types(self, queries: List[TypeQuery]) -> Dict[str, str]:
        if not queries:
            return {}
        response = self._post("/resolve-types", BatchTypeRequest(requests=queries))
        try:
            return BatchTypeResponse.model_validate(response.json()).types
        except (ValueError, ValidationError) as e:
            raise TypeResolutionError(f"Invalid /resolve-types response: {e}") from e


def create_type_resolver(config) -> Optional[TypeResolver]:
    """Build the configured resolver, or None when resolution is disabled.

    Args:
        config: :class:`~hookflow.config.TypeResolverConfig`
    """
    if not config.enabled or not config.endpoint:
        return None
    logger.info(f"Using HTTP type resolver at {config.endpoint}")
    return HttpTypeResolver(config.endpoint, timeout=config.timeout)
