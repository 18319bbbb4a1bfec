"""Canonical Pydantic models shared across all specforge modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Document models** -- the in-memory form of an OpenAPI 3.x document:
    :class:`Info`, :class:`Server`, :class:`Components`, :class:`PathItem`,
    :class:`Operation`, and the root :class:`Document`. Every document model is
    frozen and declares ``extra="allow"`` so that keys the model does not name
    (``tags``, ``callbacks``, unknown ``x-`` extensions, ...) survive a
    load/dump round trip. Wire names are kept as field aliases; dump with
    ``by_alias=True`` (see :meth:`Document.to_dict`) to get them back.

**Extension and schema models** -- :class:`CustomTag`, :class:`PermissionFlags`,
    and the schema-or-reference variant :data:`SchemaNode`
    (:class:`SchemaRef` | :class:`Schema`).

**Derived and configuration models** -- :class:`OperationRecord` and
    :class:`RouteEntry` produced by traversal and route-map construction, plus
    :class:`GlobalConfig` and its sections.

Operations are treated as immutable values: the extension handlers never
mutate one in place, they return ``operation.model_copy(update=...)``.
"""

from __future__ import annotations

import datetime
import enum
from collections.abc import Iterator, Mapping
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    SerializeAsAny,
    Tag,
    TypeAdapter,
    ValidatorFunctionWrapHandler,
    WrapValidator,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError


# --- HTTP methods ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on an OpenAPI 3.x path item.

    Declaration order is the traversal order used when a path item is
    flattened into operations.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


HTTP_METHODS: tuple[str, ...] = tuple(m.value for m in HTTPMethod)


def _as_text(value: Any) -> Any:
    # YAML turns unquoted ``version: 1.0`` into a float and ISO dates into dates.
    if isinstance(value, datetime.date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def coerce_model(model: type[BaseModel], value: Any) -> Any:
    """Return *value* as *model* when it fits, otherwise return it unchanged."""
    if isinstance(value, Mapping):
        try:
            return model.model_validate(value)
        except PydanticValidationError:
            return value
    return value


def record_field(record: Any, key: str) -> Any:
    """Read *key* from a model or a raw mapping; ``None`` for anything else."""
    if isinstance(record, BaseModel):
        return getattr(record, key, None)
    if isinstance(record, Mapping):
        return record.get(key)
    return None


def _keep_raw(value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
    try:
        return handler(value)
    except PydanticValidationError:
        return value


T = TypeVar("T")

Lenient = SerializeAsAny[Annotated[T, WrapValidator(_keep_raw)]]
"""``T`` when the loaded value fits, otherwise the value exactly as loaded.

Only the six contract checks may reject a document, so every field outside
them is declared ``Lenient[...]``. Readers must expect the raw value.
"""


# --- Extension records ---


class CustomTag(BaseModel):
    """One entry of the ``x-custom-tags`` extension.

    ``name`` is the identity used by add/remove. The other fields are free-form
    presentation hints.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    category: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    description: Optional[str] = None


class PermissionFlags(BaseModel):
    """The ``x-permissions`` extension record.

    Example::

        PermissionFlags(required=["users:read"], roles=["admin"])
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    required: Optional[list[str]] = None
    optional: Optional[list[str]] = None
    roles: Optional[list[str]] = None
    scopes: Optional[list[str]] = None


# --- Schema fragments ---


class SchemaRef(BaseModel):
    """A document-local reference, ``{"$ref": "#/components/schemas/Pet"}``."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    ref: str = Field(alias="$ref")


class Schema(BaseModel):
    """An inline JSON Schema fragment.

    Only the keywords the resolver has to descend into are modelled; all other
    keywords (``enum``, ``example``, ``additionalProperties``, ...) are kept as
    extras.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    type: Lenient[Optional[Union[str, list[str]]]] = None
    title: Lenient[Optional[str]] = None
    description: Lenient[Optional[str]] = None
    format: Lenient[Optional[str]] = None
    properties: Lenient[Optional[dict[str, Lenient[SchemaNode]]]] = None
    items: Lenient[Optional[SchemaNode]] = None
    required: Lenient[Optional[list[str]]] = None
    all_of: Lenient[Optional[list[Lenient[SchemaNode]]]] = Field(default=None, alias="allOf")
    any_of: Lenient[Optional[list[Lenient[SchemaNode]]]] = Field(default=None, alias="anyOf")
    one_of: Lenient[Optional[list[Lenient[SchemaNode]]]] = Field(default=None, alias="oneOf")
    not_: Lenient[Optional[SchemaNode]] = Field(default=None, alias="not")


def _schema_kind(value: Any) -> str:
    if isinstance(value, SchemaRef):
        return "ref"
    if isinstance(value, Mapping) and "$ref" in value:
        return "ref"
    return "inline"


SchemaNode = Annotated[
    Union[Annotated[SchemaRef, Tag("ref")], Annotated[Schema, Tag("inline")]],
    Discriminator(_schema_kind),
]
"""Schema-or-reference: a :class:`SchemaRef` when ``$ref`` is present, else a :class:`Schema`."""

Schema.model_rebuild()

_schema_node_adapter: TypeAdapter[Any] = TypeAdapter(SchemaNode)


def as_schema_node(value: Any) -> Optional[Union[SchemaRef, Schema]]:
    """Coerce a raw mapping (or an existing node) into a :data:`SchemaNode`.

    Returns:
        The node, or ``None`` if *value* is not a schema-shaped mapping.
    """
    if isinstance(value, (SchemaRef, Schema)):
        return value
    if not isinstance(value, Mapping):
        return None
    try:
        return _schema_node_adapter.validate_python(value)
    except PydanticValidationError:
        return None


# --- Document ---


class Operation(BaseModel):
    """A single OpenAPI *Operation Object* with the SpecForge extensions.

    The three extension fields are read leniently: a tag or permission record
    that does not fit its model is kept as the raw mapping, and a non-list
    value is kept as-is, so loading never fails on extension content. The
    ``validate_*`` helpers in :mod:`specforge.extensions` report such entries.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    summary: Lenient[Optional[str]] = None
    description: Lenient[Optional[str]] = None
    operation_id: Lenient[Optional[str]] = Field(default=None, alias="operationId")
    tags: Lenient[list[str]] = Field(default_factory=list)
    parameters: Lenient[list[dict[str, Any]]] = Field(default_factory=list)
    request_body: Lenient[Optional[dict[str, Any]]] = Field(default=None, alias="requestBody")
    responses: Lenient[dict[str, Any]] = Field(default_factory=dict)
    deprecated: Lenient[bool] = False
    security: Lenient[Optional[list[dict[str, list[str]]]]] = None

    route_aliases: Any = Field(default=None, alias="x-route-aliases")
    custom_tags: Any = Field(default=None, alias="x-custom-tags")
    permissions: Any = Field(default=None, alias="x-permissions")

    @field_validator("responses", mode="before")
    @classmethod
    def _status_codes_as_text(cls, value: Any) -> Any:
        # Unquoted YAML status codes (``200:``) load as ints.
        if isinstance(value, Mapping):
            return {str(code): response for code, response in value.items()}
        return value

    @field_validator("custom_tags", mode="before")
    @classmethod
    def _read_custom_tags(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [coerce_model(CustomTag, entry) for entry in value]
        return value

    @field_validator("permissions", mode="before")
    @classmethod
    def _read_permissions(cls, value: Any) -> Any:
        return coerce_model(PermissionFlags, value)


class PathItem(BaseModel):
    """An OpenAPI *Path Item Object*: verb -> :class:`Operation` plus shared fields."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    summary: Lenient[Optional[str]] = None
    description: Lenient[Optional[str]] = None
    parameters: Lenient[list[dict[str, Any]]] = Field(default_factory=list)
    servers: Lenient[Optional[list[dict[str, Any]]]] = None

    get: Lenient[Optional[Operation]] = None
    put: Lenient[Optional[Operation]] = None
    post: Lenient[Optional[Operation]] = None
    delete: Lenient[Optional[Operation]] = None
    options: Lenient[Optional[Operation]] = None
    head: Lenient[Optional[Operation]] = None
    patch: Lenient[Optional[Operation]] = None
    trace: Lenient[Optional[Operation]] = None

    def operations(self) -> Iterator[tuple[HTTPMethod, Operation]]:
        """Yield ``(method, operation)`` for every declared verb, in verb order.

        A verb whose value is not an operation object is skipped.
        """
        for method in HTTPMethod:
            operation = getattr(self, method.value)
            if isinstance(operation, Operation):
                yield method, operation

    def with_operation(self, method: HTTPMethod | str, operation: Operation) -> PathItem:
        """Return a copy of this path item with *operation* installed under *method*."""
        return self.model_copy(update={HTTPMethod(method).value: operation})


class Info(BaseModel):
    """The document's *Info Object*."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    title: Lenient[str]
    version: Lenient[str]
    description: Lenient[Optional[str]] = None
    terms_of_service: Lenient[Optional[str]] = Field(default=None, alias="termsOfService")
    contact: Lenient[Optional[dict[str, Any]]] = None
    license: Lenient[Optional[dict[str, Any]]] = None

    @field_validator("title", "version", mode="before")
    @classmethod
    def _numbers_as_text(cls, value: Any) -> Any:
        return _as_text(value)


class Server(BaseModel):
    """A ``servers`` entry."""

    model_config = ConfigDict(extra="allow", frozen=True)

    url: Lenient[Optional[str]] = None
    description: Lenient[Optional[str]] = None
    variables: Lenient[Optional[dict[str, Any]]] = None


class Components(BaseModel):
    """Reusable fragments. Only ``schemas`` is typed as :data:`SchemaNode` values."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    schemas: Lenient[dict[str, Lenient[SchemaNode]]] = Field(default_factory=dict)
    parameters: Lenient[dict[str, Any]] = Field(default_factory=dict)
    responses: Lenient[dict[str, Any]] = Field(default_factory=dict)
    request_bodies: Lenient[dict[str, Any]] = Field(default_factory=dict, alias="requestBodies")
    security_schemes: Lenient[dict[str, Any]] = Field(
        default_factory=dict, alias="securitySchemes"
    )


class Document(BaseModel):
    """A loaded OpenAPI 3.x document.

    Produced by :meth:`specforge.parser.SpecParser.parse_object` only after the
    minimal contract holds, so ``openapi``, ``info.title``, ``info.version``,
    and ``paths`` are always present. Beyond that nothing is enforced: a value
    that does not fit its field is kept as loaded, and a ``paths`` entry that
    is not a path item object (``x-internal: true``) stays raw and is skipped
    by traversal.

    See Also:
        :func:`specforge.parser.get_all_operations`: Flatten the paths.
        :func:`specforge.parser.resolver.resolve`: Follow a ``$ref``.
    """

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    openapi: str
    info: Info
    servers: Lenient[list[Lenient[Server]]] = Field(default_factory=list)
    paths: dict[str, Lenient[PathItem]]
    components: Lenient[Optional[Components]] = None
    security: Lenient[list[dict[str, list[str]]]] = Field(default_factory=list)

    @field_validator("openapi", mode="before")
    @classmethod
    def _version_as_text(cls, value: Any) -> Any:
        return _as_text(value)

    def with_operation(
        self, path: str, method: HTTPMethod | str, operation: Operation
    ) -> Document:
        """Return a new document with *operation* written back under ``path``/``method``.

        The receiver is left untouched. A path that is not yet declared is added
        at the end of ``paths``.
        """
        path_item = self.paths.get(path)
        if not isinstance(path_item, PathItem):
            path_item = PathItem()
        paths = dict(self.paths)
        paths[path] = path_item.with_operation(method, operation)
        return self.model_copy(update={"paths": paths})

    def to_dict(self) -> dict[str, Any]:
        """Dump back to wire form (original key names, only keys that were set)."""
        return self.model_dump(by_alias=True, exclude_unset=True, mode="json")


# --- Derived records ---


class OperationRecord(BaseModel):
    """One flattened ``(path, method, operation)`` entry."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation: Operation


class RouteEntry(BaseModel):
    """A route-map value. ``path`` is the canonical path or the alias it was keyed by."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    operation: Operation


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class ResolverConfig(BaseModel):
    """Schema expansion settings."""

    max_depth: int = Field(
        default=32, ge=1, description="Maximum nesting depth when expanding $ref"
    )


class RoutesConfig(BaseModel):
    """Route-map construction settings."""

    strict_conflicts: bool = Field(
        default=False,
        description="Raise on METHOD:path collisions instead of last-write-wins",
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specforge/config.json``.

    Loaded and saved by :func:`~specforge.config.load_global_config` and
    :func:`~specforge.config.save_global_config`. See
    :func:`~specforge.config.resolve_config` for the precedence chain.
    """

    default_spec: Optional[str] = Field(
        default=None, description="File path or URL used when no SPEC is given"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)
    routes: RoutesConfig = Field(default_factory=RoutesConfig)
