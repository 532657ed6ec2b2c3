"""
Partial updates restricted to an allowlist of fields.

Request schemas mark the fields that may be changed through PATCH with
the Patchable marker; the engine is built from the schema once per
resource type:

    class BookRequest(BaseModel):
        title: Annotated[str, Patchable]
        pages: Annotated[int | None, Patchable] = None
        isbn: str  # not patchable

    engine = PatchEngine.for_schema(BookRequest)
    engine.apply(book, {"title": "Dune", "pages": None, "isbn": "x"})
    # title replaced, pages cleared, isbn ignored

For every allowlisted field: an absent key leaves the value alone, and
anything else, None included, is converted to the declared type and
assigned. None therefore clears only fields whose type admits it. Keys
outside the allowlist are ignored.

All values are converted before any is assigned, so a failed patch
leaves the entity untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Callable, Iterable, Mapping, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from crud_shared.config.logging import get_logger
from crud_shared.utils.exceptions import PatchError

logger = get_logger(__name__)

ModelT = TypeVar("ModelT")


class _PatchableMarker:
    """Annotated metadata flagging a field as patchable."""

    def __repr__(self) -> str:
        return "Patchable"


Patchable = _PatchableMarker()


def _set_attribute(name: str) -> Callable[[Any, Any], None]:
    def setter(entity: Any, value: Any) -> None:
        setattr(entity, name, value)

    return setter


@dataclass(frozen=True)
class PatchField:
    """
    How one field is patched.

    adapter converts raw payload values to the declared type; setter
    writes the converted value (or None when clearing) onto the entity.
    """

    name: str
    adapter: TypeAdapter[Any]
    setter: Callable[[Any, Any], None] | None = None

    def __post_init__(self) -> None:
        if self.setter is None:
            object.__setattr__(self, "setter", _set_attribute(self.name))

    @classmethod
    def of(cls, name: str, field_type: Any, setter: Callable[[Any, Any], None] | None = None) -> PatchField:
        return cls(name=name, adapter=TypeAdapter(field_type), setter=setter)


def patchable_fields(schema: type[BaseModel]) -> frozenset[str]:
    """Names of the schema's fields carrying the Patchable marker."""
    return frozenset(
        name
        for name, info in schema.model_fields.items()
        if any(meta is Patchable for meta in info.metadata)
    )


class PatchEngine:
    """Applies patch payloads to entities for one resource type."""

    def __init__(self, fields: Iterable[PatchField]):
        self._fields: dict[str, PatchField] = {f.name: f for f in fields}

    @classmethod
    def for_schema(cls, schema: type[BaseModel]) -> PatchEngine:
        """
        Build from the Patchable fields of a request schema.

        Constraints and validators attached to a field through Annotated
        metadata apply to patch values as well. Model-level validators
        (@field_validator, @model_validator) do not run.
        """
        names = patchable_fields(schema)
        return cls(
            PatchField.of(name, Annotated[(info.annotation, *info.metadata)])
            for name, info in schema.model_fields.items()
            if name in names
        )

    @property
    def allowed_fields(self) -> frozenset[str]:
        return frozenset(self._fields)

    @property
    def supports_patch(self) -> bool:
        return bool(self._fields)

    def apply(self, entity: ModelT, payload: Mapping[str, Any]) -> ModelT:
        """
        Patch entity in place and return it.

        Raises:
            PatchError: If any allowlisted value cannot be converted or
                assigned. No field is modified in that case.
        """
        changes: list[tuple[PatchField, Any]] = []

        for name, patch_field in self._fields.items():
            if name not in payload:
                continue

            try:
                changes.append((patch_field, patch_field.adapter.validate_python(payload[name])))
            except ValidationError as e:
                reason = e.errors()[0]["msg"] if e.errors() else str(e)
                raise PatchError(name, reason) from e

        for patch_field, value in changes:
            try:
                patch_field.setter(entity, value)
            except (AttributeError, TypeError, ValueError) as e:
                raise PatchError(patch_field.name, str(e)) from e

        logger.debug(
            "Patch applied",
            entity=type(entity).__name__,
            fields=sorted(f.name for f, _ in changes),
        )
        return entity


def patch(entity: ModelT, payload: Mapping[str, Any], allowed_fields: Mapping[str, Any] | Iterable[PatchField]) -> ModelT:
    """
    One-shot patch with an explicit field table.

    allowed_fields is either PatchField objects or a mapping of field name
    to declared type.
    """
    if isinstance(allowed_fields, Mapping):
        fields = [PatchField.of(name, field_type) for name, field_type in allowed_fields.items()]
    else:
        fields = list(allowed_fields)
    return PatchEngine(fields).apply(entity, payload)
