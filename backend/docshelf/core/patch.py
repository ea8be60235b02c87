"""Explicit partial-update values.

Every optional field of an update request resolves to exactly one of:

  UNSET: the key was absent; leave the stored value alone
  CLEAR: the key was sent as null; reset the stored value
  SET:   the key carried a value; store it
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class PatchOp(str, Enum):
    UNSET = "unset"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class FieldPatch(Generic[T]):
    op: PatchOp
    value: T | None = None

    @classmethod
    def unset(cls) -> "FieldPatch[T]":
        return cls(PatchOp.UNSET)

    @classmethod
    def clear(cls) -> "FieldPatch[T]":
        return cls(PatchOp.CLEAR)

    @classmethod
    def of(cls, value: T) -> "FieldPatch[T]":
        return cls(PatchOp.SET, value)

    @property
    def is_unset(self) -> bool:
        return self.op is PatchOp.UNSET

    def resolve(self, current: T | None, cleared: T | None = None) -> T | None:
        """Value the field holds after this patch is applied."""
        match self.op:
            case PatchOp.UNSET:
                return current
            case PatchOp.CLEAR:
                return cleared
            case PatchOp.SET:
                return self.value


def field_patches(body: BaseModel, names: list[str]) -> dict[str, FieldPatch[Any]]:
    """Build one FieldPatch per field name from a parsed request body.

    Uses ``model_fields_set`` to tell an absent key from an explicit null.
    """
    patches: dict[str, FieldPatch[Any]] = {}
    for name in names:
        if name not in body.model_fields_set:
            patches[name] = FieldPatch.unset()
        else:
            value = getattr(body, name)
            patches[name] = FieldPatch.clear() if value is None else FieldPatch.of(value)
    return patches
