"""Struct parameter lookup."""

from __future__ import annotations

from typing import Any, Dict, Optional, Type, Union

from ..cache.models import ParamValue
from ..cache.store import RecordStore
from ..errors import (
    E_MISSING_PARAM,
    E_PARAM_TYPE,
    MissingParameter,
    decode_failure,
)

__all__ = ["ABSENT", "ParameterResolver"]


class _Absent:
    """Marker for a parameter the struct does not define."""

    _instance: Optional["_Absent"] = None

    def __new__(cls) -> "_Absent":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


class ParameterResolver:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def resolve(
        self, struct_id: int, param_id: int
    ) -> Union[ParamValue, _Absent]:
        """Value of ``param_id`` on ``struct_id``, or ``ABSENT``.

        Raises ``RecordNotFound`` when the struct itself is not in the store.
        """
        params = self._store.get_struct(struct_id).params
        if param_id not in params:
            return ABSENT
        return params[param_id]

    def require(
        self,
        struct_id: int,
        param_id: int,
        expected: Type[Any],
        *,
        param: str,
    ) -> Any:
        """Like ``resolve`` but a missing or mistyped value is an error.

        ``param`` is the symbolic name used in diagnostics (``page-name``).
        """
        ctx: Dict[str, Any] = {
            "struct_id": struct_id,
            "param_id": param_id,
            "param": param,
        }
        value = self.resolve(struct_id, param_id)
        if value is ABSENT:
            raise MissingParameter(
                code=E_MISSING_PARAM,
                message=(
                    f"Struct {struct_id} has no {param} parameter ({param_id})"
                ),
                context=ctx,
            )
        if isinstance(value, bool) or not isinstance(value, expected):
            raise decode_failure(
                "struct",
                struct_id,
                f"{param} parameter ({param_id}) is "
                f"{type(value).__name__}, expected {expected.__name__}",
                code=E_PARAM_TYPE,
                context=ctx,
            )
        return value
