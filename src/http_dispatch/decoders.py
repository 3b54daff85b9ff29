"""
Response body decoders.

A decoder turns the raw bytes of a successful response into the value the
caller expects. Decoders signal failure by raising ``ValueError`` or
``TypeError``; the Dispatcher reports those as ``DecodingError``.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Type, TypeVar

from pydantic import TypeAdapter

T = TypeVar("T")


class Decoder(ABC):
    """Interface for response body decoders."""

    @abstractmethod
    def decode(self, response_type: Type[T], data: bytes) -> T:
        """
        Decode ``data`` into an instance of ``response_type``.

        Raises:
            ValueError: If the data is malformed or does not match the type.
        """


class JSONDecoder(Decoder):
    """
    Decode JSON bodies with pydantic.

    ``response_type`` may be anything pydantic can validate against:
    builtins, ``List[Model]``, dataclasses, TypedDicts or ``Any`` for the
    plain parsed JSON value.
    """

    def __init__(self, strict: bool = False) -> None:
        self._strict = strict
        self._adapters: Dict[Any, TypeAdapter] = {}

    def _adapter_for(self, response_type: Any) -> TypeAdapter:
        try:
            return self._adapters[response_type]
        except (KeyError, TypeError):
            pass
        adapter = TypeAdapter(response_type)
        try:
            self._adapters[response_type] = adapter
        except TypeError:
            # unhashable type hints are not cached
            pass
        return adapter

    def decode(self, response_type: Type[T], data: bytes) -> T:
        if response_type is None or response_type is type(None):
            if data.strip():
                raise ValueError("Expected an empty body")
            return None  # type: ignore[return-value]
        adapter = self._adapter_for(response_type)
        return adapter.validate_json(data, strict=self._strict)
