from typing import Any, Dict, Iterator, Mapping, Optional

PRICE = "price"
QUANTITY = "quantity"

DEFAULT_FIELDS = {PRICE: "price", QUANTITY: "quantity"}


class FieldMap:
    """String-keyed cart metadata.

    ``price`` and ``quantity`` are reserved: their values name the item
    attributes the calculator reads. Any other key is free-form.
    """

    def __init__(self, fields: Optional[Mapping[str, Any]] = None):
        self._fields: Dict[str, Any] = dict(DEFAULT_FIELDS)
        if fields:
            self.set_fields(fields)

    def set_fields(self, fields: Mapping[str, Any]) -> "FieldMap":
        for key, value in fields.items():
            if not isinstance(key, str) or not key:
                raise ValueError(f"field names must be non-empty strings, got {key!r}")
            self._fields[key] = value
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self._fields.get(key, default)

    def get_str(self, key: str, default: str = "") -> str:
        value = self._fields.get(key)
        return default if value is None else str(value)

    def get_float(self, key: str, default: float = 0.0) -> float:
        value = self._fields.get(key)
        return default if value is None else float(value)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._fields.get(key)
        return default if value is None else bool(value)

    def as_dict(self) -> Dict[str, Any]:
        return dict(self._fields)

    @property
    def price_field(self) -> str:
        return self.get_str(PRICE, DEFAULT_FIELDS[PRICE])

    @property
    def quantity_field(self) -> str:
        return self.get_str(QUANTITY, DEFAULT_FIELDS[QUANTITY])

    def __contains__(self, key: object) -> bool:
        return key in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)
