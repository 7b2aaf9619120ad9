from enum import Enum
from typing import Any


PRIMITIVE_TYPES = (str, int, float, bool, type(None))


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def serialize_result(obj: Any):
    """
    Serialize analysis results into JSON-compatible structures.
    Deterministic.
    Attribute names become camelCase; mapping keys are data and stay as they are.
    """

    if isinstance(obj, PRIMITIVE_TYPES):
        return obj

    if isinstance(obj, Enum):
        return obj.value

    if isinstance(obj, (list, tuple)):
        return [serialize_result(item) for item in obj]

    if isinstance(obj, dict):
        return {k: serialize_result(v) for k, v in obj.items()}

    if hasattr(obj, "to_dict"):
        return serialize_result(obj.to_dict())

    if hasattr(obj, "__dict__"):
        return {
            camel_case(key): serialize_result(value)
            for key, value in obj.__dict__.items()
            if not key.startswith("_")
        }

    return str(obj)
