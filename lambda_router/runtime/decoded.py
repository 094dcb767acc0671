# =============================================================================
# Payload Decoder - Raw Lambda Payload to Tagged Tree
# =============================================================================
# Turns the raw invocation payload into a Node tree that can be probed for
# shape before any event type is known. Decoding never raises: malformed
# input comes back as (empty mapping, ok=False).
# =============================================================================

import json
import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from lambda_router import config

logger = logging.getLogger(__name__)

RawEvent = Union[bytes, bytearray, memoryview, str, Dict[str, Any], List[Any]]

# Backslash escapes, quotes and brackets: everything the depth scan looks at
_SCAN_TOKEN_RE = re.compile(r'\\.|["\[\]{}]', re.DOTALL)


class NodeKind(str, Enum):
    """Variants of a decoded value."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


@dataclass(frozen=True)
class Node:
    """
    One value in a decoded event.

    value holds the Python scalar for scalar kinds, a List[Node] for
    SEQUENCE and a Dict[str, Node] for MAPPING.
    """
    kind: NodeKind
    value: Any = None

    @classmethod
    def empty(cls) -> "Node":
        return cls(NodeKind.MAPPING, {})

    @property
    def is_mapping(self) -> bool:
        return self.kind == NodeKind.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind == NodeKind.SEQUENCE

    @property
    def is_string(self) -> bool:
        return self.kind == NodeKind.STRING

    @property
    def is_null(self) -> bool:
        return self.kind == NodeKind.NULL

    def has(self, key: str) -> bool:
        return self.is_mapping and key in self.value

    def get(self, key: str) -> Optional["Node"]:
        """Child under key, or None when absent or when this is not a mapping."""
        if not self.is_mapping:
            return None
        return self.value.get(key)

    def first(self) -> Optional["Node"]:
        """First element of a non-empty sequence, else None."""
        if not self.is_sequence or not self.value:
            return None
        return self.value[0]

    def keys(self) -> List[str]:
        return list(self.value.keys()) if self.is_mapping else []

    def to_python(self) -> Any:
        if self.kind == NodeKind.MAPPING:
            return {k: v.to_python() for k, v in self.value.items()}
        if self.kind == NodeKind.SEQUENCE:
            return [v.to_python() for v in self.value]
        return self.value


def from_python(obj: Any, max_depth: int, _depth: int = 0) -> Node:
    """
    Build a Node tree from JSON-compatible Python values.

    Raises ValueError on values JSON cannot carry or on nesting deeper
    than max_depth.
    """
    if obj is None:
        return Node(NodeKind.NULL)
    if isinstance(obj, bool):
        return Node(NodeKind.BOOL, obj)
    if isinstance(obj, int):
        return Node(NodeKind.NUMBER, obj)
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise ValueError(f"non-finite number: {obj!r}")
        return Node(NodeKind.NUMBER, obj)
    if isinstance(obj, str):
        return Node(NodeKind.STRING, obj)

    if _depth >= max_depth:
        raise ValueError(f"nesting deeper than {max_depth}")

    if isinstance(obj, dict):
        children = {}
        for key, value in obj.items():
            if not isinstance(key, str):
                raise ValueError(f"non-string key: {key!r}")
            children[key] = from_python(value, max_depth, _depth + 1)
        return Node(NodeKind.MAPPING, children)
    if isinstance(obj, (list, tuple)):
        return Node(NodeKind.SEQUENCE, [from_python(v, max_depth, _depth + 1) for v in obj])

    raise ValueError(f"unsupported type: {type(obj).__name__}")


def exceeds_depth(text: str, max_depth: int) -> bool:
    """
    Check bracket nesting of JSON text without parsing it.

    One left-to-right pass that tracks whether it is inside a string
    literal; an escaped character is consumed together with its backslash.
    Unterminated strings simply stop the counting.
    """
    depth = 0
    in_string = False
    for match in _SCAN_TOKEN_RE.finditer(text):
        token = match.group()
        if token[0] == "\\":
            continue
        if token == '"':
            in_string = not in_string
        elif in_string:
            continue
        elif token in "[{":
            depth += 1
            if depth > max_depth:
                return True
        else:
            depth -= 1
    return False


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _as_text(raw: RawEvent, max_bytes: int) -> Optional[str]:
    if isinstance(raw, (bytes, bytearray, memoryview)):
        data = bytes(raw)
        if len(data) > max_bytes:
            logger.warning(f"Payload too large: {len(data)} bytes (limit {max_bytes})")
            return None
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning(f"Payload is not valid UTF-8: {e}")
            return None

    if isinstance(raw, str):
        if len(raw) > max_bytes:
            logger.warning(f"Payload too large: {len(raw)} chars (limit {max_bytes})")
            return None
        return raw

    logger.warning(f"Unsupported payload type: {type(raw).__name__}")
    return None


def decode(raw: RawEvent, max_bytes: int = None, max_depth: int = None) -> Tuple[Node, bool]:
    """
    Decode a raw payload into a Node tree.

    Accepts bytes or text holding JSON, or the dict/list the Python Lambda
    runtime has already deserialized.

    Returns:
        (tree, True) on success, (Node.empty(), False) on any failure
    """
    max_bytes = max_bytes if max_bytes is not None else config.max_event_bytes()
    max_depth = max_depth if max_depth is not None else config.max_event_depth()

    if isinstance(raw, (dict, list)):
        try:
            return from_python(raw, max_depth), True
        except ValueError as e:
            logger.warning(f"Error converting event: {e}")
            return Node.empty(), False

    text = _as_text(raw, max_bytes)
    if text is None or not text.strip():
        return Node.empty(), False

    if exceeds_depth(text, max_depth):
        logger.warning(f"Payload nesting exceeds {max_depth} levels")
        return Node.empty(), False

    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
        return from_python(parsed, max_depth), True
    except (ValueError, RecursionError) as e:
        logger.warning(f"Error parsing event: {e}")
        return Node.empty(), False


def raw_text(raw: RawEvent) -> str:
    """Best-effort text rendering of a raw payload, used for echoing it back."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    if isinstance(raw, str):
        return raw
    try:
        return json.dumps(raw, ensure_ascii=False, default=str)
    except (TypeError, ValueError, RecursionError):
        return f"<unrenderable {type(raw).__name__}>"
