# =============================================================================
# Typed Events - Strongly-typed Views of Classified Events
# =============================================================================
# After classification the decoded tree is re-projected into typed records.
# A type mismatch raises EventShapeError, which sends the event to the
# fallback handler just like an undecodable payload.
# =============================================================================

import base64
import binascii
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from lambda_router.runtime.decoded import Node, NodeKind
from lambda_router.runtime.errors import EventShapeError, RequestBodyError


def _opt_str(node: Optional[Node], key: str) -> str:
    """String field, or "" when absent or null."""
    child = node.get(key) if node is not None else None
    if child is None or child.is_null:
        return ""
    if not child.is_string:
        raise EventShapeError(f"field '{key}' must be a string, got {child.kind.value}")
    return child.value


def _opt_bool(node: Node, key: str) -> bool:
    child = node.get(key)
    if child is None or child.is_null:
        return False
    if child.kind != NodeKind.BOOL:
        raise EventShapeError(f"field '{key}' must be a boolean, got {child.kind.value}")
    return child.value


def _opt_mapping(node: Optional[Node], key: str) -> Optional[Node]:
    """Mapping field, or None when absent or null."""
    child = node.get(key) if node is not None else None
    if child is None or child.is_null:
        return None
    if not child.is_mapping:
        raise EventShapeError(f"field '{key}' must be an object, got {child.kind.value}")
    return child


def _str_map(node: Node, key: str) -> Dict[str, str]:
    mapping = _opt_mapping(node, key)
    if mapping is None:
        return {}
    return {name: _opt_str(mapping, name) for name in mapping.keys()}


# =============================================================================
# API GATEWAY
# =============================================================================

@dataclass
class ApiGatewayRequest:
    """API Gateway proxy request (REST API v1 or HTTP API v2)."""
    http_method: str = ""
    path: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    query_string_parameters: Dict[str, str] = field(default_factory=dict)
    path_parameters: Dict[str, str] = field(default_factory=dict)
    body: str = ""
    is_base64_encoded: bool = False
    request_id: str = ""

    @classmethod
    def from_event(cls, event: Node) -> "ApiGatewayRequest":
        if not event.is_mapping:
            raise EventShapeError("API Gateway event must be an object")

        request_context = _opt_mapping(event, "requestContext")
        http = _opt_mapping(request_context, "http")

        return cls(
            http_method=_opt_str(event, "httpMethod") or _opt_str(http, "method"),
            path=_opt_str(event, "path") or _opt_str(event, "rawPath") or _opt_str(http, "path"),
            headers=_str_map(event, "headers"),
            query_string_parameters=_str_map(event, "queryStringParameters"),
            path_parameters=_str_map(event, "pathParameters"),
            body=_opt_str(event, "body"),
            is_base64_encoded=_opt_bool(event, "isBase64Encoded"),
            request_id=_opt_str(request_context, "requestId"),
        )

    def body_text(self) -> str:
        """Request body with base64 transfer encoding removed."""
        if not self.is_base64_encoded or not self.body:
            return self.body
        try:
            return base64.b64decode(self.body, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise RequestBodyError(f"invalid base64 body: {e}") from e


# =============================================================================
# SQS
# =============================================================================

@dataclass
class SqsMessage:
    """One record of an SQS batch."""
    message_id: str = ""
    receipt_handle: str = ""
    body: str = ""
    event_source: str = ""
    event_source_arn: str = ""
    aws_region: str = ""
    attributes: Dict[str, str] = field(default_factory=dict)
    message_attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_record(cls, record: Node) -> "SqsMessage":
        if not record.is_mapping:
            raise EventShapeError(f"SQS record must be an object, got {record.kind.value}")
        message_attributes = _opt_mapping(record, "messageAttributes")
        return cls(
            message_id=_opt_str(record, "messageId"),
            receipt_handle=_opt_str(record, "receiptHandle"),
            body=_opt_str(record, "body"),
            event_source=_opt_str(record, "eventSource"),
            event_source_arn=_opt_str(record, "eventSourceARN"),
            aws_region=_opt_str(record, "awsRegion"),
            attributes=_str_map(record, "attributes"),
            message_attributes=message_attributes.to_python() if message_attributes else {},
        )


@dataclass
class SqsEvent:
    """SQS batch delivered to a Lambda event source mapping."""
    records: List[SqsMessage] = field(default_factory=list)

    @classmethod
    def from_event(cls, event: Node) -> "SqsEvent":
        records = event.get("Records")
        if records is None or records.is_null:
            return cls()
        if not records.is_sequence:
            raise EventShapeError(f"Records must be a list, got {records.kind.value}")
        return cls(records=[SqsMessage.from_record(r) for r in records.value])


# =============================================================================
# REQUEST BODIES
# =============================================================================

def _decode_object_body(text: str) -> Dict[str, Any]:
    """Decode a JSON body that must be an object (null counts as empty)."""
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError) as e:
        raise RequestBodyError(f"body is not valid JSON: {e}") from e
    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise RequestBodyError(f"body must be a JSON object, got {type(parsed).__name__}")
    return parsed


def _body_str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise RequestBodyError(f"field '{key}' must be a string")
    return value


@dataclass
class GreetingRequest:
    """Optional JSON body of the greeting endpoint."""
    name: str = ""
    message: str = ""

    @classmethod
    def from_body(cls, text: str) -> "GreetingRequest":
        data = _decode_object_body(text)
        return cls(name=_body_str(data, "name"), message=_body_str(data, "message"))


@dataclass
class EmailRequest:
    """JSON body of the email-sending endpoint."""
    to: str = ""
    subject: str = ""
    body: str = ""

    @classmethod
    def from_body(cls, text: str) -> "EmailRequest":
        data = _decode_object_body(text)
        return cls(
            to=_body_str(data, "to"),
            subject=_body_str(data, "subject"),
            body=_body_str(data, "body"),
        )

    def missing_fields(self) -> List[str]:
        return [name for name in ("to", "subject", "body") if not getattr(self, name)]
