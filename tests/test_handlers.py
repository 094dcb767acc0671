#!/usr/bin/env python3
"""
Tests for the leaf handlers and Lambda entry points.

Tests:
- API Gateway greeting handler
- SQS batch handler (per-message isolation)
- Generic echo handler
- SES email sender and email request handler
- app.lambda_handler / app.email_lambda_handler

Run with: pytest tests/test_handlers.py -v
Or: python tests/test_handlers.py
"""
import os
import sys
import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Set required environment variables BEFORE imports
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("SES_SENDER_EMAIL", "noreply@example.com")

CONTEXT = SimpleNamespace(aws_request_id="lambda-req-1", function_name="router")


def _api_event(body=None, method="POST", path="/hello"):
    event = {
        "path": path,
        "httpMethod": method,
        "headers": {"Content-Type": "application/json"},
        "requestContext": {"requestId": "req-123", "httpMethod": method},
    }
    if body is not None:
        event["body"] = body
    return event


def _sqs_event(*bodies):
    return {
        "Records": [
            {"messageId": f"msg-{i}", "body": body, "eventSource": "aws:sqs"}
            for i, body in enumerate(bodies, start=1)
        ]
    }


def _envelope(raw):
    from lambda_router.runtime.classify import parse_event
    return parse_event(raw)


def _deps_with_ses(ses):
    from lambda_router.runtime.deps import create_deps

    deps = create_deps()
    deps.ses = ses
    return deps


# =============================================================================
# TEST: HTTP handler
# =============================================================================

class TestHttpHandler:
    """Tests for the API Gateway greeting handler."""

    def test_greeting_and_echo(self):
        """Test name and message from the body."""
        from lambda_router.app.http_handler import handle_http_request
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.envelope import Reply

        outcome = handle_http_request(_envelope(_api_event('{"name": "Ada", "message": "hi"}')), create_deps())

        assert isinstance(outcome, Reply)
        assert outcome.status_code == 200
        assert outcome.body["greeting"] == "Hello, Ada!"
        assert outcome.body["echo"] == "hi"
        assert outcome.body["method"] == "POST"
        assert outcome.body["path"] == "/hello"
        assert outcome.headers["Access-Control-Allow-Origin"] == "*"
        assert outcome.headers["Content-Type"] == "application/json"
        print("✓ Greeting and echo returned")

    def test_no_body(self):
        """Test a request without a body."""
        from lambda_router.app.http_handler import handle_http_request
        from lambda_router.runtime.deps import create_deps

        outcome = handle_http_request(_envelope(_api_event(method="GET")), create_deps())

        assert outcome.status_code == 200
        assert "greeting" not in outcome.body
        assert "echo" not in outcome.body
        assert outcome.body["method"] == "GET"
        print("✓ Bodyless request answered")

    def test_invalid_body(self):
        """Test that a broken body is a 400, not an exception."""
        from lambda_router.app.http_handler import handle_http_request
        from lambda_router.runtime.deps import create_deps

        for body in ["{not json", "[1, 2]", '{"name": 42}']:
            outcome = handle_http_request(_envelope(_api_event(body)), create_deps())
            assert outcome.status_code == 400
            assert outcome.body == {"error": "Invalid request body"}
        print("✓ Invalid bodies return 400")

    def test_base64_body(self):
        """Test base64-encoded bodies."""
        import base64
        from lambda_router.app.http_handler import handle_http_request
        from lambda_router.runtime.deps import create_deps

        event = _api_event(base64.b64encode(b'{"name": "Grace"}').decode())
        event["isBase64Encoded"] = True
        outcome = handle_http_request(_envelope(event), create_deps())

        assert outcome.body["greeting"] == "Hello, Grace!"
        print("✓ Base64 body decoded")

    def test_greeting_message_from_env(self):
        """Test the configurable greeting message."""
        from lambda_router.app.http_handler import handle_http_request
        from lambda_router.runtime.deps import create_deps

        with patch.dict(os.environ, {"GREETING_MESSAGE": "Howdy"}):
            outcome = handle_http_request(_envelope(_api_event()), create_deps())
        assert outcome.body["message"] == "Howdy"
        print("✓ Greeting message configurable")


# =============================================================================
# TEST: Queue handler
# =============================================================================

class TestQueueHandler:
    """Tests for the SQS batch handler."""

    def test_bad_message_does_not_stop_batch(self):
        """Test that messages 1 and 3 are processed when 2 is broken."""
        from lambda_router.app.queue_handler import handle_queue_batch
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.envelope import Void

        event = _sqs_event('{"n": 1}', "{broken json", '{"n": 3}')
        with patch("lambda_router.app.queue_handler.process_message") as mock_process:
            outcome = handle_queue_batch(_envelope(event), create_deps())

        assert isinstance(outcome, Void)
        processed = [c.args[0].message_id for c in mock_process.call_args_list]
        assert processed == ["msg-1", "msg-3"]
        assert mock_process.call_args_list[1].args[1] == {"n": 3}
        print("✓ Broken message skipped, rest processed")

    def test_processing_error_is_isolated(self):
        """Test that an exception in one message's processing is contained."""
        from lambda_router.app.queue_handler import handle_queue_batch
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.envelope import Void

        seen = []

        def flaky(message, payload, deps):
            seen.append(message.message_id)
            if message.message_id == "msg-1":
                raise RuntimeError("downstream unavailable")

        with patch("lambda_router.app.queue_handler.process_message", side_effect=flaky):
            outcome = handle_queue_batch(_envelope(_sqs_event("{}", "{}")), create_deps())

        assert isinstance(outcome, Void)
        assert seen == ["msg-1", "msg-2"]
        print("✓ Processing errors isolated per message")

    def test_sns_wrapped_body(self):
        """Test SNS notifications delivered through SQS are unwrapped."""
        from lambda_router.app.queue_handler import decode_message_body
        from lambda_router.runtime.events import SqsMessage

        wrapper = {"Type": "Notification", "Message": json.dumps({"orderId": "o-1"})}
        assert decode_message_body(SqsMessage(body=json.dumps(wrapper))) == {"orderId": "o-1"}

        print("✓ SNS wrapper unwrapped")

    def test_non_object_bodies_rejected(self):
        """Test bodies that are valid JSON but not objects count as decode failures."""
        import pytest
        from lambda_router.app.queue_handler import decode_message_body
        from lambda_router.runtime.events import SqsMessage

        bodies = [
            "[1, 2]",
            "123",
            '"text"',
            "null",
            json.dumps({"Type": "Notification", "Message": "plain text"}),
            json.dumps({"Type": "Notification", "Message": "[1, 2]"}),
            json.dumps({"Type": "Notification", "Message": {"inline": True}}),
        ]
        for body in bodies:
            with pytest.raises(ValueError):
                decode_message_body(SqsMessage(body=body))
        print("✓ Non-object bodies rejected")

    def test_non_object_message_skipped_in_batch(self):
        """Test a scalar or array body is skipped and the rest of the batch processed."""
        from lambda_router.app.queue_handler import handle_queue_batch
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.envelope import Void

        event = _sqs_event("[1, 2]", '{"n": 2}', "123")
        with patch("lambda_router.app.queue_handler.process_message") as mock_process:
            outcome = handle_queue_batch(_envelope(event), create_deps())

        assert isinstance(outcome, Void)
        assert [c.args[0].message_id for c in mock_process.call_args_list] == ["msg-2"]
        print("✓ Non-object messages skipped")

    def test_deeply_nested_message_skipped(self):
        """Test a body nested past the interpreter's recursion limit is skipped, not fatal."""
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.router import route

        deep_sns = json.dumps({"Type": "Notification", "Message": "[" * 100000})
        event = _sqs_event('{"a": 1}', "[" * 100000, deep_sns, '{"c": 3}')
        with patch("lambda_router.app.queue_handler.process_message") as mock_process:
            response = route(event, deps=create_deps())

        assert response is None
        assert [c.args[0].message_id for c in mock_process.call_args_list] == ["msg-1", "msg-4"]
        print("✓ Deeply nested message skipped")

    def test_route_batch_returns_none(self):
        """Test the router returns no response for batches."""
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.router import route

        with patch("lambda_router.app.queue_handler.process_message") as mock_process:
            response = route(_sqs_event('{"a": 1}', "nope", '{"c": 3}'), deps=create_deps())

        assert response is None
        assert mock_process.call_count == 2
        print("✓ Batch routed with no response")


# =============================================================================
# TEST: Generic handler
# =============================================================================

class TestGenericHandler:
    """Tests for the fallback echo handler."""

    def test_echoes_raw_bytes(self):
        """Test raw text is echoed back."""
        from lambda_router.app.generic_handler import handle_generic
        from lambda_router.runtime.deps import create_deps
        from lambda_router.runtime.envelope import Reply

        outcome = handle_generic(_envelope(b"this is not json"), create_deps())

        assert isinstance(outcome, Reply)
        assert outcome.status_code == 200
        assert outcome.body["event"] == "this is not json"
        assert outcome.body["message"]
        print("✓ Raw bytes echoed")

    def test_echoes_dict_event(self):
        """Test dict events are echoed as JSON text."""
        from lambda_router.app.generic_handler import handle_generic
        from lambda_router.runtime.deps import create_deps

        outcome = handle_generic(_envelope({"source": "aws.events", "detail": {}}), create_deps())
        assert json.loads(outcome.body["event"]) == {"source": "aws.events", "detail": {}}
        print("✓ Dict events echoed")


# =============================================================================
# TEST: Email
# =============================================================================

class TestEmail:
    """Tests for the SES sender and email request handler."""

    def test_send_email_success(self):
        """Test a successful SES send."""
        from lambda_router.notifications.email_sender import send_email
        from lambda_router.runtime.events import EmailRequest

        ses = MagicMock()
        ses.send_email.return_value = {"MessageId": "ses-msg-1"}

        response = send_email(EmailRequest(to="a@example.com", subject="Hi", body="Hello"), _deps_with_ses(ses))

        assert response.status_code == 200
        assert response.to_dict() == {"statusCode": 200, "messageId": "ses-msg-1"}
        kwargs = ses.send_email.call_args.kwargs
        assert kwargs["Destination"] == {"ToAddresses": ["a@example.com"]}
        assert kwargs["Message"]["Subject"]["Data"] == "Hi"
        assert kwargs["Message"]["Body"]["Text"]["Data"] == "Hello"
        print("✓ SES send succeeds")

    def test_send_email_failure_hides_cause(self):
        """Test that provider errors are not returned to the caller."""
        from botocore.exceptions import ClientError
        from lambda_router.notifications.email_sender import send_email
        from lambda_router.runtime.events import EmailRequest

        ses = MagicMock()
        ses.send_email.side_effect = ClientError(
            {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified"}},
            "SendEmail",
        )

        response = send_email(EmailRequest(to="a@example.com", subject="Hi", body="Hello"), _deps_with_ses(ses))

        assert response.status_code == 500
        assert response.error == "Failed to send email"
        assert "not verified" not in json.dumps(response.to_dict())
        print("✓ SES failure reported generically")

    def test_email_handler_routes_through_override(self):
        """Test the email handler bound as the HTTP handler."""
        from lambda_router.app.email_handler import handle_email_request
        from lambda_router.runtime.envelope import EventKind
        from lambda_router.runtime.router import route

        ses = MagicMock()
        ses.send_email.return_value = {"MessageId": "ses-msg-2"}
        event = _api_event(json.dumps({"to": "a@example.com", "subject": "Hi", "body": "Hello"}))

        response = route(event, deps=_deps_with_ses(ses), handlers={EventKind.HTTP_REQUEST: handle_email_request})

        assert response["statusCode"] == 200
        assert json.loads(response["body"]) == {"statusCode": 200, "messageId": "ses-msg-2"}
        print("✓ Email request relayed to SES")

    def test_email_handler_validation(self):
        """Test bad and incomplete email requests."""
        from lambda_router.app.email_handler import handle_email_request

        ses = MagicMock()
        deps = _deps_with_ses(ses)

        outcome = handle_email_request(_envelope(_api_event("{nope")), deps)
        assert outcome.status_code == 400
        assert outcome.body == {"error": "Invalid request body"}

        outcome = handle_email_request(_envelope(_api_event()), deps)
        assert outcome.status_code == 400

        outcome = handle_email_request(_envelope(_api_event('{"to": "a@example.com"}')), deps)
        assert outcome.status_code == 400
        assert "subject" in outcome.body["error"]

        ses.send_email.assert_not_called()
        print("✓ Email requests validated")

    def test_email_handler_provider_failure(self):
        """Test SES failure becomes a 500 reply."""
        from botocore.exceptions import ClientError
        from lambda_router.app.email_handler import handle_email_request

        ses = MagicMock()
        ses.send_email.side_effect = ClientError({"Error": {"Code": "Throttling", "Message": "Rate exceeded"}}, "SendEmail")
        body = json.dumps({"to": "a@example.com", "subject": "Hi", "body": "Hello"})

        outcome = handle_email_request(_envelope(_api_event(body)), _deps_with_ses(ses))

        assert outcome.status_code == 500
        assert outcome.body == {"statusCode": 500, "error": "Failed to send email"}
        print("✓ SES failure returns 500")


# =============================================================================
# TEST: Lambda entry points
# =============================================================================

class TestEntryPoints:
    """Tests for app.py."""

    def test_lambda_handler_http(self):
        """Test the router entry point with an API Gateway event."""
        import app

        response = app.lambda_handler(_api_event('{"name":"Ada"}'), CONTEXT)
        assert response["statusCode"] == 200
        assert "Ada" in json.loads(response["body"])["greeting"]
        print("✓ lambda_handler answers HTTP")

    def test_lambda_handler_sqs(self):
        """Test the router entry point with an SQS batch."""
        import app

        with patch("lambda_router.app.queue_handler.process_message"):
            assert app.lambda_handler(_sqs_event('{"a": 1}'), CONTEXT) is None
        print("✓ lambda_handler acknowledges SQS")

    def test_lambda_handler_generic(self):
        """Test the router entry point with an unknown event."""
        import app

        response = app.lambda_handler({"detail-type": "Scheduled Event", "source": "aws.events"}, CONTEXT)
        assert response["statusCode"] == 200
        assert "Scheduled Event" in json.loads(response["body"])["event"]
        print("✓ lambda_handler echoes unknown events")

    def test_lambda_handler_tracing_on(self):
        """Test results are identical with tracing enabled."""
        import app

        event = _api_event('{"name":"Ada"}')
        plain = app.lambda_handler(event, CONTEXT)
        with patch.dict(os.environ, {"TRACING_ENABLED": "true"}):
            traced = app.lambda_handler(event, CONTEXT)
        assert plain == traced
        print("✓ Tracing does not change the response")

    def test_email_lambda_handler_invalid_body(self):
        """Test the email entry point rejects a bad body without calling SES."""
        import app

        response = app.email_lambda_handler(_api_event("not json"), CONTEXT)
        assert response["statusCode"] == 400
        assert json.loads(response["body"]) == {"error": "Invalid request body"}
        print("✓ email_lambda_handler validates input")


# =============================================================================
# MAIN TEST RUNNER
# =============================================================================

def run_all_tests():
    """Run all test classes."""
    print("\n" + "=" * 70)
    print("HANDLER TEST SUITE")
    print("=" * 70 + "\n")

    test_classes = [
        ("HTTP Handler Tests", TestHttpHandler),
        ("Queue Handler Tests", TestQueueHandler),
        ("Generic Handler Tests", TestGenericHandler),
        ("Email Tests", TestEmail),
        ("Entry Point Tests", TestEntryPoints),
    ]

    passed = 0
    failed = 0

    for name, test_class in test_classes:
        print(f"\n{'=' * 60}")
        print(f"Running: {name}")
        print("=" * 60)

        instance = test_class()
        for method_name in dir(instance):
            if method_name.startswith("test_"):
                try:
                    getattr(instance, method_name)()
                    passed += 1
                except Exception as e:
                    print(f"✗ {method_name}: {e}")
                    failed += 1

    print("\n" + "=" * 70)
    print(f"RESULTS: {passed} passed, {failed} failed")
    print("=" * 70)

    return failed == 0


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
