"""Notify Gateway — Dispatcher Test Script.

Verifies dispatch against the in-memory providers:
  1. Direct and workflow email (literal and template content)
  2. Required-field rejection with zero provider calls
  3. Delay validation and override construction
  4. Push with and without a device token
  5. Provider failures, missing references and internal errors
  6. Push-token registry acknowledgements

Run: python scripts/test_dispatcher.py
  or: pytest scripts/test_dispatcher.py
"""

from __future__ import annotations

import asyncio
import base64
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from notify_gateway.config import WorkflowIds
from notify_gateway.dispatch.dispatcher import NotificationDispatcher, coerce_delay_amount
from notify_gateway.dispatch.models import (
    Channel,
    Delay,
    DispatchResult,
    LiteralContent,
    NotificationRequest,
    Recipient,
    TemplateContent,
)
from notify_gateway.dispatch.push_tokens import PushTokenRegistry
from notify_gateway.errors import MissingFields, ProviderNotConfigured, ValidationFailed
from notify_gateway.providers.memory import InMemoryEmailSender, InMemoryWorkflowClient
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

# ── Test counters ─────────────────────────────────────────
_passed = 0
_failed = 0

FROM = "noreply@example.com"


def check(label: str, condition: bool) -> None:
    """Assert a test condition and track pass/fail counts."""
    global _passed, _failed
    if condition:
        _passed += 1
        logger.info("  ✅ %s", label)
    else:
        _failed += 1
        logger.error("  ❌ FAILED: %s", label)
    assert condition, label


def _make(**sender_kwargs) -> tuple[NotificationDispatcher, InMemoryEmailSender, InMemoryWorkflowClient]:
    email = InMemoryEmailSender(**sender_kwargs)
    workflow = InMemoryWorkflowClient(**sender_kwargs)
    dispatcher = NotificationDispatcher(email, workflow, from_email=FROM, workflows=WorkflowIds())
    return dispatcher, email, workflow


def _dispatch(dispatcher: NotificationDispatcher, request: NotificationRequest) -> DispatchResult:
    return asyncio.run(dispatcher.dispatch(request))


def _push(channel: Channel, delay: Delay | None = None, token: str = "") -> NotificationRequest:
    return NotificationRequest(
        channel=channel,
        recipient=Recipient(user_id="user-1", device_token=token),
        content=LiteralContent(subject="Hello", body="You have mail", data={"k": "v"}),
        delay=delay,
    )


def test_email_direct() -> None:
    """Direct email with literal and template content."""
    logger.info("═══ Test 1: Direct Email ═══")
    dispatcher, email, workflow = _make()

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email="ada@example.com"),
        content=LiteralContent(subject="Hi", body="<p>Hello</p>"),
    ))
    check("Literal email succeeds", result.success)
    check("Provider is the email sender", result.provider == "memory-email")
    check("Reference from id", result.provider_reference == "email-1")
    check("One send, no trigger", email.call_count == 1 and workflow.call_count == 0)
    sent = email.calls[0]
    check("From address from config", sent.from_email == FROM)
    check("Literal body sent as html", sent.html == "<p>Hello</p>" and sent.text is None)
    check("to_dict carries emailId", result.to_dict() == {
        "success": True, "provider": "memory-email", "hasReference": True, "emailId": "email-1",
    })

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email="ada@example.com"),
        content=TemplateContent(
            template_name="welcome",
            props={"firstName": "Ada", "loginUrl": "https://app.example.com/login"},
            subject="Welcome!",
        ),
    ))
    check("Template email succeeds", result.success)
    sent = email.calls[-1]
    check("Rendered html sent", sent.html.startswith("<!DOCTYPE html>") and "Ada" in sent.html)
    check("Plain-text alternative sent", bool(sent.text) and "<" not in sent.text)


def test_email_workflow() -> None:
    """Workflow email: envelope, base64 template content, delayed workflow."""
    logger.info("═══ Test 2: Workflow Email ═══")
    dispatcher, email, workflow = _make()

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id="user-1", email="ada@example.com"),
        content=LiteralContent(subject="Hi", body="plain content"),
    ))
    check("Workflow email succeeds", result.success)
    check("Reference from transactionId", result.provider_reference == "txn-1")
    event = workflow.calls[0]
    check("Email workflow id", event.workflow_id == "user-email-notifications")
    check("Recipient envelope", event.to == {"subscriberId": "user-1", "email": "ada@example.com"})
    check("Literal payload", event.payload == {"subject": "Hi", "content": "plain content"})
    check("No overrides", event.overrides is None and "overrides" not in event.to_payload())
    check("Direct sender untouched", email.call_count == 0)

    _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id="user-1", email="ada@example.com"),
        content=TemplateContent(
            template_name="confirmation",
            props={"firstName": "Ada", "confirmUrl": "https://app.example.com/c"},
            subject="Confirm",
        ),
    ))
    payload = workflow.calls[-1].payload
    decoded = base64.b64decode(payload["content"]).decode("utf-8")
    check("Template content base64-encoded", decoded.startswith("<!DOCTYPE html>"))
    check("Encoding marked", payload["contentEncoding"] == "base64")

    _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(user_id="user-1", email="ada@example.com"),
        content=LiteralContent(subject="Later", body="later content"),
        delay=Delay(amount="2", unit="hours"),
    ))
    event = workflow.calls[-1]
    check("Delayed email workflow id", event.workflow_id == "delayed-email-notifications")
    check("Delayed email override", event.overrides == {"delay": {"amount": 2, "unit": "hours"}})


def test_missing_fields() -> None:
    """Missing fields are reported exactly and nothing is sent."""
    logger.info("═══ Test 3: Missing Fields ═══")
    dispatcher, email, workflow = _make()

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(),
        content=LiteralContent(subject="Hi", body="x"),
    ))
    check("Missing address rejected", not result.success)
    check("Tagged MissingFields", result.error == MissingFields.tag)
    check("Details list 'email'", result.details == ("email",))
    check("Zero provider calls", email.call_count == 0 and workflow.call_count == 0)

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_WORKFLOW,
        recipient=Recipient(),
        content=LiteralContent(),
    ))
    check(
        "Workflow email lists every absent field",
        result.details == ("userId", "email", "subject", "content"),
    )

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.PUSH_IMMEDIATE,
        recipient=Recipient(user_id="  "),
        content=LiteralContent(subject="", body="b"),
    ))
    check("Push lists userId and title", result.details == ("userId", "title"))

    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED))
    check("Delayed push without delay", result.details == ("delayAmount", "delayUnit"))

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.PUSH_IMMEDIATE,
        recipient=Recipient(user_id="user-1"),
        content=TemplateContent(template_name="welcome", subject="x"),
    ))
    check("Template push rejected", result.error == ValidationFailed.tag)
    check("Still zero provider calls", email.call_count == 0 and workflow.call_count == 0)


def test_delay() -> None:
    """Delay unit and amount validation."""
    logger.info("═══ Test 4: Delay Validation ═══")
    dispatcher, _, workflow = _make()

    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay(30, "seconds")))
    check("30 seconds accepted", result.success)
    check("Delay override attached", workflow.calls[-1].overrides == {"delay": {"amount": 30, "unit": "seconds"}})
    check("Delayed push workflow id", workflow.calls[-1].workflow_id == "expo-push-notification")

    count = workflow.call_count
    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay(5, "fortnights")))
    check("Unknown unit rejected", result.error == "DelayUnitInvalid")
    check("Allowed units listed", result.details == ("seconds", "minutes", "hours", "days"))
    check("No provider call on bad unit", workflow.call_count == count)

    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay(-1, "minutes")))
    check("Negative amount rejected", result.error == ValidationFailed.tag)
    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay("soon", "minutes")))
    check("Non-numeric amount rejected", result.error == ValidationFailed.tag)
    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay(0, "fortnights")))
    check("Unit checked before amount", result.error == "DelayUnitInvalid")
    check("No provider call on bad amount", workflow.call_count == count)

    check("Numeric string coerced", coerce_delay_amount(" 15 ") == 15)
    check("Integral float coerced", coerce_delay_amount(3.0) == 3)
    for bad in (True, 2.5, None, "1.5", 0):
        try:
            coerce_delay_amount(bad)
            check(f"{bad!r} rejected", False)
        except ValidationFailed:
            check(f"{bad!r} rejected", True)

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email="ada@example.com"),
        content=LiteralContent(subject="Hi", body="x"),
        delay=Delay(1, "minutes"),
    ))
    check("Delay on direct email rejected", result.error == ValidationFailed.tag)

    result = _dispatch(dispatcher, _push(Channel.PUSH_DELAYED, Delay(1, "Minutes")))
    check("Unit is case-insensitive", workflow.calls[-1].overrides["delay"]["unit"] == "minutes")


def test_push() -> None:
    """Push envelopes with and without a just-in-time token."""
    logger.info("═══ Test 5: Push ═══")
    dispatcher, _, workflow = _make()

    result = _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE, token="ExponentPushToken[abc]"))
    check("Push succeeds", result.success and result.provider == "memory-workflow")
    event = workflow.calls[-1]
    check("Push workflow id", event.workflow_id == "expo-push-notification")
    check("Token becomes channel override", event.to["channels"] == [{
        "providerId": "expo",
        "credentials": {"deviceTokens": ["ExponentPushToken[abc]"]},
    }])
    check("Push payload", event.payload == {"title": "Hello", "body": "You have mail", "data": {"k": "v"}})

    _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE))
    check("No token → subscriber only", workflow.calls[-1].to == {"subscriberId": "user-1"})

    templated = NotificationRequest(
        channel=Channel.PUSH_IMMEDIATE,
        recipient=Recipient(user_id="user-1"),
        content=TemplateContent(template_name="welcome", props={}, subject="Hi"),
    )
    try:
        dispatcher._build_push_event(templated, None)
        check("Push envelope refuses template content", False)
    except ValidationFailed as e:
        check("Push envelope refuses template content", "email channels" in e.errors[0])


def test_provider_outcomes() -> None:
    """Provider failures, missing references and unexpected errors."""
    logger.info("═══ Test 6: Provider Outcomes ═══")

    dispatcher, _, workflow = _make(omit_reference=True)
    result = _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE))
    check("No reference is still success", result.success)
    check("has_reference False", result.has_reference is False)
    check("No transactionId in body", "transactionId" not in result.to_dict())

    dispatcher, _, workflow = _make()
    workflow.fail_next()
    result = _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE))
    check("Provider failure reported", result.error == "ProviderError")
    check("Exactly one attempt", workflow.call_count == 1)

    workflow.fail_next(ProviderNotConfigured("Novu", "NOVU_API_KEY"))
    result = _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE))
    check("Not configured reported", result.error == "ProviderNotConfigured")
    check("Message names the setting", "NOVU_API_KEY" in result.error_message)

    workflow.fail_next(KeyError("surprise"))
    result = _dispatch(dispatcher, _push(Channel.PUSH_IMMEDIATE))
    check("Unexpected error → InternalError", result.error == "InternalError")
    check("Generic message, cause not leaked", "surprise" not in (result.error_message or ""))

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email="ada@example.com"),
        content=TemplateContent(template_name="goodbye", subject="Bye"),
    ))
    check("Unknown template on dispatch", result.error == "UnknownTemplate")
    check("Valid names listed", result.details == ("welcome", "confirmation", "newsletter"))

    result = _dispatch(dispatcher, NotificationRequest(
        channel=Channel.EMAIL_DIRECT,
        recipient=Recipient(email="ada@example.com"),
        content=TemplateContent(template_name="welcome", props={}, subject="Hi"),
    ))
    check("Invalid bag on dispatch", result.error == ValidationFailed.tag)
    check("Validation errors as details", result.details == ("firstName is required", "loginUrl is required"))


def test_push_tokens() -> None:
    """Advisory push-token registration."""
    logger.info("═══ Test 7: Push Tokens ═══")
    registry = PushTokenRegistry()

    token = "ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]"
    ack = registry.register("user-1", token)
    check("Preview is 20 chars + ...", ack.token_preview == token[:20] + "...")
    check("Ack shape", ack.to_dict() == {
        "userId": "user-1",
        "token": token[:20] + "...",
        "note": "Token will be used when sending notifications",
    })
    registry.register("user-1", "other-token")
    check("Re-registering overwrites", registry.lookup("user-1") == "other-token" and len(registry) == 1)

    try:
        registry.register("", "")
        check("Empty values rejected", False)
    except MissingFields as e:
        check("Empty values rejected", e.details == ["userId", "token"])

    ack = registry.register(42, token)
    check("Numeric userId accepted as text", ack.user_id == "42" and registry.lookup("42") == token)

    try:
        registry.register(None, token)
        check("None userId reported missing", False)
    except MissingFields as e:
        check("None userId reported missing", e.details == ["userId"])

    try:
        registry.register({"id": 1}, token)
        check("Object userId rejected", False)
    except ValidationFailed as e:
        check("Object userId rejected", e.errors == ["userId must be a string"])


def run_all_tests() -> None:
    """Run all dispatcher tests."""
    logger.info("╔══════════════════════════════════════════╗")
    logger.info("║  Notify Gateway — Dispatcher Tests       ║")
    logger.info("╚══════════════════════════════════════════╝")

    for test in (
        test_email_direct,
        test_email_workflow,
        test_missing_fields,
        test_delay,
        test_push,
        test_provider_outcomes,
        test_push_tokens,
    ):
        try:
            test()
        except AssertionError:
            logger.error("%s stopped at first failure", test.__name__)

    logger.info("═══════════════════════════════════════════")
    logger.info("  Results: %d passed, %d failed", _passed, _failed)
    logger.info("═══════════════════════════════════════════")

    if _failed > 0:
        logger.error("Some tests failed!")
        sys.exit(1)
    else:
        logger.info("🎉 All dispatcher tests passed!")


if __name__ == "__main__":
    run_all_tests()
