"""Notify Gateway — HTTP API Test Script.

Drives the aiohttp application through aiohttp.test_utils with the
in-memory providers:
  1. Service banner and health endpoints
  2. /api/email dedicated and generic template routes
  3. /api/notifications workflow email, preview and push routes
  4. Error tag → HTTP status mapping

Run: python scripts/test_api.py
  or: pytest scripts/test_api.py
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

from aiohttp import test_utils

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from notify_gateway.api.app import create_app
from notify_gateway.config import AppConfig, EmailConfig, ServerConfig, WorkflowConfig
from notify_gateway.dispatch.dispatcher import NotificationDispatcher
from notify_gateway.errors import ProviderNotConfigured
from notify_gateway.providers.memory import InMemoryEmailSender, InMemoryWorkflowClient
from notify_gateway.utils.logger import get_logger

logger = get_logger(__name__)

# ── Test counters ─────────────────────────────────────────
_passed = 0
_failed = 0

TEMPLATE_NAMES = ["welcome", "confirmation", "newsletter"]

Scenario = Callable[
    [test_utils.TestClient, InMemoryEmailSender, InMemoryWorkflowClient],
    Awaitable[None],
]


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


def _config(email_key: str = "re_key", workflow_key: str = "nv_key") -> AppConfig:
    return AppConfig(
        email=EmailConfig(api_key=email_key, from_email="noreply@example.com"),
        workflow=WorkflowConfig(api_key=workflow_key),
        server=ServerConfig(),
    )


async def _serve(scenario: Scenario, config: Optional[AppConfig] = None) -> None:
    config = config or _config()
    email, workflow = InMemoryEmailSender(), InMemoryWorkflowClient()
    dispatcher = NotificationDispatcher.from_config(config, email, workflow)
    app = create_app(config, dispatcher)
    async with test_utils.TestClient(test_utils.TestServer(app)) as client:
        await scenario(client, email, workflow)


def _run(scenario: Scenario, config: Optional[AppConfig] = None) -> None:
    asyncio.run(_serve(scenario, config))


# ═══════════════════════════════════════════════════════════
# Banner & Health
# ═══════════════════════════════════════════════════════════


async def _banner_and_health(client, email, workflow) -> None:
    resp = await client.get("/")
    body = await resp.json()
    check("GET / → 200", resp.status == 200)
    check("Banner lists endpoints", body["endpoints"]["email"] == "/api/email/")

    resp = await client.get("/api/email/health")
    body = await resp.json()
    check("Email health OK", resp.status == 200 and body["status"] == "OK")
    check("Email health lists templates", body["available_templates"] == TEMPLATE_NAMES)
    check("Email health reports key", body["resend_api_key_configured"] is True)

    resp = await client.get("/api/notifications/health")
    body = await resp.json()
    check("Notifications health OK", resp.status == 200 and body["status"] == "OK")
    check("Workflow provider probed", body["workflow_provider"]["status"] == "connected")


async def _health_unconfigured(client, email, workflow) -> None:
    resp = await client.get("/api/email/health")
    body = await resp.json()
    check("Unconfigured email health → 503", resp.status == 503)
    check("Unconfigured status ERROR", body["status"] == "ERROR")


def test_banner_and_health() -> None:
    """Banner and health endpoints."""
    logger.info("═══ Test 1: Banner & Health ═══")
    _run(_banner_and_health)
    _run(_health_unconfigured, _config(email_key=""))


# ═══════════════════════════════════════════════════════════
# /api/email
# ═══════════════════════════════════════════════════════════


async def _email_routes(client, email, workflow) -> None:
    resp = await client.post("/api/email/send-welcome", json={
        "email": "ada@example.com",
        "firstName": "Ada",
        "companyName": "Acme",
        "loginUrl": "https://app.example.com/login",
    })
    body = await resp.json()
    check("send-welcome → 200", resp.status == 200)
    check("send-welcome body", body == {
        "message": "Welcome email sent successfully",
        "email": "ada@example.com",
        "success": True,
        "provider": "memory-email",
        "hasReference": True,
        "emailId": "email-1",
    })
    sent = email.calls[-1]
    check("Welcome subject", sent.subject == "Welcome to Acme! 🎉")
    check("Default support email rendered", "support@company.com" in sent.html)

    resp = await client.post("/api/email/send-welcome", json={"email": "ada@example.com", "firstName": "Ada"})
    body = await resp.json()
    check("Missing fields → 400", resp.status == 400)
    check("Missing fields listed", body["error"] == "MissingFields" and body["details"] == ["companyName", "loginUrl"])
    check("Nothing sent for bad request", email.call_count == 1)

    resp = await client.post("/api/email/send-confirmation", json={
        "email": "ada@example.com",
        "firstName": "Ada",
        "companyName": "Acme",
        "confirmUrl": "https://app.example.com/confirm",
    })
    check("send-confirmation → 200", resp.status == 200)
    check("Confirmation subject", email.calls[-1].subject == "Please confirm your email address")
    check("Default expiry rendered", "24 hours" in email.calls[-1].html)

    resp = await client.post("/api/email/send-newsletter", json={
        "email": "ada@example.com",
        "firstName": "Ada",
        "companyName": "Acme",
        "unsubscribeUrl": "https://app.example.com/unsub",
    })
    check("send-newsletter → 200", resp.status == 200)
    check("Default newsletter subject", email.calls[-1].subject == "Your Weekly Newsletter")

    resp = await client.post("/api/email/send-newsletter", json={
        "email": "ada@example.com",
        "firstName": "Ada",
        "companyName": "Acme",
        "unsubscribeUrl": "#",
        "articles": "not-an-array",
    })
    body = await resp.json()
    check("Bad articles → 400", resp.status == 400)
    check("Bad articles reported", body["details"] == ["articles must be an array"])

    resp = await client.post("/api/email/send-template", json={
        "email": "ada@example.com",
        "template": "goodbye",
        "subject": "Bye",
        "props": {},
    })
    body = await resp.json()
    check("Unknown template → 400", resp.status == 400 and body["error"] == "UnknownTemplate")
    check("Valid names listed", body["details"] == TEMPLATE_NAMES)
    sent_before = email.call_count

    resp = await client.post("/api/email/send-template", json={
        "email": "ada@example.com",
        "template": "confirmation",
        "subject": "Confirm please",
        "props": {"firstName": "Ada", "confirmUrl": "https://x.test/c"},
    })
    body = await resp.json()
    check("send-template → 200", resp.status == 200 and body["template"] == "confirmation")
    check("send-template body", body["message"] == "confirmation email sent successfully"
          and body["email"] == "ada@example.com" and body["success"] is True)
    check("send-template sends once", email.call_count == sent_before + 1)
    sent = email.calls[-1]
    check("send-template subject", sent.subject == "Confirm please")
    check("send-template recipient", sent.to == "ada@example.com")
    check("send-template html rendered", "https://x.test/c" in sent.html and "Ada" in sent.html)

    resp = await client.get("/api/email/templates")
    body = await resp.json()
    check("Email catalog", [t["name"] for t in body["templates"]] == TEMPLATE_NAMES)
    check(
        "Validation example included",
        body["templates"][0]["validation_example"] == {
            "isValid": False,
            "errors": ["firstName is required", "loginUrl is required"],
        },
    )

    resp = await client.post(
        "/api/email/send-template",
        data="{not json",
        headers={"Content-Type": "application/json"},
    )
    body = await resp.json()
    check("Invalid JSON → 400", resp.status == 400 and body["error"] == "ValidationFailed")


async def _email_provider_failures(client, email, workflow) -> None:
    request = {
        "email": "ada@example.com",
        "firstName": "Ada",
        "companyName": "Acme",
        "loginUrl": "https://app.example.com/login",
    }
    email.fail_next()
    resp = await client.post("/api/email/send-welcome", json=request)
    body = await resp.json()
    check("ProviderError → 502", resp.status == 502 and body["error"] == "ProviderError")

    email.fail_next(ProviderNotConfigured("Resend", "RESEND_API_KEY"))
    resp = await client.post("/api/email/send-welcome", json=request)
    body = await resp.json()
    check("ProviderNotConfigured → 503", resp.status == 503)
    check("Message names the setting", "RESEND_API_KEY" in body["message"])

    email.fail_next(RuntimeError("disk on fire"))
    resp = await client.post("/api/email/send-welcome", json=request)
    body = await resp.json()
    check("Internal error → 500", resp.status == 500 and body["error"] == "InternalError")
    check("Cause not leaked", "disk on fire" not in body["message"])


def test_email_routes() -> None:
    """Direct template email routes."""
    logger.info("═══ Test 2: /api/email ═══")
    _run(_email_routes)
    _run(_email_provider_failures)


# ═══════════════════════════════════════════════════════════
# /api/notifications
# ═══════════════════════════════════════════════════════════


async def _notification_email_routes(client, email, workflow) -> None:
    resp = await client.post("/api/notifications/send-email", json={
        "userId": "user-1",
        "email": "ada@example.com",
        "subject": "Hi",
        "content": "Hello there",
    })
    body = await resp.json()
    check("send-email → 200", resp.status == 200)
    check("transactionId returned", body["transactionId"] == "txn-1" and body["userId"] == "user-1")
    check("Workflow triggered, not direct email", workflow.call_count == 1 and email.call_count == 0)

    resp = await client.post("/api/notifications/send-template-email", json={
        "userId": "user-1",
        "email": "ada@example.com",
        "subject": "Welcome",
        "templateName": "welcome",
        "templateProps": {"firstName": "Ada", "loginUrl": "https://app.example.com/login"},
    })
    body = await resp.json()
    check("send-template-email → 200", resp.status == 200 and body["templateName"] == "welcome")
    check("Template content base64", workflow.calls[-1].payload["contentEncoding"] == "base64")

    resp = await client.post("/api/notifications/send-template-email", json={
        "userId": "user-1",
        "email": "ada@example.com",
        "subject": "Welcome",
        "templateName": "welcome",
    })
    body = await resp.json()
    check("Template without props → 400", resp.status == 400 and body["error"] == "ValidationFailed")

    resp = await client.post("/api/notifications/send-delayed-email", json={
        "userId": "user-1",
        "email": "ada@example.com",
        "subject": "Later",
        "content": "See you soon",
        "delayAmount": "30",
        "delayUnit": "minutes",
    })
    body = await resp.json()
    check("send-delayed-email → 200", resp.status == 200)
    check("Delay echoed", body["delay"] == "30 minutes" and body["message"] == "Email will be sent in 30 minutes")
    event = workflow.calls[-1]
    check("Delayed workflow", event.workflow_id == "delayed-email-notifications")
    check("Amount coerced", event.overrides == {"delay": {"amount": 30, "unit": "minutes"}})

    resp = await client.post("/api/notifications/send-delayed-email", json={
        "userId": "user-1",
        "email": "ada@example.com",
        "subject": "Later",
        "content": "See you soon",
    })
    body = await resp.json()
    check("Missing delay → 400", resp.status == 400 and body["details"] == ["delayAmount", "delayUnit"])


async def _preview_and_catalog(client, email, workflow) -> None:
    resp = await client.post("/api/notifications/preview-template", json={
        "templateName": "newsletter",
        "templateProps": {"firstName": "Ada", "year": 2030},
    })
    body = await resp.json()
    check("preview → 200", resp.status == 200 and body["success"] is True)
    check("Preview has html and text", body["html"].startswith("<!DOCTYPE html>") and "Ada" in body["text"])
    check("Preview sends nothing", email.call_count == 0 and workflow.call_count == 0)

    resp = await client.post("/api/notifications/preview-template", json={"templateName": "goodbye"})
    body = await resp.json()
    check("Preview unknown → 400", resp.status == 400 and body["error"] == "UnknownTemplate")
    check("Preview lists names", body["details"] == TEMPLATE_NAMES)

    resp = await client.post("/api/notifications/preview-template", json={"templateName": "confirmation"})
    body = await resp.json()
    check(
        "Preview validation errors",
        body["details"] == ["firstName is required", "confirmUrl is required"],
    )

    resp = await client.get("/api/notifications/templates")
    body = await resp.json()
    check("Notification catalog", body["templates"][2] == {
        "name": "newsletter",
        "description": "Newsletter template with articles and call-to-action",
    })


async def _push_routes(client, email, workflow) -> None:
    token = "ExponentPushToken[abcdefghijklmnopqrstuvwxyz]"
    resp = await client.post("/api/notifications/register-push-token", json={"userId": "user-1", "token": token})
    body = await resp.json()
    check("register-push-token → 200", resp.status == 200)
    check("Token truncated", body["token"] == token[:20] + "...")
    check("Registration triggers nothing", workflow.call_count == 0)

    resp = await client.post("/api/notifications/register-push-token", json={"userId": "user-1"})
    body = await resp.json()
    check("Missing token → 400", resp.status == 400 and body["details"] == ["token"])

    resp = await client.post("/api/notifications/register-push-token", json={"userId": 7, "token": token})
    body = await resp.json()
    check("Numeric userId registers", resp.status == 200 and body["userId"] == "7")

    resp = await client.post("/api/notifications/push-notification", json={
        "userId": "user-1",
        "title": "Hello",
        "body": "World",
        "data": {"screen": "inbox"},
        "token": token,
    })
    body = await resp.json()
    check("push-notification → 200", resp.status == 200 and body["transactionId"] == "txn-1")
    event = workflow.calls[-1]
    check("JIT token attached", event.to["channels"][0]["credentials"]["deviceTokens"] == [token])
    check("Custom data forwarded", event.payload["data"] == {"screen": "inbox"})

    resp = await client.post("/api/notifications/push-notification-delayed", json={
        "userId": "user-1",
        "title": "Hello",
        "body": "Later",
        "delayAmount": 30,
        "delayUnit": "seconds",
    })
    body = await resp.json()
    check("Delayed push → 200", resp.status == 200 and body["delay"] == "30 seconds")
    check("Delay override", workflow.calls[-1].overrides == {"delay": {"amount": 30, "unit": "seconds"}})

    count = workflow.call_count
    resp = await client.post("/api/notifications/push-notification-delayed", json={
        "userId": "user-1",
        "title": "Hello",
        "body": "Later",
        "delayAmount": 5,
        "delayUnit": "fortnights",
    })
    body = await resp.json()
    check("Bad unit → 400", resp.status == 400 and body["error"] == "DelayUnitInvalid")
    check("Bad unit sends nothing", workflow.call_count == count)

    resp = await client.post("/api/notifications/push-notification", json={"userId": "user-1", "title": "Hi"})
    body = await resp.json()
    check("Push missing body → 400", resp.status == 400 and body["details"] == ["body"])


def test_notification_routes() -> None:
    """Workflow email, preview and push routes."""
    logger.info("═══ Test 3: /api/notifications ═══")
    _run(_notification_email_routes)
    _run(_preview_and_catalog)
    _run(_push_routes)


def run_all_tests() -> None:
    """Run all API tests."""
    logger.info("╔══════════════════════════════════════════╗")
    logger.info("║  Notify Gateway — HTTP API Tests         ║")
    logger.info("╚══════════════════════════════════════════╝")

    for test in (test_banner_and_health, test_email_routes, test_notification_routes):
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
        logger.info("🎉 All API tests passed!")


if __name__ == "__main__":
    run_all_tests()
