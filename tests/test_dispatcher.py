"""
Tests para NotificationDispatcher y AlertFanOutEngine.
"""

import asyncio
import time

import pytest

from alert_core.config import AlertConfig
from alert_core.models import AlertOptions, Contact, DispatchStatus, NotificationChannel
from action_layer.fanout import AlertFanOutEngine
from action_layer.host_launcher import HostLauncher, MockLauncher
from action_layer.notification_dispatcher import (
    NotificationDispatcher,
    build_call_uri,
    build_email_uri,
    build_sms_uri,
    normalize_phone,
)


@pytest.fixture
def config():
    return AlertConfig(sms_delay_seconds=0, dispatch_timeout_seconds=2.0)


@pytest.fixture
def launcher():
    return MockLauncher()


@pytest.fixture
def dispatcher(launcher, config):
    return NotificationDispatcher(launcher=launcher, config=config)


@pytest.fixture
def engine(dispatcher, config):
    return AlertFanOutEngine(dispatcher, config=config)


class ExplodingLauncher(HostLauncher):
    """Launcher que falla con errores inesperados."""

    def navigate(self, uri):
        raise RuntimeError("")

    def open_new(self, uri):
        raise RuntimeError("")


class SlowLauncher(HostLauncher):
    """Launcher que bloquea más que el timeout de despacho."""

    def __init__(self, delay):
        self.delay = delay

    def navigate(self, uri):
        time.sleep(self.delay)

    def open_new(self, uri):
        time.sleep(self.delay)


class TestUriBuilders:
    """Tests para la construcción de URIs."""

    def test_normalize_phone(self):
        assert normalize_phone("+1 (555) 123-4567") == "+15551234567"

    def test_call_uri(self):
        assert build_call_uri("555-1234") == "tel:5551234"

    def test_sms_uri_encodes_body(self):
        uri = build_sms_uri("555 1234", "help me & now")

        assert uri == "sms:5551234?body=help%20me%20%26%20now"

    def test_email_uri_joins_recipients(self):
        uri = build_email_uri(["a@x.com", "b@y.org"], "SOS Alert", "help")

        assert uri == "mailto:a@x.com,b@y.org?subject=SOS%20Alert&body=help"


class TestNotificationDispatcher:
    """Tests para el dispatcher individual."""

    def test_call_contact(self, dispatcher, launcher):
        record = dispatcher.call_contact("555-1234")

        assert record.ok
        assert record.channel == NotificationChannel.CALL
        assert launcher.uris == ["tel:5551234"]
        assert dispatcher.get_stats()["calls"] == 1

    def test_call_falls_back_once(self, config):
        launcher = MockLauncher(fail_primary={"tel:"})
        dispatcher = NotificationDispatcher(launcher=launcher, config=config)

        record = dispatcher.call_contact("555-1234")

        assert record.ok
        assert launcher.launched[0]["strategy"] == "open_new"
        assert len(launcher.rejected) == 1

    def test_sms_fails_when_fallback_fails(self, config):
        launcher = MockLauncher(fail_primary={"sms:"}, fail_fallback={"sms:"})
        dispatcher = NotificationDispatcher(launcher=launcher, config=config)

        record = dispatcher.send_sms("555-1234", "help")

        assert record.status == DispatchStatus.FAILED
        assert record.error_message
        assert len(launcher.rejected) == 2
        assert dispatcher.get_stats()["failed"] == 1

    def test_email_has_no_fallback(self, config):
        launcher = MockLauncher(fail_primary={"mailto:"})
        dispatcher = NotificationDispatcher(launcher=launcher, config=config)

        records = dispatcher.send_email_batch(["a@x.com", "b@x.com"], "help")

        assert [r.status for r in records] == [DispatchStatus.FAILED, DispatchStatus.FAILED]
        assert len(launcher.rejected) == 1
        assert launcher.uris == []

    def test_send_single_email(self, dispatcher, launcher):
        record = dispatcher.send_email("lee@x.com", "help")

        assert record.ok
        assert record.recipient == "lee@x.com"
        assert launcher.uris[0].startswith("mailto:lee@x.com?subject=")

    def test_empty_error_message_still_fails(self, config):
        dispatcher = NotificationDispatcher(launcher=ExplodingLauncher(), config=config)

        record = dispatcher.call_contact("555")

        assert not record.ok

    def test_records_and_clear(self, dispatcher):
        dispatcher.call_contact("1")
        dispatcher.send_sms("1", "x")

        assert len(dispatcher.get_records()) == 2
        assert dispatcher.get_stats()["total_dispatched"] == 2

        dispatcher.clear_history()

        assert dispatcher.get_records() == []


class TestFanOutEngine:
    """Tests para el motor de fan-out."""

    def test_no_contacts_dispatches_nothing(self, engine, launcher):
        outcome = asyncio.run(engine.send_alert([], "help"))

        assert not outcome.success
        assert (outcome.sent, outcome.failed, outcome.called) == (0, 0, 0)
        assert launcher.uris == []

    def test_email_only_contact(self, engine):
        contacts = [Contact(id=1, name="Lee", email="lee@x.com")]

        outcome = asyncio.run(engine.send_alert(contacts, "help", AlertOptions()))

        assert outcome.called == 0
        assert outcome.sent == 1
        assert outcome.failed == 0

    def test_call_targets_first_phone_contact(self, engine, launcher):
        contacts = [
            Contact(id=1, name="Lee", email="lee@x.com"),
            Contact(id=2, name="A", phone="111"),
            Contact(id=3, name="B", phone="222"),
        ]

        outcome = asyncio.run(engine.send_alert(contacts, "help"))

        calls = [uri for uri in launcher.uris if uri.startswith("tel:")]
        assert calls == ["tel:111"]
        assert outcome.called == 1

    def test_contact_list_is_snapshotted(self, engine, launcher):
        contacts = [Contact(id=1, name="A", phone="111"), Contact(id=2, name="B", phone="222")]

        async def scenario():
            task = asyncio.create_task(engine.send_alert(contacts, "help"))
            await asyncio.sleep(0)
            contacts.reverse()
            contacts.append(Contact(id=3, name="C", phone="333"))
            return await task

        outcome = asyncio.run(scenario())

        assert launcher.uris[0] == "tel:111"
        assert not any("333" in uri for uri in launcher.uris)
        assert outcome.sent == 2

    def test_end_to_end_dispatch_sequence(self, engine, launcher):
        contacts = [
            Contact(id=1, name="Mom", phone="555-1234", email=""),
            Contact(id=2, name="Dr. Lee", phone="", email="lee@x.com"),
        ]

        outcome = asyncio.run(engine.send_alert(contacts, "help"))

        assert launcher.uris[0] == "tel:5551234"
        assert launcher.uris[1] == "sms:5551234?body=help"
        assert launcher.uris[2].startswith("mailto:lee@x.com?subject=")
        assert "SOS%20Alert" in launcher.uris[2]
        assert launcher.uris[2].endswith("&body=help")
        assert len(launcher.uris) == 3
        assert outcome.success
        assert (outcome.sent, outcome.failed, outcome.called) == (2, 0, 1)

    def test_single_email_for_many_recipients(self, engine, launcher):
        contacts = [
            Contact(id=1, name="A", email="a@x.com"),
            Contact(id=2, name="B", email=" b@x.com "),
        ]

        outcome = asyncio.run(engine.send_alert(contacts, "help"))

        mailtos = [uri for uri in launcher.uris if uri.startswith("mailto:")]
        assert len(mailtos) == 1
        assert mailtos[0].startswith("mailto:a@x.com,b@x.com?")
        assert outcome.sent == 2

    def test_partial_failure_is_accumulated(self, config):
        launcher = MockLauncher(fail_primary={"mailto:"})
        engine = AlertFanOutEngine(NotificationDispatcher(launcher, config), config=config)
        contacts = [Contact(id=1, name="A", phone="111", email="a@x.com")]

        outcome = asyncio.run(engine.send_alert(contacts, "help"))

        assert outcome.success
        assert (outcome.sent, outcome.failed, outcome.called) == (1, 1, 1)

    def test_options_disable_channels(self, engine, launcher):
        contacts = [Contact(id=1, name="A", phone="111", email="a@x.com")]

        outcome = asyncio.run(engine.send_alert(
            contacts, "help", AlertOptions(call_first=False, send_sms=True, send_email=False)
        ))

        assert launcher.uris == ["sms:111?body=help"]
        assert outcome.called == 0

    def test_slow_dispatch_times_out(self):
        config = AlertConfig(sms_delay_seconds=0, dispatch_timeout_seconds=0.05)
        engine = AlertFanOutEngine(NotificationDispatcher(SlowLauncher(0.3), config), config=config)
        contacts = [Contact(id=1, name="A", phone="111")]

        outcome = asyncio.run(engine.send_alert(contacts, "help", AlertOptions(send_sms=False, send_email=False)))

        assert not outcome.success
        assert outcome.failed == 1
        assert "timed out" in outcome.dispatches[0].error_message

    def test_sms_pacing(self, launcher):
        config = AlertConfig(sms_delay_seconds=0.05)
        engine = AlertFanOutEngine(NotificationDispatcher(launcher, config), config=config)
        contacts = [Contact(id=i, name=str(i), phone=str(i)) for i in range(1, 4)]

        start = time.monotonic()
        outcome = asyncio.run(engine.send_alert(contacts, "help", AlertOptions(call_first=False, send_email=False)))
        elapsed = time.monotonic() - start

        assert outcome.sent == 3
        assert elapsed >= 0.12
