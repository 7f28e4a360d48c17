"""
Tests unitarios para Alert Core.
"""

import pytest

from alert_core.config import AlertConfig
from alert_core.models import (
    AlertError,
    AlertFailure,
    AlertOutcome,
    Contact,
    DispatchRecord,
    DispatchStatus,
    NotificationChannel,
    StatusLevel,
    classify_status,
    describe_status,
    outcome_from_records,
)
from alert_core.validator import (
    CHANNEL_REQUIRED,
    INVALID_EMAIL,
    INVALID_PHONE,
    NAME_REQUIRED,
    validate_contact,
)


def _record(channel, ok=True):
    return DispatchRecord(
        channel=channel,
        recipient="x",
        uri="x:",
        status=DispatchStatus.SENT if ok else DispatchStatus.FAILED,
        error_message=None if ok else "rejected"
    )


class TestContact:
    """Tests para el modelo Contact."""

    def test_contact_from_dict(self):
        contact = Contact.from_dict({"id": 7, "name": "Mom", "phone": "555-1234", "email": None})

        assert contact.id == 7
        assert contact.name == "Mom"
        assert contact.email == ""
        assert contact.has_phone
        assert not contact.has_email

    def test_whitespace_only_channels_are_not_reachable(self):
        contact = Contact(id=1, name="Ghost", phone="   ", email=" ")

        assert not contact.has_phone
        assert not contact.has_email
        assert not contact.is_reachable

    def test_contact_to_dict(self):
        result = Contact(id=2, name="Dr. Lee", email="lee@x.com").to_dict()

        assert result == {"id": 2, "name": "Dr. Lee", "phone": "", "email": "lee@x.com"}


class TestValidator:
    """Tests para validate_contact."""

    def test_empty_contact_has_exactly_two_errors(self):
        result = validate_contact(Contact(id=1))

        assert not result.valid
        assert list(result.errors) == [NAME_REQUIRED, CHANNEL_REQUIRED]

    def test_blank_name_is_required(self):
        result = validate_contact(Contact(id=1, name="   ", phone="555"))

        assert result.errors == (NAME_REQUIRED,)

    def test_valid_contact(self):
        result = validate_contact(Contact(id=1, name="Mom", phone="555-1234", email="mom@home.org"))

        assert result.valid
        assert result.errors == ()

    @pytest.mark.parametrize("phone", [
        "5",
        "555-1234",
        "+1 (555) 123-4567",
        "0044 20 7946 0958",
        "12345678901234567890",
    ])
    def test_permissive_phone_formats(self, phone):
        result = validate_contact(Contact(id=1, name="A", phone=phone))

        assert INVALID_PHONE not in result.errors

    @pytest.mark.parametrize("phone", ["555-CALL", "555.1234", "#123"])
    def test_invalid_phone_formats(self, phone):
        result = validate_contact(Contact(id=1, name="A", phone=phone))

        assert INVALID_PHONE in result.errors

    @pytest.mark.parametrize("email", [
        "lee.x.com",
        "lee@xcom",
        "lee@",
        "@x.com",
        "lee @x.com",
        "lee@x.",
    ])
    def test_invalid_email_formats(self, email):
        result = validate_contact(Contact(id=1, name="A", email=email))

        assert INVALID_EMAIL in result.errors

    def test_valid_email_format(self):
        result = validate_contact(Contact(id=1, name="A", email="lee@clinic.example.com"))

        assert result.valid

    def test_all_rules_are_reported_together(self):
        result = validate_contact(Contact(id=1, name="", phone="abc", email="nope"))

        assert result.errors == (NAME_REQUIRED, INVALID_PHONE, INVALID_EMAIL)

    def test_validation_result_to_dict(self):
        result = validate_contact(Contact(id=1, name="A", phone="1"))

        assert result.to_dict() == {"valid": True, "errors": []}


class TestAlertOutcome:
    """Tests para AlertOutcome y su agregación."""

    def test_empty_outcome_is_not_success(self):
        outcome = outcome_from_records([])

        assert outcome.to_dict() == {
            "success": False,
            "sent": 0,
            "failed": 0,
            "called": 0,
            "dispatches": []
        }

    def test_outcome_counts_by_channel(self):
        outcome = outcome_from_records([
            _record(NotificationChannel.CALL),
            _record(NotificationChannel.SMS),
            _record(NotificationChannel.SMS, ok=False),
            _record(NotificationChannel.EMAIL),
        ])

        assert outcome.called == 1
        assert outcome.sent == 2
        assert outcome.failed == 1
        assert outcome.success
        assert len(outcome.dispatches) == 4

    def test_call_only_is_success(self):
        outcome = AlertOutcome(called=1)

        assert outcome.success

    def test_outcome_is_immutable(self):
        outcome = AlertOutcome(sent=1)

        with pytest.raises(Exception):
            outcome.sent = 5

    def test_dispatch_status_is_terminal(self):
        # Cada registro se crea ya resuelto: enviado o fallido
        assert {s.value for s in DispatchStatus} == {"sent", "failed"}


class TestStatusClassification:
    """Tests para classify_status / describe_status."""

    def test_full_success(self):
        assert classify_status(AlertOutcome(sent=2, called=1)) == StatusLevel.SUCCESS

    def test_partial_failure_is_warning(self):
        status = AlertOutcome(sent=1, failed=1)

        assert classify_status(status) == StatusLevel.WARNING
        assert "Failed: 1" in describe_status(status)

    def test_total_failure_is_error(self):
        assert classify_status(AlertOutcome(failed=3)) == StatusLevel.ERROR

    def test_misconfigured_contacts_are_warnings(self):
        assert classify_status(AlertFailure(AlertError.NO_CONTACTS)) == StatusLevel.WARNING
        assert classify_status(AlertFailure(AlertError.NO_VALID_CONTACTS)) == StatusLevel.WARNING

    def test_dispatch_failed_is_error(self):
        status = AlertFailure(AlertError.DISPATCH_FAILED, detail="boom")

        assert classify_status(status) == StatusLevel.ERROR
        assert status.to_dict() == {"error": "dispatch_failed", "detail": "boom"}

    def test_alert_in_progress_is_info(self):
        assert classify_status(AlertFailure(AlertError.ALERT_IN_PROGRESS)) == StatusLevel.INFO

    def test_describe_no_contacts(self):
        summary = describe_status(AlertFailure(AlertError.NO_CONTACTS))

        assert "no contacts configured" in summary


class TestAlertConfig:
    """Tests para AlertConfig."""

    def test_email_subject_uses_product_name(self):
        config = AlertConfig(product_name="TestDevice")

        assert "SOS Alert" in config.email_subject
        assert config.email_subject.endswith("TestDevice")
