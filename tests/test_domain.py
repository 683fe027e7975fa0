"""
Tests for device, request and outbound message domain models.
"""

from datetime import datetime, timezone

import pytest

from device_upstream.core.domain.devices import (
    Device, DeviceState, DeviceType, TenantContext, derive_device_key
)
from device_upstream.core.domain.messages import MessageIdentifier, MessageType, OutboundMessage
from device_upstream.core.domain.requests import SubDeviceRef
from device_upstream.core.exceptions import InvalidArgumentError, UpstreamError


class TestDeviceState:
    """Test cases for DeviceState parsing."""

    @pytest.mark.parametrize("value, expected", [
        (DeviceState.ONLINE, DeviceState.ONLINE),
        (1, DeviceState.ONLINE),
        (2, DeviceState.OFFLINE),
        ("0", DeviceState.INACTIVE),
        ("online", DeviceState.ONLINE),
        (" Offline ", DeviceState.OFFLINE),
    ])
    def test_parse_valid(self, value: object, expected: DeviceState) -> None:
        assert DeviceState.parse(value) == expected

    @pytest.mark.parametrize("value", [7, "99", "sleeping", True, None, 1.0])
    def test_parse_invalid(self, value: object) -> None:
        with pytest.raises(InvalidArgumentError):
            DeviceState.parse(value)

    def test_invalid_argument_is_upstream_and_value_error(self) -> None:
        with pytest.raises(UpstreamError):
            DeviceState.parse("bogus")
        with pytest.raises(ValueError):
            DeviceState.parse("bogus")


class TestDevice:
    """Test cases for device identity helpers."""

    def test_device_key_is_stable_and_distinct(self) -> None:
        key = derive_device_key("sensor", "d1")

        assert key == derive_device_key("sensor", "d1")
        assert key != derive_device_key("sensor", "d2")
        assert key != derive_device_key("sensor2", "d1")
        assert len(key) == 32

    def test_tenant_context_of_device(self) -> None:
        device = Device(1, 7, "sensor", "d1", "key")

        assert TenantContext.of(device) == TenantContext(7)

    def test_is_gateway_and_to_dict(self) -> None:
        device = Device(3, 1, "gateway", "gw", "key", device_type=DeviceType.GATEWAY,
                        state=DeviceState.ONLINE)

        assert device.is_gateway
        data = device.to_dict()
        assert data['device_type'] == "gateway"
        assert data['state'] == "ONLINE"
        assert data['gateway_id'] is None


class TestMessageType:
    """Test cases for MessageType parsing."""

    def test_parse_case_insensitive(self) -> None:
        assert MessageType.parse("PROPERTY") == MessageType.PROPERTY
        assert MessageType.parse("state") == MessageType.STATE
        assert MessageType.parse(MessageType.EVENT) == MessageType.EVENT

    def test_parse_unknown(self) -> None:
        with pytest.raises(InvalidArgumentError):
            MessageType.parse("telemetry")
        with pytest.raises(InvalidArgumentError):
            MessageType.parse(3)


class TestOutboundMessage:
    """Test cases for the outbound message envelope."""

    def test_topic(self) -> None:
        online = OutboundMessage(MessageType.STATE, MessageIdentifier.STATE_ONLINE.value)
        sub = OutboundMessage(MessageType.REGISTER, MessageIdentifier.REGISTER_REGISTER_SUB.value)
        event = OutboundMessage(MessageType.EVENT, "overheat")

        assert online.topic == "state.online"
        assert sub.topic == "register.register_sub"
        assert event.topic == "event.overheat"

    def test_with_identity_returns_copy(self) -> None:
        message = OutboundMessage(MessageType.PROPERTY, "report", data={"t": 1})

        enriched = message.with_identity("abc", 5)

        assert enriched.device_key == "abc"
        assert enriched.tenant_id == 5
        assert message.device_key is None

    def test_to_dict_and_back(self) -> None:
        reported = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        message = OutboundMessage(
            MessageType.PROPERTY, "report", data={"temperature": 21.5},
            device_key="abc", tenant_id=1, request_id="r1", report_time=reported,
            headers={"process_id": "p1"}
        )

        data = message.to_dict()
        assert data['type'] == "property"
        assert data['report_time'] == "2024-05-01T12:00:00+00:00"

        assert OutboundMessage.from_dict(data) == message

    def test_to_json_handles_missing_time(self) -> None:
        message = OutboundMessage(MessageType.REGISTER, "register")

        assert '"report_time": null' in message.to_json()


class TestSubDeviceRef:
    """Test cases for sub-device references."""

    def test_from_dict(self) -> None:
        ref = SubDeviceRef.from_dict({"product_key": "sensor", "device_name": "s1"})

        assert ref == SubDeviceRef("sensor", "s1")
        assert ref.to_dict() == {"product_key": "sensor", "device_name": "s1"}
