from datetime import datetime, timedelta, timezone

import pytest

from somana_agent.models import (
    ErrorBody,
    HealthStatus,
    Host,
    HostCreateRequest,
    HostHeartbeatRequest,
    HostStatus,
    HostUpdateRequest,
)

SAMPLE = {
    "created_at": "2024-03-01T10:20:30Z",
    "deleted_at": None,
    "hostname": "web-01",
    "id": 7,
    "ip_address": "10.0.0.5",
    "os_name": "linux",
    "os_version": "Ubuntu 22.04",
    "status": "online",
    "updated_at": "2024-03-01T11:00:00.5+02:00",
}


@pytest.mark.parametrize(
    "value, member",
    [
        ("maintenance", HostStatus.MAINTENANCE),
        ("offline", HostStatus.OFFLINE),
        ("online", HostStatus.ONLINE),
    ],
)
def test_host_status_values(value, member):
    host = Host.from_dict(dict(SAMPLE, status=value))
    assert host.status is member
    assert host.to_dict()["status"] == value


def test_host_from_dict_fields():
    host = Host.from_dict(SAMPLE)
    assert host.id == 7
    assert host.hostname == "web-01"
    assert host.status is HostStatus.ONLINE
    assert host.deleted_at is None
    assert host.created_at == datetime(2024, 3, 1, 10, 20, 30, tzinfo=timezone.utc)
    assert host.updated_at.utcoffset() == timedelta(hours=2)
    assert host.updated_at.microsecond == 500000


def test_host_round_trip():
    host = Host.from_dict(SAMPLE)
    assert host.to_dict() == SAMPLE
    assert Host.from_dict(host.to_dict()) == host


def test_host_deleted_at_parsed():
    data = dict(SAMPLE, deleted_at="2024-04-01T00:00:00Z")
    host = Host.from_dict(data)
    assert host.deleted_at == datetime(2024, 4, 1, tzinfo=timezone.utc)
    assert host.to_dict()["deleted_at"] == "2024-04-01T00:00:00Z"


def test_host_unknown_status_kept():
    host = Host.from_dict(dict(SAMPLE, status="rebooting"))
    assert host.status == "rebooting"
    assert host.to_dict()["status"] == "rebooting"


def test_host_missing_timestamps_use_zero_time():
    host = Host.from_dict({"id": 1})
    assert host.to_dict()["created_at"] == "0001-01-01T00:00:00Z"


@pytest.mark.parametrize(
    "data",
    [
        dict(SAMPLE, created_at="yesterday"),
        dict(SAMPLE, id="7"),
        dict(SAMPLE, hostname=3),
        [SAMPLE],
    ],
)
def test_host_from_dict_rejects_bad_input(data):
    with pytest.raises(ValueError):
        Host.from_dict(data)


def test_create_request_to_dict():
    req = HostCreateRequest("h", "1.2.3.4", "linux", "Debian")
    assert req.to_dict() == {
        "hostname": "h",
        "ip_address": "1.2.3.4",
        "os_name": "linux",
        "os_version": "Debian",
    }


def test_heartbeat_request_to_dict():
    assert HostHeartbeatRequest().to_dict() == {}
    assert HostHeartbeatRequest(HostStatus.ONLINE).to_dict() == {"status": "online"}


def test_update_request_omits_unset_fields():
    assert HostUpdateRequest().to_dict() == {}
    req = HostUpdateRequest(hostname="h2", status=HostStatus.MAINTENANCE)
    assert req.to_dict() == {"hostname": "h2", "status": "maintenance"}


def test_error_body_from_dict():
    assert ErrorBody.from_dict({"error": "not found"}).error == "not found"
    assert ErrorBody.from_dict({}).error is None
    with pytest.raises(ValueError):
        ErrorBody.from_dict("oops")


def test_health_status_from_dict():
    health = HealthStatus.from_dict({"status": "ok", "version": "1.0.6"})
    assert health.status == "ok"
    assert health.version == "1.0.6"
    assert health.message is None