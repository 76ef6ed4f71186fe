# somana-agent

An agent that runs on a host. It registers the host with a Somana server and
keeps it marked as online by sending a heartbeat every five seconds. It also
ships a small client library for the server's host registry API.

## Installation

```
pip install .
```

For the test suite:

```
pip install .[test]
pytest
```

## Configuration

By default the agent reads `config/config.yaml` relative to the working
directory. If the file does not exist, built-in defaults are used:

```yaml
host_registration:
  somana_url: "http://localhost:8081"
  host_id: ""
```

- `somana_url`: base URL of the Somana server. Leave it empty to turn
  registration off.
- `host_id`: identifier assigned by the server. After the first successful
  registration it is filled in and written back to the configuration file.
  On later starts the agent checks that the server still knows this host and
  reuses the identifier. If the server does not know it, the agent registers
  the host again.

An existing but empty configuration file is an error. So is a file whose
top level is not a mapping.

## Running

```
somana-agent [--config PATH] [--data-dir DIR]
```

- `--config`: the configuration file. The default is `config/config.yaml`.
- `--data-dir`: the directory for the local database. The default is `data`.

On start-up the agent does the following:

1. It loads the configuration. If this fails, it exits with status 1.
2. It creates the SQLite database `somana.db` in the data directory, with a
   `hosts` table. If this fails, it exits with status 1.
3. It collects the hostname, the first non-loopback IPv4 address (falling
   back to `127.0.0.1`), the OS name and the OS version. It then registers
   the host or reuses the stored identifier.
4. It sends a heartbeat with status `online` every five seconds until you
   interrupt it with Ctrl+C.

The OS version comes from the following sources:

- On Linux, from `PRETTY_NAME` in `/etc/os-release`, or else from `uname -r`.
- On macOS, from `sw_vers -productVersion`.

If registration fails, the agent logs a warning and keeps running. If a
heartbeat fails, it logs a warning and tries again at the next interval.

## Using the library

```python
from somana_agent.config import load_config, save_config
from somana_agent.client import Client
from somana_agent.models import HostCreateRequest, HostStatus
from somana_agent.registration import HostRegistrationService

config = load_config("config/config.yaml")

client = Client(config.host_registration.somana_url, timeout=10.0)
print(client.health().status_code)

response = client.create_host(
    HostCreateRequest(
        hostname="web-01",
        ip_address="192.0.2.10",
        os_name="linux",
        os_version="Ubuntu 22.04",
    )
)
print(response.status_code, response.data)

online = client.list_hosts(status=HostStatus.ONLINE)

service = HostRegistrationService(config, "config/config.yaml")
service.start()   # raises RuntimeError if registration fails
# ...
service.stop()
```

### Modules

- `somana_agent.models`
  - `Host`, `HostStatus`
  - the request bodies `HostCreateRequest`, `HostUpdateRequest` and `HostHeartbeatRequest`
  - `ErrorBody` and `HealthStatus`
- `somana_agent.client`: `Client`, with one method per endpoint:
  - `list_hosts`
  - `create_host`
  - `get_host`
  - `update_host`
  - `delete_host`
  - `heartbeat`
  - `health`

  Each method returns an `ApiResponse` with the following members:
  - `status_code`, `reason`, `status`
  - `headers`, `body`
  - `data`: the decoded model for a successful JSON response
  - `error`: the `ErrorBody` for a documented JSON error status

  `Client` also accepts these arguments:
  - a `requests.Session`
  - a `timeout`
  - `request_editors`: callables that may change each `requests.Request` before it is sent
- `somana_agent.config`: `Config`, `HostRegistrationConfig`, `load_config` and `save_config`.
- `somana_agent.database`: `init_database(data_dir)` and `get_db()`.
- `somana_agent.registration`:
  - `HostRegistrationService`
  - the helpers `get_local_ip`, `get_os_name` and `get_os_version`

## What it does not do

- The agent does not serve an HTTP API of its own. It only talks to the
  Somana server as a client.
- `init_database` creates the local `hosts` table, but nothing in the
  package reads host records from it or writes host records to it.