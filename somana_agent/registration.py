"""Registration of this host with a Somana server and periodic heartbeats."""

from __future__ import annotations

import ipaddress
import logging
import os
import platform
import re
import socket
import subprocess
import threading
from pathlib import Path

import requests

from .client import Client
from .config import Config, save_config
from .models import HostCreateRequest, HostHeartbeatRequest, HostStatus

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/config.yaml"
HEARTBEAT_INTERVAL = 5.0
REQUEST_TIMEOUT = 10.0

_OS_RELEASE = Path("/etc/os-release")
_INTEGER = re.compile(r"[+-]?\d+")


def _goos() -> str:
    return platform.system().lower()


def get_os_name() -> str:
    """Name of the running operating system as reported to the server."""
    name = _goos()
    return "macOS" if name == "darwin" else name


def get_local_ip() -> str:
    """First non-loopback IPv4 address of this host's name, else 127.0.0.1."""
    hostname = socket.gethostname()
    for *_, sockaddr in socket.getaddrinfo(hostname, None):
        try:
            address = ipaddress.ip_address(str(sockaddr[0]).split("%", 1)[0])
        except ValueError:
            continue
        v4 = address if isinstance(address, ipaddress.IPv4Address) else address.ipv4_mapped
        if v4 is not None and not v4.is_loopback:
            return str(v4)
    return "127.0.0.1"


def _command_output(*args: str) -> str | None:
    try:
        result = subprocess.run(list(args), capture_output=True, check=True, text=True)
    except (OSError, subprocess.SubprocessError):
        return None
    return result.stdout.strip()


def get_os_version() -> str:
    """Human-readable operating system version."""
    name = _goos()
    if name == "linux":
        try:
            text = _OS_RELEASE.read_text(encoding="utf-8", errors="replace")
        except OSError:
            text = None
        if text is not None:
            for line in text.split("\n"):
                if line.startswith("PRETTY_NAME="):
                    return line[len("PRETTY_NAME="):].strip('"')
        release = _command_output("uname", "-r")
        if release is not None:
            return "Linux " + release
        return "Linux"
    if name == "darwin":
        version = _command_output("sw_vers", "-productVersion")
        if version is not None:
            return "macOS " + version
        return "macOS"
    return name


class HostRegistrationService:
    """Registers this host with a Somana server and keeps it marked online."""

    def __init__(
        self,
        config: Config,
        config_path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH,
        client: Client | None = None,
    ) -> None:
        url = config.host_registration.somana_url
        logger.info("Creating host registration service with URL: %s", url)
        self.config = config
        self.config_path = config_path
        self.client = client if client is not None else Client(url, timeout=REQUEST_TIMEOUT)
        self.host_id = 0
        self.heartbeat_interval = HEARTBEAT_INTERVAL
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Register the host and start sending heartbeats in the background."""
        if not self.config.host_registration.somana_url:
            logger.info("Host registration not configured - skipping")
            return

        try:
            hostname = socket.gethostname()
        except OSError as exc:
            raise RuntimeError(f"failed to get hostname: {exc}") from exc
        try:
            ip_address = get_local_ip()
        except OSError as exc:
            raise RuntimeError(f"failed to get IP address: {exc}") from exc
        try:
            os_version = get_os_version()
        except OSError as exc:
            logger.warning("failed to get OS version: %s", exc)
            os_version = "Unknown"

        try:
            self.register_host(hostname, ip_address, os_version)
        except (RuntimeError, ValueError) as exc:
            raise RuntimeError(f"failed to register host: {exc}") from exc

        self._thread = threading.Thread(
            target=self._heartbeat_loop, name="somana-heartbeat", daemon=True
        )
        self._thread.start()
        logger.info("Host registration started - Host ID: %d", self.host_id)

    def stop(self) -> None:
        """Stop sending heartbeats."""
        if not self.config.host_registration.somana_url:
            return
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=self.heartbeat_interval + 1)
        logger.info("Host registration stopped")

    def register_host(self, hostname: str, ip_address: str, os_version: str) -> None:
        """Reuse the configured host id if the server knows it, else register anew."""
        logger.info(
            "Attempting to register host: %s (%s) - %s", hostname, ip_address, os_version
        )
        reg = self.config.host_registration

        if reg.host_id:
            if not _INTEGER.fullmatch(reg.host_id):
                raise ValueError(f"invalid host ID in config: {reg.host_id!r}")
            host_id = int(reg.host_id)
            logger.info("Checking if host ID %d exists", host_id)
            try:
                response = self.client.get_host(host_id)
            except (requests.RequestException, ValueError) as exc:
                raise RuntimeError(f"failed to check host existence: {exc}") from exc
            if response.status_code == 200 and response.data is not None:
                self.host_id = host_id
                logger.info("Found existing host with ID: %d", host_id)
                return
            logger.info("Host with ID %d does not exist, will create new host", host_id)

        body = HostCreateRequest(
            hostname=hostname,
            ip_address=ip_address,
            os_name=get_os_name(),
            os_version=os_version,
        )
        logger.info("Sending registration request to: %s/api/v1/hosts", reg.somana_url)
        try:
            response = self.client.create_host(body)
        except (requests.RequestException, ValueError) as exc:
            raise RuntimeError(f"failed to register host: {exc}") from exc

        logger.info("Registration response status: %d", response.status_code)
        if response.status_code != 201:
            raise RuntimeError(f"registration failed with status: {response.status_code}")
        if response.data is None:
            raise RuntimeError("no host data in response")

        self.host_id = response.data.id
        reg.host_id = str(self.host_id)
        try:
            save_config(self.config, self.config_path)
        except OSError as exc:
            logger.warning("failed to save host ID to config: %s", exc)
        logger.info("Successfully registered host with ID: %d", self.host_id)

    def send_heartbeat(self) -> None:
        """Tell the server that this host is online."""
        body = HostHeartbeatRequest(status=HostStatus.ONLINE)
        try:
            response = self.client.heartbeat(self.host_id, body)
        except (requests.RequestException, ValueError) as exc:
            raise RuntimeError(f"failed to send heartbeat: {exc}") from exc
        if response.status_code != 200:
            raise RuntimeError(f"heartbeat failed with status: {response.status_code}")
        logger.info("Heartbeat sent successfully")

    def _heartbeat_loop(self) -> None:
        while not self._stop_event.wait(self.heartbeat_interval):
            try:
                self.send_heartbeat()
            except RuntimeError as exc:
                logger.warning("Failed to send heartbeat: %s", exc)