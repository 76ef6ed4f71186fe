"""Agent and API client for registering a host with a Somana server and sending heartbeats."""

__version__ = "0.1.0"