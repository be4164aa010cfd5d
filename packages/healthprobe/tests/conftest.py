import socket
import threading
from random import Random

import httpx
import pytest
from click.testing import CliRunner

from healthprobe.model import HealthCheckConfig


@pytest.fixture(scope="session")
def rng_factory():
    def _rng():
        return Random(727)

    return _rng


@pytest.fixture()
def rng(rng_factory):
    return rng_factory()


@pytest.fixture(scope="session")
def base_url() -> str:
    return "http://testserver/healthz"


@pytest.fixture()
def config_factory(base_url):
    def _config(**kwargs):
        return HealthCheckConfig(**{
            "url": base_url,
            "delay_secs": 0,
            **kwargs
        })

    return _config


@pytest.fixture(scope="session")
def sequence_handler_factory():
    """Build request handlers that answer with status codes or raise exceptions, in order."""

    def _handler(*results):
        results_iter = iter(results)

        def _handle(request: httpx.Request) -> httpx.Response:
            result = next(results_iter)

            if isinstance(result, Exception):
                raise result

            return httpx.Response(result)

        return _handle

    return _handler


@pytest.fixture()
def mock_client_factory():
    clients: list[httpx.Client] = []

    def _client(handler):
        client = httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)
        clients.append(client)

        return client

    yield _client

    for c in clients:
        c.close()


@pytest.fixture()
def sleep_calls(monkeypatch):
    import time

    calls: list[float] = []
    monkeypatch.setattr(time, "sleep", calls.append)

    return calls


@pytest.fixture()
def cli_runner():
    return CliRunner()


@pytest.fixture()
def socket_server_factory():
    """
    Start local servers that answer the first request with raw chunks of bytes, waiting a fixed interval
    before each chunk.
    """
    stop = threading.Event()
    servers: list[tuple[socket.socket, threading.Thread]] = []

    def _serve(server: socket.socket, chunks: tuple[bytes, ...], interval: float):
        try:
            conn, _ = server.accept()
        except OSError:
            return

        with conn:
            try:
                conn.recv(65_536)

                for chunk in chunks:
                    if stop.wait(interval):
                        return

                    conn.sendall(chunk)
            except OSError:
                # client hung up
                return

    def _server(*chunks: bytes, interval: float = 0) -> str:
        server = socket.create_server(("127.0.0.1", 0))
        server.settimeout(10)
        thread = threading.Thread(target=_serve, args=(server, chunks, interval), daemon=True)
        thread.start()
        servers.append((server, thread))

        return f"http://127.0.0.1:{server.getsockname()[1]}/healthz"

    yield _server

    stop.set()

    for s, t in servers:
        t.join()
        s.close()
