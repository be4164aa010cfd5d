__all__ = ["DeadlineStream", "DeadlineBackend", "DeadlineTransport"]

import time
import typing

import httpcore
import httpx


def _remaining(deadline: float, timeout: float | None) -> float:
    remaining = deadline - time.monotonic()

    if timeout is None:
        return remaining

    return min(timeout, remaining)


class DeadlineStream(httpcore.NetworkStream):
    """
    Network stream that caps the timeout of every operation to whatever is left of a fixed deadline.
    httpx applies its timeouts per read and write, so a peer trickling in bytes could otherwise keep
    a request alive indefinitely.
    """

    def __init__(self, stream: httpcore.NetworkStream, deadline: float, timeout_secs: float):
        self._stream = stream
        self._deadline = deadline
        self._timeout_secs = timeout_secs

    def _timeout_for(self, timeout: float | None, exc_type: type[Exception]) -> float:
        remaining = _remaining(self._deadline, timeout)

        if remaining <= 0:
            raise exc_type(f"timed out after {self._timeout_secs}s")

        return remaining

    def read(self, max_bytes: int, timeout: float | None = None) -> bytes:
        return self._stream.read(max_bytes, self._timeout_for(timeout, httpcore.ReadTimeout))

    def write(self, buffer: bytes, timeout: float | None = None) -> None:
        self._stream.write(buffer, self._timeout_for(timeout, httpcore.WriteTimeout))

    def close(self) -> None:
        self._stream.close()

    def start_tls(
            self,
            ssl_context,
            server_hostname: str | None = None,
            timeout: float | None = None,
    ) -> httpcore.NetworkStream:
        stream = self._stream.start_tls(
            ssl_context, server_hostname, self._timeout_for(timeout, httpcore.ConnectTimeout)
        )

        return DeadlineStream(stream, self._deadline, self._timeout_secs)

    def get_extra_info(self, info: str) -> typing.Any:
        return self._stream.get_extra_info(info)


class DeadlineBackend(httpcore.NetworkBackend):
    """
    Network backend which gives every connection a fixed amount of time from the moment it is opened.
    With keep-alive disabled, every request opens its own connection, so this is a deadline on the
    whole request: connecting, sending it and reading the full response.
    """

    def __init__(self, timeout_secs: float, backend: httpcore.NetworkBackend | None = None):
        self._timeout_secs = timeout_secs
        self._backend = backend or httpcore.SyncBackend()

    def connect_tcp(
            self,
            host: str,
            port: int,
            timeout: float | None = None,
            local_address: str | None = None,
            socket_options: typing.Iterable | None = None,
    ) -> httpcore.NetworkStream:
        deadline = time.monotonic() + self._timeout_secs
        stream = self._backend.connect_tcp(
            host, port, _remaining(deadline, timeout), local_address=local_address, socket_options=socket_options
        )

        return DeadlineStream(stream, deadline, self._timeout_secs)

    def connect_unix_socket(
            self,
            path: str,
            timeout: float | None = None,
            socket_options: typing.Iterable | None = None,
    ) -> httpcore.NetworkStream:
        deadline = time.monotonic() + self._timeout_secs
        stream = self._backend.connect_unix_socket(
            path, _remaining(deadline, timeout), socket_options=socket_options
        )

        return DeadlineStream(stream, deadline, self._timeout_secs)

    def sleep(self, seconds: float) -> None:
        self._backend.sleep(seconds)


class DeadlineTransport(httpx.HTTPTransport):
    """HTTP transport which never keeps connections alive and enforces an overall deadline on each request."""

    # noinspection PyMissingConstructor
    def __init__(self, timeout_secs: float, backend: httpcore.NetworkBackend | None = None):
        # request handling and cleanup in HTTPTransport only go through the connection pool
        self._pool = httpcore.ConnectionPool(
            ssl_context=httpx.create_ssl_context(),
            max_keepalive_connections=0,
            network_backend=DeadlineBackend(timeout_secs, backend),
        )
