"""Last-known-good credential holder for caller-driven rotation."""

import logging
import ssl
import threading
from collections.abc import Callable
from typing import NamedTuple, Protocol

from .models import TLSCredential
from .tls_context import build_server_ssl_context

logger = logging.getLogger(__name__)


class CredentialSource(Protocol):
    def refresh_credential(self) -> TLSCredential: ...


class CredentialSnapshot(NamedTuple):
    credential: TLSCredential
    ssl_context: ssl.SSLContext


class CredentialHolder:
    """Holds the currently installed credential and swaps it atomically.

    Readers take the current snapshot reference without locking. Refreshes
    run one at a time, so the last issued credential is the one installed.
    A failed refresh never replaces the snapshot.
    """

    def __init__(
        self,
        source: CredentialSource,
        context_factory: Callable[[TLSCredential], ssl.SSLContext] = build_server_ssl_context,
    ) -> None:
        self.source = source
        self.context_factory = context_factory
        self._lock = threading.Lock()
        self._snapshot: CredentialSnapshot | None = None

    @property
    def snapshot(self) -> CredentialSnapshot | None:
        return self._snapshot

    @property
    def credential(self) -> TLSCredential | None:
        snapshot = self._snapshot
        return snapshot.credential if snapshot else None

    @property
    def ssl_context(self) -> ssl.SSLContext | None:
        snapshot = self._snapshot
        return snapshot.ssl_context if snapshot else None

    def refresh(self) -> TLSCredential:
        """Issue a new credential and install it.

        Returns:
            The newly installed credential

        Raises:
            Any error from the source or context factory; the previous
            snapshot stays installed.
        """
        with self._lock:
            try:
                credential = self.source.refresh_credential()
                context = self.context_factory(credential)
            except Exception as e:
                logger.error("Credential refresh failed, keeping current credential: %s", e)
                raise
            self._snapshot = CredentialSnapshot(credential, context)

        logger.info(
            "Installed credential for %s (serial=%s, expires=%s)",
            credential.common_name,
            credential.serial_number,
            credential.not_valid_after.isoformat(),
        )
        return credential

    def _select_context(
        self, ssl_socket: ssl.SSLObject | ssl.SSLSocket, server_name: str | None, _: ssl.SSLContext
    ) -> None:
        snapshot = self._snapshot
        if snapshot is not None:
            ssl_socket.context = snapshot.ssl_context

    def server_context(self) -> ssl.SSLContext:
        """Return a context that serves the latest credential on each handshake.

        Raises:
            RuntimeError: If no credential has been installed yet
        """
        snapshot = self._snapshot
        if snapshot is None:
            raise RuntimeError("no credential installed; call refresh() first")
        snapshot.ssl_context.sni_callback = self._select_context
        return snapshot.ssl_context
