#!/usr/bin/env python3
"""Serve HTTPS with a certificate issued by Vault PKI, rotating on an interval."""

import argparse
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

from vault_pki.lib.config import VaultConnectionConfig
from vault_pki.lib.credential_holder import CredentialHolder
from vault_pki.lib.errors import VaultPKIError
from vault_pki.lib.issuer import IssuanceClient
from vault_pki.lib.logging_config import LOGGER

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 18080
DEFAULT_TTL = "3600"


class WelcomeHandler(BaseHTTPRequestHandler):
    """Answers GET / with 'welcome'."""

    def do_GET(self) -> None:
        if self.path != "/":
            self.send_error(404)
            return
        body = b"welcome"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        LOGGER.info("%s %s", self.address_string(), format % args)


def rotate_forever(holder: CredentialHolder, interval: float, stop: threading.Event) -> None:
    """Refresh the credential every `interval` seconds until stopped.

    Failures are logged; the last-known-good credential keeps serving.
    """
    while not stop.wait(interval):
        try:
            holder.refresh()
        except (VaultPKIError, OSError) as e:
            LOGGER.warning("Rotation failed, still serving previous certificate: %s", e)


def build_server(holder: CredentialHolder, host: str, port: int) -> ThreadingHTTPServer:
    """Bind an HTTP server whose socket is wrapped with the holder's context.

    The TLS handshake is deferred to the request thread, so a client that
    never completes it does not block accept().
    """
    server = ThreadingHTTPServer((host, port), WelcomeHandler)
    server.socket = holder.server_context().wrap_socket(
        server.socket, server_side=True, do_handshake_on_connect=False
    )
    return server


def main(argv: list[str] | None = None) -> int:
    """Issue a certificate and serve HTTPS.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(
        description="Serve HTTPS using a certificate issued by Vault PKI"
    )
    parser.add_argument("--mount", default="pki", help="PKI mount path (default: pki)")
    parser.add_argument("--role", required=True, help="PKI role name")
    parser.add_argument("--common-name", required=True, help="Certificate common name")
    parser.add_argument("--ttl", default=DEFAULT_TTL, help=f"Certificate TTL (default: {DEFAULT_TTL})")
    parser.add_argument("--host", default=DEFAULT_HOST, help=f"Listen address (default: {DEFAULT_HOST})")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"Listen port (default: {DEFAULT_PORT})")
    parser.add_argument(
        "--rotate-interval",
        type=float,
        default=None,
        help="Re-issue the certificate every N seconds",
    )
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip TLS verification when connecting to Vault",
    )
    args = parser.parse_args(argv)

    if args.rotate_interval is not None and args.rotate_interval <= 0:
        parser.error("--rotate-interval must be positive")

    try:
        connection = VaultConnectionConfig.from_env()
        if args.insecure:
            connection.verify = False

        client = IssuanceClient(
            mount=args.mount,
            role=args.role,
            common_name=args.common_name,
            ttl=args.ttl,
            connection=connection,
        )
        holder = CredentialHolder(client)
        holder.refresh()
        server = build_server(holder, args.host, args.port)
    except (VaultPKIError, OSError) as e:
        LOGGER.error("Failed to start TLS server: %s", e)
        return 1

    stop = threading.Event()
    if args.rotate_interval:
        threading.Thread(
            target=rotate_forever,
            args=(holder, args.rotate_interval, stop),
            daemon=True,
        ).start()

    LOGGER.info("Serving https://%s:%d/ as %s", args.host, args.port, args.common_name)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        LOGGER.info("Shutting down")
    finally:
        stop.set()
        server.server_close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
