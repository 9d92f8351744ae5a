"""Tests for config module."""

import dataclasses

import pytest

from vault_pki.lib.config import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_VAULT_ADDRESS,
    IssuanceRequest,
    VaultConnectionConfig,
)
from vault_pki.lib.errors import ConfigurationError


class TestIssuanceRequest:
    """Tests for IssuanceRequest."""

    def test_path_joins_mount_and_role(self) -> None:
        """Path is <mount>/issue/<role>."""
        request = IssuanceRequest("pki", "web", "svc.example.tld", "3600")
        assert request.path == "pki/issue/web"

    def test_hierarchical_mount_and_slashes(self) -> None:
        """Nested mounts are kept, surrounding slashes stripped."""
        request = IssuanceRequest("/pki/int/", "web", "svc.example.tld", "1h")
        assert request.path == "pki/int/issue/web"

    def test_integer_ttl_serialized_as_string(self) -> None:
        """Integer TTL becomes its decimal string."""
        request = IssuanceRequest("pki", "web", "svc.example.tld", 3600)
        assert request.to_payload() == {"common_name": "svc.example.tld", "ttl": "3600"}

    def test_payload_is_fresh_each_call(self) -> None:
        """Mutating a payload does not leak into the next one."""
        request = IssuanceRequest("pki", "web", "svc.example.tld", "3600")
        payload = request.to_payload()
        payload["common_name"] = "evil.example.tld"

        assert request.to_payload()["common_name"] == "svc.example.tld"
        assert request.common_name == "svc.example.tld"

    def test_request_is_frozen(self) -> None:
        """Fields cannot be reassigned."""
        request = IssuanceRequest("pki", "web", "svc.example.tld", "3600")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.common_name = "other"  # type: ignore[misc]

    @pytest.mark.parametrize(
        ("mount", "role", "common_name", "ttl"),
        [
            ("", "web", "svc.example.tld", "3600"),
            ("/", "web", "svc.example.tld", "3600"),
            ("pki", "", "svc.example.tld", "3600"),
            ("pki", "web", "", "3600"),
            ("pki", "web", "   ", "3600"),
            ("pki", "web", "svc.example.tld", ""),
            ("pki", "web", "svc.example.tld", 0),
            ("pki", "web", "svc.example.tld", -5),
            ("pki", "web", "svc.example.tld", True),
            ("pki", "web", "svc.example.tld", None),
        ],
    )
    def test_invalid_parameters_raise(self, mount, role, common_name, ttl) -> None:
        """Empty identifiers and bad TTLs raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            IssuanceRequest(mount, role, common_name, ttl)


class TestVaultConnectionConfig:
    """Tests for VaultConnectionConfig."""

    def test_defaults(self) -> None:
        """Defaults point at a local Vault with verification on."""
        config = VaultConnectionConfig()

        assert config.address == DEFAULT_VAULT_ADDRESS
        assert config.verify is True
        assert config.timeout == DEFAULT_TIMEOUT_SECONDS
        config.validate()

    def test_token_not_in_repr(self) -> None:
        """Token is hidden from repr."""
        config = VaultConnectionConfig(token="s.secret")
        assert "s.secret" not in repr(config)

    @pytest.mark.parametrize("address", ["", "127.0.0.1:8200", "ftp://vault:8200", "https://"])
    def test_validate_rejects_bad_address(self, address: str) -> None:
        """Address needs http(s) scheme and host."""
        with pytest.raises(ConfigurationError, match="invalid Vault address"):
            VaultConnectionConfig(address=address).validate()

    def test_validate_rejects_non_positive_timeout(self) -> None:
        """Timeout must be positive."""
        with pytest.raises(ConfigurationError, match="timeout"):
            VaultConnectionConfig(timeout=0).validate()

    def test_from_env_reads_vault_variables(self) -> None:
        """VAULT_* variables populate the config."""
        config = VaultConnectionConfig.from_env(
            {
                "VAULT_ADDR": "http://vault.internal:8200",
                "VAULT_TOKEN": "s.token",
                "VAULT_CACERT": "/etc/vault/ca.pem",
                "VAULT_CLIENT_TIMEOUT": "15",
                "VAULT_NAMESPACE": "team-a",
            }
        )

        assert config.address == "http://vault.internal:8200"
        assert config.token == "s.token"
        assert config.verify == "/etc/vault/ca.pem"
        assert config.timeout == 15
        assert config.namespace == "team-a"

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", "yes"])
    def test_from_env_skip_verify(self, value: str) -> None:
        """VAULT_SKIP_VERIFY disables verification, overriding VAULT_CACERT."""
        config = VaultConnectionConfig.from_env(
            {"VAULT_SKIP_VERIFY": value, "VAULT_CACERT": "/ca.pem"}
        )
        assert config.verify is False

    def test_from_env_empty_mapping_uses_defaults(self) -> None:
        """Missing variables fall back to defaults."""
        config = VaultConnectionConfig.from_env({})

        assert config.address == DEFAULT_VAULT_ADDRESS
        assert config.token is None
        assert config.verify is True
        assert config.namespace is None

    def test_from_env_defaults_to_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without a mapping, os.environ is read."""
        monkeypatch.setenv("VAULT_ADDR", "https://vault.example.tld:8200")
        monkeypatch.delenv("VAULT_SKIP_VERIFY", raising=False)

        assert VaultConnectionConfig.from_env().address == "https://vault.example.tld:8200"

    def test_from_env_bad_timeout_raises(self) -> None:
        """Non-integer timeout raises ConfigurationError."""
        with pytest.raises(ConfigurationError, match="VAULT_CLIENT_TIMEOUT"):
            VaultConnectionConfig.from_env({"VAULT_CLIENT_TIMEOUT": "soon"})
