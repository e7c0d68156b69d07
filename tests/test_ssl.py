"""Tests for self-signed certificate generation."""

from __future__ import annotations

import stat
from datetime import datetime, timedelta, timezone

from cryptography import x509

from lamma_common import LammaConfig
from lamma.services.ssl import cert_paths, create_self_signed, read_expiry


class TestSelfSigned:
    def test_paths(self, tmp_config: LammaConfig):
        key, crt = cert_paths(tmp_config, "shop")
        assert key == tmp_config.ssl_dir / "shop.test.key"
        assert crt == tmp_config.ssl_dir / "shop.test.crt"

    def test_create(self, tmp_config: LammaConfig):
        key, crt = create_self_signed(tmp_config, "shop")

        assert stat.S_IMODE(key.stat().st_mode) == 0o600
        cert = x509.load_pem_x509_certificate(crt.read_bytes())
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
        assert san.get_values_for_type(x509.DNSName) == ["shop.test"]
        assert cert.subject == cert.issuer

        expiry = read_expiry(crt)
        assert expiry > datetime.now(timezone.utc) + timedelta(days=3000)
