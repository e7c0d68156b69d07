"""Self-signed TLS certificates for local sites."""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from lamma_common import LammaConfig
from lamma_common.constants import SSL_KEY_SIZE, SSL_VALID_DAYS


def cert_paths(cfg: LammaConfig, site: str) -> tuple[Path, Path]:
    """Return ``(key, crt)`` paths for a site."""
    hostname = cfg.hostname(site)
    return cfg.ssl_dir / f"{hostname}.key", cfg.ssl_dir / f"{hostname}.crt"


def create_self_signed(cfg: LammaConfig, site: str) -> tuple[Path, Path]:
    """Generate an RSA key and a self-signed certificate for ``<site>.<tld>``."""
    hostname = cfg.hostname(site)
    key_path, crt_path = cert_paths(cfg, site)
    key_path.parent.mkdir(parents=True, exist_ok=True)

    key = rsa.generate_private_key(public_exponent=65537, key_size=SSL_KEY_SIZE)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, hostname)])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(subject)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now)
        .not_valid_after(now + timedelta(days=SSL_VALID_DAYS))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName(hostname)]), critical=False)
        .sign(key, hashes.SHA256())
    )

    key_path.write_bytes(
        key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        )
    )
    os.chmod(key_path, 0o600)
    crt_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    return key_path, crt_path


def read_expiry(crt_path: Path) -> datetime:
    cert = x509.load_pem_x509_certificate(crt_path.read_bytes())
    return cert.not_valid_after_utc
