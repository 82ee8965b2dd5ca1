"""
Visible signing attestation.

A throw-away self-signed certificate is created once per signing session and
its subject is printed next to the signature image. The stamp is visual only:
no CMS signature is embedded and nothing about it is verifiable.
"""
from __future__ import annotations

import datetime as _dt
import uuid
from dataclasses import dataclass, field
from typing import List

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


@dataclass(frozen=True)
class AttestationIdentity:
    certificate: x509.Certificate
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def subject(self) -> str:
        """RFC 4514 subject string, e.g. ``CN=Jane Doe,O=SignDesk,C=US``."""
        return self.certificate.subject.rfc4514_string()

    @property
    def common_name(self) -> str:
        attrs = self.certificate.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
        return str(attrs[0].value) if attrs else ""


def create_attestation_identity(common_name: str, *, country: str = "US", locality: str = "",
                                organization: str = "", valid_days: int = 365) -> AttestationIdentity:
    key = ec.generate_private_key(ec.SECP256R1())

    # RFC 4514 strings list attributes last-to-first, so CN goes last here
    attrs = []
    if country:
        attrs.append(x509.NameAttribute(NameOID.COUNTRY_NAME, country[:2].upper()))
    if locality:
        attrs.append(x509.NameAttribute(NameOID.LOCALITY_NAME, locality))
    if organization:
        attrs.append(x509.NameAttribute(NameOID.ORGANIZATION_NAME, organization))
    attrs.append(x509.NameAttribute(NameOID.COMMON_NAME, common_name or "Unknown signer"))
    name = x509.Name(attrs)

    now = _dt.datetime.now(_dt.timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - _dt.timedelta(minutes=1))
        .not_valid_after(now + _dt.timedelta(days=valid_days))
        .sign(key, hashes.SHA256())
    )
    return AttestationIdentity(certificate=cert)


def attestation_lines(identity: AttestationIdentity, signed_at: _dt.datetime,
                      reason: str, date_format: str) -> List[str]:
    return [
        f"Digitally Signed by: {identity.subject}",
        f"Date: {signed_at.strftime(date_format)}",
        f"Reason: {reason}",
        f"ID: {identity.session_id}",
    ]
