from pathlib import Path

from cryptography import x509
from cryptography.x509.oid import NameOID

from ipautils.logger import get_console
from ipautils.src.core.errors import ParseError
from ipautils.src.core.facts import CertificateFacts, Environment

# Apple push certificates are named e.g.
#   "Apple Development IOS Push Services: com.example.app"
#   "Apple Production IOS Push Services: com.example.app"
#   "Apple Push Services: com.example.app" (universal, production capable)
PUSH_SERVICES_MARKER = "Push Services"


def _first_attribute(name: x509.Name, oid) -> str:
    attributes = name.get_attributes_for_oid(oid)
    return str(attributes[0].value) if attributes else ""


def certificate_facts(certificate: x509.Certificate) -> CertificateFacts:
    """Derive CertificateFacts from a loaded X.509 certificate"""
    common_name = _first_attribute(certificate.subject, NameOID.COMMON_NAME)
    is_apns = PUSH_SERVICES_MARKER in common_name

    bundle_id = _first_attribute(certificate.subject, NameOID.USER_ID)
    if not bundle_id and ": " in common_name:
        bundle_id = common_name.split(": ", 1)[1].strip()

    if "Development" in common_name.split(":", 1)[0]:
        environment = Environment.DEVELOPMENT
    else:
        environment = Environment.PRODUCTION

    return CertificateFacts(
        is_apns=is_apns,
        name=common_name,
        bundle_id=bundle_id,
        environment=environment,
    )


def load_push_certificate(pem_path: Path) -> CertificateFacts:
    """Load a PEM push certificate (as exported by the convert command)"""
    try:
        data = Path(pem_path).read_bytes()
    except OSError as e:
        raise ParseError(f"Could not read certificate {pem_path}: {e}") from e

    try:
        # A converted .p12 also holds the private key; the first certificate wins
        certificate = x509.load_pem_x509_certificates(data)[0]
    except (ValueError, IndexError) as e:
        raise ParseError(f"{pem_path} is not a valid PEM certificate: {e}") from e

    facts = certificate_facts(certificate)
    get_console().log(f"[green]Loaded certificate:[/] {facts.name or pem_path}")
    return facts
