import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

SF_ENV_VARS = (
    "SF_INSTANCE_URL",
    "SF_CLIENT_ID",
    "SF_CLIENT_SECRET",
    "SF_USERNAME",
    "SF_PASSWORD",
    "SF_SECURITY_TOKEN",
    "SF_PRIVATE_KEY",
    "SF_PRIVATE_KEY_PATH",
    "SF_SESSION_TOKEN",
    "SF_CLI_FALLBACK",
    "SF_CLI_COMMAND",
    "SF_TARGET_ORG",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's own Salesforce settings out of the tests."""
    for name in SF_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SF_CLI_FALLBACK", "false")
    monkeypatch.setattr("crm_proxy.auth.broker._BROKER_INSTANCE", None)
    monkeypatch.setattr("crm_proxy.server.tools.duplicates._PROXY", None)


@pytest.fixture(scope="session")
def rsa_key_pair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem
