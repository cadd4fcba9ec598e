from .credentials import CredentialVerifier

__all__ = ["CredentialVerifier"]
