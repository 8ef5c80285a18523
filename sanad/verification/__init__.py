from .lookup import VerificationResult, VerificationStatus, verify_identifier

__all__ = ['VerificationResult', 'VerificationStatus', 'verify_identifier']
