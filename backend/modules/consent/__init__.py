"""
Consent module.

Mandatory terms-of-service gating before app access is granted.

Public API:
- ConsentGate: Fail-closed, versioned terms gate
- IConsentRepository / ConsentRepository: Row access for ``user_consent``
- ConsentRecord, GateState: Models
- Consent exceptions: ConsentStoreError
"""

from .interfaces import IConsentRepository
from .models import ConsentRecord, GateState
from .exceptions import ConsentStoreError
from .repository import ConsentRepository
from .service import ConsentGate, terminate_process

__all__ = [
    # Interface
    "IConsentRepository",
    # Implementations
    "ConsentRepository",
    "ConsentGate",
    "terminate_process",
    # Models
    "ConsentRecord",
    "GateState",
    # Exceptions
    "ConsentStoreError",
]
