"""
Authentication and system dependencies
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..backend import BackendClient, create_backend
from ..cache import QueryCache
from ..accounts import AccountManager
from ..transactions import TransactionManager
from ..beneficiaries import BeneficiaryManager
from ..transfers import TransferService
from ..treasury import TreasuryManager
from ..jobs import JobPortal
from ..documents import DocumentManager
from ..wallets import WalletAddressManager
from ..profiles import ProfileManager
from ..explorer import BlockExplorerClient
from ..currency import CurrencyConverter
from ..config import PortalConfig, get_config

DEMO_USER_ID = "00000000-0000-0000-0000-000000000001"
DEMO_USER_EMAIL = "demo@example.com"
DEMO_USER_NAME = "Demo User"

security = HTTPBearer(auto_error=False)


@dataclass
class CurrentUser:
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None


class PortalSystem:
    """Bank portal with all managers wired to one backend and cache"""

    def __init__(self, backend: Optional[BackendClient] = None,
                 settings: Optional[PortalConfig] = None,
                 explorer: Optional[BlockExplorerClient] = None):
        self.config = settings or get_config()
        self.backend = backend or self._create_backend()
        self.cache = QueryCache()
        self.converter = CurrencyConverter()

        self.accounts = AccountManager(self.backend, self.cache)
        self.transactions = TransactionManager(self.backend, self.cache, self.accounts)
        self.beneficiaries = BeneficiaryManager(
            self.backend, self.cache, failure_rate=self.config.transfer_failure_rate
        )
        self.transfers = TransferService(self.backend, self.cache, self.accounts, self.transactions)
        self.treasury = TreasuryManager(self.backend, self.cache, self.converter)
        self.jobs = JobPortal(
            self.backend, self.cache, self.accounts, self.beneficiaries,
            crypto_portfolio_value=Decimal(self.config.crypto_portfolio_value)
        )
        self.documents = DocumentManager(self.backend, self.cache)
        self.wallets = WalletAddressManager(self.backend, self.cache)
        self.profiles = ProfileManager(self.backend, self.cache)
        self.explorer = explorer or BlockExplorerClient(
            blockchain_info_url=self.config.blockchain_info_url,
            etherscan_url=self.config.etherscan_url,
            etherscan_api_key=self.config.etherscan_api_key or None,
            timeout=self.config.explorer_timeout,
        )

    def _create_backend(self) -> BackendClient:
        """Create the backend client based on configuration"""
        if self.config.backend == "http":
            return create_backend(
                "http",
                base_url=self.config.backend_url,
                api_key=self.config.backend_anon_key,
                timeout=self.config.backend_timeout,
            )
        return create_backend(self.config.backend)

    def close(self):
        self.backend.close()
        self.explorer.close()


# Global portal system instance, created on first use
_portal_system: Optional[PortalSystem] = None


def get_portal_system() -> PortalSystem:
    global _portal_system
    if _portal_system is None:
        _portal_system = PortalSystem()
    return _portal_system


def set_portal_system(system: Optional[PortalSystem]) -> None:
    """Replace the global instance (used by tests and the runner)"""
    global _portal_system
    _portal_system = system


def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)) -> CurrentUser:
    """Dependency that validates the access token and returns the current user"""
    settings = get_config()
    if not settings.auth_enabled:
        return CurrentUser(id=DEMO_USER_ID, email=DEMO_USER_EMAIL, full_name=DEMO_USER_NAME)

    if not credentials:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            audience=settings.jwt_audience or None,
            options={"verify_aud": bool(settings.jwt_audience)},
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=401, detail="Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid token")

    metadata = payload.get("user_metadata") or {}
    return CurrentUser(id=user_id, email=payload.get("email"), full_name=metadata.get("full_name"))
