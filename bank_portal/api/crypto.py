"""
Crypto endpoints: wallet address book and block explorer lookups
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import UpdateWalletAddressRequest, WalletAddressRequest, http_error


router = APIRouter()


@router.get("/wallet-addresses")
def list_wallet_addresses(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        addresses = system.wallets.list(user.id)
    except Exception as e:
        raise http_error(e, "fetch wallet addresses")

    return {"addresses": [a.to_dict() for a in addresses]}


@router.post("/wallet-addresses", status_code=status.HTTP_201_CREATED)
def add_wallet_address(
    request: WalletAddressRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        address = system.wallets.add(
            user.id,
            exchange_name=request.exchange_name,
            cryptocurrency=request.cryptocurrency,
            wallet_address=request.wallet_address,
            address_label=request.address_label,
            is_default=request.is_default,
        )
    except Exception as e:
        raise http_error(e, "add wallet address")

    return {"address": address.to_dict(), "message": "Wallet address added successfully"}


@router.put("/wallet-addresses/{address_id}")
def update_wallet_address(
    address_id: str,
    request: UpdateWalletAddressRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        address = system.wallets.update(user.id, address_id, request.model_dump(exclude_unset=True))
    except Exception as e:
        raise http_error(e, "update wallet address")

    return {"address": address.to_dict(), "message": "Wallet address updated successfully"}


@router.delete("/wallet-addresses/{address_id}")
def delete_wallet_address(
    address_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        system.wallets.delete(user.id, address_id)
    except Exception as e:
        raise http_error(e, "delete wallet address")

    return {"message": "Wallet address deleted successfully"}


@router.get("/transactions")
def list_crypto_transactions(
    symbol: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Crypto transactions on the main account, optionally for one symbol"""
    try:
        transactions = system.transactions.crypto_history(user.id, symbol)
    except Exception as e:
        raise http_error(e, "fetch crypto transactions")

    return {"transactions": [t.to_dict() for t in transactions]}


@router.get("/explorer/{network}/{tx_hash}")
def lookup_transaction(
    network: str,
    tx_hash: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Look up an on-chain transaction on a public block explorer"""
    try:
        transaction = system.explorer.lookup(tx_hash, network)
    except Exception as e:
        raise http_error(e, "look up transaction")

    if transaction is None:
        raise HTTPException(status_code=404, detail="Transaction not found on the blockchain")
    return transaction.to_dict()
