"""
Beneficiary endpoints
"""

from fastapi import APIRouter, Depends, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import BeneficiaryTransferRequest, http_error
from ..schemas import BeneficiaryForm, BeneficiaryUpdateForm


router = APIRouter()


@router.get("")
def list_beneficiaries(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        beneficiaries = system.beneficiaries.list(user.id)
    except Exception as e:
        raise http_error(e, "fetch beneficiaries")

    return {"beneficiaries": [b.to_dict() for b in beneficiaries]}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_beneficiary(
    form: BeneficiaryForm,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Save a new beneficiary"""
    try:
        beneficiary = system.beneficiaries.create(
            user.id,
            beneficiary_name=form.beneficiary_name,
            bank_name=form.bank_name,
            account_number=form.account_number,
            swift_code=form.swift_code,
            branch_code=form.branch_code,
            beneficiary_email=form.beneficiary_email,
        )
    except Exception as e:
        raise http_error(e, "add beneficiary")

    return {"beneficiary": beneficiary.to_dict(), "message": "Beneficiary added successfully"}


@router.get("/errors")
def list_transfer_errors(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Recorded recipient-bank failures"""
    try:
        errors = system.beneficiaries.list_transfer_errors(user.id)
    except Exception as e:
        raise http_error(e, "fetch transfer errors")

    return {"errors": [error.to_dict() for error in errors]}


@router.get("/{beneficiary_id}")
def get_beneficiary(
    beneficiary_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        beneficiary = system.beneficiaries.get(user.id, beneficiary_id)
    except Exception as e:
        raise http_error(e, "fetch beneficiary")

    return beneficiary.to_dict()


@router.put("/{beneficiary_id}")
def update_beneficiary(
    beneficiary_id: str,
    form: BeneficiaryUpdateForm,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        beneficiary = system.beneficiaries.update(
            user.id, beneficiary_id, form.model_dump(exclude_unset=True)
        )
    except Exception as e:
        raise http_error(e, "update beneficiary")

    return {"beneficiary": beneficiary.to_dict(), "message": "Beneficiary updated successfully"}


@router.delete("/{beneficiary_id}")
def delete_beneficiary(
    beneficiary_id: str,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        system.beneficiaries.delete(user.id, beneficiary_id)
    except Exception as e:
        raise http_error(e, "delete beneficiary")

    return {"message": "Beneficiary deleted successfully"}


@router.post("/{beneficiary_id}/transfer")
def transfer_to_beneficiary(
    beneficiary_id: str,
    request: BeneficiaryTransferRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """
    Transfer to a saved beneficiary.

    A simulated recipient-bank rejection returns 409 with the error code and
    the suggested fix.
    """
    try:
        result = system.beneficiaries.transfer_to_beneficiary(
            user.id, beneficiary_id, request.amount, user_email=user.email
        )
    except Exception as e:
        raise http_error(e, "transfer to beneficiary")

    return {
        "success": result.success,
        "amount": str(result.amount),
        "beneficiary": result.beneficiary,
        "message": f"Transfer of R{result.amount} to {result.beneficiary} completed",
    }
