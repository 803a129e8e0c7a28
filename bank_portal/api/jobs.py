"""
Job portal endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, status

from .auth import CurrentUser, PortalSystem, get_current_user, get_portal_system
from .schemas import DualSalaryRequest, http_error
from ..jobs import JobFilters


router = APIRouter()


@router.get("")
def list_jobs(
    search: str = "",
    category_id: Optional[str] = None,
    experience_level: Optional[str] = None,
    remote_only: bool = False,
    region: Optional[str] = None,
    currency: str = "USD",
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Job listings, newest first, with salaries shown in the chosen currency"""
    filters = JobFilters(
        search=search,
        category_id=category_id,
        experience_level=experience_level,
        remote_only=remote_only,
        region=region,
    )
    try:
        jobs = system.jobs.listings(filters)
        result = [job.to_dict(display_currency=currency.upper()) for job in jobs]
    except Exception as e:
        raise http_error(e, "load job listings")

    return {"jobs": result, "count": len(result)}


@router.get("/categories")
def list_categories(
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        categories = system.jobs.categories()
    except Exception as e:
        raise http_error(e, "load job categories")

    return {"categories": [c.to_dict() for c in categories]}


@router.get("/stats")
def job_stats(
    currency: str = "USD",
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """Per-category and per-experience-level salary statistics"""
    try:
        by_category = system.jobs.category_stats(currency.upper())
        by_experience = system.jobs.experience_stats(currency.upper())
    except Exception as e:
        raise http_error(e, "load job statistics")

    return {"categories": by_category, "experience_levels": by_experience}


@router.get("/salary-setups")
def list_salary_setups(
    active_only: bool = True,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        setups = system.jobs.salary_setups(user.id, active_only)
    except Exception as e:
        raise http_error(e, "load salary setups")

    return {"salary_setups": [s.to_dict() for s in setups]}


@router.post("/salary-setups", status_code=status.HTTP_201_CREATED)
def setup_dual_salary(
    request: DualSalaryRequest,
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    """
    Split a job's salary between a new salary account and an FNB beneficiary.
    """
    try:
        result = system.jobs.setup_dual_salary(
            user.id,
            request.job_id,
            request.annual_salary,
            request.fnb_account_holder,
            request.fnb_account_number,
            request.fnb_branch_code,
            user_email=user.email,
            display_currency=request.display_currency.upper(),
        )
    except Exception as e:
        raise http_error(e, "set up dual salary")

    return {
        "salary_setup": result.setup.to_dict(),
        "salary_account": result.salary_account.to_dict(),
        "beneficiary": result.beneficiary.to_dict(),
        "tax": result.tax.to_dict(),
        "notified": result.notified,
        "warnings": result.warnings,
        "message": "Dual salary setup completed successfully",
    }


@router.get("/{job_id}")
def get_job(
    job_id: str,
    currency: str = "USD",
    user: CurrentUser = Depends(get_current_user),
    system: PortalSystem = Depends(get_portal_system)
):
    try:
        job = system.jobs.get_listing(job_id)
        return job.to_dict(display_currency=currency.upper())
    except Exception as e:
        raise http_error(e, "load job")
