"""Wealth tool calculators. No authentication, no persistence."""

from fastapi import APIRouter

from src.api.schemas import (
    InvestmentReturnRequest,
    InvestmentReturnResponse,
    LoanPayoffRequest,
    LoanPayoffResponse,
    RetirementRequest,
    RetirementResponse,
)
from src.engine.amortization import payoff_with_extra
from src.engine.projections import investment_return, retirement_projection

router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


@router.post("/loan-payoff", response_model=LoanPayoffResponse)
async def loan_payoff(req: LoanPayoffRequest):
    result = payoff_with_extra(
        req.principal, req.interest_rate, req.loan_term_years * 12, req.extra_payment
    )
    return LoanPayoffResponse.model_validate(result)


@router.post("/investment-return", response_model=InvestmentReturnResponse)
async def investment_return_calculator(req: InvestmentReturnRequest):
    result = investment_return(
        req.initial_investment, req.monthly_contribution, req.expected_return, req.investment_years
    )
    return InvestmentReturnResponse.model_validate(result)


@router.post("/retirement", response_model=RetirementResponse)
async def retirement(req: RetirementRequest):
    result = retirement_projection(
        req.current_age, req.retirement_age, req.current_savings, req.monthly_contribution
    )
    return RetirementResponse.model_validate(result)
