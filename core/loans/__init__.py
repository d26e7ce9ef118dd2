"""
대출 패키지
"""

from core.loans.tracker import LoanTracker, Repayment, repayment_bank_for

__all__ = [
    "LoanTracker",
    "Repayment",
    "repayment_bank_for",
]
