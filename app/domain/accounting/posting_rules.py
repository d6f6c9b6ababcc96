"""Normal-balance posting rules.

Each account type increases on one side: debits for assets and expenses,
credits for liabilities, equity and revenue. The sign table below is the
single source for how a journal line moves an account balance.
"""

from decimal import Decimal
from typing import Dict, Iterable, Mapping, Tuple
from uuid import UUID

from app.domain.accounting.enums import AccountType

# +1: balance grows with debits, -1: balance grows with credits
NORMAL_BALANCE_SIGN: Mapping[AccountType, int] = {
    AccountType.ASSET: 1,
    AccountType.EXPENSE: 1,
    AccountType.LIABILITY: -1,
    AccountType.EQUITY: -1,
    AccountType.REVENUE: -1,
}


def balance_delta(account_type: AccountType, debit: Decimal, credit: Decimal) -> Decimal:
    """Signed change a single line applies to an account of ``account_type``."""
    return (debit - credit) * NORMAL_BALANCE_SIGN[account_type]


def aggregate_deltas(
    lines: Iterable[Tuple[UUID, AccountType, Decimal, Decimal]],
) -> Dict[UUID, Decimal]:
    """
    Collapse journal lines into one net delta per account.

    Args:
        lines: (account_id, account_type, debit, credit) tuples

    Returns:
        Dict of account_id -> net balance delta
    """
    deltas: Dict[UUID, Decimal] = {}
    for account_id, account_type, debit, credit in lines:
        deltas[account_id] = deltas.get(account_id, Decimal("0.00")) + balance_delta(
            account_type, debit, credit
        )
    return deltas
