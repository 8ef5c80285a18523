"""
Conditional Visibility Engine

Decides which payment-method field groups are shown and which are hidden
(and blanked) for a voucher.
"""
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional

from sanad.common.models import PaymentMethod
from .fields import CHEQUE_GROUP, TRANSFER_GROUP

# PDF annotation flags (PDF 32000-1, 12.5.3)
FLAG_HIDDEN = 2
FLAG_PRINT = 4
FLAG_NOVIEW = 32


@dataclass(frozen=True)
class VisibilityPlan:
    """
    Visibility decision for one render.

    Attributes:
        method: Effective payment method (unknown/empty collapse to cash)
        shown: Conditional field names that stay visible
        hidden: Conditional field names that are hidden and blanked
    """
    method: PaymentMethod
    shown: FrozenSet[str]
    hidden: FrozenSet[str]

    @property
    def cheque_visible(self) -> bool:
        return self.method == PaymentMethod.CHEQUE

    @property
    def transfer_visible(self) -> bool:
        return self.method == PaymentMethod.BANK_TRANSFER

    def is_visible(self, name: str) -> bool:
        return name not in self.hidden

    def apply_to_values(self, values: Dict[str, str]) -> Dict[str, str]:
        """Returns a copy of ``values`` with every hidden field set to ''."""
        result = dict(values)
        for name in self.hidden:
            result[name] = ""
        return result


def plan_visibility(payment_method: Optional[str]) -> VisibilityPlan:
    """
    Cash (or anything unrecognized) hides both groups; cheque shows only the
    cheque group; bank transfer shows only the transfer group.
    """
    method = PaymentMethod.parse(payment_method) or PaymentMethod.CASH

    if method == PaymentMethod.CHEQUE:
        shown, hidden = CHEQUE_GROUP, TRANSFER_GROUP
    elif method == PaymentMethod.BANK_TRANSFER:
        shown, hidden = TRANSFER_GROUP, CHEQUE_GROUP
    else:
        shown, hidden = (), CHEQUE_GROUP + TRANSFER_GROUP

    return VisibilityPlan(method=method, shown=frozenset(shown), hidden=frozenset(hidden))


def updated_flags(current: int, visible: bool) -> int:
    """
    New /F value for a widget.

    A widget without flags is treated as printable. Showing clears Hidden and
    NoView; hiding sets Hidden.
    """
    flags = current or FLAG_PRINT
    if visible:
        return flags & ~FLAG_HIDDEN & ~FLAG_NOVIEW
    return flags | FLAG_HIDDEN
