from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from backoffice.customers.models import PlanRef
from backoffice.formatting import record_id, to_number


PAYMENT_STATUSES = ["all", "paid", "pending", "overdue"]

PAYMENT_METHODS = [
    ("cash", "Cash"),
    ("bank", "Bank Transfer"),
    ("jazzcash", "JazzCash"),
    ("easypaisa", "EasyPaisa"),
    ("other", "Other"),
]


@dataclass
class PaymentCustomer:
    id: str = ""
    name: str = ""
    mobile: str = ""
    email: str = ""
    added_by: str = ""
    connection_start_date: Any = None

    @classmethod
    def from_api(cls, raw: Any) -> "PaymentCustomer":
        if not isinstance(raw, dict):
            return cls(id=str(raw or ""))
        added_by = raw.get("addedBy")
        if isinstance(added_by, dict):
            added_by = record_id(added_by)
        return cls(
            id=record_id(raw),
            name=raw.get("name") or "",
            mobile=str(raw.get("mobile") or ""),
            email=raw.get("email") or "",
            added_by=str(added_by or ""),
            connection_start_date=raw.get("connectionStartDate"),
        )


@dataclass
class Payment:
    id: str
    amount: float = 0.0
    status: str = "pending"
    due_date: Any = None
    payment_date: Any = None
    payment_method: str = ""
    transaction_ref: str = ""
    notes: str = ""
    received_by: str = ""
    customer: PaymentCustomer = field(default_factory=PaymentCustomer)
    plan: Optional[PlanRef] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "Payment":
        received_by = raw.get("receivedBy")
        if isinstance(received_by, dict):
            received_by = record_id(received_by)
        customer = PaymentCustomer.from_api(raw.get("customer"))
        if customer.connection_start_date is None:
            customer.connection_start_date = raw.get("connectionStartDate")
        return cls(
            id=record_id(raw),
            amount=to_number(raw.get("amount")),
            status=raw.get("status") or "pending",
            due_date=raw.get("dueDate"),
            payment_date=raw.get("paymentDate"),
            payment_method=raw.get("paymentMethod") or "",
            transaction_ref=raw.get("transactionRef") or "",
            notes=raw.get("notes") or "",
            received_by=str(received_by or ""),
            customer=customer,
            plan=PlanRef.from_api(raw.get("plan")),
            raw=dict(raw),
        )

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"

    @property
    def method_label(self) -> str:
        return dict(PAYMENT_METHODS).get(self.payment_method, self.payment_method or "-")


def visible_payments(payments: Iterable[Payment], user_id: Optional[str], is_admin: bool) -> List[Payment]:
    """Admins see every payment; employees only those of customers they added."""
    payments = list(payments)
    if is_admin:
        return payments
    return [p for p in payments if user_id and p.customer.added_by == user_id]


def payment_totals(payments: Iterable[Payment]) -> Dict[str, Any]:
    payments = list(payments)
    paid = [p for p in payments if p.status == "paid"]
    pending = [p for p in payments if p.status != "paid"]
    return {
        "totalAmount": sum(p.amount for p in payments),
        "paidAmount": sum(p.amount for p in paid),
        "pendingAmount": sum(p.amount for p in pending),
        "totalRecords": len(payments),
        "paidRecords": len(paid),
        "pendingRecords": len(pending),
    }
