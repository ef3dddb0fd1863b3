"""
Data Transfer Objects (DTOs).
Used for passing results between the billing layer and the API layer.
"""
from dataclasses import dataclass, field, asdict
from decimal import Decimal
from typing import Dict


ZERO = Decimal('0.00')


@dataclass
class AllocationDTO:
    """How a payment was split over the outstanding categories"""
    rent: Decimal = ZERO
    water: Decimal = ZERO
    garbage: Decimal = ZERO
    penalties: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def applied(self) -> Decimal:
        return self.rent + self.water + self.garbage + self.penalties

    def as_dict(self) -> Dict[str, Decimal]:
        return asdict(self)


@dataclass
class SettlementDTO:
    """Result of applying a tenant's advance balance to a month"""
    settlements: Dict[str, Decimal] = field(default_factory=dict)
    remaining_credit: Decimal = ZERO

    @property
    def total_settled(self) -> Decimal:
        return sum(self.settlements.values(), ZERO)


@dataclass
class ReceiptDTO:
    """Figures printed on a receipt"""
    receipt_no: str
    tenant_id: int
    tenant_name: str
    house_number: str
    building_name: str
    month: int
    year: int
    monthly_rent: Decimal
    water_bill: Decimal
    garbage_bill: Decimal
    penalties: Decimal
    total_due: Decimal
    amount_paid: Decimal
    balance_due: Decimal
    status: str
