"""Input records handed to the engine by the import pipeline and directory."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from salescomp.models.config import CommissionRules, TransferStatus


class ProductClass(StrEnum):
    STANDARD = "standard"
    SHIPPING = "shipping"
    CC_PROCESSING = "cc_processing"


def classify_product(label: str) -> ProductClass:
    """Classify a line item by its product number / description text."""
    lowered = label.lower()
    if "shipping" in lowered:
        return ProductClass.SHIPPING
    if "cc processing" in lowered or "credit card processing" in lowered:
        return ProductClass.CC_PROCESSING
    return ProductClass.STANDARD


def normalize_segment(raw: str) -> str:
    """Map free-text account types onto segment ids (``"Wholesale"`` -> ``"wholesale"``)."""
    lowered = (raw or "").strip().lower()
    if "distributor" in lowered:
        return "distributor"
    if "wholesale" in lowered:
        return "wholesale"
    return lowered


class SalesRep(BaseModel):
    """A sales representative and the order-system username orders carry."""

    rep_id: str
    name: str = ""
    title: str
    sales_person: str = ""
    active: bool = True

    model_config = {"str_strip_whitespace": True, "frozen": True}


class Customer(BaseModel):
    """Customer directory entry with its rep assignment."""

    customer_id: str
    customer_name: str = ""
    account_type: str = "Retail"
    segment_id: str = ""
    sales_person: str = ""
    transfer_status: TransferStatus = TransferStatus.AUTO
    transfer_date: Optional[date] = None  # assignment to the current rep

    model_config = {"str_strip_whitespace": True, "frozen": True}

    @property
    def segment(self) -> str:
        return normalize_segment(self.segment_id or self.account_type)

    @property
    def is_retail(self) -> bool:
        return self.segment == "retail"


class OrderLineItem(BaseModel):
    """One sales-order line as normalized by the import pipeline."""

    line_id: str
    order_id: str
    order_num: str = ""
    customer_id: str
    customer_name: str = ""
    sales_person: str
    order_date: date
    product_num: str = ""
    product_description: str = ""
    classification: Optional[ProductClass] = None
    quantity: Decimal = Decimal("1")
    order_value: Decimal = Decimal("0")
    revenue: Decimal = Decimal("0")

    model_config = {"str_strip_whitespace": True}

    @property
    def product_class(self) -> ProductClass:
        if self.classification is not None:
            return self.classification
        return classify_product(f"{self.product_num} {self.product_description}")

    def base_amount(self, use_order_value: bool) -> Decimal:
        """Monetary base for commission; order value falls back to revenue when unset."""
        if use_order_value:
            return self.order_value or self.revenue
        return self.revenue


class RepQuarterActuals(BaseModel):
    """Actual values for one rep and quarter (stored or derived from orders)."""

    rep_id: str
    quarter_id: str
    bucket_actuals: dict[str, Decimal] = Field(default_factory=dict)
    sub_goal_actuals: dict[str, Decimal] = Field(default_factory=dict)

    def merged_over(self, base: RepQuarterActuals) -> RepQuarterActuals:
        """Return ``base`` with this instance's values taking precedence."""
        return RepQuarterActuals(
            rep_id=self.rep_id,
            quarter_id=self.quarter_id,
            bucket_actuals={**base.bucket_actuals, **self.bucket_actuals},
            sub_goal_actuals={**base.sub_goal_actuals, **self.sub_goal_actuals},
        )


def index_reps_by_sales_person(reps: Iterable[SalesRep]) -> dict[str, SalesRep]:
    """Map order-system usernames to reps, with a first-name fallback."""
    reps = list(reps)
    index: dict[str, SalesRep] = {}
    for rep in reps:
        if rep.sales_person:
            index[rep.sales_person] = rep
    for rep in reps:
        first = rep.name.split(" ")[0] if rep.name else ""
        if first and first not in index:
            index[first] = rep
    return index


def is_excluded(item: OrderLineItem, rules: CommissionRules) -> bool:
    """Whether the commission rules drop this line from every commission base."""
    product_class = item.product_class
    if product_class == ProductClass.SHIPPING:
        return rules.exclude_shipping
    if product_class == ProductClass.CC_PROCESSING:
        return rules.exclude_cc_processing
    return False
