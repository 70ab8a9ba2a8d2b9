from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ...constants import DELIVERY_DELIVERED, KEY_SALES, MANUAL_GROUP_ID, UNIT_PIECE
from .document_store import DocumentStore


@dataclass
class PaymentEntry:
    amount: float
    date: str
    note: str | None = None
    received_by: str | None = None

    def to_dict(self) -> Dict:
        d = {"amount": self.amount, "date": self.date}
        if self.note is not None:
            d["note"] = self.note
        if self.received_by is not None:
            d["receivedBy"] = self.received_by
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> "PaymentEntry":
        return cls(
            amount=float(d.get("amount") or 0.0),
            date=str(d.get("date") or ""),
            note=d.get("note"),
            received_by=d.get("receivedBy"),
        )


@dataclass
class CartItem:
    """
    One sale line. name/price/cost are snapshots taken when the line was
    built and are never re-read from inventory.
    """
    group_id: str
    variant_id: str
    name: str
    length_feet: float
    quantity_pieces: int
    formatted_qty: str
    price_unit: float
    buy_price_unit: float
    subtotal: float
    unit_type: str = UNIT_PIECE
    calculation_base: Optional[float] = None

    @property
    def is_manual(self) -> bool:
        return self.group_id == MANUAL_GROUP_ID

    def to_dict(self) -> Dict:
        d = {
            "groupId": self.group_id,
            "variantId": self.variant_id,
            "name": self.name,
            "lengthFeet": self.length_feet,
            "quantityPieces": self.quantity_pieces,
            "formattedQty": self.formatted_qty,
            "priceUnit": self.price_unit,
            "buyPriceUnit": self.buy_price_unit,
            "subtotal": self.subtotal,
            "unitType": self.unit_type,
        }
        if self.calculation_base is not None:
            d["calculationBase"] = self.calculation_base
        return d

    @classmethod
    def from_dict(cls, d: Dict) -> "CartItem":
        base = d.get("calculationBase")
        return cls(
            group_id=str(d.get("groupId") or MANUAL_GROUP_ID),
            variant_id=str(d.get("variantId") or ""),
            name=d.get("name") or "",
            length_feet=float(d.get("lengthFeet") or 0),
            quantity_pieces=int(d.get("quantityPieces") or 0),
            formatted_qty=d.get("formattedQty") or "",
            price_unit=float(d.get("priceUnit") or 0.0),
            buy_price_unit=float(d.get("buyPriceUnit") or 0.0),
            subtotal=float(d.get("subtotal") or 0.0),
            unit_type=d.get("unitType") or UNIT_PIECE,
            calculation_base=float(base) if base else None,
        )


@dataclass
class Sale:
    id: str
    invoice_id: str
    customer_name: str
    customer_phone: str
    items: List[CartItem]
    sub_total: float
    discount: float
    final_amount: float
    paid_amount: float
    due_amount: float
    timestamp: str
    payment_history: List[PaymentEntry] = field(default_factory=list)
    customer_address: str | None = None
    delivery_status: str = DELIVERY_DELIVERED
    sold_by: str = ""
    note: str | None = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "invoiceId": self.invoice_id,
            "customerName": self.customer_name,
            "customerPhone": self.customer_phone,
            "customerAddress": self.customer_address,
            "items": [it.to_dict() for it in self.items],
            "subTotal": self.sub_total,
            "discount": self.discount,
            "finalAmount": self.final_amount,
            "paidAmount": self.paid_amount,
            "dueAmount": self.due_amount,
            "paymentHistory": [p.to_dict() for p in self.payment_history],
            "timestamp": self.timestamp,
            "deliveryStatus": self.delivery_status,
            "soldBy": self.sold_by,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "Sale":
        return cls(
            id=str(d["id"]),
            invoice_id=str(d.get("invoiceId") or ""),
            customer_name=d.get("customerName") or "",
            customer_phone=d.get("customerPhone") or "",
            customer_address=d.get("customerAddress"),
            items=[CartItem.from_dict(it) for it in d.get("items") or []],
            sub_total=float(d.get("subTotal") or 0.0),
            discount=float(d.get("discount") or 0.0),
            final_amount=float(d.get("finalAmount") or 0.0),
            paid_amount=float(d.get("paidAmount") or 0.0),
            due_amount=float(d.get("dueAmount") or 0.0),
            payment_history=[PaymentEntry.from_dict(p) for p in d.get("paymentHistory") or []],
            timestamp=str(d.get("timestamp") or ""),
            delivery_status=d.get("deliveryStatus") or DELIVERY_DELIVERED,
            sold_by=d.get("soldBy") or "",
            note=d.get("note"),
        )


class SalesRepo:
    """
    Sales document repository.

    Sales are kept newest first. Financial fields are only ever written by
    the sales builder/returns functions; this class stores what it is given.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_sales(self) -> List[Sale]:
        return [Sale.from_dict(d) for d in self.store.load(KEY_SALES, [])]

    def get(self, sale_id: str) -> Sale | None:
        return next((s for s in self.list_sales() if s.id == sale_id), None)

    def search(self, query: str) -> List[Sale]:
        """Match invoice number, customer name or phone."""
        q = (query or "").strip().lower()
        sales = self.list_sales()
        if not q:
            return sales
        return [
            s for s in sales
            if q in s.invoice_id.lower()
            or q in s.customer_name.lower()
            or q in s.customer_phone
        ]

    def save_sales(self, sales: List[Sale]) -> None:
        self.store.save(KEY_SALES, [s.to_dict() for s in sales])

    # ---------------------------- list helpers (pure) ----------------------------

    @staticmethod
    def with_added(sales: List[Sale], sale: Sale) -> List[Sale]:
        return [sale] + [s for s in sales if s.id != sale.id]

    @staticmethod
    def with_replaced(sales: List[Sale], sale: Sale) -> List[Sale]:
        return [sale if s.id == sale.id else s for s in sales]

    @staticmethod
    def without(sales: List[Sale], sale_id: str) -> List[Sale]:
        return [s for s in sales if s.id != sale_id]
