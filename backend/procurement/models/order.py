from __future__ import annotations
from datetime import date, datetime
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Date, DateTime, ForeignKey
from typing import Optional

from procurement.constants import orders as oc
from .user import Base, utcnow


class Order(Base):
    __tablename__ = 'orders'
    # Lifecycle status constants (pipeline order lives in constants.orders)
    STATUS_PENDING = oc.STATUS_PENDING
    STATUS_QUOTING = oc.STATUS_QUOTING
    STATUS_PURCHASED = oc.STATUS_PURCHASED
    STATUS_SHIPPING = oc.STATUS_SHIPPING
    STATUS_DELIVERED = oc.STATUS_DELIVERED
    ALL_STATUSES = oc.ORDER_PIPELINE
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    engineer_id: Mapped[int] = mapped_column(ForeignKey('users.id'), nullable=False, index=True)
    engineer_name: Mapped[str] = mapped_column(String(128), nullable=False)
    materials: Mapped[str] = mapped_column(Text, nullable=False)
    cost_center: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    deadline: Mapped[date] = mapped_column(Date, nullable=False)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False, default=oc.DEFAULT_URGENCY)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default=oc.STATUS_PENDING, index=True)
    responsible_id: Mapped[Optional[int]] = mapped_column(ForeignKey('users.id'), nullable=True, index=True)
    responsible_name: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def is_claimable(self) -> bool:
        return self.responsible_id is None and self.status == oc.STATUS_PENDING

# Status flow: pending -> quoting -> purchased -> shipping -> delivered (terminal).
# Claiming sets responsible_* once and only while the order is still pending.
