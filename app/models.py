import enum

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy import orm
from sqlalchemy.sql import func

from .database import Base


class OrderStatus(str, enum.Enum):
    PENDING = "pending"  # needs to be printed
    PRINTED = "printed"  # printed, not mailed yet
    MAILED = "mailed"  # terminal
    CANCELLED = "cancelled"  # terminal


# Orders in these states lock their recipient against edits
IN_FLIGHT_STATUSES = (OrderStatus.PENDING.value, OrderStatus.PRINTED.value)


class CardType(str, enum.Enum):
    SUBSCRIPTION = "subscription"  # drawn from the plan allotment
    BULK = "bulk"  # holiday pack purchase
    INDIVIDUAL = "individual"  # purchased card credit


class AddressStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    CORRECTABLE = "correctable"
    UNDELIVERABLE = "undeliverable"
    UNVERIFIED = "unverified"  # validation service unavailable, accepted provisionally


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    external_uid = Column(String(255), unique=True, index=True, nullable=False)  # identity provider
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(200), nullable=True)
    plan = Column(String(50), nullable=True)  # product id, null until subscribed
    subscription_status = Column(String(20), nullable=True)  # active, past_due, cancelled
    card_credits = Column(Integer, default=0, nullable=False)  # purchased single cards

    # Default return address printed on envelopes
    return_street = Column(String(255), nullable=True)
    return_apartment = Column(String(100), nullable=True)
    return_city = Column(String(100), nullable=True)
    return_state = Column(String(50), nullable=True)
    return_zip = Column(String(20), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    recipients = orm.relationship("Recipient", back_populates="account")
    orders = orm.relationship("Order", back_populates="account")

    @property
    def has_active_subscription(self) -> bool:
        return bool(self.plan) and self.subscription_status == "active"

    @property
    def has_return_address(self) -> bool:
        return all([self.return_street, self.return_city, self.return_state, self.return_zip])

    @property
    def return_name(self) -> str:
        return (self.full_name or "").strip() or self.email


class Recipient(Base):
    __tablename__ = "recipients"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    # Optional second person when the card goes to a couple
    partner_first_name = Column(String(100), nullable=True)
    partner_last_name = Column(String(100), nullable=True)
    relationship = Column(String(50), nullable=False)  # Family, Friend, Romantic, Professional

    street = Column(String(255), nullable=False)
    apartment = Column(String(100), nullable=True)
    city = Column(String(100), nullable=False)
    state = Column(String(50), nullable=False)
    zip = Column(String(20), nullable=False)
    country = Column(String(100), nullable=False, default="United States")
    address_status = Column(String(20), nullable=False, default=AddressStatus.PENDING.value)
    address_verified_at = Column(DateTime, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    account = orm.relationship("Account", back_populates="recipients")
    occasions = orm.relationship(
        "Occasion", back_populates="recipient", cascade="all, delete-orphan", order_by="Occasion.id"
    )
    # No delete cascade: orders outlive their recipient as historical snapshots
    orders = orm.relationship("Order", back_populates="recipient")

    @property
    def display_name(self) -> str:
        if not self.partner_first_name:
            return f"{self.first_name} {self.last_name}"
        partner_last = self.partner_last_name or self.last_name
        if partner_last == self.last_name:
            return f"{self.first_name} & {self.partner_first_name} {self.last_name}"
        return f"{self.first_name} {self.last_name} & {self.partner_first_name} {partner_last}"


class Occasion(Base):
    __tablename__ = "occasions"
    __table_args__ = (
        # At most one Just Because occasion per recipient
        Index(
            "uq_occasions_one_just_because",
            "recipient_id",
            unique=True,
            sqlite_where=text("is_just_because = 1"),
            postgresql_where=text("is_just_because IS TRUE"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(
        Integer, ForeignKey("recipients.id", ondelete="CASCADE"), nullable=False, index=True
    )
    occasion_type = Column(String(50), nullable=False)
    # User-entered date for personal occasions; always null for holidays and Just Because
    occasion_date = Column(Date, nullable=True)
    notes = Column(Text, nullable=True)

    is_just_because = Column(Boolean, nullable=False, default=False)
    computed_send_date = Column(Date, nullable=True)  # selected date, Just Because only
    card_variation = Column(String(50), nullable=True)  # thinking_of_you, romantic, recognition
    last_sent_year = Column(Integer, nullable=True)  # cycle that already has an order

    created_at = Column(DateTime, server_default=func.now())

    recipient = orm.relationship("Recipient", back_populates="occasions")
    orders = orm.relationship("Order", back_populates="occasion")


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        # One order per occasion per cycle, enforced by the database for overlapping batch runs
        UniqueConstraint("occasion_id", "target_year", name="uq_orders_occasion_target_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    recipient_id = Column(
        Integer, ForeignKey("recipients.id", ondelete="SET NULL"), nullable=True, index=True
    )
    occasion_id = Column(Integer, ForeignKey("occasions.id", ondelete="SET NULL"), nullable=True)
    target_year = Column(Integer, nullable=False)

    card_type = Column(String(20), nullable=False, default=CardType.SUBSCRIPTION.value)
    status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value, index=True)

    # Occasion details for this specific year
    occasion_type = Column(String(50), nullable=False)
    occasion_date = Column(Date, nullable=False)
    occasion_notes = Column(Text, nullable=True)
    card_variation = Column(String(50), nullable=True)

    print_date = Column(DateTime, nullable=True)
    mail_date = Column(DateTime, nullable=True)

    # Recipient snapshot at creation time
    recipient_name = Column(String(255), nullable=False)
    recipient_street = Column(String(255), nullable=False)
    recipient_apartment = Column(String(100), nullable=True)
    recipient_city = Column(String(100), nullable=False)
    recipient_state = Column(String(50), nullable=False)
    recipient_zip = Column(String(20), nullable=False)
    recipient_country = Column(String(100), nullable=False, default="United States")

    # Return address snapshot from the account's default address
    return_name = Column(String(200), nullable=False)
    return_street = Column(String(255), nullable=False)
    return_apartment = Column(String(100), nullable=True)
    return_city = Column(String(100), nullable=False)
    return_state = Column(String(50), nullable=False)
    return_zip = Column(String(20), nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    account = orm.relationship("Account", back_populates="orders")
    recipient = orm.relationship("Recipient", back_populates="orders")
    occasion = orm.relationship("Occasion", back_populates="orders")
