from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp, the format every DateTime column stores"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Roles
ROLE_ADMIN = "ADMIN"
ROLE_MANAGER = "MANAGER"
ROLE_STAFF = "STAFF"
USER_ROLES = (ROLE_ADMIN, ROLE_MANAGER, ROLE_STAFF)

SERVICE_CATEGORIES = (
    "HAIR_TREATMENTS",
    "CORNROWS_BRAIDS",
    "STRAWSET_CURLS",
    "STYLING_SERVICE",
    "TWIST_HAIRSTYLE",
    "SPECIAL_OFFERS",
    "KIDS_SERVICES",
)

PAYMENT_METHODS = ("CASH", "MOBILE_MONEY", "MOMO", "BANK_CARD", "BANK_TRANSFER")

# Discount types applied automatically by the sale workflow
BUILTIN_DISCOUNT_TYPES = (
    "SIXTH_VISIT",
    "BIRTHDAY_MONTH",
    "SERVICE_COMBO",
    "BRING_OWN_PRODUCT",
    "MANUAL_DISCOUNT",
)
# Discount types an admin configures with a date window and service selection
CONFIGURABLE_DISCOUNT_TYPES = ("SEASONAL", "PROMOTIONAL", "HOLIDAY", "LOYALTY", "CUSTOM")
DISCOUNT_TYPES = BUILTIN_DISCOUNT_TYPES + CONFIGURABLE_DISCOUNT_TYPES


class User(Base):
    """Staff account (admins, managers and stylists)"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), index=True, nullable=True)
    phone = Column(String(20), index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), default=ROLE_STAFF, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    created_sales = relationship("Sale", back_populates="created_by")
    sale_links = relationship("SaleStaff", back_populates="staff")
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    gender = Column(String(10), nullable=False)  # MALE, FEMALE
    location = Column(String(255), nullable=False)
    district = Column(String(255), nullable=False)
    province = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False, index=True)
    email = Column(String(255), nullable=True)
    birth_day = Column(Integer, nullable=False)
    birth_month = Column(Integer, nullable=False)
    birth_year = Column(Integer, nullable=True)

    # Running counters maintained by the sale workflow
    sale_count = Column(Integer, default=0, nullable=False)
    loyalty_points = Column(Integer, default=0, nullable=False)
    total_spent = Column(Float, default=0, nullable=False)
    last_sale = Column(DateTime, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sales = relationship("Sale", back_populates="customer", order_by="Sale.created_at.desc()")
    discounts = relationship("CustomerDiscount", back_populates="customer")


discount_rule_services = Table(
    "discount_rule_services",
    Base.metadata,
    Column("discount_rule_id", Integer, ForeignKey("discount_rules.id"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id"), primary_key=True),
)


class Service(Base):
    """Salon service on the price list"""

    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(50), nullable=False, index=True)
    description = Column(Text, nullable=False)
    single_price = Column(Float, nullable=False)
    combined_price = Column(Float, nullable=True)  # price with shampoo
    child_price = Column(Float, nullable=True)
    child_combined_price = Column(Float, nullable=True)
    duration = Column(Integer, nullable=False)  # minutes
    is_combo_eligible = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sale_lines = relationship("SaleService", back_populates="service")
    discount_rules = relationship(
        "DiscountRule", secondary=discount_rule_services, back_populates="services"
    )


class Product(Base):
    """Retail product sold over the counter"""

    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    quantity = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    sale_lines = relationship("SaleProduct", back_populates="product")


class Sale(Base):
    """A customer visit: services and products sold, who did the work and how it was paid"""

    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)

    total_amount = Column(Float, nullable=False)
    discount_amount = Column(Float, default=0, nullable=False)
    increment_amount = Column(Float, default=0, nullable=False)  # manual surcharge
    final_amount = Column(Float, nullable=False)
    loyalty_points_earned = Column(Integer, default=0, nullable=False)
    payment_method = Column(String(20), default="CASH", nullable=False)  # primary method
    own_shampoo_discount = Column(Boolean, default=False, nullable=False)
    birth_month_discount = Column(Boolean, default=False, nullable=False)
    notes = Column(Text, nullable=True)
    is_completed = Column(Boolean, default=True, nullable=False)

    sale_date = Column(DateTime, default=utcnow, nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="sales")
    created_by = relationship("User", back_populates="created_sales")
    services = relationship("SaleService", back_populates="sale", cascade="all, delete-orphan")
    products = relationship("SaleProduct", back_populates="sale", cascade="all, delete-orphan")
    staff = relationship("SaleStaff", back_populates="sale", cascade="all, delete-orphan")
    payments = relationship("SalePayment", back_populates="sale", cascade="all, delete-orphan")
    discounts = relationship("SaleDiscount", back_populates="sale", cascade="all, delete-orphan")
    customer_discounts = relationship("CustomerDiscount", cascade="all, delete-orphan")


class SaleService(Base):
    __tablename__ = "sale_services"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    is_child = Column(Boolean, default=False, nullable=False)
    is_combined = Column(Boolean, default=False, nullable=False)
    add_shampoo = Column(Boolean, default=False, nullable=False)

    sale = relationship("Sale", back_populates="services")
    service = relationship("Service", back_populates="sale_lines")


class SaleProduct(Base):
    __tablename__ = "sale_products"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, default=1, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="products")
    product = relationship("Product", back_populates="sale_lines")


class SaleStaff(Base):
    """Stylist who worked on a sale. Either a system user or a name typed at the till."""

    __tablename__ = "sale_staff"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    staff_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    custom_name = Column(String(255), nullable=True)

    sale = relationship("Sale", back_populates="staff")
    staff = relationship("User", back_populates="sale_links")


class SalePayment(Base):
    __tablename__ = "sale_payments"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    payment_method = Column(String(20), nullable=False)
    amount = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    sale = relationship("Sale", back_populates="payments")


class DiscountRule(Base):
    __tablename__ = "discount_rules"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    type = Column(String(30), nullable=False, index=True)
    value = Column(Float, nullable=False)
    is_percentage = Column(Boolean, default=True, nullable=False)
    description = Column(Text, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    min_amount = Column(Float, nullable=True)
    max_discount = Column(Float, nullable=True)
    apply_to_all_services = Column(Boolean, default=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    services = relationship(
        "Service", secondary=discount_rule_services, back_populates="discount_rules"
    )
    sale_discounts = relationship("SaleDiscount", back_populates="discount_rule")


class SaleDiscount(Base):
    __tablename__ = "sale_discounts"

    id = Column(Integer, primary_key=True, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=False, index=True)
    discount_rule_id = Column(Integer, ForeignKey("discount_rules.id"), nullable=False)
    discount_amount = Column(Float, nullable=False)

    sale = relationship("Sale", back_populates="discounts")
    discount_rule = relationship("DiscountRule", back_populates="sale_discounts")


class CustomerDiscount(Base):
    """History of discounts a customer received, used for once-per-month rules"""

    __tablename__ = "customer_discounts"

    id = Column(Integer, primary_key=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    sale_id = Column(Integer, ForeignKey("sales.id"), nullable=True, index=True)
    discount_rule_id = Column(Integer, ForeignKey("discount_rules.id"), nullable=False)
    discount_amount = Column(Float, nullable=False)
    used_at = Column(DateTime, default=utcnow, nullable=False)

    customer = relationship("Customer", back_populates="discounts")
    discount_rule = relationship("DiscountRule")


class Notification(Base):
    """In-app notification shown to a staff user"""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    user = relationship("User", back_populates="notifications")
