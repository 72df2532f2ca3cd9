"""SQLAlchemy 2.0 database models."""
from sqlalchemy import Column, String, Integer, Date, DateTime, ForeignKey, JSON, Enum as SQLEnum, Float, Text, UniqueConstraint
from sqlalchemy.orm import relationship, declarative_base
from datetime import datetime
import enum
import uuid


Base = declarative_base()


def _enum_values(enum_cls):
    """Persist enum values ("per_person") rather than member names."""
    return [member.value for member in enum_cls]


class PricingModel(str, enum.Enum):
    """How a stay option's price is charged."""
    PER_OPTION = "per_option"
    PER_PERSON = "per_person"


class AvailabilityStatus(str, enum.Enum):
    """Coarse availability flag for a stay option."""
    AVAILABLE = "available"
    LIMITED = "limited"
    BOOKED_OUT = "booked_out"


class BookingStatus(str, enum.Enum):
    """Booking status enumeration."""
    CONFIRMED = "confirmed"
    PENDING = "pending"
    FAILED = "failed"


class PaymentStatus(str, enum.Enum):
    """Payment status recorded on a booking."""
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class Resort(Base):
    """Resort model."""
    __tablename__ = "resorts"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    location = Column(String, nullable=False, default="")
    description = Column(Text, nullable=True)
    price_per_night = Column(Float, nullable=True)  # Display price, stay options carry the real rate
    rating = Column(Float, nullable=True)
    amenities = Column(JSON, default=list)
    capacity = Column(Integer, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    stay_options = relationship(
        "StayOption",
        back_populates="resort",
        cascade="all, delete-orphan",
        order_by="StayOption.created_at"
    )
    reviews = relationship("Review", back_populates="resort", cascade="all, delete-orphan")


class StayOption(Base):
    """Bookable sub-unit of a resort (room, villa, tent)."""
    __tablename__ = "stay_options"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    resort_id = Column(String, ForeignKey("resorts.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    pricing_model = Column(
        SQLEnum(PricingModel, values_callable=_enum_values),
        default=PricingModel.PER_OPTION,
        nullable=False
    )
    capacity = Column(Integer, nullable=False, default=1)
    availability_status = Column(
        SQLEnum(AvailabilityStatus, values_callable=_enum_values),
        default=AvailabilityStatus.AVAILABLE,
        nullable=False
    )
    amenities = Column(JSON, default=list)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    
    # Relationships
    resort = relationship("Resort", back_populates="stay_options")


class Booking(Base):
    """Booking created after a confirmed UPI payment."""
    __tablename__ = "bookings"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=True, index=True)
    resort_id = Column(String, ForeignKey("resorts.id", ondelete="SET NULL"), nullable=True, index=True)
    stay_option_id = Column(String, ForeignKey("stay_options.id", ondelete="SET NULL"), nullable=True)
    check_in_date = Column(Date, nullable=False)
    check_out_date = Column(Date, nullable=False)
    guest_count = Column(Integer, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(
        SQLEnum(BookingStatus, values_callable=_enum_values),
        default=BookingStatus.PENDING,
        nullable=False
    )
    payment_status = Column(
        SQLEnum(PaymentStatus, values_callable=_enum_values),
        default=PaymentStatus.PENDING,
        nullable=False
    )
    payment_method = Column(String, default="upi", nullable=False)
    payment_reference = Column(String, nullable=True, unique=True)
    guest_name = Column(String, nullable=True)
    guest_email = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    resort = relationship("Resort")
    stay_option = relationship("StayOption")


class Review(Base):
    """Guest review, one per completed booking."""
    __tablename__ = "reviews"
    __table_args__ = (UniqueConstraint("booking_id", name="uq_reviews_booking"),)
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    resort_id = Column(String, ForeignKey("resorts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, nullable=False, index=True)
    booking_id = Column(String, ForeignKey("bookings.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    
    # Relationships
    resort = relationship("Resort", back_populates="reviews")


class WebsiteSetting(Base):
    """Public site setting (contact details, social links), one row per key."""
    __tablename__ = "website_settings"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    setting_key = Column(String, nullable=False, unique=True)
    setting_value = Column(Text, nullable=False, default="")
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class ContactMessage(Base):
    """Message sent through the public contact form."""
    __tablename__ = "contact_messages"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    subject = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)


class AuditLog(Base):
    """Audit log model for tracking operator and booking actions."""
    __tablename__ = "audit_logs"
    
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    user = Column(String, nullable=False)
    action = Column(String, nullable=False)  # resort_create, booking_confirmed, etc.
    entity_type = Column(String, nullable=True)
    entity_id = Column(String, nullable=True, index=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    before_hash = Column(String, nullable=True)
    after_hash = Column(String, nullable=True)
    details = Column(JSON, nullable=True)
