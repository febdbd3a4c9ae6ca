"""
Request schemas for the Land Rental API

Each pydantic model validates one request body or query string. Fields are
declared in snake_case and accepted in camelCase (the frontend's casing) or
snake_case.
"""
from datetime import datetime
from typing import Annotated, Any, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from landrental.models.land import (
    SOIL_TYPES, WATER_SOURCES, IRRIGATION_TYPES, LAND_STATUSES,
    LAND_PAYMENT_SCHEDULES, CONTACT_PREFERENCES,
)
from landrental.models.rental import (
    RENTAL_STATUSES, PAYMENT_STATUSES, PAYMENT_METHODS,
    RENTAL_PAYMENT_SCHEDULES, MAINTENANCE_OPTIONS, UTILITY_OPTIONS,
)
from landrental.models.chat import MESSAGE_TYPES
from landrental.models.user import USER_TYPES, DOCUMENT_TYPES
from landrental.utils.dates import to_naive_utc

UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'
PHONE_PATTERN = r'^[0-9]{10}$'


class ApiSchema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra='ignore',
    )


class PageParams(ApiSchema):
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=50)


# ---------- users ----------

class UserAddress(ApiSchema):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None


class RegisterRequest(ApiSchema):
    name: str = Field(..., min_length=2, max_length=50)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=120)
    password: str = Field(..., min_length=6, max_length=128)
    user_type: Literal[USER_TYPES]
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[UserAddress] = None

    @field_validator('email')
    @classmethod
    def lowercase_email(cls, value):
        return value.lower()


class LoginRequest(ApiSchema):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class BankDetails(ApiSchema):
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    account_holder_name: Optional[str] = None


class ProfileUpdateRequest(ApiSchema):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    phone: Optional[str] = Field(None, pattern=PHONE_PATTERN)
    address: Optional[UserAddress] = None
    farming_experience: Optional[int] = Field(None, ge=0, le=50)
    preferred_crops: Optional[List[str]] = None
    bank_details: Optional[BankDetails] = None
    profile_image: Optional[str] = None


class DocumentItem(ApiSchema):
    document_type: Literal[DOCUMENT_TYPES]
    document_url: str = Field(..., pattern=r'^https?://\S+$')


class DocumentsUploadRequest(ApiSchema):
    documents: List[DocumentItem] = Field(..., min_length=1)


class RatingRequest(ApiSchema):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=500)


class UserSearchParams(PageParams):
    search: Optional[str] = None
    experience: Optional[int] = Field(None, ge=0, le=50)
    state: Optional[str] = None
    city: Optional[str] = None


# ---------- land ----------

class GeoPoint(ApiSchema):
    type: Literal['Point'] = 'Point'
    coordinates: List[float] = Field(..., min_length=2, max_length=2)

    @field_validator('coordinates')
    @classmethod
    def check_range(cls, value):
        longitude, latitude = value
        if not -180 <= longitude <= 180:
            raise ValueError('Longitude must be between -180 and 180')
        if not -90 <= latitude <= 90:
            raise ValueError('Latitude must be between -90 and 90')
        return value


class LandAddress(ApiSchema):
    street: Optional[str] = None
    village: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: str = 'India'


class LandRentalTerms(ApiSchema):
    minimum_duration: int = Field(1, ge=1, le=12)
    maximum_duration: int = Field(12, ge=1, le=60)
    payment_schedule: Literal[LAND_PAYMENT_SCHEDULES] = 'monthly'
    security_deposit: float = Field(0, ge=0)


class LandImage(ApiSchema):
    url: str
    caption: Optional[str] = None


class LandCreateRequest(ApiSchema):
    title: str = Field(..., min_length=5, max_length=100)
    description: str = Field(..., min_length=20, max_length=1000)
    total_acres: float = Field(..., ge=0.1, le=10000)
    available_acres: float = Field(..., ge=0.1)
    price_per_acre: float = Field(..., ge=100, le=100000)
    location: GeoPoint
    address: LandAddress = Field(default_factory=LandAddress)
    soil_type: Literal[SOIL_TYPES]
    water_source: Literal[WATER_SOURCES]
    irrigation_type: Literal[IRRIGATION_TYPES] = 'none'
    available_from: UtcDatetime
    available_to: Optional[UtcDatetime] = None
    rental_terms: LandRentalTerms = Field(default_factory=LandRentalTerms)
    restrictions: List[str] = Field(default_factory=list)
    preferred_crops: List[str] = Field(default_factory=list)
    contact_preference: Literal[CONTACT_PREFERENCES] = 'both'
    images: List[LandImage] = Field(default_factory=list)


class LandUpdateRequest(ApiSchema):
    title: Optional[str] = Field(None, min_length=5, max_length=100)
    description: Optional[str] = Field(None, min_length=20, max_length=1000)
    total_acres: Optional[float] = Field(None, ge=0.1, le=10000)
    available_acres: Optional[float] = Field(None, ge=0.1)
    price_per_acre: Optional[float] = Field(None, ge=100, le=100000)
    location: Optional[GeoPoint] = None
    address: Optional[LandAddress] = None
    soil_type: Optional[Literal[SOIL_TYPES]] = None
    water_source: Optional[Literal[WATER_SOURCES]] = None
    irrigation_type: Optional[Literal[IRRIGATION_TYPES]] = None
    land_status: Optional[Literal[LAND_STATUSES]] = None
    available_from: Optional[UtcDatetime] = None
    available_to: Optional[UtcDatetime] = None
    rental_terms: Optional[LandRentalTerms] = None
    restrictions: Optional[List[str]] = None
    preferred_crops: Optional[List[str]] = None
    contact_preference: Optional[Literal[CONTACT_PREFERENCES]] = None
    images: Optional[List[LandImage]] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None


class LandSearchParams(PageParams):
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)
    min_acres: Optional[float] = Field(None, ge=0)
    max_acres: Optional[float] = Field(None, ge=0)
    soil_type: Optional[Literal[SOIL_TYPES]] = None
    water_source: Optional[Literal[WATER_SOURCES]] = None
    irrigation_type: Optional[Literal[IRRIGATION_TYPES]] = None
    state: Optional[str] = None
    city: Optional[str] = None
    district: Optional[str] = None
    village: Optional[str] = None
    search: Optional[str] = None
    sort_by: Literal['price', 'acres', 'createdAt', 'rating'] = 'createdAt'
    sort_order: Literal['asc', 'desc'] = 'desc'
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    radius: Optional[float] = Field(None, gt=0)


class InquiryRequest(ApiSchema):
    message: str = Field(..., min_length=10, max_length=500)


# ---------- agreements & payments ----------

class RentalTerms(ApiSchema):
    crops_allowed: List[str] = Field(default_factory=list)
    restrictions: List[str] = Field(default_factory=list)
    maintenance: Literal[MAINTENANCE_OPTIONS] = 'farmer'
    utilities: Literal[UTILITY_OPTIONS] = 'notAvailable'


class GenerateAgreementRequest(ApiSchema):
    land_id: int
    farmer_id: int
    rented_acres: float = Field(..., ge=0.1)
    price_per_acre: float = Field(..., ge=100)
    start_date: UtcDatetime
    end_date: UtcDatetime
    duration: int = Field(..., ge=1, le=60)
    payment_schedule: Literal[RENTAL_PAYMENT_SCHEDULES]
    security_deposit: float = Field(0, ge=0)
    terms: RentalTerms = Field(default_factory=RentalTerms)


class SignRequest(ApiSchema):
    signature: str = Field(..., min_length=1)


class CancelRequest(ApiSchema):
    reason: str = Field(..., min_length=10, max_length=500)


class DisputeRequest(ApiSchema):
    issue: str = Field(..., min_length=5, max_length=200)
    description: Optional[str] = Field(None, max_length=1000)


class MyRentalsParams(PageParams):
    status: Optional[Literal[RENTAL_STATUSES]] = None


class ProcessPaymentRequest(ApiSchema):
    rental_id: int
    payment_index: int = Field(..., ge=0)
    amount: float = Field(..., ge=0.01)
    payment_method: Literal[PAYMENT_METHODS]
    transaction_id: Optional[str] = Field(None, min_length=1, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


class ReminderRequest(ApiSchema):
    payment_index: int = Field(..., ge=0)
    message: Optional[str] = Field(None, max_length=500)


class PaymentListParams(PageParams):
    status: Optional[Literal[PAYMENT_STATUSES]] = None


# ---------- chat ----------

class ChatListParams(PageParams):
    limit: int = Field(20, ge=1, le=50)


class MessagePageParams(PageParams):
    limit: int = Field(50, ge=1, le=100)


class CreateChatRequest(ApiSchema):
    participant_id: int
    land_id: Optional[int] = None
    rental_id: Optional[int] = None
    initial_message: Optional[str] = Field(None, min_length=1, max_length=500)


class Attachment(ApiSchema):
    type: Literal['image', 'document', 'location']
    url: Optional[str] = None
    filename: Optional[str] = None
    size: Optional[int] = Field(None, ge=0)


class SendMessageRequest(ApiSchema):
    content: str = Field(..., min_length=1, max_length=1000)
    message_type: Literal[MESSAGE_TYPES] = 'text'
    attachments: List[Attachment] = Field(default_factory=list)


# ---------- chatbot ----------

class ChatbotMessageRequest(ApiSchema):
    message: str = Field(..., min_length=1, max_length=1000)
    conversation_history: List[Any] = Field(default_factory=list)


class QuickResponseRequest(ApiSchema):
    message: str = Field(..., min_length=1, max_length=500)


class FeedbackRequest(ApiSchema):
    message: str = Field(..., min_length=1, max_length=1000)
    response: str = Field(..., min_length=1, max_length=1000)
    rating: int = Field(..., ge=1, le=5)
    feedback: Optional[str] = Field(None, max_length=500)
