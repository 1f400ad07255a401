import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import EmailStr
from sqlalchemy import JSON, DateTime, Text, UniqueConstraint
from sqlmodel import Field, SQLModel


def get_datetime_utc() -> datetime:
    return datetime.now(timezone.utc)


class TaxonomyType(str, Enum):
    COUNTRY = "country"
    BLOG = "blog"


class CommentTarget(str, Enum):
    BLOG = "blog"
    COUNTRY = "country"


class VisaStatus(str, Enum):
    VISA_FREE = "visa-free"
    VISA_ON_ARRIVAL = "visa-on-arrival"
    ETA = "eta"
    EVISA = "evisa"
    VISA_REQUIRED = "visa-required"


# Shared properties
class UserBase(SQLModel):
    email: EmailStr = Field(unique=True, index=True, max_length=255)
    is_active: bool = True
    is_superuser: bool = False
    full_name: str | None = Field(default=None, max_length=255)


# Properties to receive via API on creation
class UserCreate(UserBase):
    password: str = Field(min_length=8, max_length=128)


# Properties to receive via API on update, all are optional
class UserUpdate(UserBase):
    email: EmailStr | None = Field(default=None, max_length=255)  # type: ignore
    password: str | None = Field(default=None, min_length=8, max_length=128)


# Database model, database table inferred from class name
class User(UserBase, table=True):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    hashed_password: str
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


# Properties to return via API, id is always required
class UserPublic(UserBase):
    id: uuid.UUID
    created_at: datetime | None = None


class UsersPublic(SQLModel):
    data: list[UserPublic]
    count: int


# Generic message
class Message(SQLModel):
    message: str


# JSON payload containing access token
class Token(SQLModel):
    access_token: str
    token_type: str = "bearer"


# Contents of JWT token
class TokenPayload(SQLModel):
    sub: str | None = None


# Countries

class CountryBase(SQLModel):
    name: str = Field(min_length=1, max_length=255, index=True)
    title: str | None = Field(default=None, max_length=255)
    title_en: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, sa_type=Text)
    description_en: str | None = Field(default=None, sa_type=Text)
    contents: str | None = Field(default=None, sa_type=Text)
    contents_en: str | None = Field(default=None, sa_type=Text)
    req_document: str | None = Field(default=None, sa_type=Text)
    req_document_en: str | None = Field(default=None, sa_type=Text)
    price_contents: str | None = Field(default=None, sa_type=Text)
    price_contents_en: str | None = Field(default=None, sa_type=Text)
    warning_notes: str | None = Field(default=None, sa_type=Text)
    warning_notes_en: str | None = Field(default=None, sa_type=Text)
    meta_title: str | None = Field(default=None, max_length=255)
    meta_description: str | None = Field(default=None, max_length=500)
    country_code: str | None = Field(default=None, max_length=3, index=True)
    continent: str | None = Field(default=None, max_length=50)
    image_url: str | None = Field(default=None, max_length=1000)
    status: int = 1
    sorted: int = 0


class CountryCreate(CountryBase):
    slug: str | None = Field(default=None, max_length=255)


class CountryUpdate(SQLModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    title: str | None = None
    title_en: str | None = None
    description: str | None = None
    description_en: str | None = None
    contents: str | None = None
    contents_en: str | None = None
    req_document: str | None = None
    req_document_en: str | None = None
    price_contents: str | None = None
    price_contents_en: str | None = None
    warning_notes: str | None = None
    warning_notes_en: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    country_code: str | None = Field(default=None, max_length=3)
    continent: str | None = None
    image_url: str | None = None
    status: int | None = None
    sorted: int | None = None
    slug: str | None = Field(default=None, max_length=255)


class Country(CountryBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class CountryPublic(CountryBase):
    id: int
    slug: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CountriesPublic(SQLModel):
    data: list[CountryPublic]
    count: int


# Blogs

class BlogBase(SQLModel):
    title: str = Field(min_length=1, max_length=255)
    title_en: str | None = Field(default=None, max_length=255)
    description: str | None = Field(default=None, sa_type=Text)
    description_en: str | None = Field(default=None, sa_type=Text)
    contents: str | None = Field(default=None, sa_type=Text)
    contents_en: str | None = Field(default=None, sa_type=Text)
    slug: str | None = Field(default=None, max_length=255, index=True)
    category: str | None = Field(default=None, max_length=100)
    image_url: str | None = Field(default=None, max_length=1000)
    meta_title: str | None = Field(default=None, max_length=255)
    meta_description: str | None = Field(default=None, max_length=500)
    tags: list[str] = Field(default_factory=list, sa_type=JSON)
    home: int = 0
    status: int = 1


class BlogCreate(BlogBase):
    pass


class BlogUpdate(SQLModel):
    title: str | None = Field(default=None, min_length=1, max_length=255)
    title_en: str | None = None
    description: str | None = None
    description_en: str | None = None
    contents: str | None = None
    contents_en: str | None = None
    slug: str | None = Field(default=None, max_length=255)
    category: str | None = None
    image_url: str | None = None
    meta_title: str | None = None
    meta_description: str | None = None
    tags: list[str] | None = None
    home: int | None = None
    status: int | None = None


class Blog(BlogBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    views: int = 0
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class BlogPublic(BlogBase):
    id: int
    views: int = 0
    path: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None


class BlogDetail(BlogPublic):
    reading_time: int = 1
    headings: list[dict[str, str]] = []


class BlogsPublic(SQLModel):
    data: list[BlogPublic]
    count: int


# Taxonomies: canonical slugs for countries and blogs

class TaxonomyBase(SQLModel):
    slug: str = Field(max_length=255, index=True)
    type: TaxonomyType
    model_id: int = Field(index=True)


class Taxonomy(TaxonomyBase, table=True):
    __table_args__ = (UniqueConstraint("type", "model_id"),)

    id: int | None = Field(default=None, primary_key=True)


class TaxonomyPublic(TaxonomyBase):
    id: int


# Products: consultancy packages sold per country

class ProductBase(SQLModel):
    country_id: int = Field(foreign_key="country.id", index=True, ondelete="CASCADE")
    name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, sa_type=Text)
    price: float = Field(default=0, ge=0)
    currency: str = Field(default="TRY", max_length=3)
    process_time: str | None = Field(default=None, max_length=255)
    req_document: str | None = Field(default=None, sa_type=Text)
    status: int = 1


class ProductCreate(ProductBase):
    pass


class ProductUpdate(SQLModel):
    country_id: int | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    price: float | None = Field(default=None, ge=0)
    currency: str | None = Field(default=None, max_length=3)
    process_time: str | None = None
    req_document: str | None = None
    status: int | None = None


class Product(ProductBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ProductPublic(ProductBase):
    id: int
    created_at: datetime | None = None


# Comments on blogs and countries

class CommentBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr = Field(max_length=255)
    body: str = Field(min_length=1, max_length=5000)


class CommentCreate(CommentBase):
    target_type: CommentTarget
    target_id: int
    rating: int = Field(default=0, ge=0, le=5)


class CommentReply(CommentBase):
    pass


class Comment(CommentBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    target_type: CommentTarget = Field(index=True)
    target_id: int = Field(index=True)
    parent_id: int | None = Field(default=None, foreign_key="comment.id", ondelete="CASCADE")
    rating: int = 0
    likes_count: int = 0
    status: int = 0  # 0 pending approval, 1 approved
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class CommentPublic(SQLModel):
    id: int
    target_type: CommentTarget
    target_id: int
    parent_id: int | None = None
    name: str
    body: str
    rating: int
    likes_count: int
    status: int
    created_at: datetime | None = None


class CommentThread(CommentPublic):
    replies: list[CommentPublic] = []


class CommentLike(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("comment_id", "user_ip"),)

    id: int | None = Field(default=None, primary_key=True)
    comment_id: int = Field(foreign_key="comment.id", index=True, ondelete="CASCADE")
    user_ip: str = Field(max_length=64)


class LikeResult(SQLModel):
    liked: bool
    likes_count: int


# Country questions: visitors ask, admins answer and approve

class QuestionBase(SQLModel):
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr = Field(max_length=255)
    phone: str | None = Field(default=None, max_length=50)


class QuestionCreate(QuestionBase):
    country_id: int
    question: str = Field(min_length=1, max_length=5000)


class QuestionAnswer(SQLModel):
    contents: str = Field(min_length=1)


class QuestionStatusUpdate(SQLModel):
    status: int = Field(ge=0, le=1)


class Question(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    country_id: int = Field(foreign_key="country.id", index=True, ondelete="CASCADE")
    parent_id: int | None = Field(default=None, foreign_key="question.id", ondelete="CASCADE")
    name: str | None = Field(default=None, max_length=255)
    email: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=50)
    contents: str = Field(sa_type=Text)
    status: int = 0  # 0 pending approval, 1 approved
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class QuestionPublic(SQLModel):
    id: int
    country_id: int
    parent_id: int | None = None
    name: str | None = None
    contents: str
    status: int
    created_at: datetime | None = None


class QuestionAdmin(QuestionPublic):
    email: str | None = None
    phone: str | None = None
    answer_count: int = 0


class QuestionWithAnswers(QuestionPublic):
    answers: list[QuestionPublic] = []


# Visa applications submitted through the public form

class ApplicationStatus(str, Enum):
    NEW = "new"
    PENDING = "pending"
    PROCESSING = "processing"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApplicationBase(SQLModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr = Field(max_length=255)
    phone: str = Field(min_length=1, max_length=50)
    country_id: int | None = None
    package_id: int | None = None
    notes: str | None = Field(default=None, max_length=5000)


class ApplicationCreate(ApplicationBase):
    pass


class ApplicationStatusUpdate(SQLModel):
    status: ApplicationStatus


class Application(ApplicationBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    country_id: int | None = Field(default=None, foreign_key="country.id", ondelete="SET NULL")
    package_id: int | None = Field(default=None, foreign_key="product.id", ondelete="SET NULL")
    country_name: str | None = Field(default=None, max_length=255)
    package_name: str | None = Field(default=None, max_length=255)
    notes: str | None = Field(default=None, sa_type=Text)
    status: ApplicationStatus = Field(default=ApplicationStatus.NEW, index=True)
    created_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class ApplicationPublic(ApplicationBase):
    id: int
    country_name: str | None = None
    package_name: str | None = None
    status: ApplicationStatus
    created_at: datetime | None = None


class ApplicationsPublic(SQLModel):
    data: list[ApplicationPublic]
    count: int


# Visa requirements for Turkish passport holders, keyed by destination code

class VisaRequirementBase(SQLModel):
    country_code: str = Field(max_length=3, unique=True, index=True)
    country_name: str | None = Field(default=None, max_length=255)
    visa_status: VisaStatus = VisaStatus.VISA_REQUIRED
    allowed_stay: str | None = Field(default=None, max_length=255)
    conditions: str | None = Field(default=None, sa_type=Text)
    notes: str | None = Field(default=None, sa_type=Text)
    application_method: str | None = Field(default=None, max_length=50)
    available_methods: list[str] = Field(default_factory=list, sa_type=JSON)
    visa_cost: str | None = Field(default=None, max_length=100)
    processing_time: str | None = Field(default=None, max_length=100)
    data_source: str | None = Field(default=None, max_length=100)


class VisaRequirementUpdate(SQLModel):
    country_code: str = Field(min_length=2, max_length=3)
    country_name: str | None = None
    allowed_stay: str | None = None
    conditions: str | None = None
    notes: str | None = None
    available_methods: list[str] | None = None


class VisaRequirementImportItem(SQLModel):
    country_code: str = Field(min_length=2, max_length=3)
    country_name: str | None = None
    visa_status: VisaStatus
    allowed_stay: str | None = None
    conditions: str | None = None
    visa_cost: str | None = None
    processing_time: str | None = None
    application_method: str | None = None


class VisaRequirement(VisaRequirementBase, table=True):
    id: int | None = Field(default=None, primary_key=True)
    updated_at: datetime | None = Field(
        default_factory=get_datetime_utc,
        sa_type=DateTime(timezone=True),  # type: ignore
    )


class VisaRequirementPublic(VisaRequirementBase):
    id: int
    updated_at: datetime | None = None


class CountryDetail(CountryPublic):
    visa_requirement: VisaRequirementPublic | None = None
    products: list[ProductPublic] = []
