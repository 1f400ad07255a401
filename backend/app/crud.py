from typing import Any

from sqlmodel import Session, select

from app.core.security import get_password_hash, verify_password
from app.models import (
    Application,
    ApplicationCreate,
    Blog,
    BlogCreate,
    BlogUpdate,
    Comment,
    CommentCreate,
    CommentLike,
    CommentReply,
    Country,
    CountryCreate,
    CountryUpdate,
    Product,
    ProductCreate,
    ProductUpdate,
    Question,
    QuestionAnswer,
    QuestionCreate,
    Taxonomy,
    TaxonomyType,
    User,
    UserCreate,
    UserUpdate,
    VisaRequirement,
    get_datetime_utc,
)


def create_user(*, session: Session, user_create: UserCreate) -> User:
    db_obj = User.model_validate(
        user_create, update={"hashed_password": get_password_hash(user_create.password)}
    )
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj


def update_user(*, session: Session, db_user: User, user_in: UserUpdate) -> Any:
    user_data = user_in.model_dump(exclude_unset=True)
    extra_data = {}
    if "password" in user_data:
        password = user_data["password"]
        hashed_password = get_password_hash(password)
        extra_data["hashed_password"] = hashed_password
    db_user.sqlmodel_update(user_data, update=extra_data)
    session.add(db_user)
    session.commit()
    session.refresh(db_user)
    return db_user


def get_user_by_email(*, session: Session, email: str) -> User | None:
    statement = select(User).where(User.email == email)
    session_user = session.exec(statement).first()
    return session_user


# Dummy hash to use for timing attack prevention when user is not found
# This is an Argon2 hash of a random password, used to ensure constant-time comparison
DUMMY_HASH = "$argon2id$v=19$m=65536,t=3,p=4$MjQyZWE1MzBjYjJlZTI0Yw$YTU4NGM5ZTZmYjE2NzZlZjY0ZWY3ZGRkY2U2OWFjNjk"


def authenticate(*, session: Session, email: str, password: str) -> User | None:
    db_user = get_user_by_email(session=session, email=email)
    if not db_user:
        # Prevent timing attacks by running password verification even when user doesn't exist
        verify_password(password, DUMMY_HASH)
        return None
    verified, updated_password_hash = verify_password(password, db_user.hashed_password)
    if not verified:
        return None
    if updated_password_hash:
        db_user.hashed_password = updated_password_hash
        session.add(db_user)
        session.commit()
        session.refresh(db_user)
    return db_user


def get_taxonomy(
    *, session: Session, type: TaxonomyType, model_id: int
) -> Taxonomy | None:
    statement = select(Taxonomy).where(
        Taxonomy.type == type, Taxonomy.model_id == model_id
    )
    return session.exec(statement).first()


def set_taxonomy_slug(
    *, session: Session, type: TaxonomyType, model_id: int, slug: str
) -> Taxonomy:
    taxonomy = get_taxonomy(session=session, type=type, model_id=model_id)
    if taxonomy:
        taxonomy.slug = slug
    else:
        taxonomy = Taxonomy(type=type, model_id=model_id, slug=slug)
    session.add(taxonomy)
    session.commit()
    session.refresh(taxonomy)
    return taxonomy


def delete_taxonomy(*, session: Session, type: TaxonomyType, model_id: int) -> None:
    taxonomy = get_taxonomy(session=session, type=type, model_id=model_id)
    if taxonomy:
        session.delete(taxonomy)
        session.commit()


def create_country(*, session: Session, country_in: CountryCreate) -> Country:
    db_country = Country.model_validate(country_in)
    session.add(db_country)
    session.commit()
    session.refresh(db_country)
    return db_country


def update_country(*, session: Session, db_country: Country, country_in: CountryUpdate) -> Country:
    country_data = country_in.model_dump(exclude_unset=True, exclude={"slug"})
    db_country.sqlmodel_update(country_data, update={"updated_at": get_datetime_utc()})
    session.add(db_country)
    session.commit()
    session.refresh(db_country)
    return db_country


def create_blog(*, session: Session, blog_in: BlogCreate) -> Blog:
    db_blog = Blog.model_validate(blog_in)
    session.add(db_blog)
    session.commit()
    session.refresh(db_blog)
    return db_blog


def update_blog(*, session: Session, db_blog: Blog, blog_in: BlogUpdate) -> Blog:
    blog_data = blog_in.model_dump(exclude_unset=True)
    db_blog.sqlmodel_update(blog_data, update={"updated_at": get_datetime_utc()})
    session.add(db_blog)
    session.commit()
    session.refresh(db_blog)
    return db_blog


def create_product(*, session: Session, product_in: ProductCreate) -> Product:
    db_product = Product.model_validate(product_in)
    session.add(db_product)
    session.commit()
    session.refresh(db_product)
    return db_product


def update_product(*, session: Session, db_product: Product, product_in: ProductUpdate) -> Product:
    db_product.sqlmodel_update(product_in.model_dump(exclude_unset=True))
    session.add(db_product)
    session.commit()
    session.refresh(db_product)
    return db_product


def create_comment(*, session: Session, comment_in: CommentCreate) -> Comment:
    db_comment = Comment.model_validate(comment_in, update={"status": 0})
    session.add(db_comment)
    session.commit()
    session.refresh(db_comment)
    return db_comment


def create_comment_reply(*, session: Session, parent: Comment, reply_in: CommentReply) -> Comment:
    # Replies carry no rating and wait for approval like top-level comments.
    # Threads are one level deep, so a reply to a reply joins the root thread.
    db_reply = Comment.model_validate(
        reply_in,
        update={
            "target_type": parent.target_type,
            "target_id": parent.target_id,
            "parent_id": parent.parent_id or parent.id,
            "rating": 0,
            "status": 0,
        },
    )
    session.add(db_reply)
    session.commit()
    session.refresh(db_reply)
    return db_reply


def create_question(*, session: Session, question_in: QuestionCreate) -> Question:
    db_question = Question.model_validate(
        question_in.model_dump(exclude={"question"}),
        update={"contents": question_in.question, "status": 0},
    )
    session.add(db_question)
    session.commit()
    session.refresh(db_question)
    return db_question


def answer_question(*, session: Session, question: Question, answer_in: QuestionAnswer) -> Question:
    # Answers come from admins and are published right away
    db_answer = Question(
        country_id=question.country_id,
        parent_id=question.parent_id or question.id,
        contents=answer_in.contents,
        status=1,
    )
    session.add(db_answer)
    session.commit()
    session.refresh(db_answer)
    return db_answer


def create_application(
    *,
    session: Session,
    application_in: ApplicationCreate,
    country: Country | None = None,
    product: Product | None = None,
) -> Application:
    db_application = Application.model_validate(
        application_in,
        update={
            "country_name": country.name if country else None,
            "package_name": product.name if product else None,
        },
    )
    session.add(db_application)
    session.commit()
    session.refresh(db_application)
    return db_application


def toggle_comment_like(*, session: Session, comment: Comment, user_ip: str) -> bool:
    """Like the comment for this IP, or remove the like if it already exists."""
    existing = session.exec(
        select(CommentLike).where(
            CommentLike.comment_id == comment.id, CommentLike.user_ip == user_ip
        )
    ).first()
    if existing:
        session.delete(existing)
        comment.likes_count = max(0, comment.likes_count - 1)
        liked = False
    else:
        session.add(CommentLike(comment_id=comment.id, user_ip=user_ip))
        comment.likes_count += 1
        liked = True
    session.add(comment)
    session.commit()
    session.refresh(comment)
    return liked


def get_visa_requirement(*, session: Session, country_code: str) -> VisaRequirement | None:
    statement = select(VisaRequirement).where(
        VisaRequirement.country_code == country_code.upper()
    )
    return session.exec(statement).first()


def upsert_visa_requirement(
    *, session: Session, country_code: str, values: dict[str, Any]
) -> tuple[VisaRequirement, bool]:
    """Insert or update the row for country_code. Returns (row, created)."""
    code = country_code.upper()
    db_obj = get_visa_requirement(session=session, country_code=code)
    created = db_obj is None
    if db_obj is None:
        db_obj = VisaRequirement(country_code=code)
    db_obj.sqlmodel_update(values, update={"updated_at": get_datetime_utc()})
    session.add(db_obj)
    session.commit()
    session.refresh(db_obj)
    return db_obj, created


def increment_blog_views(*, session: Session, blog: Blog) -> Blog:
    blog.views += 1
    session.add(blog)
    session.commit()
    session.refresh(blog)
    return blog
