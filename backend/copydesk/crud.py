import uuid
from typing import Any

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from copydesk import frameworks
from copydesk.core.security import get_password_hash, verify_password
from copydesk.models import (
    BusinessProfile,
    BusinessProfileCreate,
    BusinessProfileUpdate,
    Chat,
    ChatCreate,
    ChatMessage,
    ChatMessageCreate,
    ChatUpdate,
    User,
    UserCreate,
    UserUpdateMe,
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


def update_user(*, session: Session, db_user: User, user_in: UserUpdateMe) -> Any:
    user_data = user_in.model_dump(exclude_unset=True)
    db_user.sqlmodel_update(user_data)
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
        # Run the hash anyway so response time does not reveal whether the email exists
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


# Business profiles

def get_user_business_profiles(*, session: Session, owner_id: uuid.UUID) -> list[BusinessProfile]:
    statement = (
        select(BusinessProfile)
        .where(BusinessProfile.owner_id == owner_id)
        .order_by(col(BusinessProfile.created_at).desc())
    )
    return list(session.exec(statement).all())


def get_business_profile(*, session: Session, profile_id: uuid.UUID) -> BusinessProfile | None:
    return session.get(BusinessProfile, profile_id)


def get_default_business_profile(*, session: Session, owner_id: uuid.UUID) -> BusinessProfile | None:
    statement = select(BusinessProfile).where(
        BusinessProfile.owner_id == owner_id, col(BusinessProfile.is_default).is_(True)
    )
    return session.exec(statement).first()


def _unset_default_profiles(*, session: Session, owner_id: uuid.UUID) -> None:
    # Flushed but not committed: the caller commits together with the new default.
    statement = (
        update(BusinessProfile)
        .where(col(BusinessProfile.owner_id) == owner_id, col(BusinessProfile.is_default).is_(True))
        .values(is_default=False, updated_at=get_datetime_utc())
    )
    session.exec(statement)  # type: ignore[call-overload]


def create_business_profile(
    *, session: Session, profile_in: BusinessProfileCreate, owner_id: uuid.UUID
) -> BusinessProfile:
    has_profiles = session.exec(
        select(BusinessProfile.id).where(BusinessProfile.owner_id == owner_id)
    ).first() is not None
    # The first profile of a user always becomes the default.
    is_default = profile_in.is_default or not has_profiles
    if is_default:
        _unset_default_profiles(session=session, owner_id=owner_id)
    db_profile = BusinessProfile.model_validate(
        profile_in, update={"owner_id": owner_id, "is_default": is_default}
    )
    session.add(db_profile)
    session.commit()
    session.refresh(db_profile)
    return db_profile


def update_business_profile(
    *, session: Session, db_profile: BusinessProfile, profile_in: BusinessProfileUpdate
) -> BusinessProfile:
    profile_data = profile_in.model_dump(exclude_unset=True)
    if profile_data.get("is_default"):
        _unset_default_profiles(session=session, owner_id=db_profile.owner_id)
        session.expire(db_profile, ["is_default"])
    db_profile.sqlmodel_update(profile_data, update={"updated_at": get_datetime_utc()})
    session.add(db_profile)
    session.commit()
    session.refresh(db_profile)
    return db_profile


def set_default_business_profile(*, session: Session, db_profile: BusinessProfile) -> BusinessProfile:
    _unset_default_profiles(session=session, owner_id=db_profile.owner_id)
    session.expire(db_profile, ["is_default"])
    db_profile.is_default = True
    db_profile.updated_at = get_datetime_utc()
    session.add(db_profile)
    session.commit()
    session.refresh(db_profile)
    return db_profile


def delete_business_profile(*, session: Session, db_profile: BusinessProfile) -> BusinessProfile | None:
    """
    Delete a profile. When it was the default, the newest remaining profile
    of the same owner is promoted. Returns the new default, if any.
    """
    owner_id = db_profile.owner_id
    was_default = db_profile.is_default
    session.exec(  # type: ignore[call-overload]
        update(Chat)
        .where(col(Chat.business_profile_id) == db_profile.id)
        .values(business_profile_id=None)
    )
    session.delete(db_profile)
    session.flush()

    new_default = None
    if was_default:
        new_default = session.exec(
            select(BusinessProfile)
            .where(BusinessProfile.owner_id == owner_id)
            .order_by(col(BusinessProfile.created_at).desc())
        ).first()
        if new_default:
            new_default.is_default = True
            new_default.updated_at = get_datetime_utc()
            session.add(new_default)
    session.commit()
    if new_default:
        session.refresh(new_default)
    return new_default


# Chats

def get_user_chats(
    *, session: Session, owner_id: uuid.UUID, archived: bool | None = None
) -> list[Chat]:
    statement = select(Chat).where(Chat.owner_id == owner_id)
    if archived is not None:
        statement = statement.where(Chat.archived == archived)
    statement = statement.order_by(col(Chat.created_at).desc())
    return list(session.exec(statement).all())


def create_chat(*, session: Session, chat_in: ChatCreate, owner_id: uuid.UUID) -> Chat:
    db_chat = Chat.model_validate(
        chat_in,
        update={
            "owner_id": owner_id,
            "framework": frameworks.legacy_convert(chat_in.framework),
        },
    )
    session.add(db_chat)
    session.commit()
    session.refresh(db_chat)
    return db_chat


def update_chat(*, session: Session, db_chat: Chat, chat_in: ChatUpdate) -> Chat:
    chat_data = chat_in.model_dump(exclude_unset=True)
    if "framework" in chat_data:
        chat_data["framework"] = frameworks.legacy_convert(chat_data["framework"])
    db_chat.sqlmodel_update(chat_data, update={"updated_at": get_datetime_utc()})
    session.add(db_chat)
    session.commit()
    session.refresh(db_chat)
    return db_chat


def archive_chat(*, session: Session, db_chat: Chat) -> Chat:
    return update_chat(session=session, db_chat=db_chat, chat_in=ChatUpdate(archived=True))


def delete_chat(*, session: Session, db_chat: Chat) -> None:
    session.exec(delete(ChatMessage).where(col(ChatMessage.chat_id) == db_chat.id))  # type: ignore[call-overload]
    session.delete(db_chat)
    session.commit()


# Messages

def add_message(*, session: Session, chat_id: uuid.UUID, message_in: ChatMessageCreate) -> ChatMessage:
    db_message = ChatMessage.model_validate(message_in, update={"chat_id": chat_id})
    session.add(db_message)
    session.commit()
    session.refresh(db_message)
    return db_message


def get_chat_messages(*, session: Session, chat_id: uuid.UUID) -> list[ChatMessage]:
    statement = (
        select(ChatMessage)
        .where(ChatMessage.chat_id == chat_id)
        .order_by(col(ChatMessage.created_at), col(ChatMessage.id))
    )
    return list(session.exec(statement).all())
