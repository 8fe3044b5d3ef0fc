import logging
import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from copydesk import crud
from copydesk.api.deps import CurrentUser, get_db
from copydesk.api.routes.business_profiles import get_owned_profile
from copydesk.models import (
    BusinessProfilePublic,
    Chat,
    ChatCreate,
    ChatMessageCreate,
    ChatMessagePublic,
    ChatPublic,
    ChatsPublic,
    ChatUpdate,
    ChatWithMessages,
    Message,
    User,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def get_owned_chat(session: Session, id: uuid.UUID, current_user: User) -> Chat:
    chat = session.get(Chat, id)
    if not chat:
        raise HTTPException(status_code=404, detail="Chat not found")
    if chat.owner_id != current_user.id:
        raise HTTPException(status_code=403, detail="Not enough permissions")
    return chat


@router.get("/", response_model=ChatsPublic)
def read_chats(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    archived: bool | None = None,
) -> Any:
    """
    Retrieve the current user's chats, newest first.
    """
    chats = crud.get_user_chats(session=session, owner_id=current_user.id, archived=archived)
    return ChatsPublic(data=chats, count=len(chats))


@router.post("/", response_model=ChatPublic)
def create_chat(
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    chat_in: ChatCreate,
) -> Any:
    if chat_in.business_profile_id:
        get_owned_profile(session, chat_in.business_profile_id, current_user)
    chat = crud.create_chat(session=session, chat_in=chat_in, owner_id=current_user.id)
    logger.info("Created chat %s (%s) for user %s", chat.id, chat.framework, current_user.id)
    return chat


@router.get("/{id}", response_model=ChatWithMessages)
def read_chat(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    """
    Retrieve a chat with its messages in creation order and its attached profile.
    """
    chat = get_owned_chat(session, id, current_user)
    messages = crud.get_chat_messages(session=session, chat_id=chat.id)
    return ChatWithMessages.model_validate(
        chat,
        update={
            "messages": [ChatMessagePublic.model_validate(m) for m in messages],
            "business_profile": (
                BusinessProfilePublic.model_validate(chat.business_profile)
                if chat.business_profile
                else None
            ),
        },
    )


@router.patch("/{id}", response_model=ChatPublic)
def update_chat(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    chat_in: ChatUpdate,
) -> Any:
    """
    Rename, archive, or change the framework or business profile of a chat.
    """
    chat = get_owned_chat(session, id, current_user)
    if chat_in.business_profile_id:
        get_owned_profile(session, chat_in.business_profile_id, current_user)
    return crud.update_chat(session=session, db_chat=chat, chat_in=chat_in)


@router.post("/{id}/archive", response_model=ChatPublic)
def archive_chat(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    chat = get_owned_chat(session, id, current_user)
    return crud.archive_chat(session=session, db_chat=chat)


@router.delete("/{id}", response_model=Message)
def delete_chat(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    chat = get_owned_chat(session, id, current_user)
    crud.delete_chat(session=session, db_chat=chat)
    return Message(message="Chat deleted successfully")


@router.get("/{id}/messages", response_model=list[ChatMessagePublic])
def read_chat_messages(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
) -> Any:
    chat = get_owned_chat(session, id, current_user)
    return crud.get_chat_messages(session=session, chat_id=chat.id)


@router.post("/{id}/messages", response_model=ChatMessagePublic)
def add_chat_message(
    id: uuid.UUID,
    *,
    session: Session = Depends(get_db),
    current_user: CurrentUser,
    message_in: ChatMessageCreate,
) -> Any:
    """
    Append a message to a chat owned by the current user.
    """
    chat = get_owned_chat(session, id, current_user)
    return crud.add_message(session=session, chat_id=chat.id, message_in=message_in)
