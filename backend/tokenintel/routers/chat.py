"""
Chat Router - chat records and their messages
"""
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from pydantic import BaseModel, Field

from ..database.sqlite import ChatStore
from ..dependencies.services import get_chat_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])


class ChatUpsert(BaseModel):
    id: str = Field(..., min_length=1)
    title: Optional[str] = None
    visibility: Optional[str] = Field(None, pattern="^(private|public)$")


class ChatMessage(BaseModel):
    id: Optional[str] = None
    role: str
    parts: List[Any] = Field(default_factory=list)


class AppendMessages(BaseModel):
    title: Optional[str] = None
    messages: List[ChatMessage]


def _not_found(chat_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Chat {chat_id} not found")


def _forbidden(chat_id: str) -> HTTPException:
    return HTTPException(status_code=403, detail=f"Chat {chat_id} belongs to another user")


@router.get("")
def list_chats(
    user_id: str = Header(..., alias="X-User-Id"),
    store: ChatStore = Depends(get_chat_store),
) -> Dict[str, Any]:
    return {"success": True, "result": store.list_chats(user_id)}


@router.post("")
def upsert_chat(
    chat: ChatUpsert,
    user_id: str = Header(..., alias="X-User-Id"),
    store: ChatStore = Depends(get_chat_store),
) -> Dict[str, Any]:
    try:
        record = store.upsert_chat(chat.id, user_id, title=chat.title, visibility=chat.visibility)
    except PermissionError:
        raise _forbidden(chat.id)
    return {"success": True, "result": record}


@router.get("/{chat_id}")
def get_chat(
    chat_id: str,
    include_messages: bool = True,
    user_id: str = Header(..., alias="X-User-Id"),
    store: ChatStore = Depends(get_chat_store),
) -> Dict[str, Any]:
    chat = store.find_chat(chat_id, user_id, include_messages=include_messages)
    if chat is None:
        raise _not_found(chat_id)
    return {"success": True, "result": chat}


@router.post("/{chat_id}/messages")
def append_messages(
    chat_id: str,
    body: AppendMessages,
    user_id: str = Header(..., alias="X-User-Id"),
    store: ChatStore = Depends(get_chat_store),
) -> Dict[str, Any]:
    try:
        chat = store.append_messages(
            chat_id,
            user_id,
            [message.model_dump() for message in body.messages],
            title=body.title,
        )
    except PermissionError:
        raise _forbidden(chat_id)
    return {"success": True, "result": chat}


@router.delete("/{chat_id}")
def delete_chat(
    chat_id: str,
    user_id: str = Header(..., alias="X-User-Id"),
    store: ChatStore = Depends(get_chat_store),
) -> Dict[str, Any]:
    if not store.delete_chat(chat_id, user_id):
        raise _not_found(chat_id)
    return {"success": True}
