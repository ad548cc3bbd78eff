# api/chat/chat.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from models import ChatHistory, ChatList, ChatRequest, ChatResponse
from services.conversation_service import ConversationService, get_conversation_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("", response_model=ChatList)
async def list_chat(conv_service: ConversationService = Depends(get_conversation_service)):
    """Ids of every stored conversation"""
    try:
        return await conv_service.list_chat()
    except Exception:
        logger.exception("[Chat] list_chat failed")
        raise HTTPException(status_code=500)


@router.post("", response_model=ChatResponse)
async def new_chat(
    payload: ChatRequest,
    conv_service: ConversationService = Depends(get_conversation_service),
):
    """Start a conversation with the first user message"""
    try:
        return await conv_service.new_chat(payload.message)
    except Exception:
        logger.exception("[Chat] new_chat failed")
        raise HTTPException(status_code=500)


@router.get("/{chat_id}", response_model=ChatHistory)
async def get_chat(
    chat_id: str,
    conv_service: ConversationService = Depends(get_conversation_service),
):
    try:
        return await conv_service.get_chat(chat_id)
    except Exception:
        logger.exception("[Chat] get_chat %s failed", chat_id)
        raise HTTPException(status_code=500)


@router.put("/{chat_id}", response_model=ChatResponse)
async def continue_chat(
    chat_id: str,
    payload: ChatRequest,
    conv_service: ConversationService = Depends(get_conversation_service),
):
    try:
        return await conv_service.continue_chat(chat_id, payload.message)
    except Exception:
        logger.exception("[Chat] continue_chat %s failed", chat_id)
        raise HTTPException(status_code=500)


@router.delete("/{chat_id}")
async def delete_chat(
    chat_id: str,
    conv_service: ConversationService = Depends(get_conversation_service),
):
    try:
        await conv_service.delete_chat(chat_id)
    except Exception:
        logger.exception("[Chat] delete_chat %s failed", chat_id)
        raise HTTPException(status_code=500)
    return Response(status_code=200)
