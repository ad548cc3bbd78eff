from models.Message_schema import Message, NoReply, NO_REPLY, Role
from models.Conversation_schema import Conversation
from models.Chat_schema import ChatHistory, ChatList, ChatRequest, ChatResponse

__all__ = [
    "ChatHistory",
    "ChatList",
    "ChatRequest",
    "ChatResponse",
    "Conversation",
    "Message",
    "NO_REPLY",
    "NoReply",
    "Role",
]
