from typing import Callable

from fastapi import APIRouter, Depends

from codearena.business.services import ChatService, get_chat_model_factory, get_current_user
from codearena.data.schemas import ChatRequest, ChatResponse, User

chat_router = APIRouter(prefix="/ai", tags=["ai"])


@chat_router.post(
    "/chat",
    response_model=ChatResponse,
    summary="Ask the DSA tutor",
    description="Sends the conversation and the problem context to the language model.",
)
async def chat(
    chat_request: ChatRequest,
    user: User = Depends(get_current_user),
    model_factory: Callable = Depends(get_chat_model_factory),
):
    return await ChatService.chat(chat_request, model_factory)
