import json
from typing import Callable

import google.generativeai as genai

from codearena.config import Config, logger
from codearena.data.schemas import ChatRequest, ChatResponse
from codearena.errors import BadRequestException, ExternalServiceException

chat_logger = logger.getChild("chat")

SYSTEM_PROMPT = """You are an expert Data Structures and Algorithms tutor helping a user with one coding problem.

## PROBLEM
Title: {title}
Description: {description}
Examples: {test_cases}
Starter code: {start_code}

## HOW TO HELP
- Give hints that guide the user towards the solution before revealing it.
- Review and debug code the user shares, explaining what goes wrong.
- Explain the optimal approach with its time and space complexity when asked.
- Use the language the user writes in, defaulting to the starter code's languages.

## LIMITS
Only discuss this problem and closely related DSA concepts. Politely decline anything else."""


def build_system_instruction(request: ChatRequest) -> str:
    return SYSTEM_PROMPT.format(
        title=request.title or "Unknown",
        description=request.description or "Not provided",
        test_cases=json.dumps([case.model_dump() for case in request.test_cases]),
        start_code=json.dumps([code.model_dump() for code in request.start_code]),
    )


def gemini_model_factory(system_instruction: str):
    genai.configure(api_key=Config.GEMINI_API_KEY)
    return genai.GenerativeModel(Config.GEMINI_MODEL, system_instruction=system_instruction)


def get_chat_model_factory() -> Callable[[str], object]:
    return gemini_model_factory


class ChatService:
    @staticmethod
    async def chat(request: ChatRequest, model_factory: Callable[[str], object]) -> ChatResponse:
        if not request.messages:
            raise BadRequestException(detail="At least one message is required")

        model = model_factory(build_system_instruction(request))
        contents = [
            {"role": message.role, "parts": [part.text for part in message.parts]}
            for message in request.messages
        ]
        chat_logger.info(f"Chat request about '{request.title}' ({len(contents)} messages)")
        try:
            response = await model.generate_content_async(contents)
            text = response.text
        except Exception as e:
            chat_logger.error(f"Gemini request failed: {str(e)}")
            raise ExternalServiceException(detail="AI assistant is unavailable")
        return ChatResponse(message=text)
