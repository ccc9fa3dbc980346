"""
Chat completion client for hybrid answers.
Sends the course scope instructions, the retrieved knowledge context and the
learner's question to the configured OpenAI-compatible endpoint.
"""

from typing import Dict, List

import openai
from loguru import logger
from openai.types.chat import ChatCompletion

from lecturer.config import settings

SYSTEM_PROMPT = """
أنت "المحاضر الإلكتروني — أحمد ياسين" للبرنامج التدريبي: "الذكاء الصناعي في الإدارة: تعزيز الكفاءة والابتكار".
المؤسسة: مركز التدريب المالي والمحاسبي — وزارة المالية (قسم الحاسبة الإلكترونية).
المهام:
- أجب فقط ضمن نطاق المادة المُدرجة في قاعدة المعرفة المرفقة.
- إن كان السؤال خارج النطاق، قل: "هذا السؤال خارج نطاق المادة المعتمدة لهذه الدورة."
- الأسلوب: عربي فصيح أكاديمي، موجز وواضح، مدعم بأمثلة عندما يلزم.
- لا تقدّم وعوداً تقنية تتجاوز قدرات المنصة.
"""

CONTEXT_HEADER = "المقاطع ذات الصلة:\n"
NO_CONTEXT = "لا توجد مقاطع مطابقة في قاعدة المعرفة."


class CompletionError(Exception):
    """The completion endpoint could not be reached or rejected the request."""


def has_api_key() -> bool:
    return bool(settings.OPENAI_API_KEY.strip())


def build_context_block(sections: List[str]) -> str:
    if not sections:
        return NO_CONTEXT
    return CONTEXT_HEADER + "\n\n".join(sections)


def build_messages(question: str, context_block: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "system", "content": context_block},
        {"role": "user", "content": question},
    ]


def _get_client() -> openai.AsyncOpenAI:
    return openai.AsyncOpenAI(
        api_key=settings.OPENAI_API_KEY,
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT,
        max_retries=0,
    )


async def chat_completion(question: str, context_block: str) -> str:
    """
    Ask the completion endpoint and return the trimmed message content.

    Returns an empty string when the response carries no usable content,
    including error statuses that come back with a JSON body.
    Raises CompletionError on connection failures and unparseable bodies.
    """
    client = _get_client()
    try:
        response = await client.chat.completions.create(
            model=settings.OPENAI_MODEL,
            messages=build_messages(question, context_block),
            temperature=settings.OPENAI_TEMPERATURE,
        )
    except openai.APIStatusError as e:
        if not isinstance(e.body, (dict, list)):
            logger.error(f"Completion endpoint returned {e.status_code} with unparseable body")
            raise CompletionError(str(e)) from e
        logger.warning(f"Completion endpoint returned {e.status_code}: {e.message}")
        return ""
    except (openai.OpenAIError, ValueError) as e:
        logger.error(f"Completion request failed: {e}")
        raise CompletionError(str(e)) from e
    finally:
        await client.close()

    # Non-JSON success bodies come back from the SDK as plain text
    if not isinstance(response, ChatCompletion):
        logger.error("Completion endpoint returned an unparseable body")
        raise CompletionError("unparseable completion response")

    if not response.choices or response.choices[0].message is None:
        logger.warning("Completion response has no choices")
        return ""

    content = response.choices[0].message.content or ""
    return content.strip()
