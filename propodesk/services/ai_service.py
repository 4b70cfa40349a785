"""OpenAI chat completions client for proposal writing"""

import json
import logging
from typing import Any, Optional

import httpx

from ..config import OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL

logger = logging.getLogger(__name__)

PROPOSAL_SYSTEM_PROMPT = """You are an expert marketing proposal writer.
Create compelling, professional proposal content based on the client information and selected services.

For EVERY selected service, include it in the "Our Proposed Solution" section with a specific outcome.

Return ONLY a valid JSON object with a "blocks" property holding an array of blocks.
Headings: {"type": "heading", "props": {"level": 1}, "content": [{"type": "text", "text": "..."}]}
Paragraphs: {"type": "paragraph", "content": [{"type": "text", "text": "..."}]}
Bullet items: {"type": "bulletListItem", "content": [{"type": "text", "text": "..."}]}

Sections: Executive Summary, Understanding Your Needs, Our Proposed Solution,
Value & Investment, Next Steps.

Copywriting rules: active voice, sentences under 20 words where possible,
no jargon such as "leverage" or "synergy", no cliches."""

ENHANCE_SYSTEM_PROMPT = """You are an expert marketing copywriter.
- If content is provided, enhance it based on the instruction.
- If no content is provided or content is minimal, generate compelling new content from scratch.
Maintain a professional, persuasive tone. Return only the content, no additional commentary."""

# Below this many characters the content is treated as empty and generated from scratch
MIN_ENHANCE_LENGTH = 50


class AINotConfigured(RuntimeError):
    """Raised when no OpenAI key is configured"""


class AIServiceError(RuntimeError):
    """Raised when the completion call fails or returns unusable output"""


class AIService:
    """Thin wrapper around the OpenAI chat completions REST endpoint"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else OPENAI_API_KEY
        self.model = model or OPENAI_MODEL
        self.base_url = (base_url or OPENAI_BASE_URL).rstrip("/")
        self.transport = transport

    async def _complete(self, messages: list[dict], temperature: float, json_mode: bool = False) -> str:
        if not self.api_key:
            raise AINotConfigured("OpenAI API key not configured")

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            async with httpx.AsyncClient(timeout=60.0, transport=self.transport) as client:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                    json=payload,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ OpenAI returned {e.response.status_code}: {e.response.text[:200]}")
            raise AIServiceError(f"OpenAI returned {e.response.status_code}") from e
        except httpx.RequestError as e:
            logger.error(f"❌ OpenAI request failed: {e}")
            raise AIServiceError("OpenAI request failed") from e

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise AIServiceError("Unexpected completion payload") from e

    async def enhance_content(self, content: str = "", instruction: Optional[str] = None) -> str:
        """Improve ``content`` per ``instruction``, or write new copy when content is minimal"""
        instruction = instruction or "Improve and enhance this content"
        if not content or len(content.strip()) < MIN_ENHANCE_LENGTH:
            user_prompt = instruction
        else:
            user_prompt = f"{instruction}:\n\n{content}"

        logger.info(f"🤖 Enhancing content ({len(content or '')} chars)")
        return await self._complete(
            [
                {"role": "system", "content": ENHANCE_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
        )

    async def generate_proposal(
        self,
        client_name: str,
        calculator_data: dict,
        calculator_type: str = "marketing",
        client_company: Optional[str] = None,
        client_industry: Optional[str] = None,
        additional_context: Optional[str] = None,
    ) -> list[dict]:
        """Draft proposal blocks from the client details and calculator snapshot"""
        lines = [
            "Create a proposal for:",
            f"Client: {client_name}",
            f"Company: {client_company}" if client_company else "",
            f"Industry: {client_industry}" if client_industry else "",
            f"Calculator Type: {calculator_type}",
            f"Selected Services: {json.dumps(calculator_data, indent=2)}",
            f"Additional Context: {additional_context}" if additional_context else "",
            "",
            "Generate compelling proposal content that highlights the value of these services for this specific client.",
        ]
        user_prompt = "\n".join(line for line in lines if line is not None)

        logger.info(f"🤖 Generating proposal content for {client_name}")
        raw = await self._complete(
            [
                {"role": "system", "content": PROPOSAL_SYSTEM_PROMPT},
                {"role": "user", "content": user_prompt},
            ],
            temperature=0.7,
            json_mode=True,
        )
        try:
            parsed = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            logger.error(f"❌ AI returned invalid JSON: {raw[:200]}")
            raise AIServiceError("AI returned invalid JSON") from e

        blocks = parsed.get("blocks", []) if isinstance(parsed, dict) else []
        return blocks if isinstance(blocks, list) else []
