"""
AI suggestion flows backed by the Gemini ``generateContent`` REST endpoint.

- suggest_handicap: point handicaps that balance a match between players.
- suggest_matchups: a random draw of pairings, with a bye for odd player counts.

Both flows are stateless: build a prompt, ask for a JSON response, validate it.
"""
import json
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from scoreverse.core.config import settings
from scoreverse.core.exceptions import AISuggestionError
from scoreverse.schemas.ai_schemas import (
    SuggestHandicapInput,
    SuggestHandicapOutput,
    SuggestMatchupsInput,
    SuggestMatchupsOutput,
)

logger = logging.getLogger(__name__)

if not settings.GOOGLE_API_KEY:
    logger.warning("GOOGLE_API_KEY is not set. AI features will not work until it is configured.")

SERVICE_UNAVAILABLE_MESSAGE = "The AI service is currently unavailable. Please check the service configuration."
INVALID_KEY_MESSAGE = "The provided API key is invalid. Please check the application configuration."
NOT_CONFIGURED_MESSAGE = "AI features are not configured on this server."
HANDICAP_FAILED_MESSAGE = "Failed to get handicap suggestions. Please try again."
MATCHUPS_FAILED_MESSAGE = "An unexpected error occurred while generating matchups. Please try again later."


def build_handicap_prompt(data: SuggestHandicapInput) -> str:
    lines = [
        f'You are an expert game handicapper. Given the following player statistics for the game "{data.game_name}", '
        "suggest a point handicapping system for each player to make the game more fair and exciting. "
        "Only suggest a handicap if a player's abilities are noticeably skewed relative to the other players.",
        "",
        "Player Statistics:",
    ]
    for stat in data.player_stats:
        lines.append(
            f"- Player Name: {stat.player_name}, Win Rate: {stat.win_rate:.2f}, Average Score: {stat.average_score}"
        )
    lines += [
        "",
        "Output your suggestions as a JSON array. For each player, include the 'player_name' and a 'handicap' field "
        "representing the suggested handicap (positive or negative). Also include a short 'reason' for the suggestion. "
        "If no handicap is necessary for a player, do not include the 'handicap' or 'reason' fields for that player.",
        "",
        "Ensure that the output is valid JSON.",
    ]
    return "\n".join(lines)


def build_matchups_prompt(data: SuggestMatchupsInput) -> str:
    lines = [
        f'You are an enthusiastic tournament organizer for the game "{data.game_name}". '
        "Your task is to create a random draw for the players provided.",
    ]
    if data.language:
        lines.append(
            f"The output 'commentary' field MUST be in the language specified by the language code: {data.language}."
        )
    lines += ["", "Players:"]
    lines += [f"- {name}" for name in data.player_names]
    lines += [
        "",
        "Instructions:",
        "1. Shuffle the list of players randomly.",
        "2. Create pairs of players for the matchups.",
        "3. If there is an odd number of players, one player must receive a \"bye\" and will not be paired for this round. "
        "The 'bye' field in the output should contain their name. If the number of players is even, the 'bye' field should be null.",
        "4. Provide some fun, brief commentary about the draw, as if you were announcing it to the players.",
        "",
        "Return a JSON object with the fields 'pairings' (a list of objects with 'player1' and 'player2'), 'bye' and 'commentary'.",
    ]
    return "\n".join(lines)


def classify_error(status_code: int, body: str, fallback: str) -> str:
    """Maps an upstream failure to a message that is safe to show to users."""
    if "API_KEY_SERVICE_BLOCKED" in body or status_code == 403:
        return SERVICE_UNAVAILABLE_MESSAGE
    if "API_KEY_INVALID" in body:
        return INVALID_KEY_MESSAGE
    return fallback


class AIService:
    def __init__(self,
                 api_key: Optional[str] = None,
                 model: Optional[str] = None,
                 base_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.AI_MODEL
        self.base_url = (base_url or settings.AI_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.AI_TIMEOUT_SECONDS
        self.transport = transport # injected in tests

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    async def _generate_json(self, prompt: str, fallback_message: str) -> Any:
        if not self.enabled:
            raise AISuggestionError(NOT_CONFIGURED_MESSAGE)

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"responseMimeType": "application/json"},
        }
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
            except httpx.HTTPError as e:
                logger.error("AI request to %s failed: %s", self.model, e)
                raise AISuggestionError(fallback_message) from e

        if response.status_code >= 400:
            logger.error("AI request failed with status %s: %s", response.status_code, response.text[:500])
            raise AISuggestionError(classify_error(response.status_code, response.text, fallback_message))

        try:
            text = response.json()["candidates"][0]["content"]["parts"][0]["text"]
            return json.loads(text)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error("AI response could not be parsed: %s", e)
            raise AISuggestionError(fallback_message) from e

    async def suggest_handicap(self, data: SuggestHandicapInput) -> SuggestHandicapOutput:
        result = await self._generate_json(build_handicap_prompt(data), HANDICAP_FAILED_MESSAGE)
        # The model answers with a bare array; tolerate a wrapping object too
        if isinstance(result, dict):
            result = result.get("suggestions", [])
        try:
            return SuggestHandicapOutput(suggestions=result)
        except ValidationError as e:
            logger.error("AI handicap output did not match the schema: %s", e)
            raise AISuggestionError(HANDICAP_FAILED_MESSAGE) from e

    async def suggest_matchups(self, data: SuggestMatchupsInput) -> SuggestMatchupsOutput:
        result = await self._generate_json(build_matchups_prompt(data), MATCHUPS_FAILED_MESSAGE)
        try:
            return SuggestMatchupsOutput.model_validate(result)
        except ValidationError as e:
            logger.error("AI matchups output did not match the schema: %s", e)
            raise AISuggestionError(MATCHUPS_FAILED_MESSAGE) from e
