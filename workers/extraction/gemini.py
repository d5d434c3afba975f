"""
Gemini structured extraction client.

Sends the OCR text with an instruction and a JSON response schema, and
returns the parsed JSON object (or None if the reply cannot be parsed).
"""

import json
import logging
from typing import Any, Dict, Optional

import google.generativeai as genai

from backend.core.config import get_settings
from workers.extraction.prompts import FEATURE_RESPONSE_SCHEMA

logger = logging.getLogger(__name__)


class GeminiStructuredExtractor:
    """
    Handles the structured-output call to Gemini.

    The model is created on first use so the API key is only needed when
    an extraction actually runs.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        api_key: Optional[str] = None,
        temperature: Optional[float] = None,
        response_schema: Optional[Dict[str, Any]] = None,
    ):
        gemini_settings = get_settings().gemini
        self.model_name = model_name or gemini_settings.model
        self.api_key = api_key or gemini_settings.api_key
        self.temperature = gemini_settings.temperature if temperature is None else temperature
        self.response_schema = response_schema or FEATURE_RESPONSE_SCHEMA
        self._model = None

    def _configure_gemini(self) -> None:
        """Configure Gemini API with API key from settings."""
        if not self.api_key:
            raise ValueError(
                "GEMINI_API_KEY not set. Please set the GEMINI_API_KEY environment variable "
                "or add it to your .env file."
            )
        genai.configure(api_key=self.api_key)

    @property
    def model(self):
        if self._model is None:
            self._configure_gemini()
            self._model = genai.GenerativeModel(
                self.model_name,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=self.response_schema,
                    temperature=self.temperature,
                ),
            )
        return self._model

    def extract(self, prompt: str) -> Optional[Dict[str, Any]]:
        """
        Run one structured extraction call. Not retried.

        Returns:
            Parsed JSON object, or None if the reply was empty or not a JSON object

        Raises:
            Whatever the Gemini client raises for transport/API errors
        """
        logger.info(f"Calling Gemini ({self.model_name}) for structured extraction")
        response = self.model.generate_content(prompt)

        try:
            result_text = response.text
        except ValueError as e:
            # .text raises when the candidate was blocked or has no parts
            logger.warning(f"Gemini returned no text: {e}")
            return None

        if not result_text or not result_text.strip():
            logger.warning("Gemini returned an empty response")
            return None

        result_text = self._clean_json_response(result_text.strip())
        try:
            data = json.loads(result_text)
        except json.JSONDecodeError as e:
            logger.warning(f"JSON parse error in Gemini response: {e}")
            logger.debug(f"Raw response: {result_text[:500]}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Expected a JSON object from Gemini, got {type(data).__name__}")
            return None

        return data

    def _clean_json_response(self, text: str) -> str:
        """Remove markdown formatting from JSON response."""
        if text.startswith('```json'):
            text = text[7:]
        elif text.startswith('```'):
            text = text[3:]

        if text.endswith('```'):
            text = text[:-3]

        return text.strip()
