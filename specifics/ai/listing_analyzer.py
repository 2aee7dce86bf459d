"""
Listing analyzer - AI photo analysis and item-specifics suggestions.
"""
import json
import logging
from typing import Optional, Sequence

from openai import APIError
from pydantic import ValidationError

from ..config import get_config
from ..errors import AnalysisError
from ..models.aspect import AttributeDefinition
from ..models.listing import ListingAnalysis, SpecificsSuggestion
from .llm_client import LLMClient
from .prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    ANALYSIS_USER_PROMPT,
    RECONCILE_SYSTEM_PROMPT,
    build_reconcile_user_prompt,
)


logger = logging.getLogger(__name__)


class ListingAnalyzer:
    """
    Two model passes: an open analysis of the photos, then a grounded pass
    that sees the category's real aspects and options. The grounded answer is
    only a proposal; the reconciliation policy has the last word.
    """

    def __init__(self, llm_client: Optional[LLMClient] = None):
        self.llm = llm_client or LLMClient()
        self.config = get_config()

    def analyze(self, image_data_urls: Sequence[str]) -> ListingAnalysis:
        """
        Analyze all photos together.

        Raises:
            AnalysisError: If no images, no model, a failed request or an unusable answer
        """
        if not image_data_urls:
            raise AnalysisError("No images provided")
        if not self.llm.is_available():
            raise AnalysisError("LLM not available (no API key?)")

        logger.info(f"Analyzing {len(image_data_urls)} images")
        try:
            analysis = self.llm.call_with_schema(
                system_prompt=ANALYSIS_SYSTEM_PROMPT,
                user_prompt=ANALYSIS_USER_PROMPT,
                response_model=ListingAnalysis,
                temperature=self.config.openai.analysis_temperature,
                max_tokens=self.config.openai.analysis_max_tokens,
                image_urls=image_data_urls,
            )
        except APIError as e:
            raise AnalysisError(f"OpenAI request failed: {e}") from e
        except (ValidationError, json.JSONDecodeError) as e:
            raise AnalysisError(f"Invalid response format from OpenAI: {e}") from e

        logger.info(f"Analysis title: {analysis.title!r}")
        return analysis

    def suggest_specifics(
        self,
        analysis: ListingAnalysis,
        category_path: str,
        definitions: Sequence[AttributeDefinition],
    ) -> Optional[SpecificsSuggestion]:
        """
        Ask the model to fill the category's aspects.

        Returns:
            The proposal, or None when the model is unavailable or fails
        """
        if not definitions:
            return None
        if not self.llm.is_available():
            logger.warning("LLM not available, skipping specifics suggestion")
            return None

        limit = self.config.ebay.max_options_per_aspect
        aspects_for_model = []
        for d in definitions:
            schema = d.to_schema_dict()
            schema["options"] = schema["options"][:limit]  # keep prompt compact
            aspects_for_model.append(schema)

        user_prompt = build_reconcile_user_prompt(
            category_path=category_path,
            title=analysis.title,
            description=analysis.description,
            detected=analysis.detected.model_dump(by_alias=True, exclude_none=True),
            aspects_for_model=aspects_for_model,
        )

        try:
            suggestion = self.llm.call_with_schema(
                system_prompt=RECONCILE_SYSTEM_PROMPT,
                user_prompt=user_prompt,
                response_model=SpecificsSuggestion,
                temperature=self.config.openai.reconcile_temperature,
                max_tokens=self.config.openai.reconcile_max_tokens,
            )
        except (APIError, ValidationError, json.JSONDecodeError) as e:
            logger.warning(f"Specifics suggestion failed: {e}")
            return None

        logger.info(f"Model proposed {len(suggestion.final_specifics)} specifics")
        return suggestion
