"""
Pipeline orchestrator - photos in, reconciled listing draft out.
"""
import json
import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Sequence

import redis
import requests

from ..ai.listing_analyzer import ListingAnalyzer
from ..client.ebay import EbayTaxonomyClient
from ..client.images import fetch_image_data_urls
from ..client.session_store import SessionStore
from ..client.webhook import forward_to_webhook
from ..config import get_config
from ..errors import AnalysisError, EbayApiError
from ..models.aspect import AttributeDefinition
from ..models.facts import DetectedFacts
from ..models.listing import CategorySuggestions, ListingResult
from ..reconcile.facts_builder import facts_from_analysis
from ..reconcile.heuristics import apply_relational_defaults
from ..reconcile.policy import ReconciliationPolicy


logger = logging.getLogger(__name__)


def reconcile_request(
    definitions: Sequence[Mapping[str, Any]],
    facts: Optional[Mapping[str, Any]] = None,
    evidence: Optional[Sequence[str]] = None,
) -> list[dict[str, Any]]:
    """
    JSON in, JSON out: [{name, value, note?}] for plain definition/fact dicts.

    Raises:
        SchemaError: If the definitions are malformed
    """
    config = get_config()
    detected = DetectedFacts(values=dict(facts or {}), evidence=list(evidence or []))
    policy = ReconciliationPolicy(multi_select_cap=config.reconcile.multi_select_cap)
    return [a.to_output() for a in policy.reconcile(definitions, detected)]


def run_listing_pipeline(
    image_urls: Sequence[str],
    session_id: Optional[str] = None,
    analyzer: Optional[ListingAnalyzer] = None,
    taxonomy: Optional[EbayTaxonomyClient] = None,
    store: Optional[SessionStore] = None,
    image_fetcher: Callable[..., list[str]] = fetch_image_data_urls,
    webhook_url: Optional[str] = None,
) -> ListingResult:
    """
    Run the full listing flow.

    Pipeline steps:
    1. Download photos as data URLs
    2. Analyze photos (title, description, detected signals)
    3. Suggest a category and fetch its aspects
    4. Ask the model to propose aspect values
    5. Reconcile proposals and detected facts against the aspects
    6. Fill blanks from relational cues
    7. Store the draft in the session cache and notify the webhook

    Args:
        image_urls: Hosted photo URLs (first 12 are used)
        session_id: Existing session to write to (new one if None)
        store: Session cache; drafts are not stored when None

    Returns:
        ListingResult ready for the editor

    Raises:
        AnalysisError: If there are no photos, they cannot be downloaded, or the analysis is unusable
    """
    config = get_config()
    if not image_urls:
        raise AnalysisError("No images provided")

    analyzer = analyzer or ListingAnalyzer()
    taxonomy = taxonomy or EbayTaxonomyClient()
    warnings: list[str] = []

    # Step 1-2: photos -> analysis
    logger.info(f"Step 1: Downloading {min(len(image_urls), config.reconcile.max_images)} images")
    try:
        data_urls = image_fetcher(
            image_urls,
            limit=config.reconcile.max_images,
            timeout=config.reconcile.image_timeout,
        )
    except requests.RequestException as e:
        raise AnalysisError(f"Could not download images: {e}") from e
    logger.info("Step 2: Analyzing photos")
    analysis = analyzer.analyze(data_urls)

    # Step 3: category + aspects, falling back to the default category
    logger.info("Step 3: Category and aspects")
    categories: CategorySuggestions = taxonomy.suggest_categories(analysis.title, analysis.keywords)
    definitions: list[AttributeDefinition] = []
    try:
        definitions = taxonomy.get_category_aspects(categories.category_id)
    except EbayApiError as e:
        logger.error(f"Aspect lookup failed, using fallback category: {e}")
        warnings.append(f"Category schema unavailable: {e}")
        categories = taxonomy.fallback_category()
    category_path = categories.category_path or categories.category_name

    # Step 4: model proposal
    suggestion = None
    if config.enable_ai_suggestions and definitions:
        logger.info("Step 4: Requesting specifics suggestion")
        suggestion = analyzer.suggest_specifics(analysis, category_path, definitions)
        if suggestion is None:
            warnings.append("Model suggestion unavailable; used detected facts only")

    # Step 5: reconcile
    logger.info(f"Step 5: Reconciling {len(definitions)} aspects")
    facts = facts_from_analysis(analysis, suggestion, definitions, category_path)
    policy = ReconciliationPolicy(multi_select_cap=config.reconcile.multi_select_cap)
    attributes = policy.reconcile(definitions, facts)

    # Step 6: relational defaults
    if config.enable_relational_defaults:
        text = " ".join([
            analysis.title,
            analysis.description,
            json.dumps(analysis.detected.model_dump(by_alias=True, exclude_none=True)),
        ])
        attributes = apply_relational_defaults(attributes, definitions, text)

    filled = sum(1 for a in attributes if not a.is_blank)
    logger.info(f"Filled {filled}/{len(attributes)} aspects")

    result = ListingResult(
        session_id=session_id,
        title=analysis.title,
        description=analysis.description,
        keywords=analysis.keywords,
        detected=analysis.detected,
        category=categories.top,
        category_suggestions=categories.suggestions,
        category_specifics_schema=definitions,
        item_specifics=attributes,
        notes=suggestion.notes if suggestion else "",
        images_processed=len(data_urls),
        warnings=warnings,
    )

    # Step 7: persist + notify
    if store is not None:
        result.session_id = session_id or store.new_session_id()
        try:
            store.save(result.to_output(), result.session_id)
        except redis.RedisError as e:
            logger.error(f"Session store failed: {e}")
            result.warnings.append("Draft not cached; session link will not work")

    webhook_url = webhook_url if webhook_url is not None else config.webhook.url
    if webhook_url:
        forward_to_webhook(
            webhook_url,
            {
                "session_id": result.session_id,
                "analysis": result.to_output(),
                "image_urls": list(image_urls),
                "timestamp": datetime.now().isoformat(),
            },
            timeout=config.webhook.timeout,
        )

    return result
