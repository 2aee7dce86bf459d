"""
eBay OAuth + Taxonomy API client with retry logic and schema normalization.
"""
import logging
import time
from typing import Any, Callable, Optional, Sequence

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from ..config import EbayConfig, get_config
from ..errors import EbayApiError
from ..models.aspect import AttributeDefinition
from ..models.listing import CategorySuggestion, CategorySuggestions


logger = logging.getLogger(__name__)


class TokenCache:
    """
    Holds one application access token until it expires.
    Injected into the client so expiry is explicit and testable.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._token: Optional[str] = None
        self._expires_at = 0.0

    def get(self) -> Optional[str]:
        if self._token and self._clock() < self._expires_at:
            return self._token
        return None

    def set(self, token: str, expires_in: float) -> None:
        self._token = token
        self._expires_at = self._clock() + max(0.0, expires_in)

    def clear(self) -> None:
        self._token = None
        self._expires_at = 0.0


class EbayTaxonomyClient:
    """
    Client-credentials OAuth plus the two Taxonomy calls the listing flow needs:
    category suggestions for a title and item aspects for a category.
    """

    TOKEN_PATH = "/identity/v1/oauth2/token"
    SUGGESTIONS_PATH = "/commerce/taxonomy/v1/category_tree/{tree_id}/get_category_suggestions"
    ASPECTS_PATH = "/commerce/taxonomy/v1/category_tree/{tree_id}/get_item_aspects_for_category"

    def __init__(
        self,
        config: Optional[EbayConfig] = None,
        session: Optional[requests.Session] = None,
        token_cache: Optional[TokenCache] = None,
    ):
        self.config = config or get_config().ebay
        self.session = session or requests.Session()
        self.token_cache = token_cache or TokenCache()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type((requests.RequestException, ConnectionError)),
        before_sleep=lambda retry_state: logger.warning(
            f"Retry attempt {retry_state.attempt_number}"
        ),
        reraise=True,
    )
    def _send(self, method: str, path: str, **kwargs) -> requests.Response:
        """Send a request; 5xx responses raise so they are retried."""
        kwargs.setdefault("timeout", self.config.request_timeout)
        response = self.session.request(method, f"{self.config.api_base}{path}", **kwargs)
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    def get_access_token(self) -> str:
        """
        Application token via client credentials, cached until expiry.

        Raises:
            EbayApiError: Missing credentials or a rejected token request
        """
        cached = self.token_cache.get()
        if cached:
            return cached

        if not self.config.client_id or not self.config.client_secret:
            raise EbayApiError("eBay credentials not configured")

        try:
            response = self._send(
                "POST",
                self.TOKEN_PATH,
                auth=(self.config.client_id, self.config.client_secret),
                headers={"Content-Type": "application/x-www-form-urlencoded"},
                data={"grant_type": "client_credentials", "scope": self.config.oauth_scope},
            )
        except requests.RequestException as e:
            raise EbayApiError(f"OAuth request failed: {e}") from e

        if not response.ok:
            raise EbayApiError(f"OAuth error: {response.text}", status_code=response.status_code)

        payload = self._json(response, "OAuth")
        token = payload.get("access_token")
        if not token:
            raise EbayApiError("OAuth response had no access_token")

        expires_in = float(payload.get("expires_in", 7200)) - self.config.token_expiry_margin
        self.token_cache.set(token, expires_in)
        logger.info(f"Fetched eBay application token (expires in {payload.get('expires_in')}s)")
        return token

    def _get_json(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        token = self.get_access_token()
        try:
            response = self._send(
                "GET",
                path.format(tree_id=self.config.category_tree_id),
                params=params,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Accept": "application/json",
                },
            )
        except requests.RequestException as e:
            raise EbayApiError(f"Taxonomy request failed: {e}") from e

        if response.status_code == 401:
            self.token_cache.clear()
        if not response.ok:
            raise EbayApiError(
                f"Taxonomy API error {response.status_code}: {response.text}",
                status_code=response.status_code,
            )
        return self._json(response, "Taxonomy")

    @staticmethod
    def _json(response: requests.Response, what: str) -> dict[str, Any]:
        """Decoded JSON object body; anything else is an EbayApiError."""
        try:
            payload = response.json()
        except requests.JSONDecodeError as e:
            raise EbayApiError(f"{what} response is not JSON: {e}", status_code=response.status_code) from e
        if not isinstance(payload, dict):
            raise EbayApiError(f"{what} response is not a JSON object", status_code=response.status_code)
        return payload

    def fallback_category(self) -> CategorySuggestions:
        """Category used when the taxonomy cannot answer."""
        name = self.config.fallback_category_name
        top = CategorySuggestion(id=self.config.fallback_category_id, name=name, path=name)
        return CategorySuggestions(
            category_id=top.id,
            category_name=top.name,
            category_path=top.path,
            suggestions=[top],
            is_fallback=True,
        )

    def suggest_categories(self, title: str, keywords: Sequence[str] = ()) -> CategorySuggestions:
        """
        Best category for a listing title plus up to 3 alternatives.
        Never raises: any failure yields the fallback category.
        """
        query = (title or "").strip() or " ".join(k for k in keywords if k).strip()
        if not query:
            logger.warning("Empty title, using fallback category")
            return self.fallback_category()

        logger.info(f"Requesting category suggestions for: {query!r}")
        try:
            data = self._get_json(self.SUGGESTIONS_PATH, {"q": query})
        except EbayApiError as e:
            logger.error(f"Category suggestion failed: {e}")
            return self.fallback_category()

        suggestions = [
            s for s in (self._parse_suggestion(raw) for raw in data.get("categorySuggestions") or [])
            if s is not None
        ]
        if not suggestions:
            logger.warning("No categories found, using fallback")
            return self.fallback_category()

        top = suggestions[0]
        logger.info(f"Found suggestions: {[s.name for s in suggestions[:3]]}")
        return CategorySuggestions(
            category_id=top.id,
            category_name=top.name,
            category_path=top.path,
            suggestions=suggestions[:3],
        )

    def _parse_suggestion(self, raw: dict[str, Any]) -> Optional[CategorySuggestion]:
        category = raw.get("category") or {}
        category_id = category.get("categoryId")
        name = category.get("categoryName")
        if not category_id or not name:
            return None

        # Ancestors come nearest-first
        ancestors = [
            a.get("categoryName")
            for a in reversed(raw.get("categoryTreeNodeAncestors") or [])
            if a.get("categoryName")
        ]
        return CategorySuggestion(
            id=str(category_id),
            name=name,
            path=" > ".join(ancestors + [name]),
        )

    def get_category_aspects(self, category_id: str) -> list[AttributeDefinition]:
        """
        Item aspects for a leaf category as AttributeDefinitions.

        Raises:
            EbayApiError: If the taxonomy call fails
        """
        data = self._get_json(self.ASPECTS_PATH, {"category_id": category_id})
        definitions = self.parse_aspects(data.get("aspects") or [])
        logger.info(f"Category {category_id}: {len(definitions)} aspects")
        return definitions

    @staticmethod
    def parse_aspects(raw_aspects: Sequence[dict[str, Any]]) -> list[AttributeDefinition]:
        """Map Taxonomy aspect JSON onto definitions; duplicate names keep the first."""
        definitions: list[AttributeDefinition] = []
        seen: set[str] = set()

        for raw in raw_aspects:
            name = (raw.get("localizedAspectName") or "").strip()
            if not name or name.lower() in seen:
                if name:
                    logger.warning(f"Skipping duplicate aspect {name!r}")
                continue
            seen.add(name.lower())

            constraint = raw.get("aspectConstraint") or {}
            selection_only = constraint.get("aspectMode") == "SELECTION_ONLY"

            options: list[str] = []
            for value in raw.get("aspectValues") or []:
                label = value.get("localizedValue")
                if label and label not in options:
                    options.append(label)

            definitions.append(AttributeDefinition(
                name=name,
                required=bool(constraint.get("aspectRequired")),
                multi=constraint.get("itemToAspectCardinality") == "MULTI",
                selection_only=selection_only,
                free_text_allowed=not selection_only,
                options=options,
            ))

        return definitions
