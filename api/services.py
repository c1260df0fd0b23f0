"""
Service initialization and dependency injection for Signal Radar API.

Creates and manages the classifier, extractor and alert instances used by the API.
"""

import logging
from typing import Dict, List, Optional

from config.settings import get_settings, Settings
from signal_scoring.alerts import AlertDispatcher, AlertNotifier, AlertPolicy, LoggingNotifier, WebhookNotifier
from signal_scoring.default_lexicons import DEFAULT_LEXICONS, get_default_lexicon
from signal_scoring.lexicon import Lexicon, load_lexicon_file
from signal_scoring.signal_classifier import SignalClassifier, TierScheme, WeightedScheme
from signal_scoring.signal_extractor import SignalExtractor

logger = logging.getLogger(__name__)


class Services:
    """Container for all application services."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.lexicons: Dict[str, Lexicon] = {}
        self.weighted_lexicon_name: Optional[str] = None
        self.classifier: Optional[SignalClassifier] = None
        self.tier_classifier: Optional[SignalClassifier] = None
        self.extractor: Optional[SignalExtractor] = None
        self.dispatcher: Optional[AlertDispatcher] = None
        self._initialized = False

    def initialize(self, settings: Optional[Settings] = None):
        """Initialize all services."""
        if self._initialized:
            return

        self.settings = settings or get_settings()
        self._init_lexicons()
        self._init_classifiers()
        self._init_alerts()
        self._initialized = True
        logger.info("All services initialized successfully")

    def _init_lexicons(self):
        """Built-in lexicons, plus the configured lexicon file when set (it becomes the weighted default)."""
        self.lexicons = dict(DEFAULT_LEXICONS)
        if self.settings.lexicon_file:
            custom = load_lexicon_file(self.settings.lexicon_file)
            self.lexicons[custom.name] = custom
            self.weighted_lexicon_name = custom.name
        else:
            self.weighted_lexicon_name = get_default_lexicon(self.settings.default_lexicon).name

    def _init_classifiers(self):
        """Initialize the weighted and three-tier classifiers."""
        s = self.settings
        options = s.classify_options()

        weighted_lexicon = self.lexicons[self.weighted_lexicon_name]

        self.classifier = SignalClassifier(lexicon=weighted_lexicon, scheme=WeightedScheme(), options=options)
        self.tier_classifier = SignalClassifier(scheme=TierScheme(), options=options)
        self.extractor = SignalExtractor()
        logger.info(
            f"Classifiers ready: weighted/{weighted_lexicon.name} ({len(weighted_lexicon)} entries), "
            f"tier/{self.tier_classifier.lexicon.name}"
        )

    def _init_alerts(self):
        """Initialize alert notifiers."""
        s = self.settings
        notifiers: List[AlertNotifier] = [LoggingNotifier()]
        if s.alert_webhook_url:
            notifiers.append(WebhookNotifier(
                webhook_url=s.alert_webhook_url,
                api_key=s.alert_webhook_api_key,
                timeout=s.alert_webhook_timeout,
            ))
            logger.info("Webhook alerts enabled")

        self.dispatcher = AlertDispatcher(
            notifiers=notifiers,
            policy=AlertPolicy(min_score=s.alert_min_score),
            high_intent_score=s.high_intent_score,
        )

    @property
    def is_ready(self) -> bool:
        return self._initialized and self.classifier is not None

    def health(self) -> dict:
        """Return health status of all services."""
        return {
            "initialized": self._initialized,
            "classifier": self.classifier is not None,
            "tier_classifier": self.tier_classifier is not None,
            "extractor": self.extractor is not None,
            "lexicons": sorted(self.lexicons),
            "notifiers": [n.channel for n in self.dispatcher.notifiers] if self.dispatcher else [],
        }


# Singleton
_services = Services()


def get_services() -> Services:
    """Get the global services instance."""
    if not _services._initialized:
        _services.initialize()
    return _services


def initialize_services(settings: Optional[Settings] = None):
    """Initialize all services (called at startup)."""
    _services.initialize(settings)
