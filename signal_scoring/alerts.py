"""
Alert rules and notification delivery for Signal Radar.

Turns signal profiles into alerts according to a per-user policy and hands
them to notifiers (webhook, log).
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .profile import SignalProfile

logger = logging.getLogger(__name__)


class AlertType(Enum):
    NEW_SIGNAL = "new_signal"
    HIGH_INTENT = "high_intent"
    CONTACT_NEEDED = "contact_needed"


class Severity(Enum):
    CRITICAL = "critical"   # Score >= 80
    WARNING = "warning"     # Score 60-79
    INFO = "info"


def severity_for(score: int) -> Severity:
    if score >= 80:
        return Severity.CRITICAL
    if score >= 60:
        return Severity.WARNING
    return Severity.INFO


@dataclass
class Alert:
    """An alert ready for delivery."""
    alert_type: AlertType
    severity: Severity
    message: str
    score: Optional[int] = None
    source_id: Optional[str] = None
    sent_via: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "alert_type": self.alert_type.value,
            "severity": self.severity.value,
            "message": self.message,
            "score": self.score,
            "source_id": self.source_id,
            "sent_via": self.sent_via,
            "created_at": self.created_at.isoformat(),
        }


def parse_company_size(size: Optional[str]) -> int:
    """Lower bound of a company size string ("51-200" -> 51, "1,000+" -> 1000)."""
    if not size:
        return 0
    match = re.search(r"\d+", size.replace(",", ""))
    return int(match.group(0)) if match else 0


@dataclass
class AlertPolicy:
    """
    Per-user alert filter.

    An empty policy lets every profile through.
    """
    min_score: int = 0
    target_industries: List[str] = field(default_factory=list)
    exclude_industries: List[str] = field(default_factory=list)
    min_company_size: Optional[str] = None

    def should_alert(self, profile: SignalProfile) -> bool:
        if profile.score < self.min_score:
            return False

        industry = profile.source.industry
        if self.target_industries and industry not in self.target_industries:
            return False
        if self.exclude_industries and industry in self.exclude_industries:
            return False

        if self.min_company_size and profile.source.company_size:
            if parse_company_size(profile.source.company_size) < parse_company_size(self.min_company_size):
                return False

        return True


def render_alert_message(profile: SignalProfile) -> str:
    """Plain-text alert body."""
    source = profile.source
    extraction = profile.extraction
    lines = [
        "New Intent Signal Detected",
        "",
        f"Company: {source.company_name or 'Unknown'}",
        f"Contact: {source.contact_name or 'Unknown'}",
        f"Industry: {source.industry or 'Unknown'}",
        f"Company Size: {source.company_size or 'Unknown'}",
        "",
        f"Intent Score: {profile.score}/100",
        f"Priority: {profile.priority.value}",
        f"Current Tool: {source.current_tool or 'Unknown'}",
        f"Stage: {extraction.stage.value}",
        f"Timeline: {extraction.timeline or 'Unknown'}",
        "",
        "Pain Points:",
        *[f"  - {point}" for point in extraction.pain_points],
        "",
        f"Source: {source.source or 'Unknown'}",
    ]
    return "\n".join(lines)


def build_alert(profile: SignalProfile) -> Alert:
    return Alert(
        alert_type=AlertType.NEW_SIGNAL,
        severity=severity_for(profile.score),
        message=render_alert_message(profile),
        score=profile.score,
        source_id=profile.source.source_id,
    )


def build_high_intent_alert(profile: SignalProfile) -> Alert:
    company = profile.source.company_name or "Unknown company"
    return Alert(
        alert_type=AlertType.HIGH_INTENT,
        severity=Severity.CRITICAL,
        message=(
            f"HIGH INTENT: {company} has an intent score of {profile.score}/100. "
            "Immediate outreach recommended."
        ),
        score=profile.score,
        source_id=profile.source.source_id,
    )


def build_contact_needed_alert(profiles: Sequence[SignalProfile]) -> Optional[Alert]:
    """Reminder for high-intent profiles nobody has contacted yet."""
    if not profiles:
        return None
    return Alert(
        alert_type=AlertType.CONTACT_NEEDED,
        severity=Severity.WARNING,
        message=f"You have {len(profiles)} high-intent leads that haven't been contacted yet.",
    )


# ── Notifiers ─────────────────────────────────────────


class AlertNotifier(ABC):
    """Delivery channel for alerts."""

    channel = "base"

    @abstractmethod
    async def send(self, alert: Alert, profile: Optional[SignalProfile] = None) -> bool:
        """Deliver an alert. Returns True when the channel accepted it."""


class LoggingNotifier(AlertNotifier):
    """Writes alerts to the application log."""

    channel = "log"

    async def send(self, alert: Alert, profile: Optional[SignalProfile] = None) -> bool:
        logger.info(f"[{alert.severity.value}] {alert.alert_type.value}: {alert.message.splitlines()[0]}")
        return True


class WebhookNotifier(AlertNotifier):
    """POSTs alerts as JSON to a webhook URL."""

    channel = "webhook"

    def __init__(
        self,
        webhook_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the webhook notifier.

        Args:
            webhook_url: Target URL
            api_key: Optional key sent as X-API-Key
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.webhook_url = webhook_url
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    async def send(self, alert: Alert, profile: Optional[SignalProfile] = None) -> bool:
        payload = {
            "alert": alert.to_dict(),
            "profile": profile.to_dict() if profile else None,
        }
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["X-API-Key"] = self.api_key

        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                response = await client.post(self.webhook_url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Webhook alert delivery failed: {e}")
            return False

        if response.status_code in (200, 201, 202):
            logger.info(f"Webhook alert delivered ({alert.alert_type.value}, score={alert.score})")
            return True

        logger.error(f"Webhook alert rejected: status={response.status_code} body={response.text[:500]}")
        return False


class AlertDispatcher:
    """
    Decides which alerts a profile triggers and delivers them.

    - Profiles without a signal never alert
    - A new-signal alert is sent when the policy allows it
    - A high-intent alert is always sent at or above ``high_intent_score``
    """

    def __init__(
        self,
        notifiers: Sequence[AlertNotifier],
        policy: Optional[AlertPolicy] = None,
        high_intent_score: int = 80,
    ):
        self.notifiers = list(notifiers)
        self.policy = policy or AlertPolicy()
        self.high_intent_score = high_intent_score

    def plan(self, profile: SignalProfile) -> List[Alert]:
        """Alerts the profile would trigger, without sending them."""
        if not profile.classification.has_signal:
            return []

        alerts = []
        if self.policy.should_alert(profile):
            alerts.append(build_alert(profile))
        else:
            logger.info(f"Alert for {profile.source.source_id or 'profile'} suppressed by policy")

        if profile.score >= self.high_intent_score:
            alerts.append(build_high_intent_alert(profile))
        return alerts

    async def dispatch(self, profile: SignalProfile) -> List[Alert]:
        """Plan and deliver alerts; each alert records the channels that accepted it."""
        alerts = self.plan(profile)
        for alert in alerts:
            await self._deliver(alert, profile)
        return alerts

    async def remind(self, profiles: Sequence[SignalProfile]) -> Optional[Alert]:
        """Send one contact-needed reminder covering every high-intent profile, or None when there are none."""
        pending = [p for p in profiles if p.classification.has_signal and p.score >= self.high_intent_score]
        alert = build_contact_needed_alert(pending)
        if alert is None:
            return None
        await self._deliver(alert)
        logger.info(f"Contact reminder sent for {len(pending)} of {len(profiles)} profiles")
        return alert

    async def _deliver(self, alert: Alert, profile: Optional[SignalProfile] = None):
        for notifier in self.notifiers:
            if await notifier.send(alert, profile):
                alert.sent_via.append(notifier.channel)
