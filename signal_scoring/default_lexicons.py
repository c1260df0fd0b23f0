"""
Built-in lexicons.

Two lexicons share the same scoring mechanics:
- DEFECTION_LEXICON: competitor-defection signals in reviews and posts
- BUYING_INTENT_LEXICON: buying-intent signals in leads (hot/warm/cold groups)
"""

from typing import Dict

from .lexicon import CombinationBonus, Lexicon, SignalCategory

C = SignalCategory


DEFECTION_ENTRIES = [
    # High-intent switching (4-5)
    ("switching from", C.SWITCHING, 5),
    ("switch from", C.SWITCHING, 5),
    ("switching to", C.SWITCHING, 4),
    ("switched to", C.SWITCHING, 4),
    ("moved to", C.SWITCHING, 4),
    ("migrating to", C.SWITCHING, 5),
    ("moving away from", C.SWITCHING, 5),
    ("left for", C.SWITCHING, 5),

    # Alternative seeking (3-4)
    ("looking for alternative", C.ALTERNATIVE, 4),
    ("looking for an alternative", C.ALTERNATIVE, 4),
    ("evaluating alternatives", C.ALTERNATIVE, 4),
    ("considering alternatives", C.ALTERNATIVE, 4),
    ("exploring options", C.ALTERNATIVE, 3),
    ("better alternative", C.ALTERNATIVE, 3),
    ("cheaper alternative", C.ALTERNATIVE, 3),
    ("alternative to", C.ALTERNATIVE, 3),

    # Replacement intent (3-4)
    ("looking to replace", C.REPLACEMENT, 4),
    ("need to replace", C.REPLACEMENT, 4),
    ("replacing with", C.REPLACEMENT, 4),
    ("replace with", C.REPLACEMENT, 3),
    ("replacement", C.REPLACEMENT, 3),

    # Pain / frustration (2-4)
    ("tired of", C.PAIN, 4),
    ("fed up with", C.PAIN, 4),
    ("sick of", C.PAIN, 4),
    ("frustrated with", C.PAIN, 4),
    ("hate using", C.PAIN, 4),
    ("unhappy with", C.PAIN, 3),
    ("dissatisfied with", C.PAIN, 3),
    ("disappointed with", C.PAIN, 3),
    ("regret choosing", C.PAIN, 4),
    ("waste of money", C.PAIN, 4),
    ("not worth the", C.PAIN, 3),
    ("problems with", C.PAIN, 3),
    ("issues with", C.PAIN, 3),
    ("constantly crashes", C.PAIN, 3),
    ("buggy", C.PAIN, 2),
    ("unreliable", C.PAIN, 3),
    ("terrible", C.PAIN, 2),
    ("awful", C.PAIN, 2),
    ("terrible support", C.PAIN, 3),
    ("poor customer service", C.PAIN, 3),

    # Churn (3-5)
    ("canceling subscription", C.CHURN, 5),
    ("cancelling subscription", C.CHURN, 5),
    ("cancelled subscription", C.CHURN, 5),
    ("not renewing", C.CHURN, 5),
    ("won't renew", C.CHURN, 5),
    ("subscription ending", C.CHURN, 4),
    ("leaving for", C.CHURN, 5),
    ("stopped using", C.CHURN, 4),
    ("done with", C.CHURN, 4),

    # Timeline urgency (2-3)
    ("asap", C.TIMELINE, 3),
    ("need something asap", C.TIMELINE, 3),
    ("immediately", C.TIMELINE, 3),
    ("urgent", C.TIMELINE, 2),
    ("this quarter", C.TIMELINE, 2),
    ("end of month", C.TIMELINE, 2),
    ("this month", C.TIMELINE, 2),
    ("next month", C.TIMELINE, 2),

    # Comparison shopping (2-3)
    ("comparing with", C.COMPARISON, 3),
    ("versus", C.COMPARISON, 3),
    ("vs", C.COMPARISON, 2),
    ("looking at", C.COMPARISON, 2),
]

DEFECTION_COMBINATIONS = (
    CombinationBonus.of(10, C.SWITCHING, C.PAIN),
    CombinationBonus.of(15, C.CHURN, C.ALTERNATIVE),
    CombinationBonus.of(10, C.SWITCHING, (C.TIMELINE, C.URGENT)),
)


BUYING_INTENT_ENTRIES = [
    # Hot: urgency
    ("urgent", C.URGENT, 3),
    ("asap", C.URGENT, 3),
    ("immediately", C.URGENT, 3),
    ("this week", C.URGENT, 3),
    ("today", C.URGENT, 3),
    ("hiring now", C.URGENT, 3),
    ("start asap", C.URGENT, 3),
    ("need asap", C.URGENT, 3),
    ("quickly", C.URGENT, 3),
    ("emergency", C.URGENT, 3),
    ("critical", C.URGENT, 3),
    ("deadline", C.URGENT, 3),
    ("rush", C.URGENT, 3),

    # Hot: budget
    ("$50k", C.BUDGET, 3),
    ("$100k", C.BUDGET, 3),
    ("$500k", C.BUDGET, 3),
    ("$1m", C.BUDGET, 3),
    ("million", C.BUDGET, 3),
    ("budget approved", C.BUDGET, 3),
    ("allocated budget", C.BUDGET, 3),
    ("funding secured", C.BUDGET, 3),
    ("series a", C.BUDGET, 3),
    ("series b", C.BUDGET, 3),
    ("raised", C.BUDGET, 3),
    ("just funded", C.BUDGET, 3),

    # Hot: decision
    ("decision made", C.DECISION, 3),
    ("approved", C.DECISION, 3),
    ("ready to buy", C.DECISION, 3),
    ("ready to start", C.DECISION, 3),
    ("signed off", C.DECISION, 3),
    ("green light", C.DECISION, 3),
    ("go ahead", C.DECISION, 3),
    ("confirmed", C.DECISION, 3),

    # Hot: action
    ("book a call", C.ACTION, 3),
    ("schedule demo", C.ACTION, 3),
    ("send proposal", C.ACTION, 3),
    ("lets talk", C.ACTION, 3),
    ("let's talk", C.ACTION, 3),
    ("contact us", C.ACTION, 3),
    ("reach out", C.ACTION, 3),

    # Warm: interest
    ("interested", C.INTEREST, 1),
    ("looking for", C.INTEREST, 1),
    ("seeking", C.INTEREST, 1),
    ("searching for", C.INTEREST, 1),
    ("considering", C.INTEREST, 1),
    ("evaluating", C.INTEREST, 1),
    ("reviewing options", C.INTEREST, 1),

    # Warm: research
    ("comparing", C.RESEARCH, 1),
    ("research", C.RESEARCH, 1),
    ("explore", C.RESEARCH, 1),
    ("learn more", C.RESEARCH, 1),
    ("get quote", C.RESEARCH, 1),
    ("pricing", C.RESEARCH, 1),
    ("cost", C.RESEARCH, 1),
    ("how much", C.RESEARCH, 1),

    # Warm: timing
    ("next month", C.TIMELINE, 1),
    ("next quarter", C.TIMELINE, 1),
    ("soon", C.TIMELINE, 1),
    ("upcoming", C.TIMELINE, 1),
    ("planning to", C.TIMELINE, 1),
    ("thinking about", C.TIMELINE, 1),
    ("might need", C.TIMELINE, 1),

    # Cold: vague
    ("maybe", C.VAGUE, 1),
    ("possibly", C.VAGUE, 1),
    ("not sure", C.VAGUE, 1),
    ("just looking", C.VAGUE, 1),
    ("curious", C.VAGUE, 1),
    ("information", C.VAGUE, 1),
    ("general inquiry", C.VAGUE, 1),

    # Cold: future
    ("someday", C.FUTURE, 1),
    ("eventually", C.FUTURE, 1),
    ("in the future", C.FUTURE, 1),
    ("not now", C.FUTURE, 1),
    ("later", C.FUTURE, 1),
    ("next year", C.FUTURE, 1),
]

BUYING_INTENT_COMBINATIONS = (
    CombinationBonus.of(15, C.BUDGET, C.URGENT),
    CombinationBonus.of(10, C.DECISION, C.ACTION),
    CombinationBonus.of(10, (C.INTEREST, C.RESEARCH), C.BUDGET),
)


DEFECTION_LEXICON = Lexicon.build(DEFECTION_ENTRIES, DEFECTION_COMBINATIONS, name="defection")
BUYING_INTENT_LEXICON = Lexicon.build(BUYING_INTENT_ENTRIES, BUYING_INTENT_COMBINATIONS, name="buying_intent")

DEFAULT_LEXICONS: Dict[str, Lexicon] = {
    DEFECTION_LEXICON.name: DEFECTION_LEXICON,
    BUYING_INTENT_LEXICON.name: BUYING_INTENT_LEXICON,
}


def get_default_lexicon(name: str) -> Lexicon:
    """Look up a built-in lexicon by name."""
    try:
        return DEFAULT_LEXICONS[name]
    except KeyError:
        raise KeyError(f"Unknown lexicon '{name}'. Available: {', '.join(sorted(DEFAULT_LEXICONS))}") from None
