"""
Grounding demo scenario.

A small financial dataset with planted problems, plus an AI "analysis"
of it that fabricates and contradicts. Lets a user try the audit without
uploading anything.

PLANTED PROBLEMS:
- income jumps to 9,999,999 for ids 13-14 (system sentinel value)
- credit_score drops from 600-799 to 300-599 after id 8 (population shift)
- the AI text claims scores above 850 and calls the sentinel income legitimate

With only 15 rows, the demo always lands on the INSUFFICIENT badge: the
data-volume veto runs before any other judgment.
"""

import random

DEMO_FILE_LABEL = "financial_audit_demo.json"

DEMO_ROWS = 15
DEMO_SEED = 42

DEMO_AI_TEXT = (
    "Based on the analysis of customer data, we observed that high-income "
    "individuals typically have a credit score above 850, which is impossible "
    "as FICO scores cap at 850. The dataset shows a stable trend in income, "
    "despite the clear spike in the last quartile. We recommend approving loans "
    "for all users with ID > 40 because their income is listed as 9,999,999, "
    "which is definitely a legitimate value and not a system error."
)


def build_demo_dataset(seed: int = DEMO_SEED, num_rows: int = DEMO_ROWS) -> list[dict]:
    """Build the demo rows; the same seed always gives the same rows."""
    rng = random.Random(seed)
    rows = []
    for i in range(num_rows):
        rows.append({
            "id": i,
            "customer_age": rng.randint(18, 79),
            "income": 9999999 if i > 12 else rng.randint(30000, 129999),
            "credit_score": rng.randint(600, 799) if i <= 8 else rng.randint(300, 599),
            "purchase_amount": round(rng.uniform(0, 1000), 2),
        })
    return rows
