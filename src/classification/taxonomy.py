"""Closed retail taxonomy: Category -> EventType -> SubType.

The table below is the single source of truth. The prompt is rendered from
it and the validator checks generated triples against it; nothing outside
this table is a valid classification.
"""

from __future__ import annotations

from typing import NamedTuple


class TaxonomyEntry(NamedTuple):
    category: str
    event_type: str
    sub_type: str


TAXONOMY: dict[str, dict[str, tuple[str, ...]]] = {
    "Transactional": {
        "Check-out Issues": (
            "Scanning/Bar-code Issues",
            "Incorrect Shelf Tags",
            "POS Hardware Malfunction/Payment Issues",
            "Pricing Confusion",
            "Cash Handling",
        ),
    },
    "Operational": {
        "Inventory Related": (
            "Out of Stock",
            "Misplaced Items",
            "Damaged/Expired Products",
            "Restocking Delays",
        ),
        "Facility Issue": (
            "Cleanliness/Spills",
            "Equipment Malfunction",
            "Temperature/HVAC",
            "Lighting/Power Issues",
        ),
        "Compliance Issues": (
            "Age-Restricted Sales",
            "Safety Violations",
            "Policy Non-adherence",
        ),
        "Staffing Related": (
            "Understaffing",
            "Shift Handover",
            "Employee Conduct",
        ),
    },
    "Customer Service": {
        "Cashier Engagement": (
            "Greeting",
            "Courtesy/Politeness",
            "Assistance Offered",
        ),
        "Complaint Handling": (
            "Product Complaint",
            "Service Complaint",
            "Refund/Return Request",
            "Escalation to Manager",
        ),
        "Lost & Found": (
            "Lost Item Reported",
            "Found Item Handed In",
        ),
        "Service-Oriented Events": (
            "Product Inquiry",
            "Store Navigation Help",
            "Special Request",
        ),
    },
    "Security & Risk": {
        "Suspicious Behaviour": (
            "Loitering",
            "Concealment",
            "Unusual Activity",
        ),
        "Conflict": (
            "Verbal Altercation",
            "Physical Altercation",
            "Customer-Employee Dispute",
        ),
        "Accidents": (
            "Slip/Trip/Fall",
            "Injury",
        ),
        "Emergency Assistance": (
            "Medical Emergency",
            "Fire/Evacuation",
            "Police Assistance",
        ),
        "Theft-Robbery": (
            "Shoplifting",
            "Armed Robbery",
            "Employee Theft",
        ),
    },
    "Promotional & Marketing": {
        "Up-sell/Cross-sell": (
            "Product Recommendation",
            "Add-on Offer",
        ),
        "Promotions": (
            "Discount Announcement",
            "Coupon Redemption",
            "Seasonal Offer",
        ),
        "Loyalty Program": (
            "Enrollment",
            "Points Redemption",
            "Membership Inquiry",
        ),
    },
}


def all_entries() -> list[TaxonomyEntry]:
    """Every valid triple, in table order."""
    return [
        TaxonomyEntry(category, event_type, sub_type)
        for category, events in TAXONOMY.items()
        for event_type, sub_types in events.items()
        for sub_type in sub_types
    ]


_ENTRIES: frozenset[TaxonomyEntry] = frozenset(all_entries())


def is_known(category: str, event_type: str, sub_type: str) -> bool:
    """Exact-match lookup of a triple in the closed taxonomy."""
    return TaxonomyEntry(category, event_type, sub_type) in _ENTRIES


def render_taxonomy() -> str:
    """Numbered, indented rendering of the table for prompts."""
    lines: list[str] = []
    for number, (category, events) in enumerate(TAXONOMY.items(), start=1):
        lines.append(f"{number}. Category: {category}")
        for event_type, sub_types in events.items():
            lines.append(f"   - EventType: {event_type}")
            for sub_type in sub_types:
                lines.append(f"       * SubType: {sub_type}")
    return "\n".join(lines)
