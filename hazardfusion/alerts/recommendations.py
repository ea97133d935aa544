"""Public safety recommendations per hazard type and severity."""

from __future__ import annotations

from typing import Dict, List

from hazardfusion.models.reports import HazardType, Severity

RECOMMENDATIONS: Dict[str, Dict[str, List[str]]] = {
    HazardType.FLOODING: {
        Severity.HIGH: [
            "Evacuate low-lying areas immediately",
            "Move to higher ground",
            "Avoid walking or driving through flood waters",
            "Contact emergency services if trapped",
        ],
        Severity.MODERATE: [
            "Monitor water levels",
            "Prepare emergency supplies",
            "Avoid flood-prone areas",
            "Stay informed through official channels",
        ],
        Severity.LOW: [
            "Be aware of rising water levels",
            "Avoid unnecessary travel in affected areas",
        ],
    },
    HazardType.STORM_SURGE: {
        Severity.HIGH: [
            "Evacuate coastal areas immediately",
            "Move inland to higher ground",
            "Do not return until authorities declare safe",
        ],
        Severity.MODERATE: [
            "Prepare for possible evacuation",
            "Secure loose outdoor items",
            "Stay away from beaches",
        ],
        Severity.LOW: [
            "Monitor weather updates",
            "Avoid coastal areas during high tide",
        ],
    },
    HazardType.HIGH_WAVES: {
        Severity.HIGH: [
            "Stay away from beaches and coastal areas",
            "Do not attempt water activities",
            "Heed all warning signs",
        ],
        Severity.MODERATE: [
            "Exercise caution near water",
            "Avoid swimming",
            "Keep children away from shoreline",
        ],
        Severity.LOW: [
            "Be cautious near water",
            "Check conditions before water activities",
        ],
    },
    HazardType.EROSION: {
        Severity.HIGH: [
            "Evacuate cliff-top areas",
            "Stay away from eroding coastline",
            "Report any structural damage",
        ],
        Severity.MODERATE: [
            "Avoid walking near cliff edges",
            "Monitor for signs of land movement",
        ],
        Severity.LOW: [
            "Be aware of unstable ground",
            "Report any visible erosion",
        ],
    },
    HazardType.RIP_CURRENT: {
        Severity.HIGH: [
            "Do not enter the water",
            "If caught, swim parallel to shore",
            "Signal for help if needed",
        ],
        Severity.MODERATE: [
            "Swim only in designated areas",
            "Stay close to shore",
            "Swim with a buddy",
        ],
        Severity.LOW: [
            "Be aware of current conditions",
            "Know how to escape rip currents",
        ],
    },
    HazardType.TSUNAMI: {
        Severity.HIGH: [
            "Move to high ground immediately",
            "Do not wait for official warning",
            "Stay away from coast until all-clear",
        ],
        Severity.MODERATE: [
            "Be prepared to evacuate",
            "Know your evacuation route",
            "Monitor official channels",
        ],
        Severity.LOW: [
            "Be aware of tsunami signs",
            "Know evacuation procedures",
        ],
    },
    HazardType.POLLUTION: {
        Severity.HIGH: [
            "Avoid contact with affected water",
            "Do not consume seafood from area",
            "Report to environmental authorities",
        ],
        Severity.MODERATE: [
            "Limit exposure to affected areas",
            "Wash thoroughly after any contact",
        ],
        Severity.LOW: [
            "Be aware of water quality",
            "Follow local advisories",
        ],
    },
    HazardType.OTHER: {
        Severity.HIGH: [
            "Follow official guidance",
            "Stay informed",
            "Prepare emergency supplies",
        ],
        Severity.MODERATE: [
            "Monitor situation",
            "Be prepared to act",
        ],
        Severity.LOW: [
            "Stay aware of conditions",
        ],
    },
}


def generate_recommendations(hazard_type: str, severity: str) -> List[str]:
    """Ordered safety recommendations for a hazard at a given severity.

    Unknown hazard types use the generic "other" advice; unknown severities
    use the moderate advice.

    Returns:
        A new list, safe for the caller to modify.
    """
    by_severity = RECOMMENDATIONS.get(hazard_type, RECOMMENDATIONS[HazardType.OTHER])
    return list(by_severity.get(severity, by_severity[Severity.MODERATE]))
