from typing import Any, Dict

from .schemas import CombinedResult, SuggestionRequest

MOCK_RESPONSE: Dict[str, Any] = {
    "weather": {
        "location": "San Francisco, CA",
        "highTemp": 18,
        "lowTemp": 11,
        "dayParts": [
            {"period": "Morning", "time": "07:00", "temp": 12, "condition": "Cool and foggy", "conditionIcon": "PARTLY_CLOUDY", "isNight": False},
            {"period": "Afternoon", "time": "12:00", "temp": 18, "condition": "Partly sunny", "conditionIcon": "SUNNY", "isNight": False},
            {"period": "Evening", "time": "17:00", "temp": 15, "condition": "Clear and cool", "conditionIcon": "SUNNY", "isNight": False},
            {"period": "Night", "time": "22:00", "temp": 11, "condition": "Clear skies", "conditionIcon": "CLEAR_NIGHT", "isNight": True},
        ],
        "dateRange": "October 26, 2024",
        "sunrise": 390,
        "sunset": 1110,
    },
    "suggestions": [
        {
            "member": "Adult",
            "outfit": ["Light jacket or hoodie", "Long-sleeve shirt", "Jeans or comfortable pants", "Closed-toe shoes"],
            "notes": "Layers are key. The morning fog will burn off, but it gets cool again in the evening.",
        },
        {
            "member": "Child (5-12)",
            "outfit": ["Sweatshirt", "T-shirt", "Pants", "Sneakers"],
            "notes": "A warm layer is important for the morning and after the sun goes down.",
        },
        {
            "member": "Toddler (1-4)",
            "outfit": ["Warm fleece jacket", "Long-sleeve shirt", "Pants", "Socks and shoes", "Beanie (for the morning)"],
            "notes": "Keep the little one bundled in the morning and evening. The fleece can come off in the afternoon.",
        },
        {
            "member": "Baby (0-1)",
            "outfit": ["Warm romper", "Hooded jacket or bunting", "Warm hat", "Blanket for the stroller"],
            "notes": "Babies get cold easily. Keep them well covered while it is foggy and windy.",
        },
    ],
}


class CannedPipeline:
    """Stands in for the model-backed pipeline when USE_MOCK_GEMINI is on."""

    def run(self, request: SuggestionRequest) -> CombinedResult:
        return CombinedResult.model_validate(MOCK_RESPONSE)
