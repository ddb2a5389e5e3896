"""
Prompt templates sent to Gemini.

Templates use str.format; literal JSON braces are doubled.
"""

INTEREST_EXTRACTION_PROMPT = """
Analyze the following travel preference message and extract structured information.

User Message: "{message}"

Return a valid JSON object like:
{{
  "interests": [...],
  "preferences": {{
    "cultural": [...],
    "food": [...],
    "activities": [...],
    "atmosphere": [...]
  }},
  "keywords": [...],
  "travelStyle": "budget|mid-range|luxury",
  "duration": "number of days (default {default_days})"
}}

Examples:
- "I love BTS, Studio Ghibli, and ramen" -> interests: ["BTS", "Studio Ghibli", "ramen"], cultural: ["K-pop", "anime"], food: ["Japanese cuisine", "ramen"]

Return only valid JSON, no extra text.
"""

ITINERARY_PROMPT = """
Create a detailed travel itinerary based on the user's interests and taste-aligned recommendations.

User Interests: {interests_json}
Budget: ${budget}
Taste Recommendations: {recommendations_json}

Generate a JSON object:
{{
  "id": "unique-trip-id",
  "destination": "City, Country",
  "duration": {duration},
  "mapCenter": {{"lat": number, "lng": number}},
  "preferences": [...],
  "costBreakdown": {{
    "accommodation": number,
    "food": number,
    "transport": number,
    "activities": number,
    "total": number
  }},
  "itinerary": [
    {{
      "day": 1,
      "date": "YYYY-MM-DD",
      "totalCost": number,
      "activities": [
        {{
          "id": "activity-id",
          "time": "HH:MM AM/PM",
          "title": "...",
          "description": "...",
          "location": "...",
          "coordinates": {{"lat": number, "lng": number}},
          "cost": number,
          "type": "attraction|restaurant|transport|accommodation",
          "rating": 1-5
        }}
      ]
    }}
  ]
}}

Guidelines:
- Use realistic cities and coordinates.
- Stay within budget.
- Add 6-8 activities per day (morning, afternoon, evening).
- Make it personal by referencing user preferences.
- Start on {start_date}.
- Return only valid JSON.
"""

SUGGESTIONS_PROMPT = """
Based on this query: "{message}"
Suggest 3-5 destinations. Return JSON like:
[
  {{
    "id": "slug-id",
    "name": "City Name",
    "country": "Country",
    "description": "...",
    "image": "https://images.pexels.com/photos/XXXX.jpg",
    "highlights": [...],
    "estimatedCost": number,
    "duration": "5-7 days",
    "coordinates": {{"lat": number, "lng": number}},
    "matchScore": 70-95
  }}
]

Use real cities, realistic data. Return only valid JSON.
"""
