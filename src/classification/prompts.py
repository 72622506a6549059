"""Prompt assembly for taxonomy-constrained segment classification."""

from __future__ import annotations

from src.classification.taxonomy import render_taxonomy

SYSTEM_PROMPT = (
    "You are a retail store audio analyst. You receive a timestamped transcript "
    "recorded at a store station and classify every segment against a fixed "
    "taxonomy of in-store events."
)

OUTPUT_RULES = """\
STRICT OUTPUT RULES:
1. Return ONLY a single JSON object. No prose, no markdown, no code fences.
2. Use ONLY the exact Category, EventType and SubType strings listed in the taxonomy.
   Never invent, rephrase, abbreviate or translate them.
3. If a segment matches no taxonomy entry, set its "SegmentClassification" to []
   but still include the segment. Never drop a segment.
4. Produce exactly one entry in "Segments" per transcript line, in transcript order,
   using the line's start/end seconds for Starting_Second/Ending_Second.
5. classifyConfidenceScore is a number between 0 and 1; SentimentScore is a number
   between -1 and 1.
6. SpeakerType is one of "Customer", "Employee", "Unknown". CriticalLevel and
   EnvironmentNoiseLevel are one of "low", "medium", "high".
   overall_CriticalEventPresent and overall_EscalationDetected are "yes" or "no".
"""

OUTPUT_TEMPLATE = """\
{
  "TranscriptionID": "string",
  "Recording_StationID": "string",
  "Audio_Original_Transcript": "string",
  "Audio_English_Translation": "string",
  "Audio_Total_Segments": 0,
  "Audio_Total_Words": 0,
  "Audio_Total_Duration": 0.0,
  "overall_DominantLanguage": "string",
  "overall_AudioSummary": "string",
  "overall_EventsKeyPoints": ["string"],
  "overall_TopKeywords": ["string"],
  "overall_CriticalEventPresent": "yes|no",
  "overall_EscalationDetected": "yes|no",
  "overall_DetectedNamedEntity": ["string"],
  "Segments": [
    {
      "SegmentID": "string",
      "Segment_Duration": 0.0,
      "Starting_Second": 0.0,
      "Ending_Second": 0.0,
      "Speaker": "string",
      "SpeakerType": "Customer|Employee|Unknown",
      "Segment_original": "string",
      "Segment_English_Translation": "string",
      "Segment_Summary": "string",
      "SegmentClassification": [
        {
          "Category": "string",
          "EventType": "string",
          "SubType": "string",
          "Tags": ["string"],
          "classifyConfidenceScore": 0.0,
          "classifyreason": "string"
        }
      ],
      "KeySentences": ["string"],
      "CriticalLevel": "low|medium|high",
      "LanguageSpoken": "string",
      "DetectedIntent": ["string"],
      "EnvironmentNoiseLevel": "low|medium|high",
      "SentimentScore": 0.0,
      "EmotionalTone": "string"
    }
  ]
}"""


def build_classification_prompt(timestamped_text: str) -> str:
    """Combine taxonomy, output rules, schema template and the transcript."""
    return (
        f"{SYSTEM_PROMPT}\n\n"
        "TAXONOMY (closed set; these are the only valid values):\n"
        f"{render_taxonomy()}\n\n"
        f"{OUTPUT_RULES}\n"
        "OUTPUT JSON SHAPE:\n"
        f"{OUTPUT_TEMPLATE}\n\n"
        "TRANSCRIPT (one segment per line, \"start - end text\" in seconds):\n"
        f"{timestamped_text}"
    )
