"""LLM prompt templates for the Strength Coach service."""

# ============================================================================
# PRE-WORKOUT SUGGESTION PROMPTS
# ============================================================================

SUGGESTION_SYSTEM = """You are a strength coach that detects training plateaus and gives pre-workout weight and rep suggestions.
Respond only with valid JSON."""

SUGGESTION_USER = """Suggest the weight and reps for today's session of one exercise, based on the user's recent performance and 10-week progress analysis.

{training_guidance}
{body_weight_context}
{analysis_context}

EXERCISE:
{exercise_context}

Consider:
- The training goal and phase guidance above (follow these strictly)
- The 10-week progress analysis and plateau signals
- Recent sets to establish the working weight
- With no previous data, suggest a conservative starting point
{plateau_instructions}
Respond in JSON format:
{{
  "suggestions": [
    {{
      "exerciseId": "{exercise_id}",
      "suggestedWeight": number,
      "suggestedReps": number,
      "reasoning": "Brief explanation (1 sentence)",
      "confidence": "high" | "medium" | "low",
      "progressStatus": "improving" | "plateau" | "declining" | "new"{plateau_fields}
    }}
  ]
}}

Use {weight_unit} for weights. Confidence should be:
- "high" if there is clear recent data showing a pattern
- "medium" if there is some data but the pattern is unclear
- "low" if there is minimal or no previous data"""

PLATEAU_INSTRUCTIONS = """
This exercise is in a PLATEAU:
- Suggest a REP RANGE CHANGE to break through it
- Around 8-12 reps now: suggest 5-8 reps (heavier) or 12-15 reps (lighter, more volume)
- Include a "techniqueTip" explaining the change
- Include a "repRangeChange" object with from/to/reason fields
"""

PLATEAU_FIELDS = """,
      "techniqueTip": "How to break the plateau",
      "repRangeChange": {"from": "8-12", "to": "5-8", "reason": "Heavier loads for new strength gains"}"""

VOLUME_GUIDANCE = """VOLUME GUIDANCE:
- Prefer 2-3 working sets per exercise taken close to failure
- Quality over quantity, fewer sets with maximum effort"""

BODY_WEIGHT_CONTEXT = """USER BODY WEIGHT CONTEXT:
Current weight: {current_weight:.1f} {unit}
Weight trend (last 60 days): {direction} {change:+.1f} {unit} ({change_percent:+.1f}%)
Recent entries: {recent_entries}

If losing weight quickly the user may be in a deficit and need slightly lower weights to keep form.
If gaining steadily the user may handle progressive overload."""

# ============================================================================
# CYCLE RECOMMENDATION PROMPTS
# ============================================================================

CYCLE_RECOMMENDATION_SYSTEM = """You are a fitness programming expert helping a user choose the best training cycle.

Available training cycles:
{cycle_catalog}

GUIDELINES:
- Match cycle type to the user's training focus (strength vs cardio)
- Beginners benefit from shorter cycles (4 weeks) for faster feedback
- Advanced users can handle longer cycles (8 weeks) with more complex periodization
- If the user is hitting plateaus, recommend a cycle that differs from their current one
- If the user is progressing well, recommend staying with a similar structure

Respond with JSON only."""

CYCLE_RECOMMENDATION_USER = """Based on this user's profile, recommend the best training cycle:

USER PROFILE:
- Experience level: {experience_level}
- Workout goal: {workout_goal}
- Training focus: {training_focus}
- Total completed workouts: {total_completed}
- Weekly workout average: {weekly_average} workouts/week
- Has plateaus: {plateaus}
- {current_cycle}

Respond with JSON matching this exact structure:
{{
  "recommendedCycleId": "<id from available cycles>",
  "reasoning": "<1-2 sentences explaining why this cycle fits>",
  "alternativeId": "<optional: another good option>",
  "alternativeReason": "<optional: why they might choose the alternative>",
  "confidence": "high" | "medium" | "low"
}}"""
