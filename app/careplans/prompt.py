"""The GP Chronic Condition Management Plan (GPCCMP) prompt.

The template is clinical business content owned by the practice: it is sent to the
model verbatim and must not be reformatted. Patient conditions are appended after
the trailing "My conditions are: " marker.
"""

from __future__ import annotations

CARE_PLAN_PROMPT = """\
Act as an experienced Australian General Practitioner creating a GP Chronic Condition Management Plan (GPCCMP) under the current MBS guidelines (effective from July 1, 2025).

I will provide you with a list of the patient's chronic conditions.

**IMPORTANT: Please provide your response as a structured format containing the completed tables so I can directly use them in my CarePlan template.**

Generate the following structured output with clean, black and white table formatting:

## 📋 Table 1: GP Chronic Condition Management Plan

Create a table with the following exact format:

| Patient problems / needs / relevant conditions | Goals – changes to be achieved | Required treatments and services including patient actions | Arrangements for treatments/services (when, who, contact details) |
|---|---|---|---|
| [Condition 1] | [SMART goal with timeframe] | [Planned interventions, services, lifestyle advice, patient actions] | [Referrals, follow-up schedule, contact details] |
| [Condition 2] | [SMART goal with timeframe] | [Planned interventions, services, lifestyle advice, patient actions] | [Referrals, follow-up schedule, contact details] |
| [Condition 3] | [SMART goal with timeframe] | [Planned interventions, services, lifestyle advice, patient actions] | [Referrals, follow-up schedule, contact details] |

**Table 1 Requirements:**
- Each goal must be SMART (Specific, Measurable, Achievable, Relevant, Time-bound) with clear 3-6 month timeframes
- Include evidence-based interventions appropriate to each condition
- Specify relevant lifestyle modifications and clear patient responsibilities
- Include appropriate allied health referrals (physiotherapy, dietitian, podiatry, etc.)
- Add specific review and monitoring schedules in the 'Arrangements' column
- Use professional medical terminology appropriate for MBS documentation
- Keep each cell concise but comprehensive for clinical practice

## 📋 Table 2: Allied Health Professional Arrangements

Create a table with this exact format:

| Goals – changes to be achieved | Required treatments and services including patient actions | Arrangements for treatments/services (when, who, contact details) |
|---|---|---|
| 1. [SMART allied health goal] | [Specific interventions and patient actions] | [Provider type, frequency, duration, contact method] |
| 2. [SMART allied health goal] | [Specific interventions and patient actions] | [Provider type, frequency, duration, contact method] |
| 3. [SMART allied health goal] | [Specific interventions and patient actions] | [Provider type, frequency, duration, contact method] |
| 4. [SMART allied health goal] | [Specific interventions and patient actions] | [Provider type, frequency, duration, contact method] |
| 5. [SMART allied health goal] | [Specific interventions and patient actions] | [Provider type, frequency, duration, contact method] |

**Table 2 Requirements:**
- Extract and prioritize the most clinically relevant allied health goals from the conditions provided
- Each goal must be SMART, condition-specific, and measurable
- Include both professional interventions and clear patient responsibilities
- Specify recommended frequency (e.g., "Weekly for 6 weeks, then fortnightly")
- Include appropriate allied health disciplines based on evidence-based guidelines
- Leave unused rows empty if fewer than 5 goals are clinically appropriate
- Ensure content aligns with MBS allied health referral requirements

**Document Formatting Requirements:**
- Use standard table formatting with clear borders
- Use professional medical font formatting
- Include proper table headers in bold
- Include document header: "GP Chronic Condition Management Plan - [Current Date]"
- Add footer with: "Generated under MBS Guidelines effective July 1, 2025"

**Clinical Standards:**
- Ensure all content complies with current Australian clinical practice guidelines
- Include appropriate safety netting and red flag monitoring where relevant
- Use evidence-based interventions and realistic timeframes
- Prioritize clinically significant and achievable interventions
- Maintain professional medical documentation standards

**Please create the structured care plan upon completion.**

My conditions are: """


def build_care_plan_prompt(*, sanitized_conditions: str) -> str:
    """Append already-sanitized conditions to the fixed template, with no separator."""

    return CARE_PLAN_PROMPT + sanitized_conditions
