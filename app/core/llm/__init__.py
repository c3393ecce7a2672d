"""Completion service integration (OpenAI chat completions).

Kept deliberately thin:
- Prompts and completions are never logged (they carry patient conditions).
- Endpoint, model and timeout come from settings.
- One stateless request per call; callers decide how failures are reported.
"""
