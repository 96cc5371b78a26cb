"""
structkb core package.

Modules
───────
models        — Pydantic data models (Config, SourceRef, QueryResult, Category)
errors        — ErrorKind enum and the AssistantError hierarchy
catalog       — static topic catalog and the topic question template
config_store  — SQLite-backed Config persistence + ConfigHolder state slot
providers     — Provider interface, shared system instruction, provider factory
gemini        — primary provider: search-grounded answers + structural illustration
deepseek      — secondary provider: plain chat completion
assistant     — dispatch flow (Idle → Loading → Success/Failed)
cli           — command-line entry point (``python -m structkb``)
"""
