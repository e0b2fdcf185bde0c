"""Core (UI-agnostic) office market explorer logic.

This package contains:
- data loading (JSON over HTTP or from disk -> typed records)
- dataset accessor and the selection reducer
- numeric normalisation and display formatting
- page compute functions (JSON-serializable payloads)
- chart helpers (Altair -> Vega-Lite spec dict)
"""
