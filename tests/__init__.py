"""Test suite for formstate.

This package contains tests for:
- Schema validation adapter (whole-form and single-field results, messages)
- Debounce scheduler timing
- Form controller state, reactive validation, submission and auto-save
- Field binding adapter
- Event system and lifecycle tracking
- Presets and helpers
"""
