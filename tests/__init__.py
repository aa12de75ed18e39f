"""fieldkit test suite.

- test_mask.py: mask grammar, placeholders, formatting
- test_variant.py: field configs and control selection
- test_edit_session.py: debounce, commit on blur, numeric sessions
- test_actions.py: status indicator and action measurement
- test_store.py: JSON store and the form host
- test_catalog.py: catalogs, settings and logging setup
- test_widgets.py: prompt_toolkit controls driven headlessly
- test_app.py: form application wiring and the CLI
"""
