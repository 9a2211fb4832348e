"""
Built-in Health Checks

Each module exposes CHECK_ID, CHECK_NAME, CHECK_DESCRIPTION and a
coroutine run(provider, options=None). The registry's auto_discover()
registers them by module path.
"""
