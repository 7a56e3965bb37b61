"""
Test suite for expert-delegator.

Shared fakes live in helpers.py: runners that echo, fail or hang, and a
notifier that records events, so no test ever calls the real agent CLI.
"""
