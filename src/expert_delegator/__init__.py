"""expert-delegator: route tasks to expert agent profiles and run them through an external agent CLI."""

__version__ = "0.1.0"
