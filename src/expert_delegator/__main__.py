"""Allow `python -m expert_delegator`."""

from .cli import main

if __name__ == "__main__":
	main()
