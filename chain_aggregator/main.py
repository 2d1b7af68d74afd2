"""Entry point: ``python -m chain_aggregator.main <command>``."""
from .cli import main

if __name__ == "__main__":
    main()
