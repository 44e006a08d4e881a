"""Run the CLI with ``python -m k8sdemo``."""

from k8sdemo.cli import main

if __name__ == "__main__":
    main()
