"""Package entry point for ``python -m transcript_publisher``.

Delegates to the CLI's main() function.
"""

from transcript_publisher.cli import main

if __name__ == "__main__":
    main()
