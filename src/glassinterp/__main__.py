"""Run the Glass Interpreter CLI."""

from glassinterp.cli import main

if __name__ == "__main__":
    main()
