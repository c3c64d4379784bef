"""Command-line interface."""
from lcresonance.main import main

if __name__ == "__main__":
    main()
