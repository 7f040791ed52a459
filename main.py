"""
Main entry point for the Ada command line
"""
from ada.cli import main


if __name__ == "__main__":
    main()
