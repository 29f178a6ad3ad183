#!/usr/bin/env python3
"""HeyFocus - Run the application.

Usage:
    python run.py
    # Or: heyfocus (console script), python -m heyfocus.app

The API will be available at http://127.0.0.1:5151/api
"""

from heyfocus.app import main

if __name__ == "__main__":
    main()
