#!/usr/bin/env python3
"""Lyrics Lab entry point for hosted deployments."""

from lyrics_lab.app.app import main

if __name__ == "__main__":
    main()
