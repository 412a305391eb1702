#!/usr/bin/env python3
"""
Main entry point for fossbot
"""

from fossbot.main import run

if __name__ == "__main__":
    run()
