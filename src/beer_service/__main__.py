"""Allows execution via: python -m beer_service"""

from beer_service.main import run

if __name__ == "__main__":
    run()
