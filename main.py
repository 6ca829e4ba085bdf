"""
Guess Duel - two-player number-guessing duel client.
Find an opponent through the lobby server, then take turns guessing.
"""
import sys

from guess_duel.app import main


if __name__ == "__main__":
    sys.exit(main())
