"""Test package for the Game Hub.

Engine tests drive each game with a fake clock and the real timer queue, so
timing is exact and nothing sleeps. UI smoke tests run headlessly using
pygame's dummy video and audio drivers. To run these tests, execute
``pytest`` from the project root.
"""
