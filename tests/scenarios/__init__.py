"""End-to-end scenarios for the request queue.

Each scenario serves a FastAPI application in-process through
``httpx.ASGITransport`` and drives it with a queue using the default
httpx transport.
"""
