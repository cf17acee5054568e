"""Core transcript model, clock helpers, and the recording aggregate.

WHY: Everything downstream (the encoder, the publish guard, the live
broadcaster) works from the same typed description of a session. Keeping
it in one package makes the contract easy to find.

HOW: ir.py defines the immutable data structures, clock.py renders and
parses instants, recorder.py accumulates events during a live session and
freezes them into a Transcript, loader.py decodes wire JSON back into the IR.

RULES:
- IR dataclasses are frozen and form the contract; change with care
- No I/O in this package
"""
