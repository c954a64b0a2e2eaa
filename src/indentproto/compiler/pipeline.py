# Copyright 2026 IndentProto Contributors
# SPDX-License-Identifier: Apache-2.0

"""Connects the scanner to the translator.

Two modes produce identical output. In the default mode the translator pulls
tokens straight from the scanner generator. In threaded mode the scanner runs
in a producer thread. It hands tokens over through a single-slot queue, so it
can never run more than one token ahead of the translator.
"""

from __future__ import annotations

import contextlib
import io
import logging
import queue
import threading
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TextIO

from indentproto.compiler.scanner import Token, scan
from indentproto.compiler.translator import Sink, translate_tokens
from indentproto.config.settings import TranslatorConfig

logger = logging.getLogger(__name__)

# ###############
# Public Interface
# ###############


def translate(
    source: str | TextIO,
    sink: Sink,
    config: TranslatorConfig | None = None,
    *,
    threaded: bool = False,
) -> None:
    """Translate DSL *source* and write the schema text to *sink*.

    Args:
        source: DSL text or a text stream.
        sink: Output target; written to incrementally.
        config: Output and grammar settings.
        threaded: Run the scanner in its own thread.

    Raises:
        TranslationError: On the first lexical, structural, or unsupported
            construct error.
    """
    if threaded:
        logger.debug("Translating with a threaded scanner")
        with _threaded_tokens(source) as tokens:
            translate_tokens(tokens, sink, config)
    else:
        translate_tokens(scan(source), sink, config)


def translate_text(
    source: str | TextIO,
    config: TranslatorConfig | None = None,
    *,
    threaded: bool = False,
) -> str:
    """Translate DSL *source* and return the complete schema text."""
    out = io.StringIO()
    translate(source, out, config, threaded=threaded)
    return out.getvalue()


def dump_tokens(source: str | TextIO) -> Iterator[str]:
    """Render each token of *source* as ``<line>:<column> <KIND> <text>``."""
    for tok in scan(source):
        yield f"{tok.line}:{tok.column} {tok.kind.value} {tok.text!r}"


# ################
# Implementation
# ################

# Marks the end of the handoff queue; never a valid token.
_END = object()

_POLL_INTERVAL = 0.05


@dataclass
class _ProducerFailure:
    error: Exception


@contextlib.contextmanager
def _threaded_tokens(source: str | TextIO) -> Iterator[Iterator[Token]]:
    """Run the scanner in a producer thread and yield the consuming iterator.

    On exit, whether normal or after an error in the consumer, the producer
    is told to stop and is joined.
    """
    handoff: queue.Queue[object] = queue.Queue(maxsize=1)
    stop = threading.Event()
    producer = threading.Thread(
        target=_produce,
        args=(source, handoff, stop),
        name="indentproto-scanner",
        daemon=True,
    )
    producer.start()
    try:
        yield _consume(handoff)
    finally:
        stop.set()
        producer.join()


def _produce(source: str | TextIO, handoff: queue.Queue[object], stop: threading.Event) -> None:
    try:
        for tok in scan(source):
            if not _put(handoff, tok, stop):
                logger.debug("Scanner stopped early by the consumer")
                return
    except Exception as exc:
        # Raised again on the consumer side.
        _put(handoff, _ProducerFailure(exc), stop)
        return
    _put(handoff, _END, stop)


def _put(handoff: queue.Queue[object], item: object, stop: threading.Event) -> bool:
    """Block until *item* is handed over; return False if asked to stop first."""
    # A plain blocking put would never return once the consumer stops reading,
    # and the join in _threaded_tokens would hang. Wake up to check *stop*.
    while not stop.is_set():
        try:
            handoff.put(item, timeout=_POLL_INTERVAL)
            return True
        except queue.Full:
            continue
    return False


def _consume(handoff: queue.Queue[object]) -> Iterator[Token]:
    while True:
        item = handoff.get()
        if item is _END:
            return
        if isinstance(item, _ProducerFailure):
            raise item.error
        assert isinstance(item, Token)
        yield item
