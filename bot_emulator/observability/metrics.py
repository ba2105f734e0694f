"""Prometheus Metrics - Chat session observability.

Exports:
- Session lifecycle counts (created, restarted, closed)
- Active session gauge
- Transcript bootstraps
- Conversation server failures by operation
- Speech pipeline outcomes
"""

from prometheus_client import Counter, Gauge, Histogram

# -----------------------------------------------------------------------------
# Counters
# -----------------------------------------------------------------------------

SESSIONS_CREATED = Counter(
    "bfemulator_chat_sessions_created_total",
    "Chat sessions bootstrapped",
    ["mode"],  # livechat, transcript, debug
)

SESSIONS_RESTARTED = Counter(
    "bfemulator_chat_sessions_restarted_total",
    "Chat sessions restarted",
    ["identity"],  # reused, new_conversation, new_user, new_both
)

SESSIONS_CLOSED = Counter(
    "bfemulator_chat_sessions_closed_total",
    "Chat sessions closed",
)

TRANSCRIPTS_OPENED = Counter(
    "bfemulator_transcripts_opened_total",
    "Transcript files replayed into a new session",
)

REQUEST_FAILURES = Counter(
    "bfemulator_conversation_request_failures_total",
    "Non-successful conversation server responses",
    ["operation", "status"],
)

SPEECH_FACTORY_RESULTS = Counter(
    "bfemulator_speech_factory_results_total",
    "Speech factory pipeline outcomes",
    ["result"],  # updated, discarded, failed
)

# -----------------------------------------------------------------------------
# Gauges / Histograms
# -----------------------------------------------------------------------------

ACTIVE_SESSIONS = Gauge(
    "bfemulator_active_chat_sessions",
    "Chat sessions currently registered",
)

SPEECH_FACTORY_LATENCY = Histogram(
    "bfemulator_speech_factory_seconds",
    "Time from speech factory request to write-back",
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)


# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def record_session_created(mode: str) -> None:
    """Record a bootstrapped session."""
    SESSIONS_CREATED.labels(mode=mode).inc()


def record_session_restarted(new_conversation: bool, new_user: bool) -> None:
    """Record a restart, labelled by which identity parts were regenerated."""
    if new_conversation and new_user:
        identity = "new_both"
    elif new_conversation:
        identity = "new_conversation"
    elif new_user:
        identity = "new_user"
    else:
        identity = "reused"
    SESSIONS_RESTARTED.labels(identity=identity).inc()


def record_session_closed() -> None:
    """Record a closed session."""
    SESSIONS_CLOSED.inc()


def record_transcript_opened() -> None:
    """Record a transcript bootstrap."""
    TRANSCRIPTS_OPENED.inc()


def record_request_failure(operation: str, status: int) -> None:
    """Record a failed conversation server call."""
    REQUEST_FAILURES.labels(operation=operation, status=str(status)).inc()


def record_speech_factory(result: str, latency_s: float | None = None) -> None:
    """Record a speech pipeline outcome."""
    SPEECH_FACTORY_RESULTS.labels(result=result).inc()
    if latency_s is not None:
        SPEECH_FACTORY_LATENCY.observe(latency_s)


def update_active_sessions(count: int) -> None:
    """Update active session gauge."""
    ACTIVE_SESSIONS.set(count)
