"""
Platform infrastructure shared by the resolution layer.

Sub-packages:
    metrics     – Per-source fetch counters and latency histograms
    resilience  – Retry with backoff for transient backend failures
    audit       – Structured audit trail (secret access, resolution passes)
"""
