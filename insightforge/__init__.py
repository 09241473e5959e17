"""Analytics-result normalization for the InsightForge dashboard.

This package contains:
- the method catalog (request parameters, chart archetype per method)
- payload transformers (analytics JSON -> canonical chart model)
- the analysis dispatcher (outbound requests, paired joins, chart state)
- chart helpers (canonical model -> Altair / Vega-Lite spec dict)
"""
