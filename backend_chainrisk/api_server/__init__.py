"""
API server package: HTTP/REST interface over the analysis pipeline.

Stateless; every request runs a fresh analysis against live chain sources.
"""
