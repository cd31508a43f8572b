"""
SV2 UI gateway: serves the monitoring dashboard and proxies its backend APIs.
"""
__version__ = "0.1.0"
