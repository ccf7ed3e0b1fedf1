"""
Command Line Interface Package

Unified CLI for all reports (``spendsight``).

Command Structure:
- spendsight: Main entry point with utility commands (version, config, period, serve)
- spendsight data / cache: Raw dataset listings and cache maintenance
- spendsight spend / travel / remittance / rewards: Analytics reports printed as JSON
"""
