"""
Libs Layer - transport and document parsing.

This package contains:
- fetcher: asynchronous HTTP fetch of group documents
- parser: YAML group document parsing
"""
