"""Core domain package for repostscope.

Core contains scoring, classification, and attribution logic without any
HTTP client or provider-specific code, keeping the business logic portable.
"""
