"""
Backend package for the LIC Neemuch site.

This package provides a FastAPI application that server-renders the landing
page (ratings, reviews and structured data) and exposes the small JSON API
used by the single-page frontend.
"""
