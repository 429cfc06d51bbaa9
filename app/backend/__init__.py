"""
Watershed Plan Extraction Backend Application.

A FastAPI service that extracts goals, best management practices,
implementation activities, monitoring metrics, outreach activities and
geographic areas from watershed plan PDFs using LLMs (OpenAI with
Anthropic fallback).
"""

__version__ = "1.0.0"
